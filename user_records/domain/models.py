"""
Domain models for the user records manager.

Defines the `User` entity aligned with the `users` table created by
`user_records.infrastructure.bootstrap`, and the `UserUpdate` patch used for
partial updates.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from user_records.domain.validators import MAX_AGE, MIN_AGE, is_valid_age

AGE_RANGE_MESSAGE = f"Age must be between {MIN_AGE} and {MAX_AGE}"


class User(BaseModel):
    """
    Representation of a single row in the `users` table.

    `id` and `created_at` are assigned by storage on first insert and are frozen
    afterwards. Assigning an out-of-range `age` raises immediately and leaves
    the previous value in place.
    """

    id: Optional[int] = Field(None, frozen=True, description="Primary key (BIGSERIAL).")
    name: str = Field(..., strict=True, description="Display name.")
    email: str = Field(..., strict=True, description="Unique email address.")
    age: Optional[int] = Field(None, strict=True, description="Age in years, 0-150.")
    created_at: Optional[datetime] = Field(
        None, frozen=True, description="Row creation timestamp."
    )

    model_config = ConfigDict(
        validate_assignment=True,
        populate_by_name=True,
    )

    @field_validator("age")
    @classmethod
    def _check_age(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and not is_valid_age(value):
            raise ValueError(AGE_RANGE_MESSAGE)
        return value

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def __str__(self) -> str:
        return (
            f"User(id={self.id}, name='{self.name}', email='{self.email}', "
            f"age={self.age}, created_at={self.created_at})"
        )


class UserUpdate(BaseModel):
    """
    Partial update for a `User`.

    A field counts as provided only when it was passed explicitly, which keeps
    "leave unchanged" apart from an explicit ``None``.
    """

    name: Optional[str] = Field(None, strict=True)
    email: Optional[str] = Field(None, strict=True)
    age: Optional[int] = Field(None, strict=True)

    model_config = ConfigDict(extra="forbid")

    @property
    def provided(self) -> dict[str, Any]:
        """Explicitly provided fields and their values."""
        return self.model_dump(include=self.model_fields_set)

    def is_empty(self) -> bool:
        return not self.model_fields_set

    def apply_to(self, user: User) -> User:
        """Return a copy of `user` with the provided fields replaced."""
        updated = user.model_copy()
        for field, value in self.provided.items():
            setattr(updated, field, value)
        return updated


__all__ = ["User", "UserUpdate", "AGE_RANGE_MESSAGE"]
