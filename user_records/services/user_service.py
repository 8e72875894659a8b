"""
Business-rule gate in front of the user repository.

`UserService` validates raw field values, checks existence, applies partial
update semantics and re-raises repository failures with operation context.
Repository errors keep their class when wrapped, so callers can tell a
duplicate email from a lost connection without string matching.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

from user_records.domain.exceptions import NotFoundError, UserRecordsError, ValidationError
from user_records.domain.models import User, UserUpdate
from user_records.domain.validators import is_blank, is_valid_age, is_valid_email
from user_records.repositories.abstract import UserRepository
from user_records.utils.logging import get_logger

log = get_logger(__name__)


@contextmanager
def _wrap_failures(context: str, **extra: Any) -> Iterator[None]:
    """Re-raise repository errors with `context` prefixed, chaining the original."""
    try:
        yield
    except UserRecordsError as exc:
        log.error(f"{context}: {exc.message}", extra=extra)
        raise exc.with_context(context) from exc


def _is_valid_id(user_id: Any) -> bool:
    if user_id is None or isinstance(user_id, bool) or not isinstance(user_id, int):
        return False
    return user_id > 0


def _validate_id(user_id: Any) -> int:
    if not _is_valid_id(user_id):
        log.warning("Invalid user ID provided", extra={"user_id": user_id})
        raise ValidationError(f"Invalid user ID: {user_id}", field="id", value=user_id)
    return user_id


def _validate_name(name: Any) -> None:
    if is_blank(name):
        raise ValidationError("Name cannot be empty", field="name", value=name)
    if not isinstance(name, str):
        raise ValidationError(f"Invalid name: {name!r}", field="name", value=name)


def _validate_email(email: Any) -> None:
    if is_blank(email):
        raise ValidationError("Email cannot be empty", field="email", value=email)
    if not is_valid_email(email):
        raise ValidationError(f"Invalid email format: {email}", field="email", value=email)


def _validate_age(age: Any) -> None:
    if not is_valid_age(age):
        raise ValidationError(f"Invalid age: {age}", field="age", value=age)


def _validate_fields(fields: dict[str, Any]) -> None:
    if "name" in fields:
        _validate_name(fields["name"])
    if "email" in fields:
        _validate_email(fields["email"])
    if "age" in fields and fields["age"] is not None:
        _validate_age(fields["age"])


class UserService:
    """
    Orchestrates validation and repository calls for users.

    Parameters
    ----------
    repository : UserRepository
        Storage backend; usually a `PostgresUserRepository`.
    """

    def __init__(self, repository: UserRepository) -> None:
        self._repository = repository

    is_valid_email = staticmethod(is_valid_email)
    is_valid_age = staticmethod(is_valid_age)

    def create(self, name: str, email: str, age: int) -> User:
        """
        Validate and persist a new user.

        Raises
        ------
        ValidationError
            Blank name, blank or malformed email, or missing/out-of-range age.
        StorageError
            The insert failed (e.g. `DuplicateEmailError`) and was rolled back.
        """
        log.debug("Creating user", extra={"user_name": name, "email": email, "age": age})
        _validate_name(name)
        _validate_email(email)
        _validate_age(age)

        with _wrap_failures("Failed to create user", email=email):
            saved = self._repository.save(User(name=name, email=email, age=age))
        log.info(f"User created with ID: {saved.id}", extra={"user_id": saved.id})
        return saved

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Return the user with `user_id`, or None when there is none."""
        _validate_id(user_id)
        with _wrap_failures("Failed to retrieve user", user_id=user_id):
            user = self._repository.find_by_id(user_id)
        log.debug(
            "User found" if user is not None else "User not found",
            extra={"user_id": user_id},
        )
        return user

    def get_all(self) -> List[User]:
        with _wrap_failures("Failed to retrieve users"):
            users = self._repository.find_all()
        log.debug(f"Retrieved {len(users)} users")
        return users

    def update(
        self,
        user_id: int,
        name: Optional[str] = None,
        email: Optional[str] = None,
        age: Optional[int] = None,
    ) -> User:
        """
        Update the given fields of a user; ``None`` leaves a field unchanged.

        Use `apply_update` with an explicit `UserUpdate` to clear `age`.
        """
        provided = {
            field: value
            for field, value in (("name", name), ("email", email), ("age", age))
            if value is not None
        }
        # Raw values are validated before the strict patch model sees them.
        _validate_id(user_id)
        _validate_fields(provided)
        return self.apply_update(user_id, UserUpdate(**provided))

    def apply_update(self, user_id: int, changes: UserUpdate) -> User:
        """
        Apply the explicitly provided fields of `changes` to a stored user.

        Raises
        ------
        ValidationError
            Invalid id or an invalid provided field.
        NotFoundError
            No user with `user_id`.
        StorageError
            The update failed and was rolled back.
        """
        log.debug(
            f"Updating user with ID: {user_id}",
            extra={"user_id": user_id, "changes": changes.provided},
        )
        _validate_id(user_id)
        _validate_fields(changes.provided)

        existing = self.get_by_id(user_id)
        if existing is None:
            log.warning(f"User not found for update with ID: {user_id}")
            raise NotFoundError(user_id)

        with _wrap_failures("Failed to update user", user_id=user_id):
            updated = self._repository.update(changes.apply_to(existing))
        log.info(f"User updated with ID: {updated.id}", extra={"user_id": updated.id})
        return updated

    def delete(self, user_id: int) -> None:
        _validate_id(user_id)
        if not self.exists(user_id):
            log.warning(f"Attempt to delete non-existent user with ID: {user_id}")
            raise NotFoundError(user_id)

        with _wrap_failures("Failed to delete user", user_id=user_id):
            self._repository.delete(user_id)
        log.info(f"User deleted with ID: {user_id}", extra={"user_id": user_id})

    def exists(self, user_id: int) -> bool:
        """True iff a user with `user_id` is stored; invalid ids are simply absent."""
        if not _is_valid_id(user_id):
            return False
        with _wrap_failures("Failed to check user existence", user_id=user_id):
            return self._repository.find_by_id(user_id) is not None


__all__ = ["UserService"]
