"""Service layer for the user records manager."""

from user_records.services.user_service import UserService

__all__ = ["UserService"]
