"""User-related business logic."""

from dataclasses import dataclass, field
from typing import Protocol

from invite_gate.domain.errors import InvalidError
from invite_gate.domain.models import User


class UserRepository(Protocol):
    """Persistence interface for user data.

    ``save`` relies on unique constraints over ``id`` and ``chat_id``; any
    lookups it does first only sharpen the conflict message.
    """

    def save(self, user: User) -> User:
        """Insert a new user or raise ``ConflictError``."""

    def get_by_id(self, user_id: int) -> User | None:
        """Return the user for a Telegram user id, if present."""

    def get_by_chat_id(self, chat_id: int) -> User | None:
        """Return the user bound to a chat, if present."""

    def get_by_username(self, username: str) -> User | None:
        """Return the user with a Telegram username, if present."""

    def set_admin_status(self, user_id: int, is_admin: bool) -> None:
        """Set the admin flag or raise ``NotFoundError``."""

    def update_personal_info(self, user_id: int, name: str, surname: str) -> None:
        """Replace name and surname or raise ``NotFoundError``."""

    def exists(self, user_id: int) -> bool:
        """Return true when a user row exists for the id."""

    def is_admin(self, user_id: int) -> bool:
        """Return the stored admin flag, false when the user is absent."""


@dataclass
class UserService:
    """Application service for user lookups and profile changes."""

    repository: UserRepository
    admin_usernames: frozenset[str] = field(default_factory=frozenset)

    def get(self, user_id: int) -> User | None:
        """Return a registered user."""
        return self.repository.get_by_id(user_id)

    def is_configured_admin(self, username: str | None) -> bool:
        """Return true when the username is in the configured admin list."""
        if not username:
            return False
        return username.lstrip("@").lower() in self.admin_usernames

    def is_admin(self, user_id: int, username: str | None) -> bool:
        """Return true for configured admins and users flagged in the store."""
        if self.is_configured_admin(username):
            return True
        return self.repository.is_admin(user_id)

    def set_admin_status(self, user_id: int, is_admin: bool) -> None:
        """Grant or revoke admin rights."""
        self.repository.set_admin_status(user_id, is_admin)

    def update_personal_info(self, user_id: int, name: str, surname: str) -> None:
        """Update a user's name and surname."""
        cleaned_name = name.strip()
        cleaned_surname = surname.strip()
        if not cleaned_name or not cleaned_surname:
            raise InvalidError("name and surname must be non-empty")
        self.repository.update_personal_info(user_id, cleaned_name, cleaned_surname)
