"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from invite_gate.adapters.supabase_errors import translate_errors
from invite_gate.domain.errors import ConflictError, NotFoundError
from invite_gate.domain.models import User
from invite_gate.services.users import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def save(self, user: User) -> User:
        """Insert a user; unique constraints on id and chat_id are final."""
        if self.get_by_id(user.id) is not None:
            raise ConflictError(f"user {user.id} already exists")
        if self.get_by_chat_id(user.chat_id) is not None:
            raise ConflictError(f"chat {user.chat_id} is bound to another user")
        with translate_errors("save user"):
            response = self.client.table("users").insert(user_payload(user)).execute()
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return parse_user(response.data[0])

    def get_by_id(self, user_id: int) -> User | None:
        """Return the user for a Telegram user id, if present."""
        return self._get_one("id", user_id)

    def get_by_chat_id(self, chat_id: int) -> User | None:
        """Return the user bound to a chat, if present."""
        return self._get_one("chat_id", chat_id)

    def get_by_username(self, username: str) -> User | None:
        """Return the user with a username, if present."""
        return self._get_one("username", username.lstrip("@"))

    def set_admin_status(self, user_id: int, is_admin: bool) -> None:
        """Update the admin flag for a user."""
        with translate_errors("set admin status"):
            response = (
                self.client.table("users")
                .update({"is_admin": is_admin})
                .eq("id", user_id)
                .execute()
            )
        if not response.data:
            raise NotFoundError(f"user {user_id} not found")

    def update_personal_info(self, user_id: int, name: str, surname: str) -> None:
        """Update first and last name for a user."""
        with translate_errors("update personal info"):
            response = (
                self.client.table("users")
                .update({"first_name": name, "last_name": surname})
                .eq("id", user_id)
                .execute()
            )
        if not response.data:
            raise NotFoundError(f"user {user_id} not found")

    def exists(self, user_id: int) -> bool:
        """Return true when a user row exists."""
        with translate_errors("check user existence"):
            response = (
                self.client.table("users")
                .select("id")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        return bool(response.data)

    def is_admin(self, user_id: int) -> bool:
        """Return the stored admin flag."""
        with translate_errors("check admin status"):
            response = (
                self.client.table("users")
                .select("is_admin")
                .eq("id", user_id)
                .limit(1)
                .execute()
            )
        if not response.data:
            return False
        return bool(response.data[0].get("is_admin"))

    def _get_one(self, column: str, value: object) -> User | None:
        with translate_errors(f"get user by {column}"):
            response = (
                self.client.table("users")
                .select("*")
                .eq(column, value)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return parse_user(response.data[0])


def user_payload(user: User) -> dict[str, object]:
    """Serialize a user into a users row."""
    return {
        "id": user.id,
        "chat_id": user.chat_id,
        "username": user.username,
        "first_name": user.name,
        "last_name": user.surname,
        "is_admin": user.is_admin,
        "created_at": user.created_at.isoformat(),
    }


def parse_user(row: dict[str, object]) -> User:
    """Parse a users row into a domain model."""
    return User(
        id=int(row["id"]),
        chat_id=int(row["chat_id"]),
        username=row.get("username"),
        name=str(row.get("first_name") or ""),
        surname=str(row.get("last_name") or ""),
        is_admin=bool(row.get("is_admin", False)),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
