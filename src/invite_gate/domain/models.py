"""Domain models for users and invite tokens."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    """Represents a registered Telegram identity."""

    id: int
    chat_id: int
    username: str | None
    name: str
    surname: str
    is_admin: bool
    created_at: datetime


@dataclass(frozen=True)
class InviteToken:
    """Represents an invite token and its consumption state."""

    id: int
    token: str
    created_by: int
    created_at: datetime
    expires_at: datetime
    is_active: bool
    usage_count: int
    max_usage: int

    @property
    def remaining_uses(self) -> int:
        """Admissions still available before the ceiling is reached."""
        return max(self.max_usage - self.usage_count, 0)

    def is_expired(self, now: datetime) -> bool:
        """Return true when the token expiry is not in the future."""
        return self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        """Return true when the token may authorize one more admission."""
        return self.is_active and not self.is_expired(now) and self.remaining_uses > 0


@dataclass(frozen=True)
class Candidate:
    """Identity presented by the chat transport for admission."""

    user_id: int
    chat_id: int
    username: str | None = None
    name: str = ""
    surname: str = ""
