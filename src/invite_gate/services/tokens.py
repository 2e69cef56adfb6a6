"""Invite token lifecycle."""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from invite_gate.domain.errors import InvalidError
from invite_gate.domain.models import InviteToken

_logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


class TokenRepository(Protocol):
    """Persistence interface for invite tokens.

    ``issue`` must deactivate every other token and insert the new one in one
    transaction, so that at most one token is active after it returns.
    """

    def issue(
        self, token: str, created_by: int, expires_at: datetime, max_usage: int
    ) -> InviteToken:
        """Create the new active token, deactivating all others."""

    def get_active(self) -> InviteToken | None:
        """Return the newest active, unexpired token, if any."""

    def get_by_value(self, token: str) -> InviteToken | None:
        """Return a token by its value regardless of state."""

    def deactivate_all(self) -> None:
        """Mark every token inactive."""

    def record_usage(self, token_id: int) -> bool:
        """Increment usage if below the ceiling; false when exhausted."""


@dataclass
class TokenService:
    """Application service for issuing and consuming invite tokens."""

    repository: TokenRepository
    ttl_hours: int = 48
    default_max_usage: int = 1

    def issue(
        self,
        created_by: int,
        max_usage: int | None = None,
        ttl_hours: int | None = None,
    ) -> InviteToken:
        """Generate a fresh token value and make it the only active token."""
        usage = self.default_max_usage if max_usage is None else max_usage
        hours = self.ttl_hours if ttl_hours is None else ttl_hours
        if usage <= 0:
            raise InvalidError(f"max_usage must be positive, got {usage}")
        if hours <= 0:
            raise InvalidError(f"ttl_hours must be positive, got {hours}")
        expires_at = (datetime.now(tz=UTC) + timedelta(hours=hours)).replace(
            microsecond=0
        )
        token = self.repository.issue(
            token=secrets.token_urlsafe(TOKEN_BYTES),
            created_by=created_by,
            expires_at=expires_at,
            max_usage=usage,
        )
        _logger.info(
            "Invite token issued: id=%s created_by=%s max_usage=%s",
            token.id,
            created_by,
            usage,
        )
        return token

    def get_active(self) -> InviteToken | None:
        """Return the current active token."""
        return self.repository.get_active()

    def get_by_value(self, token: str) -> InviteToken | None:
        """Return a token by value."""
        cleaned = token.strip()
        if not cleaned:
            return None
        return self.repository.get_by_value(cleaned)

    def deactivate_all(self) -> None:
        """Rotate every token out of service."""
        self.repository.deactivate_all()
        _logger.info("All invite tokens deactivated")

    def record_usage(self, token_id: int) -> bool:
        """Count one admission against a token."""
        return self.repository.record_usage(token_id)
