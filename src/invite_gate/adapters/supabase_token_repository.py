"""Supabase-backed invite token repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from invite_gate.adapters.supabase_errors import translate_errors
from invite_gate.domain.models import InviteToken
from invite_gate.services.tokens import TokenRepository


@dataclass
class SupabaseTokenRepository(TokenRepository):
    """Supabase implementation for invite token persistence.

    Issuing and consuming go through SQL functions so that the single-active
    rule and the usage ceiling are enforced inside one transaction.
    """

    client: Client

    def issue(
        self, token: str, created_by: int, expires_at: datetime, max_usage: int
    ) -> InviteToken:
        """Deactivate every token and insert the new active one."""
        with translate_errors("issue invite token"):
            response = self.client.rpc(
                "issue_invite_token",
                {
                    "p_token": token,
                    "p_created_by": created_by,
                    "p_expires_at": expires_at.isoformat(),
                    "p_max_usage": max_usage,
                },
            ).execute()
        if not response.data:
            raise RuntimeError("Failed to issue invite token in Supabase")
        return _parse_token(response.data[0])

    def get_active(self) -> InviteToken | None:
        """Return the newest active token that has not expired."""
        with translate_errors("get active invite token"):
            response = (
                self.client.table("invite_tokens")
                .select("*")
                .eq("is_active", True)
                .gt("expires_at", datetime.now(tz=UTC).isoformat())
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_token(response.data[0])

    def get_by_value(self, token: str) -> InviteToken | None:
        """Return a token by value regardless of state."""
        with translate_errors("get invite token"):
            response = (
                self.client.table("invite_tokens")
                .select("*")
                .eq("token", token)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_token(response.data[0])

    def deactivate_all(self) -> None:
        """Mark every active token inactive."""
        with translate_errors("deactivate invite tokens"):
            self.client.table("invite_tokens").update({"is_active": False}).eq(
                "is_active", True
            ).execute()

    def record_usage(self, token_id: int) -> bool:
        """Conditionally increment usage; false when the ceiling was reached."""
        with translate_errors("record invite token usage"):
            response = self.client.rpc(
                "record_invite_token_usage", {"p_token_id": token_id}
            ).execute()
        return bool(response.data)


def _parse_token(row: dict[str, object]) -> InviteToken:
    """Parse an invite_tokens row into a domain model."""
    return InviteToken(
        id=int(row["id"]),
        token=str(row["token"]),
        created_by=int(row["created_by"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        expires_at=datetime.fromisoformat(str(row["expires_at"])),
        is_active=bool(row["is_active"]),
        usage_count=int(row.get("usage_count", 0)),
        max_usage=int(row["max_usage"]),
    )
