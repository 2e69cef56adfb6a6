"""Supabase unit of work for admitting a user with an invite token."""

from dataclasses import dataclass

from supabase import Client

from invite_gate.adapters.supabase_errors import translate_errors
from invite_gate.adapters.supabase_user_repository import parse_user
from invite_gate.domain.models import User
from invite_gate.services.admission import AdmissionRepository


@dataclass
class SupabaseAdmissionRepository(AdmissionRepository):
    """Runs the usage increment and the user insert in one SQL function."""

    client: Client

    def admit(self, user: User, token_id: int) -> User:
        """Consume one token use and create the user, or neither."""
        with translate_errors("admit user"):
            response = self.client.rpc(
                "admit_user_with_token",
                {
                    "p_token_id": token_id,
                    "p_user_id": user.id,
                    "p_chat_id": user.chat_id,
                    "p_username": user.username,
                    "p_first_name": user.name,
                    "p_last_name": user.surname,
                    "p_is_admin": user.is_admin,
                    "p_created_at": user.created_at.isoformat(),
                },
            ).execute()
        if not response.data:
            raise RuntimeError("Failed to admit user in Supabase")
        return parse_user(response.data[0])
