"""Admission: validate an invite token and register the user it admits."""

import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from invite_gate.domain.audit import LogContext
from invite_gate.domain.errors import (
    ConflictError,
    ExhaustedError,
    InvalidError,
    InviteGateError,
    NotFoundError,
)
from invite_gate.domain.models import Candidate, InviteToken, User
from invite_gate.services.audit import AuditService
from invite_gate.services.tokens import TokenRepository
from invite_gate.services.users import UserRepository

_logger = logging.getLogger(__name__)

WELCOME_TEXT = "Welcome! Your registration is complete."
GENERIC_FAILURE_TEXT = "Registration failed. Please try again later."
_PUBLIC_REASONS = {
    NotFoundError.code: "This invite link is not valid.",
    ExhaustedError.code: "This invite link is no longer valid.",
    ConflictError.code: "You are already registered.",
    InvalidError.code: "Registration requires a valid invite link.",
}


class AdmissionRepository(Protocol):
    """Store-level unit of work spanning tokens and users."""

    def admit(self, user: User, token_id: int) -> User:
        """Consume one use of the token and insert the user atomically.

        Raises ``ExhaustedError`` when the token has no uses left, in which
        case no user is inserted, and ``ConflictError`` when the user already
        exists, in which case the usage count is left unchanged.
        """


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome handed back to the chat transport."""

    success: bool
    reason: str
    user: User | None = None
    error_code: str | None = None


@dataclass
class AdmissionService:
    """Orchestrates token validation, registration, and auditing."""

    token_repository: TokenRepository
    user_repository: UserRepository
    admission_repository: AdmissionRepository
    audit_service: AuditService
    admin_usernames: frozenset[str] = field(default_factory=frozenset)

    def admit(self, candidate: Candidate, token_value: str | None) -> AdmissionResult:
        """Admit a candidate and record exactly one audit entry for the attempt.

        Without a token only configured admins may register; this is how the
        first admin gets into an empty store.
        """
        started = time.monotonic()
        token: InviteToken | None = None
        result: AdmissionResult | None = None
        message = "Registration aborted"
        try:
            _validate_candidate(candidate)
            value = (token_value or "").strip()
            if value:
                token = self._resolve_token(value)
                user = self._admit_with_token(candidate, token)
            else:
                user = self._admit_configured_admin(candidate)
            result = AdmissionResult(success=True, reason=WELCOME_TEXT, user=user)
            message = "User registered"
        except InviteGateError as exc:
            _logger.info(
                "Admission rejected: user_id=%s code=%s reason=%s",
                candidate.user_id,
                exc.code,
                exc,
            )
            result = AdmissionResult(
                success=False,
                reason=_PUBLIC_REASONS.get(exc.code, GENERIC_FAILURE_TEXT),
                error_code=exc.code,
            )
            message = f"Registration rejected: {exc}"
        except Exception:
            _logger.exception("Admission failed: user_id=%s", candidate.user_id)
            result = AdmissionResult(
                success=False,
                reason=GENERIC_FAILURE_TEXT,
                error_code=InviteGateError.code,
            )
            message = "Registration failed: unexpected error"
        finally:
            self._record_outcome(candidate, token, result, message, started)
        return result

    def _resolve_token(self, value: str) -> InviteToken:
        token = self.token_repository.get_by_value(value)
        if token is None:
            raise NotFoundError("unknown invite token")
        now = datetime.now(tz=UTC)
        if not token.is_active:
            raise ExhaustedError(f"invite token {token.id} is inactive")
        if token.is_expired(now):
            raise ExhaustedError(f"invite token {token.id} expired")
        if token.remaining_uses == 0:
            raise ExhaustedError(f"invite token {token.id} reached its usage limit")
        return token

    def _admit_with_token(self, candidate: Candidate, token: InviteToken) -> User:
        # Fast path only; the unique constraints decide.
        if self.user_repository.exists(candidate.user_id):
            raise ConflictError(f"user {candidate.user_id} already registered")
        return self.admission_repository.admit(self._build_user(candidate), token.id)

    def _admit_configured_admin(self, candidate: Candidate) -> User:
        if not self._is_configured_admin(candidate.username):
            raise InvalidError("invite token is required")
        return self.user_repository.save(self._build_user(candidate))

    def _build_user(self, candidate: Candidate) -> User:
        return User(
            id=candidate.user_id,
            chat_id=candidate.chat_id,
            username=candidate.username,
            name=candidate.name,
            surname=candidate.surname,
            is_admin=self._is_configured_admin(candidate.username),
            created_at=datetime.now(tz=UTC),
        )

    def _is_configured_admin(self, username: str | None) -> bool:
        return bool(username) and username.lstrip("@").lower() in self.admin_usernames

    def _record_outcome(
        self,
        candidate: Candidate,
        token: InviteToken | None,
        result: AdmissionResult | None,
        message: str,
        started: float,
    ) -> None:
        duration_ms = int((time.monotonic() - started) * 1000)
        success = result is not None and result.success
        if result is None:
            error_code = InviteGateError.code
        else:
            error_code = result.error_code
        self.audit_service.log_registration(
            context=LogContext(
                user_id=candidate.user_id,
                chat_id=candidate.chat_id,
                username=candidate.username,
            ),
            message=message,
            success=success,
            details=f"token_id={token.id}" if token else None,
            duration_ms=duration_ms,
            error_code=error_code,
        )


def _validate_candidate(candidate: Candidate) -> None:
    if candidate.user_id <= 0:
        raise InvalidError(f"invalid user id {candidate.user_id}")
    if candidate.chat_id == 0:
        raise InvalidError("chat id is required")
