"""Audit logging service."""

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from invite_gate.domain.audit import (
    LogContext,
    LogEntry,
    LogFilters,
    LogLevel,
    LogStats,
    OperationLog,
    OperationType,
)

_logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


class AuditRepository(Protocol):
    """Persistence interface for audit events.

    Rows are append-only; ``created_at`` is stamped by the store.
    """

    def record(self, entry: LogEntry) -> None:
        """Append one operation log row."""

    def query(
        self, filters: LogFilters, limit: int, offset: int
    ) -> list[OperationLog]:
        """Return matching rows, newest first."""

    def stats(self, filters: LogFilters) -> LogStats:
        """Return aggregate counts over matching rows.

        Every filter except ``success`` applies, so the counts always split
        the selected window into successes and errors.
        """

    def prune_older_than(self, older_than: timedelta) -> int:
        """Delete rows older than now minus the duration; return the count."""


@dataclass
class AuditService:
    """Service for recording and reading audit events."""

    repository: AuditRepository

    def record(self, entry: LogEntry) -> bool:
        """Persist an audit event without ever failing the caller.

        Returns false when the write failed; the failure is logged.
        """
        try:
            self.repository.record(entry)
        except Exception:
            _logger.exception(
                "Failed to write audit entry: type=%s success=%s error_code=%s",
                entry.operation_type,
                entry.success,
                entry.error_code,
            )
            return False
        return True

    def query(
        self,
        filters: LogFilters | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[OperationLog]:
        """Return a page of audit events, newest first."""
        page_size = min(max(limit, 1), MAX_PAGE_SIZE)
        return self.repository.query(filters or LogFilters(), page_size, max(offset, 0))

    def stats(self, filters: LogFilters | None = None) -> LogStats:
        """Return aggregate statistics for audit events."""
        return self.repository.stats(filters or LogFilters())

    def prune_older_than(self, older_than: timedelta) -> int:
        """Delete audit events past the retention window."""
        if older_than <= timedelta(0):
            raise ValueError("retention window must be positive")
        deleted = self.repository.prune_older_than(older_than)
        _logger.info("Pruned %s audit entries older than %s", deleted, older_than)
        return deleted

    def log_registration(  # noqa: PLR0913
        self,
        context: LogContext,
        message: str,
        success: bool,
        details: str | None = None,
        duration_ms: int | None = None,
        error_code: str | None = None,
    ) -> bool:
        """Record the outcome of an admission attempt."""
        return self.record(
            LogEntry(
                operation_type=OperationType.USER_REGISTRATION,
                level=LogLevel.INFO if success else LogLevel.WARN,
                message=message,
                success=success,
                context=context,
                details=details,
                duration_ms=duration_ms,
                error_code=error_code,
            )
        )

    def log_login(self, context: LogContext) -> bool:
        """Record a returning registered user."""
        return self.record(
            LogEntry(
                operation_type=OperationType.USER_LOGIN,
                message="Registered user started the bot",
                context=context,
            )
        )

    def log_token_generation(
        self, context: LogContext, token_id: int, max_usage: int
    ) -> bool:
        """Record that an admin issued a token."""
        return self.record(
            LogEntry(
                operation_type=OperationType.TOKEN_GENERATION,
                message="Invite token generated",
                context=context,
                details=f"token_id={token_id} max_usage={max_usage}",
            )
        )

    def log_admin_action(
        self,
        context: LogContext,
        message: str,
        success: bool = True,
        details: str | None = None,
        error_code: str | None = None,
    ) -> bool:
        """Record a privileged action."""
        return self.record(
            LogEntry(
                operation_type=OperationType.ADMIN_ACTION,
                level=LogLevel.INFO if success else LogLevel.WARN,
                message=message,
                success=success,
                context=context,
                details=details,
                error_code=error_code,
            )
        )

    def log_user_update(
        self,
        context: LogContext,
        message: str,
        success: bool = True,
        error_code: str | None = None,
    ) -> bool:
        """Record a change to a user's profile."""
        return self.record(
            LogEntry(
                operation_type=OperationType.USER_UPDATE,
                level=LogLevel.INFO if success else LogLevel.WARN,
                message=message,
                success=success,
                context=context,
                error_code=error_code,
            )
        )

    def log_bot_command(
        self, context: LogContext, command: str, success: bool = True
    ) -> bool:
        """Record a bot command that does not have a richer entry."""
        return self.record(
            LogEntry(
                operation_type=OperationType.BOT_COMMAND,
                level=LogLevel.DEBUG if success else LogLevel.WARN,
                message=f"Command {command}",
                success=success,
                context=context,
            )
        )

    def log_error(
        self,
        context: LogContext | None,
        message: str,
        error_code: str,
        details: str | None = None,
    ) -> bool:
        """Record an unexpected failure."""
        return self.record(
            LogEntry(
                operation_type=OperationType.ERROR,
                level=LogLevel.ERROR,
                message=message,
                success=False,
                context=context,
                details=details,
                error_code=error_code,
            )
        )
