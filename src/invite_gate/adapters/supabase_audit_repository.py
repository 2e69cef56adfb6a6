"""Supabase repository for operation logs."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from supabase import Client

from invite_gate.adapters.supabase_errors import translate_errors
from invite_gate.domain.audit import (
    LogContext,
    LogEntry,
    LogFilters,
    LogLevel,
    LogStats,
    OperationLog,
    OperationType,
)
from invite_gate.services.audit import AuditRepository


@dataclass
class SupabaseAuditRepository(AuditRepository):
    """Supabase-backed audit repository."""

    client: Client

    def record(self, entry: LogEntry) -> None:
        """Append an operation log row; the database stamps ``created_at``."""
        context = entry.context or LogContext()
        with translate_errors("record operation log"):
            self.client.table("operation_logs").insert(
                {
                    "user_id": context.user_id,
                    "chat_id": context.chat_id,
                    "username": context.username,
                    "ip_address": context.ip_address,
                    "user_agent": context.user_agent,
                    "operation_type": entry.operation_type.value,
                    "level": entry.level.value,
                    "message": entry.message,
                    "details": entry.details,
                    "success": entry.success,
                    "duration_ms": entry.duration_ms,
                    "error_code": entry.error_code,
                }
            ).execute()

    def query(
        self, filters: LogFilters, limit: int, offset: int
    ) -> list[OperationLog]:
        """Return matching rows ordered by ``created_at`` descending."""
        with translate_errors("query operation logs"):
            request = _apply_filters(
                self.client.table("operation_logs").select("*"), filters
            )
            response = (
                request.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        return [_parse_log(row) for row in response.data or []]

    def stats(self, filters: LogFilters) -> LogStats:
        """Aggregate matching rows in the database.

        ``filters.success`` is ignored; the result already splits by outcome.
        """
        with translate_errors("operation log stats"):
            response = self.client.rpc(
                "operation_log_stats", _filter_params(filters)
            ).execute()
        rows = response.data or []
        if not rows:
            return LogStats(total_count=0, success_count=0, error_count=0)
        row = rows[0]
        average = row.get("avg_duration_ms")
        return LogStats(
            total_count=int(row.get("total_count") or 0),
            success_count=int(row.get("success_count") or 0),
            error_count=int(row.get("error_count") or 0),
            avg_duration_ms=float(average) if average is not None else None,
        )

    def prune_older_than(self, older_than: timedelta) -> int:
        """Delete rows created before now minus ``older_than``."""
        cutoff = datetime.now(tz=UTC) - older_than
        with translate_errors("prune operation logs"):
            response = self.client.rpc(
                "prune_operation_logs", {"p_cutoff": cutoff.isoformat()}
            ).execute()
        return int(response.data or 0)


def _apply_filters(request: Any, filters: LogFilters) -> Any:
    """Add one condition per populated filter field."""
    if filters.user_id is not None:
        request = request.eq("user_id", filters.user_id)
    if filters.chat_id is not None:
        request = request.eq("chat_id", filters.chat_id)
    if filters.operation_type is not None:
        request = request.eq("operation_type", filters.operation_type.value)
    if filters.level is not None:
        request = request.eq("level", filters.level.value)
    if filters.success is not None:
        request = request.eq("success", filters.success)
    if filters.start_time is not None:
        request = request.gte("created_at", filters.start_time.isoformat())
    if filters.end_time is not None:
        request = request.lte("created_at", filters.end_time.isoformat())
    return request


def _filter_params(filters: LogFilters) -> dict[str, object]:
    return {
        "p_user_id": filters.user_id,
        "p_chat_id": filters.chat_id,
        "p_operation_type": (
            filters.operation_type.value if filters.operation_type else None
        ),
        "p_level": filters.level.value if filters.level else None,
        "p_start_time": filters.start_time.isoformat() if filters.start_time else None,
        "p_end_time": filters.end_time.isoformat() if filters.end_time else None,
    }


def _parse_log(row: dict[str, Any]) -> OperationLog:
    has_context = any(
        row.get(key) is not None
        for key in ("user_id", "chat_id", "username", "ip_address", "user_agent")
    )
    context = (
        LogContext(
            user_id=row.get("user_id"),
            chat_id=row.get("chat_id"),
            username=row.get("username"),
            ip_address=row.get("ip_address"),
            user_agent=row.get("user_agent"),
        )
        if has_context
        else None
    )
    return OperationLog(
        id=int(row["id"]),
        operation_type=OperationType(row["operation_type"]),
        level=LogLevel(row["level"]),
        message=str(row["message"]),
        success=bool(row["success"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        context=context,
        details=row.get("details"),
        duration_ms=row.get("duration_ms"),
        error_code=row.get("error_code"),
    )
