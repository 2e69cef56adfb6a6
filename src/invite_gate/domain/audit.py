"""Domain models for the operation audit log."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class LogLevel(StrEnum):
    """Severity of an audit entry."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class OperationType(StrEnum):
    """Kind of operation an audit entry describes."""

    USER_REGISTRATION = "USER_REGISTRATION"
    USER_LOGIN = "USER_LOGIN"
    ADMIN_ACTION = "ADMIN_ACTION"
    TOKEN_GENERATION = "TOKEN_GENERATION"
    TOKEN_USAGE = "TOKEN_USAGE"
    USER_UPDATE = "USER_UPDATE"
    BOT_COMMAND = "BOT_COMMAND"
    ERROR = "ERROR"


@dataclass(frozen=True)
class LogContext:
    """Who and where an operation came from.

    The fields travel together; an entry either carries a context or none.
    """

    user_id: int | None = None
    chat_id: int | None = None
    username: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class LogEntry:
    """An audit entry as submitted by a caller, before the store stamps it."""

    operation_type: OperationType
    message: str
    level: LogLevel = LogLevel.INFO
    success: bool = True
    context: LogContext | None = None
    details: str | None = None
    duration_ms: int | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class OperationLog:
    """A persisted, immutable audit entry."""

    id: int
    operation_type: OperationType
    level: LogLevel
    message: str
    success: bool
    created_at: datetime
    context: LogContext | None = None
    details: str | None = None
    duration_ms: int | None = None
    error_code: str | None = None


@dataclass(frozen=True)
class LogFilters:
    """Conjunctive filters for audit queries; ``None`` means unfiltered."""

    user_id: int | None = None
    chat_id: int | None = None
    operation_type: OperationType | None = None
    level: LogLevel | None = None
    success: bool | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


@dataclass(frozen=True)
class LogStats:
    """Aggregate counts over a filtered set of audit entries."""

    total_count: int
    success_count: int
    error_count: int
    avg_duration_ms: float | None = None

