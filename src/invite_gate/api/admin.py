"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timedelta  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from invite_gate.domain.audit import LogContext, LogFilters, LogLevel, OperationType
from invite_gate.services.audit import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

if TYPE_CHECKING:
    from invite_gate.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def log_filters(  # noqa: PLR0913
    user_id: int | None = None,
    chat_id: int | None = None,
    operation_type: OperationType | None = None,
    level: LogLevel | None = None,
    success: bool | None = None,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
) -> LogFilters:
    """Build audit filters from query parameters."""
    return LogFilters(
        user_id=user_id,
        chat_id=chat_id,
        operation_type=operation_type,
        level=level,
        success=success,
        start_time=start_time,
        end_time=end_time,
    )


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.get("/logs", dependencies=[Depends(require_admin)])
async def list_logs(
    request: Request,
    filters: LogFilters = Depends(log_filters),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> dict[str, object]:
    """Return a page of operation logs, newest first."""
    container: AppContainer = request.app.state.container
    logs = container.audit_service.query(filters, limit=limit, offset=offset)
    return {"logs": [asdict(log) for log in logs], "limit": limit, "offset": offset}


@router.get("/logs/stats", dependencies=[Depends(require_admin)])
async def log_stats(
    request: Request, filters: LogFilters = Depends(log_filters)
) -> dict[str, object]:
    """Return aggregate counts over matching operation logs."""
    container: AppContainer = request.app.state.container
    return asdict(container.audit_service.stats(filters))


@router.post("/logs/prune", dependencies=[Depends(require_admin)])
async def prune_logs(
    request: Request, older_than_days: int | None = Query(default=None, ge=1)
) -> dict[str, int]:
    """Delete operation logs past the retention window."""
    container: AppContainer = request.app.state.container
    days = older_than_days or container.settings.log_retention_days
    deleted = container.audit_service.prune_older_than(timedelta(days=days))
    container.audit_service.log_admin_action(
        _request_context(request),
        "Operation logs pruned",
        details=f"older_than_days={days} deleted={deleted}",
    )
    return {"deleted": deleted, "older_than_days": days}


@router.get("/tokens/active", dependencies=[Depends(require_admin)])
async def active_token(request: Request) -> dict[str, object]:
    """Return the current invite token, if any."""
    container: AppContainer = request.app.state.container
    token = container.token_service.get_active()
    return {"token": asdict(token) if token else None}


@router.post("/tokens/deactivate", dependencies=[Depends(require_admin)])
async def deactivate_tokens(request: Request) -> dict[str, str]:
    """Deactivate every invite token."""
    container: AppContainer = request.app.state.container
    container.token_service.deactivate_all()
    container.audit_service.log_admin_action(
        _request_context(request), "All invite tokens deactivated"
    )
    return {"status": "ok"}


def _request_context(request: Request) -> LogContext:
    return LogContext(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
