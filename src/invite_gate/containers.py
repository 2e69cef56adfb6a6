"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, ClientOptions, create_client

from invite_gate.adapters.supabase_admission_repository import (
    SupabaseAdmissionRepository,
)
from invite_gate.adapters.supabase_audit_repository import SupabaseAuditRepository
from invite_gate.adapters.supabase_token_repository import SupabaseTokenRepository
from invite_gate.adapters.supabase_user_repository import SupabaseUserRepository
from invite_gate.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from invite_gate.config import Settings, parse_admin_usernames
from invite_gate.services.admission import AdmissionService
from invite_gate.services.audit import AuditService
from invite_gate.services.commands import BotCommandHandler
from invite_gate.services.tokens import TokenService
from invite_gate.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    token_service: TokenService
    user_service: UserService
    audit_service: AuditService
    admission_service: AdmissionService
    command_handler: BotCommandHandler
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = _create_supabase_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_service_key,
        resolved_settings.supabase_timeout_seconds,
    )
    if resolved_settings.audit_supabase_url:
        audit_client = _create_supabase_client(
            resolved_settings.audit_supabase_url,
            resolved_settings.audit_supabase_service_key
            or resolved_settings.supabase_service_key,
            resolved_settings.supabase_timeout_seconds,
        )
    else:
        audit_client = supabase_client
    admin_usernames = parse_admin_usernames(resolved_settings.telegram_admin_usernames)

    token_repository = SupabaseTokenRepository(supabase_client)
    user_repository = SupabaseUserRepository(supabase_client)
    admission_repository = SupabaseAdmissionRepository(supabase_client)
    audit_service = AuditService(SupabaseAuditRepository(audit_client))
    token_service = TokenService(
        token_repository,
        ttl_hours=resolved_settings.invite_ttl_hours,
        default_max_usage=resolved_settings.invite_max_usage,
    )
    user_service = UserService(user_repository, admin_usernames=admin_usernames)
    admission_service = AdmissionService(
        token_repository=token_repository,
        user_repository=user_repository,
        admission_repository=admission_repository,
        audit_service=audit_service,
        admin_usernames=admin_usernames,
    )
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    command_handler = BotCommandHandler(
        admission_service=admission_service,
        token_service=token_service,
        user_service=user_service,
        audit_service=audit_service,
        telegram_client=telegram_client,
        bot_username=resolved_settings.telegram_bot_username,
    )

    async def close_resources() -> None:
        await telegram_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        token_service=token_service,
        user_service=user_service,
        audit_service=audit_service,
        admission_service=admission_service,
        command_handler=command_handler,
        close_resources=close_resources,
    )


def _create_supabase_client(url: str, key: str, timeout_seconds: int) -> Client:
    """Create a Supabase client whose PostgREST calls share one deadline."""
    return create_client(
        url, key, options=ClientOptions(postgrest_client_timeout=timeout_seconds)
    )
