"""Tests for container wiring."""

import asyncio

from invite_gate.config import Settings
from invite_gate.containers import build_container
from tests.conftest import TEST_SERVICE_KEY


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.command_handler.bot_username == "invite_gate_bot"
    assert container.admission_service.admin_usernames == frozenset({"root_admin"})
    assert container.token_service.ttl_hours == settings.invite_ttl_hours
    assert (
        container.audit_service.repository.client
        is container.admission_service.token_repository.client
    )
    asyncio.run(container.close_resources())


def test_build_container_uses_separate_audit_store(settings: Settings) -> None:
    audit_settings = settings.model_copy(
        update={
            "audit_supabase_url": "https://audit.supabase.co",
            "audit_supabase_service_key": TEST_SERVICE_KEY,
        }
    )

    container = build_container(audit_settings)

    assert (
        container.audit_service.repository.client
        is not container.admission_service.token_repository.client
    )
    asyncio.run(container.close_resources())
