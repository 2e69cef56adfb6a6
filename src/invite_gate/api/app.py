"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from invite_gate.api.admin import router as admin_router
from invite_gate.api.telegram_models import TelegramMessage, TelegramUpdate
from invite_gate.app_logging import configure_logging
from invite_gate.containers import AppContainer
from invite_gate.domain.errors import InviteGateError
from invite_gate.services.commands import IncomingCommand
from invite_gate.telegram_commands import CHAT_MENU_BUTTON, telegram_commands

GENERIC_ERROR_TEXT = "Something went wrong. Please try again later."


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                CHAT_MENU_BUTTON
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        if message is None or not message.text or message.from_user.is_bot:
            return {"status": "ignored"}
        incoming = _to_command(message)
        try:
            await state_container.command_handler.handle(incoming)
        except Exception as exc:
            logger.exception(
                "Failed to handle Telegram update",
                extra={"update_id": update.update_id, "user_id": incoming.user_id},
            )
            state_container.audit_service.log_error(
                incoming.context,
                "Unhandled failure while processing a bot command",
                error_code=exc.code if isinstance(exc, InviteGateError) else "internal",
                details=type(exc).__name__,
            )
            try:
                await state_container.telegram_client.send_message(
                    chat_id=incoming.chat_id, text=GENERIC_ERROR_TEXT
                )
            except Exception:
                logger.exception("Failed to send error reply")
            return {"status": "error"}
        return {"status": "ok"}

    return app


def _to_command(message: TelegramMessage) -> IncomingCommand:
    """Build the transport-neutral command from a Telegram message."""
    return IncomingCommand(
        user_id=message.from_user.id,
        chat_id=message.chat.id,
        text=message.text or "",
        username=message.from_user.username,
        first_name=message.from_user.first_name,
        last_name=message.from_user.last_name,
    )
