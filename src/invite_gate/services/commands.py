"""Command handlers for Telegram updates."""

from dataclasses import dataclass

from invite_gate.adapters.telegram_client import TelegramClient
from invite_gate.domain.audit import LogContext
from invite_gate.domain.errors import InvalidError, NotFoundError
from invite_gate.domain.models import Candidate
from invite_gate.services.admission import AdmissionService
from invite_gate.services.audit import AuditService
from invite_gate.services.tokens import TokenService
from invite_gate.services.users import UserService
from invite_gate.telegram_commands import BotCommand, parse_command

NOT_AUTHORIZED_TEXT = "Not authorized."
NOT_REGISTERED_TEXT = "Please register with an invite link first."


@dataclass(frozen=True)
class IncomingCommand:
    """A text message as delivered by the chat transport."""

    user_id: int
    chat_id: int
    text: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def context(self) -> LogContext:
        """Audit context for this sender."""
        return LogContext(
            user_id=self.user_id, chat_id=self.chat_id, username=self.username
        )


@dataclass
class BotCommandHandler:
    """Route bot commands to the admission core and reply in the chat."""

    admission_service: AdmissionService
    token_service: TokenService
    user_service: UserService
    audit_service: AuditService
    telegram_client: TelegramClient
    bot_username: str | None = None

    async def handle(self, message: IncomingCommand) -> None:
        """Handle one command message and send the reply."""
        parsed = parse_command(message.text)
        command = BotCommand.lookup(parsed[0]) if parsed else None
        if parsed is None or command is None:
            await self._reply(message, "Unknown command. Send /help for a list.")
            return
        _, args = parsed
        if command.value.admin_only and not self.user_service.is_admin(
            message.user_id, message.username
        ):
            self.audit_service.log_admin_action(
                message.context,
                f"Rejected /{command.value.command}",
                success=False,
                error_code="unauthorized",
            )
            await self._reply(message, NOT_AUTHORIZED_TEXT)
            return
        handlers = {
            BotCommand.START: self._start,
            BotCommand.NAME: self._name,
            BotCommand.HELP: self._help,
            BotCommand.INVITE: self._invite,
            BotCommand.TOKEN: self._token,
            BotCommand.REVOKE: self._revoke,
            BotCommand.PROMOTE: self._promote,
            BotCommand.DEMOTE: self._demote,
        }
        text = handlers[command](message, args)
        await self._reply(message, text)

    def _start(self, message: IncomingCommand, args: list[str]) -> str:
        token_value = args[0] if args else None
        if token_value is None:
            user = self.user_service.get(message.user_id)
            if user is not None:
                self.audit_service.log_login(message.context)
                return f"Welcome back, {user.name or user.username or 'friend'}!"
        result = self.admission_service.admit(
            Candidate(
                user_id=message.user_id,
                chat_id=message.chat_id,
                username=message.username,
                name=message.first_name or "",
                surname=message.last_name or "",
            ),
            token_value,
        )
        return result.reason

    def _name(self, message: IncomingCommand, args: list[str]) -> str:
        if len(args) < 2:  # noqa: PLR2004
            return "Usage: /name <first name> <last name>"
        name, surname = args[0], " ".join(args[1:])
        try:
            self.user_service.update_personal_info(message.user_id, name, surname)
        except NotFoundError:
            self.audit_service.log_user_update(
                message.context,
                "Profile update for unknown user",
                success=False,
                error_code=NotFoundError.code,
            )
            return NOT_REGISTERED_TEXT
        self.audit_service.log_user_update(message.context, "Personal info updated")
        return f"Saved: {name} {surname}."

    def _help(self, message: IncomingCommand, args: list[str]) -> str:
        self.audit_service.log_bot_command(message.context, "/help")
        is_admin = self.user_service.is_admin(message.user_id, message.username)
        lines = ["Available commands:"]
        for entry in BotCommand:
            if entry.value.admin_only and not is_admin:
                continue
            lines.append(f"/{entry.value.command} - {entry.value.description}")
        return "\n".join(lines)

    def _invite(self, message: IncomingCommand, args: list[str]) -> str:
        max_usage: int | None = None
        if args:
            try:
                max_usage = int(args[0])
            except ValueError:
                return "Usage: /invite [max uses]"
        try:
            token = self.token_service.issue(message.user_id, max_usage=max_usage)
        except InvalidError as exc:
            self.audit_service.log_admin_action(
                message.context,
                "Invite token generation rejected",
                success=False,
                details=str(exc),
                error_code=exc.code,
            )
            return "Max uses must be a positive number."
        self.audit_service.log_token_generation(
            message.context, token.id, token.max_usage
        )
        return (
            f"New invite link (valid for {token.max_usage} registration(s) "
            f"until {token.expires_at:%Y-%m-%d %H:%M} UTC):\n"
            f"{self._invite_link(token.token)}"
        )

    def _token(self, message: IncomingCommand, args: list[str]) -> str:
        self.audit_service.log_bot_command(message.context, "/token")
        token = self.token_service.get_active()
        if token is None:
            return "No active invite link. Send /invite to create one."
        return (
            f"{self._invite_link(token.token)}\n"
            f"Used {token.usage_count}/{token.max_usage}, "
            f"expires {token.expires_at:%Y-%m-%d %H:%M} UTC."
        )

    def _revoke(self, message: IncomingCommand, args: list[str]) -> str:
        self.token_service.deactivate_all()
        self.audit_service.log_admin_action(
            message.context, "All invite tokens deactivated"
        )
        return "All invite links are now inactive."

    def _promote(self, message: IncomingCommand, args: list[str]) -> str:
        return self._set_admin(message, args, is_admin=True)

    def _demote(self, message: IncomingCommand, args: list[str]) -> str:
        return self._set_admin(message, args, is_admin=False)

    def _set_admin(
        self, message: IncomingCommand, args: list[str], is_admin: bool
    ) -> str:
        if len(args) != 1 or not args[0].isdigit():
            return "Usage: /promote <user id> or /demote <user id>"
        target_id = int(args[0])
        action = "granted" if is_admin else "revoked"
        try:
            self.user_service.set_admin_status(target_id, is_admin)
        except NotFoundError as exc:
            self.audit_service.log_admin_action(
                message.context,
                f"Admin rights {action}",
                success=False,
                details=f"target_user_id={target_id}",
                error_code=exc.code,
            )
            return "User not found."
        self.audit_service.log_admin_action(
            message.context,
            f"Admin rights {action}",
            details=f"target_user_id={target_id}",
        )
        return f"Admin rights {action} for user {target_id}."

    def _invite_link(self, token: str) -> str:
        if self.bot_username:
            return f"https://t.me/{self.bot_username}?start={token}"
        return f"/start {token}"

    async def _reply(self, message: IncomingCommand, text: str) -> None:
        await self.telegram_client.send_message(chat_id=message.chat_id, text=text)
