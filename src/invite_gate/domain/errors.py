"""Error kinds raised by stores and services."""


class InviteGateError(RuntimeError):
    """Base class for classified failures.

    ``code`` is the stable identifier written to ``operation_logs.error_code``.
    """

    code = "internal"


class NotFoundError(InviteGateError):
    """A lookup by key matched nothing."""

    code = "not_found"


class ConflictError(InviteGateError):
    """A uniqueness rule was violated."""

    code = "conflict"


class ExhaustedError(InviteGateError):
    """The invite token is inactive, expired, or at its usage ceiling."""

    code = "exhausted"


class TransientError(InviteGateError):
    """The backing store was unreachable or timed out; safe to retry."""

    code = "transient"


class InvalidError(InviteGateError):
    """Input was malformed."""

    code = "invalid"
