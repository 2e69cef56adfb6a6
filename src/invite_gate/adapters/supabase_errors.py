"""Translate Supabase/PostgREST failures into domain error kinds."""

from collections.abc import Iterator
from contextlib import contextmanager

import httpx
from postgrest.exceptions import APIError

from invite_gate.domain.errors import (
    ConflictError,
    ExhaustedError,
    InvalidError,
    NotFoundError,
    TransientError,
)

UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
INVALID_PARAMETER_VALUE = "22023"
NO_DATA_FOUND = "P0002"
TOKEN_EXHAUSTED = "IG410"
# Serialization failure, deadlock, statement timeout, lock timeout.
_RETRYABLE_CODES = {"40001", "40P01", "57014", "55P03"}


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise store failures from ``operation`` as domain errors."""
    try:
        yield
    except APIError as exc:
        code = exc.code or ""
        detail = f"{operation}: {exc.message}"
        if code == UNIQUE_VIOLATION:
            raise ConflictError(detail) from exc
        if code == NO_DATA_FOUND:
            raise NotFoundError(detail) from exc
        if code == TOKEN_EXHAUSTED:
            raise ExhaustedError(detail) from exc
        if code in {CHECK_VIOLATION, INVALID_PARAMETER_VALUE}:
            raise InvalidError(detail) from exc
        if code.startswith("08") or code in _RETRYABLE_CODES:
            raise TransientError(detail) from exc
        raise
    except httpx.TransportError as exc:
        raise TransientError(f"{operation}: {exc}") from exc
