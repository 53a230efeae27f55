"""
society.launch.errors — Error Classification
=============================================

Adapters raise :class:`UnauthorizedError` when the backend rejects the
caller's credentials.  Errors from code that predates that convention are
still recognised by status code or, as a last resort, by the wording of
their message.  Either way an auth-shaped failure means "signed out",
not "app broken".
"""

from __future__ import annotations

__all__ = [
    "UNAUTHORIZED_CODES",
    "UNAUTHORIZED_MESSAGE_TOKENS",
    "UnauthorizedError",
    "describe_error",
    "is_unauthorized_error",
]

# HTTP 401 and the PostgREST codes for missing / invalid JWTs.
UNAUTHORIZED_CODES: frozenset[str] = frozenset({"401", "PGRST301", "PGRST302"})

UNAUTHORIZED_MESSAGE_TOKENS: tuple[str, ...] = ("unauthorized", "jwt", "401", "auth")

_CODE_ATTRIBUTES = ("status", "status_code", "code")


class UnauthorizedError(Exception):
    """The backend rejected the session (expired, revoked, or missing JWT)."""


def _has_unauthorized_code(exc: BaseException) -> bool:
    for attr in _CODE_ATTRIBUTES:
        value = getattr(exc, attr, None)
        if value is not None and str(value).upper() in UNAUTHORIZED_CODES:
            return True
    return False


def is_unauthorized_error(exc: BaseException) -> bool:
    """Return True if *exc* should be treated as a sign-out."""
    if isinstance(exc, UnauthorizedError):
        return True
    if _has_unauthorized_code(exc):
        return True
    message = str(exc).lower()
    return any(token in message for token in UNAUTHORIZED_MESSAGE_TOKENS)


def describe_error(exc: BaseException) -> str:
    """Message shown next to the retry button."""
    return str(exc) or type(exc).__name__
