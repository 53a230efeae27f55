"""
society.launch.state — LaunchState Variants
============================================

The sequencer's sole observable output.  Each variant is an immutable
value; a transition always replaces the whole state, never patches it.
Only :class:`AccountDisabled` and :class:`LaunchError` carry text.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "AccountDeleted",
    "AccountDisabled",
    "AuthenticatedReady",
    "LaunchError",
    "LaunchState",
    "OnboardingRequired",
    "Splash",
    "Unauthenticated",
    "is_terminal",
]


@dataclass(frozen=True, slots=True)
class Splash:
    """Resolution in progress."""


@dataclass(frozen=True, slots=True)
class Unauthenticated:
    """No valid session; route to login."""


@dataclass(frozen=True, slots=True)
class OnboardingRequired:
    """Signed in with a profile, but onboarding is not finished."""


@dataclass(frozen=True, slots=True)
class AuthenticatedReady:
    """Signed in, active, onboarded, prefetch attempted."""


@dataclass(frozen=True, slots=True)
class AccountDeleted:
    """Signed in, but no profile row exists for the user."""


@dataclass(frozen=True, slots=True)
class AccountDisabled:
    """Signed in, but the profile is inactive or soft-deleted."""

    reason: str


@dataclass(frozen=True, slots=True)
class LaunchError:
    """Unrecoverable failure while resolving the profile; user may retry."""

    message: str


LaunchState = (
    Splash
    | Unauthenticated
    | OnboardingRequired
    | AuthenticatedReady
    | AccountDeleted
    | AccountDisabled
    | LaunchError
)


def is_terminal(state: LaunchState) -> bool:
    """Return True once resolution has produced a final (non-splash) state."""
    return not isinstance(state, Splash)
