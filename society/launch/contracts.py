"""
society.launch.contracts — Collaborator Contracts
==================================================

The launch sequencer never talks to Supabase directly.  It depends on
three small collaborators (session, profile, prefetch) plus any number of
per-user caches to wipe on sign-out.  Concrete adapters live in
:mod:`society.auth`, :mod:`society.services` and :mod:`society.stores`;
tests substitute in-memory fakes.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable
from uuid import UUID

__all__ = [
    "IdentityCallback",
    "PrefetchJob",
    "ProfileLookup",
    "ProfileStatusRecord",
    "Session",
    "SessionProvider",
    "SessionScopedCache",
]

IdentityCallback = Callable[[UUID | None], None]


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Session:
    """The slice of an auth session the launch sequence cares about."""

    user_id: UUID
    is_expired: bool = False


@dataclass(frozen=True, slots=True)
class ProfileStatusRecord:
    """Read-only projection of a ``profiles`` row.

    The defaults are part of the contract: a row without ``is_active``
    counts as active, and a row without ``onboarding_completed`` counts
    as not onboarded.
    """

    is_active: bool = True
    deleted_at: datetime | None = None
    onboarding_completed: bool = False

    @classmethod
    def from_optional(
        cls,
        is_active: bool | None = None,
        deleted_at: datetime | None = None,
        onboarding_completed: bool | None = None,
    ) -> ProfileStatusRecord:
        """Build a record from nullable backend columns."""
        return cls(
            is_active=True if is_active is None else is_active,
            deleted_at=deleted_at,
            onboarding_completed=False if onboarding_completed is None else onboarding_completed,
        )

    @property
    def is_disabled(self) -> bool:
        return not self.is_active or self.deleted_at is not None


# ---------------------------------------------------------------------------
# Collaborator protocols
# ---------------------------------------------------------------------------
@runtime_checkable
class SessionProvider(Protocol):
    """Owns the auth identity.  The sequencer only reads and reacts."""

    @property
    def user_id(self) -> UUID | None: ...

    async def refresh(self) -> None:
        """Re-read the stored session.  Best-effort."""
        ...

    async def current_session(self) -> Session | None:
        """Return the current session, or None when signed out.  May raise."""
        ...

    def subscribe(self, callback: IdentityCallback) -> Callable[[], None]:
        """Call *callback* whenever the identity changes; return an unsubscribe."""
        ...


@runtime_checkable
class ProfileLookup(Protocol):
    async def fetch_status(self, user_id: UUID) -> ProfileStatusRecord | None:
        """Return the user's status record, or None when no row exists."""
        ...


@runtime_checkable
class PrefetchJob(Protocol):
    async def run(self, user_id: UUID) -> None:
        """Warm per-user caches.  May be slow; may raise."""
        ...


@runtime_checkable
class SessionScopedCache(Protocol):
    def clear(self) -> None: ...
