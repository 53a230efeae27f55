"""
society.auth.supabase_auth — Supabase Auth Adapter
===================================================

Reads the locally stored Supabase session and forwards auth-state events.
All client calls go through :func:`~society.database.client.run_query`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any
from uuid import UUID

from supabase import Client

from society.database.client import run_query
from society.launch.contracts import IdentityCallback, Session

logger = logging.getLogger(__name__)


def session_from_supabase(raw: Any, now: float | None = None) -> Session | None:
    """Convert a Supabase auth session (or None) into a :class:`Session`.

    A session without a user counts as absent; one whose ``expires_at``
    (epoch seconds) is in the past counts as expired.
    """
    if raw is None or getattr(raw, "user", None) is None:
        return None
    expires_at = getattr(raw, "expires_at", None)
    current = time.time() if now is None else now
    return Session(
        user_id=UUID(str(raw.user.id)),
        is_expired=expires_at is not None and expires_at <= current,
    )


class SupabaseAuthRepository:
    """``AuthRepository`` backed by ``client.auth``."""

    def __init__(self, client: Client) -> None:
        self._client = client

    async def current_session(self) -> Session | None:
        raw = await run_query(self._client.auth.get_session)
        return session_from_supabase(raw)

    async def sign_out(self) -> None:
        await run_query(self._client.auth.sign_out)

    def watch(
        self, callback: IdentityCallback, loop: asyncio.AbstractEventLoop
    ) -> Callable[[], None]:
        """Forward auth-state events to *callback* on *loop*.

        The Supabase client fires these synchronously on the thread that
        performed the auth call, so each one is re-scheduled onto the loop.
        """

        def _on_auth_event(event: Any, raw_session: Any) -> None:
            session = session_from_supabase(raw_session)
            user_id = None if session is None or session.is_expired else session.user_id
            if loop.is_closed():
                logger.warning("Dropping auth event %s; event loop is closed", event)
                return
            loop.call_soon_threadsafe(callback, user_id)

        subscription = self._client.auth.on_auth_state_change(_on_auth_event)
        return subscription.unsubscribe
