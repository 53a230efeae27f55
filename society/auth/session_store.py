"""
society.auth.session_store — Published Auth Identity
=====================================================

:class:`AuthSessionStore` is the app's single source of truth for "who is
signed in".  It implements
:class:`~society.launch.contracts.SessionProvider`: the launch sequencer
reads the identity and subscribes to its changes.

Identity changes arrive two ways:

* ``refresh()`` re-reads the stored session through the repository.
* ``listen(loop)`` hooks the repository's auth-state events (sign-in,
  sign-out, token refresh), which the Supabase client delivers on
  whatever thread made the call, and marshals them onto the event loop.

Every present identity is delivered to subscribers, including a repeat
of the current one (a sign-in with the same account after the backend
rejected its token).  Signing out is delivered once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol
from uuid import UUID

from society.launch.contracts import IdentityCallback, Session

logger = logging.getLogger(__name__)


class AuthRepository(Protocol):
    async def current_session(self) -> Session | None: ...

    async def sign_out(self) -> None: ...

    def watch(
        self, callback: IdentityCallback, loop: asyncio.AbstractEventLoop
    ) -> Callable[[], None]: ...


class AuthSessionStore:
    """Holds the current user id and publishes every sign-in and sign-out."""

    def __init__(self, auth_repository: AuthRepository) -> None:
        self._repository = auth_repository
        self._user_id: UUID | None = None
        self._subscribers: list[IdentityCallback] = []
        self._stop_watching: Callable[[], None] | None = None

    @property
    def user_id(self) -> UUID | None:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    # ------------------------------------------------------------------
    # SessionProvider
    # ------------------------------------------------------------------
    async def refresh(self) -> None:
        """Re-read the session; expired or unreadable sessions count as signed out."""
        try:
            session = await self._repository.current_session()
        except Exception as exc:
            logger.info("Could not read auth session (%s); treating as signed out", exc)
            session = None

        if session is None or session.is_expired:
            self._apply_user_id(None)
        else:
            self._apply_user_id(session.user_id)

    async def current_session(self) -> Session | None:
        return await self._repository.current_session()

    def subscribe(self, callback: IdentityCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Account actions
    # ------------------------------------------------------------------
    async def sign_out(self) -> None:
        await self._repository.sign_out()
        await self.refresh()

    # ------------------------------------------------------------------
    # Auth-event bridge
    # ------------------------------------------------------------------
    def listen(self, loop: asyncio.AbstractEventLoop) -> None:
        """Start applying the repository's auth events on *loop*."""
        if self._stop_watching is not None:
            return
        self._stop_watching = self._repository.watch(self._apply_user_id, loop)
        logger.info("Listening for auth state changes")

    def stop_listening(self) -> None:
        if self._stop_watching is not None:
            self._stop_watching()
            self._stop_watching = None

    def _apply_user_id(self, user_id: UUID | None) -> None:
        changed = user_id != self._user_id
        if user_id is None and not changed:
            return
        self._user_id = user_id
        if changed:
            logger.info("Auth identity changed → %s", user_id or "signed out")
        for callback in list(self._subscribers):
            try:
                callback(user_id)
            except Exception:
                logger.exception("Auth identity subscriber failed")
