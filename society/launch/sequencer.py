"""
society.launch.sequencer — Launch & Session Resolution State Machine
=====================================================================

Implements the launch pipeline that decides which top-level screen the
app shows.  On :meth:`LaunchSequencer.start` it publishes ``Splash`` and
then, on an asyncio task:

    1. Refreshes and reads the auth session.
    2. Fetches the profile status row for the signed-in user.
    3. For active, onboarded users, races the attending-events prefetch
       against ``max_prefetch_wait``.
    4. Holds the splash for at least ``min_splash_duration`` and publishes
       the final state.

Supersession:
    Every ``start()`` bumps a generation counter and cancels the previous
    resolution task.  A resolution re-checks its generation after each
    await and never publishes once a newer one has begun, so a slow,
    stale launch can't overwrite a newer result.

The prefetch task is owned by the sequencer but never cancelled by it:
losing the race only means the launch stops waiting for it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from uuid import UUID

from society.config import LaunchConfig
from society.constants import ACCOUNT_DISABLED_REASON
from society.launch.contracts import (
    PrefetchJob,
    ProfileLookup,
    ProfileStatusRecord,
    SessionProvider,
    SessionScopedCache,
)
from society.launch.errors import describe_error, is_unauthorized_error
from society.launch.state import (
    AccountDeleted,
    AccountDisabled,
    AuthenticatedReady,
    LaunchError,
    LaunchState,
    OnboardingRequired,
    Splash,
    Unauthenticated,
    is_terminal,
)

logger = logging.getLogger(__name__)

StateListener = Callable[[LaunchState], None]


def account_state_for(profile: ProfileStatusRecord | None) -> LaunchState | None:
    """Map a profile lookup result to a blocking account state, if any."""
    if profile is None:
        return AccountDeleted()
    if profile.is_disabled:
        return AccountDisabled(reason=ACCOUNT_DISABLED_REASON)
    return None


class LaunchSequencer:
    """Resolves and publishes the app's :data:`LaunchState`.

    Parameters
    ----------
    session_provider:
        Source of the auth identity; the sequencer subscribes to its
        identity changes for its whole lifetime (until :meth:`close`).
    profile_lookup:
        Fetches the :class:`ProfileStatusRecord` for a user.
    prefetch_job:
        Best-effort cache warm-up run before ``AuthenticatedReady``.
    config:
        Splash floor and prefetch deadline.
    session_caches:
        Per-user caches wiped when the identity disappears.
    clock:
        Monotonic clock used for the splash floor.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        profile_lookup: ProfileLookup,
        prefetch_job: PrefetchJob,
        *,
        config: LaunchConfig | None = None,
        session_caches: Iterable[SessionScopedCache] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session_provider
        self._profiles = profile_lookup
        self._prefetch = prefetch_job
        self._config = config or LaunchConfig()
        self._session_caches = tuple(session_caches)
        self._clock = clock

        self._state: LaunchState = Splash()
        self._listeners: list[StateListener] = []
        self._generation = 0
        self._resolution: asyncio.Task | None = None
        # Generation whose pipeline is awaiting its own session refresh.
        self._refreshing_generation: int | None = None
        # Strong references so fire-and-forget prefetches aren't collected.
        self._prefetch_tasks: set[asyncio.Task] = set()

        self._unsubscribe_session = session_provider.subscribe(self._on_identity_changed)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    @property
    def state(self) -> LaunchState:
        return self._state

    @property
    def config(self) -> LaunchConfig:
        return self._config

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call *listener* with every published state; return an unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def wait_until_settled(self, timeout: float | None = None) -> LaunchState:
        """Return the first non-splash state, waiting for it if necessary.

        Raises
        ------
        TimeoutError
            If *timeout* elapses while the splash is still showing.
        """
        if is_terminal(self._state):
            return self._state

        settled: asyncio.Future[LaunchState] = asyncio.get_running_loop().create_future()

        def _on_state(state: LaunchState) -> None:
            if is_terminal(state) and not settled.done():
                settled.set_result(state)

        unsubscribe = self.subscribe(_on_state)
        try:
            return await asyncio.wait_for(settled, timeout)
        finally:
            unsubscribe()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def start(self) -> None:
        """(Re)start resolution.  Must be called from a running event loop."""
        generation = self._supersede()
        self._publish(Splash())
        started_at = self._clock()
        self._resolution = asyncio.get_running_loop().create_task(
            self._run_pipeline(generation, started_at),
            name=f"launch-resolution-{generation}",
        )

    def retry(self) -> None:
        self.start()

    async def validate_account_status(self) -> None:
        """Re-check the profile while the app is running.

        Only acts in ``AuthenticatedReady`` with a known identity.  Transient
        lookup failures are ignored so a flaky network doesn't bounce the
        user out of the app.
        """
        if not isinstance(self._state, AuthenticatedReady):
            return
        user_id = self._session.user_id
        if user_id is None:
            return

        generation = self._generation
        try:
            profile = await self._profiles.fetch_status(user_id)
        except Exception as exc:
            if is_unauthorized_error(exc):
                self._publish_if_current(Unauthenticated(), generation)
            else:
                logger.debug("Account re-check for %s failed: %s", user_id, exc)
            return

        account_state = account_state_for(profile)
        if account_state is not None:
            self._publish_if_current(account_state, generation)

    async def handle_onboarding_completed(self) -> None:
        """Move to ``AuthenticatedReady`` once onboarding finishes."""
        user_id = self._session.user_id
        generation = self._supersede()
        if user_id is None:
            self._publish(Unauthenticated())
            return

        await self._prefetch_with_timeout(user_id)
        self._publish_if_current(AuthenticatedReady(), generation)

    def close(self) -> None:
        """Stop reacting to session changes and abandon any resolution."""
        self._unsubscribe_session()
        self._supersede()

    # ------------------------------------------------------------------
    # Session-change reaction
    # ------------------------------------------------------------------
    def _on_identity_changed(self, user_id: UUID | None) -> None:
        if user_id is None:
            self._clear_session_caches()
            if self._refreshing_generation == self._generation:
                # The running resolution's own refresh found no session; it
                # settles on Unauthenticated after the splash floor.
                logger.debug("Session gone during launch refresh; letting resolution finish")
                return
            self._supersede()
            self._publish(Unauthenticated())
        elif isinstance(self._state, Unauthenticated):
            logger.info("Signed in as %s; restarting launch", user_id)
            self.start()

    def _clear_session_caches(self) -> None:
        for cache in self._session_caches:
            try:
                cache.clear()
            except Exception:
                logger.exception("Failed to clear %s on sign-out", type(cache).__name__)

    # ------------------------------------------------------------------
    # Resolution pipeline
    # ------------------------------------------------------------------
    async def _run_pipeline(self, generation: int, started_at: float) -> None:
        final_state = await self._resolve(generation)
        if final_state is None:
            return
        await self._finalize(final_state, started_at, generation)

    async def _resolve(self, generation: int) -> LaunchState | None:
        """Compute the final state, or None if superseded along the way."""
        self._refreshing_generation = generation
        try:
            await self._session.refresh()
        except Exception:
            logger.warning("Session refresh failed; reading stored session", exc_info=True)
        finally:
            if self._refreshing_generation == generation:
                self._refreshing_generation = None
        if not self._is_current(generation):
            return None

        try:
            session = await self._session.current_session()
        except Exception as exc:
            # Can't tell a broken session store from a signed-out user.
            logger.info("Session read failed (%s); treating as signed out", exc)
            return Unauthenticated()
        if not self._is_current(generation):
            return None
        if session is None or session.is_expired:
            return Unauthenticated()

        try:
            profile = await self._profiles.fetch_status(session.user_id)
        except Exception as exc:
            if is_unauthorized_error(exc):
                logger.info("Profile lookup rejected credentials (%s); signing out", exc)
                return Unauthenticated()
            logger.exception("Profile lookup failed for %s", session.user_id)
            return LaunchError(message=describe_error(exc))
        if not self._is_current(generation):
            return None

        account_state = account_state_for(profile)
        if account_state is not None:
            return account_state
        if not profile.onboarding_completed:
            return OnboardingRequired()

        await self._prefetch_with_timeout(session.user_id)
        if not self._is_current(generation):
            return None
        return AuthenticatedReady()

    async def _finalize(self, state: LaunchState, started_at: float, generation: int) -> None:
        remaining = self._config.min_splash_duration - (self._clock() - started_at)
        if remaining > 0:
            await asyncio.sleep(remaining)
        self._publish_if_current(state, generation)

    # ------------------------------------------------------------------
    # Prefetch race
    # ------------------------------------------------------------------
    async def _prefetch_with_timeout(self, user_id: UUID) -> bool:
        """Wait up to ``max_prefetch_wait`` for the prefetch; True if it finished."""
        task = asyncio.get_running_loop().create_task(
            self._run_prefetch(user_id), name=f"launch-prefetch-{user_id}"
        )
        self._prefetch_tasks.add(task)
        task.add_done_callback(self._prefetch_tasks.discard)

        # asyncio.wait never cancels what it waits on.
        done, _pending = await asyncio.wait({task}, timeout=self._config.max_prefetch_wait)
        if not done:
            logger.info(
                "Prefetch for %s still running after %.1fs; continuing in background",
                user_id,
                self._config.max_prefetch_wait,
            )
        return bool(done)

    async def _run_prefetch(self, user_id: UUID) -> None:
        try:
            await self._prefetch.run(user_id)
        except Exception:
            logger.warning("Prefetch for %s failed", user_id, exc_info=True)

    # ------------------------------------------------------------------
    # Generation bookkeeping & publication
    # ------------------------------------------------------------------
    def _supersede(self) -> int:
        """Invalidate the current resolution and return the new generation."""
        self._generation += 1
        if self._resolution is not None and not self._resolution.done():
            self._resolution.cancel()
            logger.debug("Superseded launch resolution (now generation %d)", self._generation)
        self._resolution = None
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _publish_if_current(self, state: LaunchState, generation: int) -> None:
        if not self._is_current(generation):
            logger.debug("Dropping %r from superseded generation %d", state, generation)
            return
        self._publish(state)

    def _publish(self, state: LaunchState) -> None:
        self._state = state
        logger.info("Launch state → %r", state)
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Launch state listener failed")
