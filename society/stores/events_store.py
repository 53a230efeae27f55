"""
society.stores.events_store — Attending-Events Cache
=====================================================

Holds the events the signed-in user is attending so the home screen can
render immediately after launch.  The launch sequencer warms it through
:class:`AttendingEventsPrefetch` and wipes it on sign-out.

Cache epochs:
    ``clear()`` bumps an epoch counter.  A prefetch that started before
    the clear finishes into a stale epoch and throws its result away, so
    a slow request can't repopulate the cache for a user who has already
    signed out.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from society.services.event_service import Event

logger = logging.getLogger(__name__)


class RsvpReader(Protocol):
    async def fetch_event_ids_attending(self, user_id: UUID) -> list[UUID]: ...


class EventReader(Protocol):
    async def fetch_events(self, ids: Sequence[UUID]) -> list[Event]: ...


class EventsStore:
    """In-memory cache of the current user's attending events."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self.is_loading_initial_data: bool = False
        self.did_finish_initial_load: bool = False
        self.load_error: str | None = None
        self._epoch = 0

    def clear(self) -> None:
        self.events = []
        self.is_loading_initial_data = False
        self.did_finish_initial_load = False
        self.load_error = None
        self._epoch += 1

    def replace_cached_events(self, events: list[Event]) -> None:
        """Swap in events loaded by a regular in-screen refresh."""
        self.events = list(events)
        self.is_loading_initial_data = False
        self.did_finish_initial_load = True
        self.load_error = None

    async def prefetch_attending_events(
        self, user_id: UUID, rsvps: RsvpReader, events: EventReader
    ) -> None:
        """Load the user's attending events into the cache.

        On failure ``load_error`` is set, ``is_loading_initial_data`` stays
        True (the home screen shows a light overlay until its own refresh
        lands) and the error is re-raised.
        """
        epoch = self._epoch
        self.is_loading_initial_data = True
        self.load_error = None

        try:
            event_ids = await rsvps.fetch_event_ids_attending(user_id)
            fetched = await events.fetch_events(event_ids) if event_ids else []
        except Exception as exc:
            if epoch == self._epoch:
                self.load_error = str(exc) or type(exc).__name__
                self.did_finish_initial_load = False
            raise

        if epoch != self._epoch:
            logger.info("Discarding prefetched events for %s; cache was cleared", user_id)
            return

        self.events = fetched
        self.did_finish_initial_load = True
        self.is_loading_initial_data = False
        logger.info("Prefetched %d attending events for %s", len(fetched), user_id)


class AttendingEventsPrefetch:
    """``PrefetchJob`` that fills an :class:`EventsStore`.

    Idempotent per user: a ``run()`` while a prefetch for the same user is
    in flight joins it instead of issuing new queries.  Callers that stop
    waiting don't cancel the shared fetch; only :meth:`cancel` does.
    """

    def __init__(self, store: EventsStore, rsvps: RsvpReader, events: EventReader) -> None:
        self._store = store
        self._rsvps = rsvps
        self._events = events
        self._inflight: dict[UUID, asyncio.Task] = {}

    async def run(self, user_id: UUID) -> None:
        task = self._inflight.get(user_id)
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(
                self._store.prefetch_attending_events(user_id, self._rsvps, self._events),
                name=f"prefetch-attending-{user_id}",
            )
            self._inflight[user_id] = task
            task.add_done_callback(lambda t, uid=user_id: self._forget(uid, t))
        await asyncio.shield(task)

    def cancel(self, user_id: UUID | None = None) -> None:
        """Cancel the in-flight prefetch for *user_id*, or all of them."""
        if user_id is None:
            tasks = list(self._inflight.values())
        else:
            tasks = [t for uid, t in self._inflight.items() if uid == user_id]
        for task in tasks:
            task.cancel()

    def is_running(self, user_id: UUID) -> bool:
        task = self._inflight.get(user_id)
        return task is not None and not task.done()

    def _forget(self, user_id: UUID, task: asyncio.Task) -> None:
        if self._inflight.get(user_id) is task:
            del self._inflight[user_id]
        # Retrieve the outcome so a failure nobody awaited isn't reported twice.
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Attending-events prefetch for %s ended with an error", user_id)
