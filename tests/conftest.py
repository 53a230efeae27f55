"""
tests/conftest.py — Shared Test Fixtures
=========================================

In-memory stand-ins for the launch sequencer's collaborators.  Each fake
records its calls and exposes plain attributes (``delay``, ``error``,
``record`` …) that a test flips before starting the sequencer.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from uuid import UUID

import pytest

from society.launch.contracts import ProfileStatusRecord, Session

TEST_USER_ID = UUID("5f0c7a8e-3b1d-4c2a-9e6f-1a2b3c4d5e6f")


class FakeSessionProvider:
    """SessionProvider whose identity a test can change at will."""

    def __init__(self, user_id: UUID | None = TEST_USER_ID) -> None:
        self.user_id = user_id
        self.session: Session | None = Session(user_id=user_id) if user_id else None
        self.read_error: Exception | None = None
        self.refresh_error: Exception | None = None
        self.read_delay = 0.0
        self.calls: list[str] = []
        self._subscribers: list[Callable[[UUID | None], None]] = []

    async def refresh(self) -> None:
        self.calls.append("refresh")
        if self.refresh_error is not None:
            raise self.refresh_error

    async def current_session(self) -> Session | None:
        self.calls.append("current_session")
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.read_error is not None:
            raise self.read_error
        return self.session

    def subscribe(self, callback: Callable[[UUID | None], None]) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def sign_in(self, user_id: UUID = TEST_USER_ID) -> None:
        self.user_id = user_id
        self.session = Session(user_id=user_id)
        for callback in list(self._subscribers):
            callback(user_id)

    def sign_out(self) -> None:
        self.user_id = None
        self.session = None
        for callback in list(self._subscribers):
            callback(None)


class FakeProfileLookup:
    """ProfileLookup returning ``record`` (or raising ``error``).

    ``script`` entries ``(delay, outcome)`` are consumed first, one per
    call; an outcome that is an exception is raised.
    """

    def __init__(self) -> None:
        self.record: ProfileStatusRecord | None = ProfileStatusRecord(onboarding_completed=True)
        self.error: Exception | None = None
        self.delay = 0.0
        self.script: list[tuple[float, object]] = []
        self.calls: list[UUID] = []
        self.returned_at: list[float] = []

    async def fetch_status(self, user_id: UUID) -> ProfileStatusRecord | None:
        self.calls.append(user_id)
        if self.script:
            delay, outcome = self.script.pop(0)
        else:
            delay = self.delay
            outcome = self.error if self.error is not None else self.record
        if delay:
            await asyncio.sleep(delay)
        self.returned_at.append(time.monotonic())
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakePrefetchJob:
    def __init__(self) -> None:
        self.delay = 0.0
        self.error: Exception | None = None
        self.started: list[UUID] = []
        self.finished: list[UUID] = []
        self.cancelled = False

    async def run(self, user_id: UUID) -> None:
        self.started.append(user_id)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error is not None:
            raise self.error
        self.finished.append(user_id)


class FakeCache:
    def __init__(self) -> None:
        self.clear_count = 0

    def clear(self) -> None:
        self.clear_count += 1


@pytest.fixture
def user_id() -> UUID:
    return TEST_USER_ID


@pytest.fixture
def session_provider() -> FakeSessionProvider:
    return FakeSessionProvider()


@pytest.fixture
def profile_lookup() -> FakeProfileLookup:
    return FakeProfileLookup()


@pytest.fixture
def prefetch_job() -> FakePrefetchJob:
    return FakePrefetchJob()


@pytest.fixture
def session_cache() -> FakeCache:
    return FakeCache()
