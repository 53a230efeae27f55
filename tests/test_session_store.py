"""
tests/test_session_store.py — AuthSessionStore
===============================================

Every present identity reaches subscribers, repeats included, because the
launch sequencer restarts on sign-in even when the same account comes
back.  Signing out is published once.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

from society.auth.session_store import AuthSessionStore
from society.launch.contracts import Session

USER_A = UUID("11111111-1111-4111-8111-111111111111")
USER_B = UUID("22222222-2222-4222-8222-222222222222")


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.run(coro)


def _make_repository(session: Session | None = None) -> MagicMock:
    repo = MagicMock()
    repo.current_session = AsyncMock(return_value=session)
    repo.sign_out = AsyncMock()
    repo.watch = MagicMock(return_value=MagicMock())
    return repo


class TestRefresh:
    def test_starts_signed_out(self):
        store = AuthSessionStore(_make_repository())
        assert store.user_id is None
        assert store.is_authenticated is False

    def test_refresh_picks_up_session(self):
        store = AuthSessionStore(_make_repository(Session(user_id=USER_A)))
        seen = []
        store.subscribe(seen.append)
        run_async(store.refresh())
        assert store.user_id == USER_A
        assert seen == [USER_A]

    def test_expired_session_counts_as_signed_out(self):
        repo = _make_repository(Session(user_id=USER_A))
        store = AuthSessionStore(repo)
        run_async(store.refresh())
        repo.current_session.return_value = Session(user_id=USER_A, is_expired=True)
        seen = []
        store.subscribe(seen.append)
        run_async(store.refresh())
        assert store.user_id is None
        assert seen == [None]

    def test_read_error_counts_as_signed_out(self):
        repo = _make_repository(Session(user_id=USER_A))
        store = AuthSessionStore(repo)
        run_async(store.refresh())
        repo.current_session.side_effect = ConnectionError("keychain locked")
        run_async(store.refresh())
        assert store.user_id is None

    def test_unchanged_identity_is_redelivered(self):
        store = AuthSessionStore(_make_repository(Session(user_id=USER_A)))
        run_async(store.refresh())
        seen = []
        store.subscribe(seen.append)
        run_async(store.refresh())
        assert seen == [USER_A]

    def test_repeated_sign_out_notifies_once(self):
        repo = _make_repository(Session(user_id=USER_A))
        store = AuthSessionStore(repo)
        run_async(store.refresh())
        repo.current_session.return_value = None
        seen = []
        store.subscribe(seen.append)
        run_async(store.refresh())
        run_async(store.refresh())
        assert seen == [None]

    def test_switching_users_notifies(self):
        repo = _make_repository(Session(user_id=USER_A))
        store = AuthSessionStore(repo)
        run_async(store.refresh())
        seen = []
        store.subscribe(seen.append)
        repo.current_session.return_value = Session(user_id=USER_B)
        run_async(store.refresh())
        assert seen == [USER_B]

    def test_current_session_passes_through_errors(self):
        repo = _make_repository()
        repo.current_session.side_effect = ConnectionError("offline")
        store = AuthSessionStore(repo)

        async def _inner():
            try:
                await store.current_session()
            except ConnectionError:
                return True
            return False

        assert run_async(_inner()) is True


class TestSubscribers:
    def test_unsubscribe(self):
        store = AuthSessionStore(_make_repository(Session(user_id=USER_A)))
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        run_async(store.refresh())
        assert seen == []

    def test_failing_subscriber_does_not_block_others(self):
        store = AuthSessionStore(_make_repository(Session(user_id=USER_A)))

        def _broken(_user_id):
            raise RuntimeError("listener bug")

        seen = []
        store.subscribe(_broken)
        store.subscribe(seen.append)
        run_async(store.refresh())
        assert seen == [USER_A]


class TestSignOutAndListen:
    def test_sign_out_refreshes(self):
        repo = _make_repository(Session(user_id=USER_A))
        store = AuthSessionStore(repo)
        run_async(store.refresh())

        async def _sign_out():
            repo.current_session.return_value = None
            await store.sign_out()

        run_async(_sign_out())
        repo.sign_out.assert_awaited_once()
        assert store.user_id is None

    def test_listen_registers_once_and_applies_events(self):
        repo = _make_repository()
        store = AuthSessionStore(repo)
        loop = MagicMock()

        store.listen(loop)
        store.listen(loop)

        repo.watch.assert_called_once()
        callback, passed_loop = repo.watch.call_args.args
        assert passed_loop is loop
        callback(USER_B)
        assert store.user_id == USER_B

    def test_same_user_sign_in_event_is_redelivered(self):
        repo = _make_repository()
        store = AuthSessionStore(repo)
        store.listen(MagicMock())
        callback, _loop = repo.watch.call_args.args
        seen = []
        store.subscribe(seen.append)

        callback(USER_A)
        callback(USER_A)

        assert seen == [USER_A, USER_A]

    def test_stop_listening_unsubscribes(self):
        repo = _make_repository()
        stop = MagicMock()
        repo.watch.return_value = stop
        store = AuthSessionStore(repo)
        store.listen(MagicMock())
        store.stop_listening()
        stop.assert_called_once_with()
