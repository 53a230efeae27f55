"""
society.__main__ — Entry point for ``python -m society``
=========================================================

Runs one launch resolution against the configured Supabase project and
reports where the app would land.  Handy for checking a session or a
profile row without a device.

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the Supabase client.
4. Build the auth session store, profile lookup, events store and prefetch.
5. Create the LaunchSequencer and bridge auth events onto the loop.
6. Start the launch and wait for a settled state.

Run with::

    python -m society
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from society.auth.session_store import AuthSessionStore
from society.auth.supabase_auth import SupabaseAuthRepository
from society.config import SocietyConfig, load_config
from society.database.client import create_supabase_client
from society.launch.sequencer import LaunchSequencer
from society.launch.state import LaunchError, LaunchState
from society.services.event_service import SupabaseEventRepository
from society.services.profile_service import SupabaseProfileLookup
from society.services.rsvp_service import SupabaseRsvpRepository
from society.stores.events_store import AttendingEventsPrefetch, EventsStore

logger = logging.getLogger("society")


def _configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    )
    # supabase-py's HTTP stack is chatty at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def resolve_launch_state(cfg: SocietyConfig) -> LaunchState:
    """Build the collaborators, run one launch and return the settled state."""
    client = create_supabase_client()

    session_store = AuthSessionStore(SupabaseAuthRepository(client))
    events_store = EventsStore()
    prefetch = AttendingEventsPrefetch(
        events_store,
        SupabaseRsvpRepository(client),
        SupabaseEventRepository(client),
    )
    sequencer = LaunchSequencer(
        session_store,
        SupabaseProfileLookup(client, table=cfg.profiles_table),
        prefetch,
        config=cfg.launch,
        session_caches=[events_store],
    )

    session_store.listen(asyncio.get_running_loop())
    try:
        sequencer.start()
        state = await sequencer.wait_until_settled()
        if events_store.did_finish_initial_load:
            logger.info("Attending events cached: %d", len(events_store.events))
        return state
    finally:
        sequencer.close()
        session_store.stop_listening()
        prefetch.cancel()


def main() -> None:
    """Resolve the launch state once and exit (1 on a launch error)."""

    # 1. Environment variables (secrets).
    load_dotenv()
    _configure_logging()

    # 2. Soft configuration.
    cfg = load_config()
    logger.info("Config loaded — App: %s", cfg.app_name)

    # 3-6. Resolve.
    try:
        state = asyncio.run(resolve_launch_state(cfg))
    except RuntimeError as exc:
        logger.critical("%s", exc)
        sys.exit(1)

    logger.info("Launch resolved → %r", state)
    if isinstance(state, LaunchError):
        sys.exit(1)


if __name__ == "__main__":
    main()
