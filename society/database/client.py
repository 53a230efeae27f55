"""
society.database.client — Supabase Client & Async Bridge
=========================================================

**Why this file exists:**
The launch sequencer runs on an ``asyncio`` event loop, while the
``supabase`` client used here is **synchronous**: a PostgREST query or an
auth call blocks until the HTTP round-trip finishes.

The bridge is the same one every adapter uses:

    1. The sequencer awaits an adapter method (async world).
    2. The adapter calls ``await run_query(some_function, arg1, arg2)``.
    3. ``run_query`` ships the synchronous call to a **thread pool** via
       ``asyncio.to_thread()``.
    4. Backend errors that mean "your credentials are no good" come back
       as :class:`~society.launch.errors.UnauthorizedError`, everything
       else is re-raised untouched.

Usage::

    from society.database.client import create_supabase_client, run_query

    client = create_supabase_client()      # reads SUPABASE_URL / SUPABASE_ANON_KEY
    rows = await run_query(lambda: client.table("profiles").select("*").execute())
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from typing import ParamSpec, TypeVar

from supabase import Client, create_client

from society.launch.errors import UnauthorizedError, is_unauthorized_error

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

_PLACEHOLDER_KEYS = frozenset({"", "your-anon-key-here"})


# ---------------------------------------------------------------------------
# Client creation
# ---------------------------------------------------------------------------
def create_supabase_client() -> Client:
    """Build a Supabase :class:`Client` from the environment.

    Reads ``SUPABASE_URL`` and ``SUPABASE_ANON_KEY`` (usually populated
    from ``.env`` by the entry point).

    Raises
    ------
    RuntimeError
        If either variable is missing or still holds the example value.
    """
    url = os.getenv("SUPABASE_URL", "")
    key = os.getenv("SUPABASE_ANON_KEY", "")
    if not url:
        raise RuntimeError(
            "SUPABASE_URL is not set.  "
            "Copy .env.example → .env and set your project URL."
        )
    if key in _PLACEHOLDER_KEYS:
        raise RuntimeError(
            "SUPABASE_ANON_KEY is not set.  "
            "Copy .env.example → .env and paste the project's anon key."
        )

    client = create_client(url, key)
    logger.info("Supabase client created → %s", url)
    return client


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_blocking(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** client call on a background thread.

    Under the hood it calls :func:`asyncio.to_thread`, which schedules
    *func* on the default ``ThreadPoolExecutor`` so the event loop is
    never blocked.
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_query(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Like :func:`run_blocking`, translating auth rejections.

    Raises
    ------
    UnauthorizedError
        If the backend rejected the caller's JWT (HTTP 401, PostgREST
        ``PGRST301``/``PGRST302``, or an auth-shaped error message).
    """
    try:
        return await run_blocking(func, *args, **kwargs)
    except UnauthorizedError:
        raise
    except Exception as exc:
        if is_unauthorized_error(exc):
            raise UnauthorizedError(str(exc)) from exc
        raise
