"""Reads from ``event_rsvps``."""

from __future__ import annotations

from uuid import UUID

from supabase import Client

from society.constants import EVENT_RSVPS_TABLE
from society.database.client import run_query


class SupabaseRsvpRepository:
    def __init__(self, client: Client) -> None:
        self._client = client

    def _fetch_event_ids(self, user_id: UUID) -> list[UUID]:
        response = (
            self._client.table(EVENT_RSVPS_TABLE)
            .select("event_id")
            .eq("user_id", str(user_id))
            .execute()
        )
        return [UUID(str(row["event_id"])) for row in response.data or []]

    async def fetch_event_ids_attending(self, user_id: UUID) -> list[UUID]:
        """Ids of every event *user_id* has RSVP'd to."""
        return await run_query(self._fetch_event_ids, user_id)
