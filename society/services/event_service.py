"""
society.services.event_service — Event Reads
=============================================

Only the read the launch prefetch needs: a batch of events by id, in
start order.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, field_validator
from supabase import Client

from society.constants import EVENTS_TABLE
from society.database.client import run_query


class Event(BaseModel):
    """One ``events`` row."""

    id: UUID
    owner_id: UUID | None = None
    title: str
    category: str
    about: str | None = None
    start_at: datetime
    end_at: datetime | None = None
    venue_name: str | None = None
    address_line: str = ""
    neighborhood: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    image_url: str | None = None
    is_featured: bool = False
    visibility: str = "public"

    @field_validator("image_url")
    @classmethod
    def _strip_image_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class SupabaseEventRepository:
    def __init__(self, client: Client) -> None:
        self._client = client

    def _fetch_rows(self, ids: list[str]) -> list[dict]:
        response = (
            self._client.table(EVENTS_TABLE)
            .select("*")
            .in_("id", ids)
            .order("start_at")
            .execute()
        )
        return response.data or []

    async def fetch_events(self, ids: Sequence[UUID]) -> list[Event]:
        """Events with the given ids, earliest first.  No query for no ids."""
        if not ids:
            return []
        rows = await run_query(self._fetch_rows, [str(i) for i in ids])
        return [Event.model_validate(row) for row in rows]
