"""
society.services.profile_service — Profile Status Lookup
=========================================================

Fetches the three columns the launch check needs from ``profiles`` and
turns them into a :class:`~society.launch.contracts.ProfileStatusRecord`.
A missing row means the account was deleted server-side.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel
from supabase import Client

from society.constants import PROFILE_STATUS_COLUMNS, PROFILES_TABLE
from society.database.client import run_query
from society.launch.contracts import ProfileStatusRecord

logger = logging.getLogger(__name__)


class LaunchProfileRow(BaseModel):
    """Row shape returned by PostgREST; every status column is nullable."""

    id: UUID
    onboarding_completed: bool | None = None
    is_active: bool | None = None
    deleted_at: datetime | None = None

    def to_record(self) -> ProfileStatusRecord:
        return ProfileStatusRecord.from_optional(
            is_active=self.is_active,
            deleted_at=self.deleted_at,
            onboarding_completed=self.onboarding_completed,
        )


class SupabaseProfileLookup:
    """``ProfileLookup`` reading the ``profiles`` table."""

    def __init__(self, client: Client, table: str = PROFILES_TABLE) -> None:
        self._client = client
        self._table = table

    def _fetch_rows(self, user_id: UUID) -> list[dict]:
        response = (
            self._client.table(self._table)
            .select(PROFILE_STATUS_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        return response.data or []

    async def fetch_status(self, user_id: UUID) -> ProfileStatusRecord | None:
        rows = await run_query(self._fetch_rows, user_id)
        if not rows:
            logger.info("No profile row for %s", user_id)
            return None
        return LaunchProfileRow.model_validate(rows[0]).to_record()
