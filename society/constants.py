"""
society.constants — Shared Constants
=====================================

Single source of truth for backend table names and the user-facing
strings the launch sequence publishes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Supabase tables
# ---------------------------------------------------------------------------
PROFILES_TABLE = "profiles"
EVENTS_TABLE = "events"
EVENT_RSVPS_TABLE = "event_rsvps"

# Columns the launch check needs from ``profiles``.
PROFILE_STATUS_COLUMNS = "id, onboarding_completed, is_active, deleted_at"

# ---------------------------------------------------------------------------
# User-facing copy
# ---------------------------------------------------------------------------
ACCOUNT_DISABLED_REASON = "Your account is disabled."
