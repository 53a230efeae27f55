"""
society.config — YAML Configuration Loader
===========================================

**Why this file exists:**
This module reads ``config.yaml`` for **soft** settings: the app name,
the profiles table, and the launch timings.  Supabase credentials are
secrets and come from the environment (``.env``), see
:mod:`society.database.client`.

Usage::

    from society.config import load_config

    cfg = load_config()                      # reads ./config.yaml by default
    print(cfg.app_name)                      # "SOCIETY"
    print(cfg.launch.min_splash_duration)    # 0.6
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from society.constants import PROFILES_TABLE

DEFAULT_MIN_SPLASH_DURATION = 0.6
DEFAULT_MAX_PREFETCH_WAIT = 2.5


# ---------------------------------------------------------------------------
# Typed settings objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LaunchConfig:
    """Timings for the launch sequence, fixed for the sequencer's lifetime.

    ``min_splash_duration``
        Floor on how long the splash stays up, so fast launches don't flicker.
    ``max_prefetch_wait``
        How long the launch waits for the best-effort prefetch before
        moving on without it.
    """

    min_splash_duration: float = DEFAULT_MIN_SPLASH_DURATION
    max_prefetch_wait: float = DEFAULT_MAX_PREFETCH_WAIT

    def __post_init__(self) -> None:
        if self.min_splash_duration < 0:
            raise ValueError(
                f"min_splash_duration must be >= 0, got {self.min_splash_duration}"
            )
        if self.max_prefetch_wait < 0:
            raise ValueError(
                f"max_prefetch_wait must be >= 0, got {self.max_prefetch_wait}"
            )


@dataclass(frozen=True, slots=True)
class SocietyConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    app_name: str
    profiles_table: str = PROFILES_TABLE
    launch: LaunchConfig = field(default_factory=LaunchConfig)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> SocietyConfig:
    """Read *path* and return a :class:`SocietyConfig` instance.

    Parameters
    ----------
    path:
        Filesystem path to the YAML configuration file.
        Defaults to ``config.yaml`` in the current working directory.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    ValueError
        If a launch timing is negative.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    launch_raw: dict = raw.get("launch") or {}

    return SocietyConfig(
        app_name=raw["app_name"],
        profiles_table=raw.get("profiles_table") or PROFILES_TABLE,
        launch=LaunchConfig(
            min_splash_duration=float(
                launch_raw.get("min_splash_duration", DEFAULT_MIN_SPLASH_DURATION)
            ),
            max_prefetch_wait=float(
                launch_raw.get("max_prefetch_wait", DEFAULT_MAX_PREFETCH_WAIT)
            ),
        ),
    )
