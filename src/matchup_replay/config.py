"""Static dashboard configuration constants and environment settings."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel

SLEEPER_API = "https://api.sleeper.app/v1"

# Intraday axis: 12:00 PM ET through 10:00 PM ET inclusive, one point per 10-minute pull.
MINUTES_PER_TICK = 10
TICKS_PER_HOUR = 60 // MINUTES_PER_TICK
START_HOUR_ET = 12
END_HOUR_ET = 22
TOTAL_TICKS = (END_HOUR_ET - START_HOUR_ET) * TICKS_PER_HOUR + 1
LAST_INDEX = TOTAL_TICKS - 1

# Synthetic scoring shape.
QUIET_SLICE_PROBABILITY = 0.55
BURST_MIN = 0.4
BURST_SPAN = 3.2
SPIKE_COUNT = 5
SPIKE_MIN = 2.0
SPIKE_SPAN = 6.0

DEFAULT_TICK_SECONDS = 600.0
DEFAULT_CACHE_TTL_HOURS = 24.0
DEFAULT_TIMEOUT_SECONDS = 15.0

ENV_PREFIX = "MATCHUP_REPLAY_"


class Settings(BaseModel):
    sleeper_api: str = SLEEPER_API
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    player_cache_path: str = "players_nfl.json"
    player_cache_ttl_hours: float = DEFAULT_CACHE_TTL_HOURS
    tick_seconds: float = DEFAULT_TICK_SECONDS
    projections_enabled: bool = False

    @property
    def resolved_player_cache_path(self) -> Path:
        return Path(self.player_cache_path).expanduser()


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    raw: dict[str, str] = {}
    for name in Settings.model_fields:
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            raw[name] = value
    return Settings(**raw)
