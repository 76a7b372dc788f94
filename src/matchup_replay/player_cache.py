from __future__ import annotations

import json
import logging
import shutil
import time
from pathlib import Path
from typing import Any, Callable

from .config import DEFAULT_CACHE_TTL_HOURS
from .models import Player

logger = logging.getLogger(__name__)


class PlayerDirectoryCache:
    SAVE_VERSION = 1

    def __init__(
        self,
        path: str | Path,
        ttl_hours: float = DEFAULT_CACHE_TTL_HOURS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.ttl_seconds = max(0.0, ttl_hours) * 3600.0
        self._clock = clock
        self.last_load_error: str = ""

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            self.last_load_error = f"Failed to load player cache ({exc}); refetching."
            return {}
        if not isinstance(raw, dict):
            self.last_load_error = "Player cache file has invalid format; refetching."
            return {}
        try:
            version = int(raw.get("save_version", 1) or 1)
        except (TypeError, ValueError):
            self.last_load_error = "Player cache version is invalid; refetching."
            return {}
        if version > self.SAVE_VERSION:
            self.last_load_error = (
                f"Unsupported player cache version {version}; app supports up to {self.SAVE_VERSION}."
            )
            return {}
        if not isinstance(raw.get("players"), dict):
            self.last_load_error = "Player cache payload is invalid; refetching."
            return {}
        return raw

    def _is_fresh(self, raw: dict[str, Any]) -> bool:
        try:
            fetched_at = float(raw.get("fetched_at", 0))
        except (TypeError, ValueError):
            return False
        age = self._clock() - fetched_at
        return 0 <= age < self.ttl_seconds

    def _save(self, players: dict[str, Player]) -> None:
        payload = {
            "save_version": self.SAVE_VERSION,
            "fetched_at": self._clock(),
            "players": {pid: player.to_dict() for pid, player in players.items()},
        }
        try:
            if self.path.exists():
                shutil.copy2(self.path, self.path.with_suffix(self.path.suffix + ".bak"))
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write player cache %s: %s", self.path, exc)

    def cached(self) -> dict[str, Player] | None:
        raw = self._load()
        if not raw or not self._is_fresh(raw):
            return None
        return {
            str(pid): Player.from_payload(str(pid), row)
            for pid, row in raw["players"].items()
            if isinstance(row, dict)
        }

    def get(self, fetch: Callable[[], dict[str, Player]], force: bool = False) -> dict[str, Player]:
        if not force:
            players = self.cached()
            if players is not None:
                logger.debug("Player directory served from cache (%d players)", len(players))
                return players
        players = fetch()
        logger.info("Fetched player directory (%d players)", len(players))
        self._save(players)
        return players
