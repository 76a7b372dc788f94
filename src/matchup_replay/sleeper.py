from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests

from .config import DEFAULT_TIMEOUT_SECONDS, SLEEPER_API
from .models import League, LeagueBundle, MatchupEntry, NFLState, Player, Roster, User

logger = logging.getLogger(__name__)


class SleeperApiError(RuntimeError):
    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class SleeperClient:
    def __init__(
        self,
        base_url: str = SLEEPER_API,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SleeperApiError(f"Sleeper request failed for {url}: {exc}", url) from exc
        if not response.ok:
            raise SleeperApiError(f"HTTP {response.status_code} for {url}", url, response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise SleeperApiError(f"Invalid JSON from {url}", url, response.status_code) from exc

    def _get_list(self, path: str) -> list[dict[str, Any]]:
        raw = self._get(path)
        # Sleeper answers unknown leagues/weeks with a JSON null.
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise SleeperApiError(f"Expected a list from {path}", path)
        return [row for row in raw if isinstance(row, dict)]

    def state(self) -> NFLState:
        raw = self._get("state/nfl")
        return NFLState.from_payload(raw if isinstance(raw, dict) else {})

    def current_week(self) -> int:
        return self.state().active_week

    def league(self, league_id: str) -> League:
        raw = self._get(f"league/{league_id}")
        if not isinstance(raw, dict):
            raise SleeperApiError(f"League {league_id} not found", f"league/{league_id}", 404)
        return League.from_payload(raw)

    def users(self, league_id: str) -> list[User]:
        return [User.from_payload(row) for row in self._get_list(f"league/{league_id}/users")]

    def rosters(self, league_id: str) -> list[Roster]:
        return [Roster.from_payload(row) for row in self._get_list(f"league/{league_id}/rosters")]

    def matchups(self, league_id: str, week: int) -> list[MatchupEntry]:
        return [MatchupEntry.from_payload(row) for row in self._get_list(f"league/{league_id}/matchups/{week}")]

    def players(self) -> dict[str, Player]:
        raw = self._get("players/nfl")
        if not isinstance(raw, dict):
            raise SleeperApiError("Player directory payload is invalid", "players/nfl")
        return {
            str(pid): Player.from_payload(str(pid), row)
            for pid, row in raw.items()
            if isinstance(row, dict)
        }

    def league_bundle(self, league_id: str, week: int) -> LeagueBundle:
        with ThreadPoolExecutor(max_workers=4) as pool:
            league = pool.submit(self.league, league_id)
            users = pool.submit(self.users, league_id)
            rosters = pool.submit(self.rosters, league_id)
            matchups = pool.submit(self.matchups, league_id, week)
            return LeagueBundle(
                league=league.result(),
                users=users.result(),
                rosters=rosters.result(),
                matchups=matchups.result(),
            )
