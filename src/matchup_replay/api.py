from __future__ import annotations

import logging
from threading import Lock
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import Settings, load_settings
from .models import LeagueBundle, MatchupPair, Player
from .player_cache import PlayerDirectoryCache
from .playback import PlaybackController
from .providers import MockProjectionProvider, ProjectionProvider, merge_projections
from .scoreboard import build_pairs, margin_rows, roster_rows, sort_pairs
from .series import GenerationFailure
from .sleeper import SleeperApiError, SleeperClient

logger = logging.getLogger(__name__)


class SyncSelection(BaseModel):
    league_id: str
    week: int | None = None


class MatchupSelection(BaseModel):
    index: int


class AutoAdvanceSelection(BaseModel):
    enabled: bool


class PlayersLoadSelection(BaseModel):
    force: bool = False


def _upstream_error(exc: SleeperApiError) -> HTTPException:
    if exc.status_code == 404:
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=502, detail=f"Sleeper sync failed: {exc}")


class DashboardService:
    def __init__(
        self,
        settings: Settings | None = None,
        client: SleeperClient | None = None,
        cache: PlayerDirectoryCache | None = None,
        controller: PlaybackController | None = None,
        provider: ProjectionProvider | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.client = client or SleeperClient(self.settings.sleeper_api, self.settings.timeout_seconds)
        self.cache = cache or PlayerDirectoryCache(
            self.settings.resolved_player_cache_path,
            ttl_hours=self.settings.player_cache_ttl_hours,
        )
        self.controller = controller or PlaybackController(tick_seconds=self.settings.tick_seconds)
        self.provider: ProjectionProvider = provider or MockProjectionProvider(self.settings.projections_enabled)
        self.league_id: str = ""
        self.week: int = 1
        self.bundle: LeagueBundle | None = None
        self.pairs: list[MatchupPair] = []
        self.selected_index: int | None = None
        self.players: dict[str, Player] | None = None
        self.players_status: str = "idle"
        self._lock = Lock()

    def current_week(self) -> int:
        try:
            self.week = self.client.current_week()
        except SleeperApiError as exc:
            raise _upstream_error(exc) from exc
        return self.week

    def sync(self, league_id: str, week: int | None = None) -> dict[str, Any]:
        league_id = league_id.strip()
        if not league_id:
            raise HTTPException(status_code=400, detail="league_id is required")
        if week is None:
            try:
                week = self.client.current_week()
            except SleeperApiError as exc:
                logger.warning("state/nfl failed; using week %s: %s", self.week, exc)
                week = self.week
        if week < 1:
            raise HTTPException(status_code=400, detail="week must be positive")

        try:
            bundle = self.client.league_bundle(league_id, week)
        except SleeperApiError as exc:
            raise _upstream_error(exc) from exc

        pairs = build_pairs(week, bundle.users, bundle.rosters, bundle.matchups)
        self.league_id = league_id
        self.week = week
        self.bundle = bundle
        self.pairs = pairs
        self.selected_index = None
        logger.info("Synced league %s week %s: %d matchups", league_id, week, len(self.pairs))
        if self.pairs:
            self.select_matchup(0)
        else:
            self.controller.clear()
        return self.scoreboard()

    def _require_bundle(self) -> LeagueBundle:
        if self.bundle is None:
            raise HTTPException(status_code=400, detail="No league synced")
        return self.bundle

    def scoreboard(self, sort: str = "margin") -> dict[str, Any]:
        try:
            ordered = sort_pairs(self.pairs, by=sort)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        index_of = {id(pair): idx for idx, pair in enumerate(self.pairs)}
        league = self.bundle.league if self.bundle else None
        return {
            "league_id": self.league_id,
            "league_name": league.name if league else "",
            "season": league.season if league else "",
            "week": self.week,
            "selected_index": self.selected_index,
            "matchups": [{"index": index_of[id(pair)], **pair.to_dict()} for pair in ordered],
        }

    def margins(self, sort: str = "margin") -> list[dict[str, Any]]:
        try:
            return margin_rows(sort_pairs(self.pairs, by=sort))
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    def load_players(self, force: bool = False) -> dict[str, Any]:
        self.players_status = "loading"
        try:
            self.players = self.cache.get(self.client.players, force=force)
        except SleeperApiError as exc:
            self.players_status = "error"
            raise _upstream_error(exc) from exc
        self.players_status = "ready"
        return {
            "status": self.players_status,
            "count": len(self.players),
            "cache_warning": self.cache.last_load_error,
        }

    def rosters(self) -> list[dict[str, Any]]:
        bundle = self._require_bundle()
        rows = roster_rows(bundle.rosters, bundle.users, self.players)
        for row in rows:
            row["starters"] = merge_projections(row["starters"], self.provider, self.week)
        return rows

    def select_matchup(self, index: int) -> dict[str, Any]:
        if not 0 <= index < len(self.pairs):
            raise HTTPException(status_code=404, detail="Matchup not found")
        pair = self.pairs[index]
        seed1, seed2 = pair.seeds
        total1, total2 = pair.series_totals
        try:
            self.controller.select_matchup(seed1, total1, seed2, total2)
        except GenerationFailure as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        self.selected_index = index
        return self.playback()

    def playback(self) -> dict[str, Any]:
        payload = self.controller.snapshot()
        pair = self.pairs[self.selected_index] if self.selected_index is not None else None
        payload["matchup_index"] = self.selected_index
        payload["team1"] = pair.team1 if pair else None
        payload["team2"] = pair.team2 if pair else None
        return payload

    def step(self) -> dict[str, Any]:
        self.controller.step_forward()
        return self.playback()

    def restart_day(self) -> dict[str, Any]:
        if not self.controller.is_loaded:
            raise HTTPException(status_code=400, detail="No matchup selected")
        self.controller.restart_day()
        return self.playback()

    def set_auto_advance(self, enabled: bool) -> dict[str, Any]:
        self.controller.set_auto_advance(enabled)
        return self.playback()


service = DashboardService()
app = FastAPI(title="Matchup Replay API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/week")
def week() -> dict[str, int]:
    with service._lock:
        return {"week": service.current_week()}


@app.post("/api/sync")
def sync(payload: SyncSelection) -> dict[str, Any]:
    with service._lock:
        return service.sync(payload.league_id, week=payload.week)


@app.get("/api/scoreboard")
def scoreboard(sort: str = "margin") -> dict[str, Any]:
    with service._lock:
        return service.scoreboard(sort=sort.lower())


@app.get("/api/margins")
def margins(sort: str = "margin") -> list[dict[str, Any]]:
    with service._lock:
        return service.margins(sort=sort.lower())


@app.post("/api/players/load")
def load_players(payload: PlayersLoadSelection) -> dict[str, Any]:
    with service._lock:
        return service.load_players(force=payload.force)


@app.get("/api/rosters")
def rosters() -> list[dict[str, Any]]:
    with service._lock:
        return service.rosters()


@app.post("/api/matchup/select")
def select_matchup(payload: MatchupSelection) -> dict[str, Any]:
    with service._lock:
        return service.select_matchup(payload.index)


@app.get("/api/playback")
def playback() -> dict[str, Any]:
    with service._lock:
        return service.playback()


@app.post("/api/playback/step")
def playback_step() -> dict[str, Any]:
    with service._lock:
        return service.step()


@app.post("/api/playback/restart")
def playback_restart() -> dict[str, Any]:
    with service._lock:
        return service.restart_day()


@app.post("/api/playback/auto")
def playback_auto(payload: AutoAdvanceSelection) -> dict[str, Any]:
    with service._lock:
        return service.set_auto_advance(payload.enabled)
