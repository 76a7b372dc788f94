import pytest
from fastapi.testclient import TestClient

import matchup_replay.api as api_mod
from matchup_replay.api import DashboardService
from matchup_replay.config import Settings
from matchup_replay.player_cache import PlayerDirectoryCache
from matchup_replay.playback import PlaybackController
from matchup_replay.providers import MockProjectionProvider
from matchup_replay.sleeper import SleeperApiError

from conftest import FakeScheduler, FakeSleeperClient


def _service(tmp_path, league_bundle, players, scheduler: FakeScheduler, **overrides) -> DashboardService:
    kwargs = {
        "settings": Settings(player_cache_path=str(tmp_path / "players.json")),
        "client": FakeSleeperClient(league_bundle, week=3, players=players),
        "cache": PlayerDirectoryCache(tmp_path / "players.json"),
        "controller": PlaybackController(scheduler=scheduler, tick_seconds=1.0),
        "provider": MockProjectionProvider(is_enabled=True),
    }
    kwargs.update(overrides)
    return DashboardService(**kwargs)


@pytest.fixture()
def http(tmp_path, league_bundle, players, scheduler, monkeypatch):
    service = _service(tmp_path, league_bundle, players, scheduler)
    monkeypatch.setattr(api_mod, "service", service)
    return TestClient(api_mod.app)


def test_health(http) -> None:
    assert http.get("/api/health").json() == {"status": "ok"}


def test_sync_uses_current_week_and_selects_first_matchup(http) -> None:
    res = http.post("/api/sync", json={"league_id": " L1 "})
    assert res.status_code == 200
    body = res.json()
    assert body["week"] == 3
    assert body["league_name"] == "Sunday Legends"
    assert body["selected_index"] == 0
    assert len(body["matchups"]) == 2

    playback = http.get("/api/playback").json()
    assert playback["state"] == "loaded"
    assert playback["reveal_index"] == 60
    assert playback["team1"] == "Gridiron Gang"
    assert playback["home"][-1] == 101.3
    assert len(playback["hour_ticks"]) == 11


def test_scoreboard_sort_and_bad_key(http) -> None:
    http.post("/api/sync", json={"league_id": "L1", "week": 2})
    by_margin = http.get("/api/scoreboard", params={"sort": "margin"}).json()
    assert by_margin["week"] == 2
    assert by_margin["matchups"][0]["team1"] == "charlie"
    assert by_margin["matchups"][0]["index"] == 1
    by_total = http.get("/api/scoreboard", params={"sort": "total"}).json()
    assert by_total["matchups"][0]["team1"] == "Gridiron Gang"
    assert http.get("/api/scoreboard", params={"sort": "name"}).status_code == 400
    assert http.get("/api/margins").json()[0]["matchup"] == "charlie vs delta"


def test_playback_controls(http, scheduler) -> None:
    http.post("/api/sync", json={"league_id": "L1"})
    assert http.post("/api/playback/restart").json()["reveal_index"] == 0
    step = http.post("/api/playback/step").json()
    assert step["reveal_index"] == 1
    assert step["home"][2] is None

    auto = http.post("/api/playback/auto", json={"enabled": True}).json()
    assert auto["state"] == "playing"
    scheduler.fire(3)
    assert http.get("/api/playback").json()["reveal_index"] == 4

    selected = http.post("/api/matchup/select", json={"index": 1}).json()
    assert selected["state"] == "loaded"
    assert selected["reveal_index"] == 60
    assert selected["team1"] == "charlie"
    assert not scheduler.pending


def test_select_unknown_matchup(http) -> None:
    http.post("/api/sync", json={"league_id": "L1"})
    assert http.post("/api/matchup/select", json={"index": 9}).status_code == 404


def test_restart_without_matchup(http) -> None:
    assert http.post("/api/playback/restart").status_code == 400


def test_sync_requires_league_id(http) -> None:
    assert http.post("/api/sync", json={"league_id": "  "}).status_code == 400


def test_rosters_with_players_and_projections(http) -> None:
    assert http.get("/api/rosters").status_code == 400
    http.post("/api/sync", json={"league_id": "L1"})
    loaded = http.post("/api/players/load", json={}).json()
    assert loaded["status"] == "ready"
    assert loaded["count"] == 4
    rows = http.get("/api/rosters").json()
    starters = rows[0]["starters"]
    assert starters[0]["name"] == "Tester One"
    assert starters[0]["projection"] == 10.0
    assert starters[1]["source"] == "Mock"


def test_upstream_failure_maps_to_bad_gateway(tmp_path, league_bundle, players, scheduler) -> None:
    class _Broken(FakeSleeperClient):
        def league_bundle(self, league_id, week):
            raise SleeperApiError("HTTP 500", "league/L1", 500)

    service = _service(tmp_path, league_bundle, players, scheduler, client=_Broken(league_bundle))
    with pytest.raises(api_mod.HTTPException) as info:
        service.sync("L1", week=1)
    assert info.value.status_code == 502
    assert service.bundle is None


def test_empty_week_clears_playback(tmp_path, league_bundle, players, scheduler) -> None:
    service = _service(tmp_path, league_bundle, players, scheduler)
    service.sync("L1")
    league_bundle.matchups.clear()
    board = service.sync("L1")
    assert board["matchups"] == []
    assert service.playback()["state"] == "idle"
    assert service.playback()["home"] is None


@pytest.mark.regression
def test_negative_points_replay_from_zero(tmp_path, league_bundle, players, scheduler) -> None:
    league_bundle.matchups[1].points = -2.5
    service = _service(tmp_path, league_bundle, players, scheduler)
    board = service.sync("L1")
    assert board["selected_index"] == 0
    assert board["matchups"][0]["points2"] == -2.5

    playback = service.playback()
    assert playback["state"] == "loaded"
    assert playback["home"][-1] == 101.3
    assert playback["away"] == [0.0] * 61
