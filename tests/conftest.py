from __future__ import annotations

from typing import Any, Callable

import pytest

from matchup_replay.models import League, LeagueBundle, MatchupEntry, Player, Roster, User
from matchup_replay.playback import PlaybackController


class FakeScheduler:
    """Collects scheduled callbacks; tests fire them by hand."""

    def __init__(self) -> None:
        self.pending: dict[int, Callable[[], None]] = {}
        self.history: dict[int, Callable[[], None]] = {}
        self.delays: list[float] = []
        self.cancelled: list[int] = []
        self._next = 0

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> int:
        self._next += 1
        self.pending[self._next] = callback
        self.history[self._next] = callback
        self.delays.append(delay_seconds)
        return self._next

    def cancel(self, handle: Any) -> None:
        self.pending.pop(handle, None)
        self.cancelled.append(handle)

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            due = list(self.pending.items())
            self.pending.clear()
            for _handle, callback in due:
                callback()

    def fire_handle(self, handle: int) -> None:
        self.history[handle]()


class FakeSleeperClient:
    def __init__(self, bundle: LeagueBundle, week: int = 3, players: dict[str, Player] | None = None) -> None:
        self.bundle = bundle
        self.week = week
        self._players = players or {}
        self.bundle_calls: list[tuple[str, int]] = []
        self.player_calls = 0

    def current_week(self) -> int:
        return self.week

    def league_bundle(self, league_id: str, week: int) -> LeagueBundle:
        self.bundle_calls.append((league_id, week))
        return self.bundle

    def players(self) -> dict[str, Player]:
        self.player_calls += 1
        return dict(self._players)


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def controller(scheduler: FakeScheduler) -> PlaybackController:
    return PlaybackController(scheduler=scheduler, tick_seconds=5.0)


@pytest.fixture()
def league_bundle() -> LeagueBundle:
    users = [
        User(user_id="u1", display_name="alpha"),
        User(user_id="u2", display_name="bravo"),
        User(user_id="u3", display_name="charlie"),
        User(user_id="u4", display_name="delta"),
    ]
    rosters = [
        Roster(roster_id=1, owner_id="u1", starters=["p1", "p2"], players=["p1", "p2", "p3"], metadata={"team_name": "Gridiron Gang"}),
        Roster(roster_id=2, owner_id="u2", starters=["p4"], players=["p4", "p5"]),
        Roster(roster_id=3, owner_id="u3", starters=["p6"], players=["p6"]),
        Roster(roster_id=4, owner_id="u4", starters=["0"], players=[]),
    ]
    matchups = [
        MatchupEntry(matchup_id=1, roster_id=1, points=101.26),
        MatchupEntry(matchup_id=1, roster_id=2, points=88.4),
        MatchupEntry(matchup_id=2, roster_id=3, points=120.0),
        MatchupEntry(matchup_id=2, roster_id=4, points=64.55),
    ]
    league = League(league_id="L1", name="Sunday Legends", season="2025", total_rosters=4)
    return LeagueBundle(league=league, users=users, rosters=rosters, matchups=matchups)


@pytest.fixture()
def players() -> dict[str, Player]:
    return {
        "p1": Player(player_id="p1", full_name="Tester One", position="QB", team="BUF"),
        "p2": Player(player_id="p2", full_name="Tester Two", fantasy_positions=["RB"], team="SF"),
        "p3": Player(player_id="p3", first_name="Bench", last_name="Guy", position="WR"),
        "p4": Player(player_id="p4", full_name="Tester Four", position="TE"),
    }
