import pytest

from matchup_replay.models import MatchupEntry, MatchupPair, Roster, User
from matchup_replay.scoreboard import (
    build_pairs,
    fmt_player_name,
    fmt_pos,
    margin_rows,
    roster_display_name,
    roster_rows,
    sort_pairs,
)


def test_roster_display_name_fallbacks() -> None:
    users = {"u1": User(user_id="u1", display_name="alpha")}
    assert roster_display_name(Roster(roster_id=1, owner_id="u1", metadata={"team_name": "  Gang "}), users) == "Gang"
    assert roster_display_name(Roster(roster_id=1, owner_id="u1", metadata={"team_name": " ", "nickname": "Nick"}), users) == "Nick"
    assert roster_display_name(Roster(roster_id=1, owner_id="u1"), users) == "alpha"
    assert roster_display_name(Roster(roster_id=7, owner_id="missing"), users) == "Roster 7"
    assert roster_display_name(None, users) == "Unknown"


def test_build_pairs_groups_rounds_and_sorts(league_bundle) -> None:
    pairs = build_pairs(3, league_bundle.users, league_bundle.rosters, league_bundle.matchups)
    assert [(p.team1, p.team2) for p in pairs] == [("Gridiron Gang", "bravo"), ("charlie", "delta")]
    assert pairs[0].points1 == 101.3
    assert pairs[1].points2 == round(64.55, 1)
    assert all(p.week == 3 and p.status == "LIVE" for p in pairs)


def test_build_pairs_skips_incomplete_and_unmatched(league_bundle) -> None:
    entries = list(league_bundle.matchups) + [
        MatchupEntry(matchup_id=9, roster_id=1, points=5.0),
        MatchupEntry(matchup_id=None, roster_id=2, points=7.0),
    ]
    pairs = build_pairs(3, league_bundle.users, league_bundle.rosters, entries)
    assert len(pairs) == 2


def test_pair_properties() -> None:
    pair = MatchupPair(week=1, team1="A", points1=90.0, team2="B", points2=110.0)
    assert pair.winner == "B"
    assert pair.margin == 20.0
    assert pair.total == 200.0
    assert pair.share == pytest.approx(0.45)
    assert pair.seeds == ("A-B-t1", "A-B-t2")
    tied = MatchupPair(week=1, team1="A", points1=0.0, team2="B", points2=0.0)
    assert tied.winner == "Tied"
    assert tied.share == 0.5
    assert tied.to_dict()["winner"] == "Tied"


def test_sort_pairs_by_margin_and_total() -> None:
    close = MatchupPair(week=1, team1="A", points1=100.0, team2="B", points2=99.0)
    blowout = MatchupPair(week=1, team1="C", points1=60.0, team2="D", points2=20.0)
    shootout = MatchupPair(week=1, team1="E", points1=150.0, team2="F", points2=140.0)
    pairs = [close, blowout, shootout]
    assert sort_pairs(pairs, by="margin") == [blowout, shootout, close]
    assert sort_pairs(pairs, by="total") == [shootout, close, blowout]
    with pytest.raises(ValueError):
        sort_pairs(pairs, by="name")
    rows = margin_rows(sort_pairs(pairs))
    assert rows[0] == {"id": 1, "matchup": "C vs D", "margin": 40.0}


def test_fmt_pos_and_name(players) -> None:
    assert fmt_pos("p1", players) == "QB"
    assert fmt_pos("p2", players) == "RB"
    assert fmt_pos("nope", players) == ""
    assert fmt_pos("p1", None) == ""
    assert fmt_player_name("p1", players) == "Tester One"
    assert fmt_player_name("p3", players) == "Bench Guy"
    assert fmt_player_name("nope", players) == "nope"


def test_roster_rows_split_starters_and_bench(league_bundle, players) -> None:
    rows = roster_rows(league_bundle.rosters, league_bundle.users, players)
    first = rows[0]
    assert first["team"] == "Gridiron Gang"
    assert [p["player_id"] for p in first["starters"]] == ["p1", "p2"]
    assert [p["name"] for p in first["bench"]] == ["Bench Guy"]
    assert first["bench"][0]["position"] == "WR"
    assert rows[3]["starters"] == []
