from __future__ import annotations

from typing import Any, Iterable, Mapping

from .models import MatchupEntry, MatchupPair, Player, Roster, User

SORT_KEYS = ("margin", "total")


def roster_display_name(roster: Roster | None, users_by_id: Mapping[str, User]) -> str:
    if roster is None:
        return "Unknown"
    for key in ("team_name", "name", "nickname"):
        value = roster.metadata.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    owner = users_by_id.get(roster.owner_id) if roster.owner_id else None
    if owner is not None and owner.display_name:
        return owner.display_name
    return f"Roster {roster.roster_id}"


def build_pairs(
    week: int,
    users: Iterable[User],
    rosters: Iterable[Roster],
    matchups: Iterable[MatchupEntry],
) -> list[MatchupPair]:
    users_by_id = {u.user_id: u for u in users}
    rosters_by_id = {r.roster_id: r for r in rosters}
    grouped: dict[int, list[MatchupEntry]] = {}
    for entry in matchups:
        # Bye weeks and median games come back without a matchup id.
        if entry.matchup_id is None:
            continue
        grouped.setdefault(entry.matchup_id, []).append(entry)

    pairs: list[MatchupPair] = []
    for entries in grouped.values():
        if len(entries) < 2:
            continue
        a, b = entries[0], entries[1]
        pairs.append(
            MatchupPair(
                week=week,
                team1=roster_display_name(rosters_by_id.get(a.roster_id), users_by_id),
                points1=round(a.points, 1),
                team2=roster_display_name(rosters_by_id.get(b.roster_id), users_by_id),
                points2=round(b.points, 1),
            )
        )
    pairs.sort(key=lambda p: p.team1 + p.team2)
    return pairs


def sort_pairs(pairs: Iterable[MatchupPair], by: str = "margin") -> list[MatchupPair]:
    if by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{by}'; expected one of {', '.join(SORT_KEYS)}")
    if by == "margin":
        return sorted(pairs, key=lambda p: p.margin, reverse=True)
    return sorted(pairs, key=lambda p: p.total, reverse=True)


def margin_rows(pairs: Iterable[MatchupPair]) -> list[dict[str, Any]]:
    return [
        {"id": idx, "matchup": f"{p.team1} vs {p.team2}", "margin": round(p.margin, 1)}
        for idx, p in enumerate(pairs, start=1)
    ]


def fmt_pos(player_id: str, players: Mapping[str, Player] | None) -> str:
    player = players.get(player_id) if players else None
    if player is None:
        return ""
    if player.position:
        return player.position
    return player.fantasy_positions[0] if player.fantasy_positions else ""


def fmt_player_name(player_id: str, players: Mapping[str, Player] | None) -> str:
    player = players.get(player_id) if players else None
    if player is None:
        return player_id
    if player.full_name:
        return player.full_name
    joined = f"{player.first_name} {player.last_name}".strip()
    return joined or player_id


def _player_rows(ids: Iterable[str], players: Mapping[str, Player] | None) -> list[dict[str, str]]:
    # Sleeper marks empty starter slots with "0".
    return [
        {"player_id": pid, "name": fmt_player_name(pid, players), "position": fmt_pos(pid, players)}
        for pid in ids
        if pid and pid != "0"
    ]


def roster_rows(
    rosters: Iterable[Roster],
    users: Iterable[User],
    players: Mapping[str, Player] | None,
) -> list[dict[str, Any]]:
    users_by_id = {u.user_id: u for u in users}
    rows = []
    for roster in sorted(rosters, key=lambda r: r.roster_id):
        rows.append(
            {
                "roster_id": roster.roster_id,
                "team": roster_display_name(roster, users_by_id),
                "starters": _player_rows(roster.starters, players),
                "bench": _player_rows(roster.bench, players),
            }
        )
    return rows
