from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from .series import side_seeds


def _str(value: Any, default: str = "") -> str:
    return str(value) if value is not None else default


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


@dataclass(slots=True)
class NFLState:
    week: int | None = None
    display_week: int | None = None
    leg: int | None = None
    season_type: str = ""

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> NFLState:
        def _opt(key: str) -> int | None:
            value = raw.get(key)
            return _int(value) if value is not None else None

        return cls(
            week=_opt("week"),
            display_week=_opt("display_week"),
            leg=_opt("leg"),
            season_type=_str(raw.get("season_type")),
        )

    @property
    def active_week(self) -> int:
        for value in (self.display_week, self.week, self.leg):
            if value is not None:
                return value
        return 1


@dataclass(slots=True)
class League:
    league_id: str
    name: str
    season: str = ""
    season_type: str = ""
    total_rosters: int = 0
    roster_positions: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> League:
        return cls(
            league_id=_str(raw.get("league_id")),
            name=_str(raw.get("name"), "Unnamed League"),
            season=_str(raw.get("season")),
            season_type=_str(raw.get("season_type")),
            total_rosters=_int(raw.get("total_rosters")),
            roster_positions=_str_list(raw.get("roster_positions")),
        )


@dataclass(slots=True)
class User:
    user_id: str
    display_name: str
    username: str = ""
    avatar: str | None = None

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> User:
        return cls(
            user_id=_str(raw.get("user_id")),
            display_name=_str(raw.get("display_name")),
            username=_str(raw.get("username")),
            avatar=raw.get("avatar"),
        )


@dataclass(slots=True)
class Roster:
    roster_id: int
    owner_id: str | None = None
    starters: list[str] = field(default_factory=list)
    players: list[str] = field(default_factory=list)
    reserve: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> Roster:
        metadata = raw.get("metadata")
        owner = raw.get("owner_id")
        return cls(
            roster_id=_int(raw.get("roster_id")),
            owner_id=str(owner) if owner else None,
            starters=_str_list(raw.get("starters")),
            players=_str_list(raw.get("players")),
            reserve=_str_list(raw.get("reserve")),
            metadata=metadata if isinstance(metadata, dict) else {},
        )

    @property
    def bench(self) -> list[str]:
        starters = set(self.starters)
        reserve = set(self.reserve)
        return [pid for pid in self.players if pid not in starters and pid not in reserve]


@dataclass(slots=True)
class MatchupEntry:
    matchup_id: int | None
    roster_id: int
    points: float = 0.0
    starters: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> MatchupEntry:
        matchup_id = raw.get("matchup_id")
        return cls(
            matchup_id=_int(matchup_id) if matchup_id is not None else None,
            roster_id=_int(raw.get("roster_id")),
            points=_float(raw.get("points")),
            starters=_str_list(raw.get("starters")),
        )


@dataclass(slots=True)
class Player:
    player_id: str
    full_name: str = ""
    first_name: str = ""
    last_name: str = ""
    team: str | None = None
    position: str | None = None
    fantasy_positions: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, player_id: str, raw: dict[str, Any]) -> Player:
        return cls(
            player_id=_str(raw.get("player_id"), player_id),
            full_name=_str(raw.get("full_name")),
            first_name=_str(raw.get("first_name")),
            last_name=_str(raw.get("last_name")),
            team=raw.get("team"),
            position=raw.get("position"),
            fantasy_positions=_str_list(raw.get("fantasy_positions")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class LeagueBundle:
    league: League
    users: list[User]
    rosters: list[Roster]
    matchups: list[MatchupEntry]


@dataclass(slots=True)
class MatchupPair:
    week: int
    team1: str
    points1: float
    team2: str
    points2: float
    status: str = "LIVE"

    @property
    def winner(self) -> str:
        if self.points1 == self.points2:
            return "Tied"
        return self.team1 if self.points1 > self.points2 else self.team2

    @property
    def margin(self) -> float:
        return abs(self.points1 - self.points2)

    @property
    def total(self) -> float:
        return self.points1 + self.points2

    @property
    def share(self) -> float:
        if self.total <= 0:
            return 0.5
        return self.points1 / self.total

    @property
    def seeds(self) -> tuple[str, str]:
        return side_seeds(self.team1, self.team2)

    @property
    def series_totals(self) -> tuple[float, float]:
        # Stat corrections can leave a side below zero; the replay starts from 0.
        return max(0.0, self.points1), max(0.0, self.points2)

    def to_dict(self) -> dict[str, Any]:
        row = asdict(self)
        row.update(
            winner=self.winner,
            margin=round(self.margin, 1),
            total=round(self.total, 1),
            share=round(self.share, 3),
        )
        return row
