from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Sequence

import uvicorn

from .config import LAST_INDEX, load_settings
from .models import MatchupPair
from .scoreboard import build_pairs, sort_pairs
from .series import Series, generate_series
from .sleeper import SleeperApiError, SleeperClient
from .timeaxis import fmt_tick_time

logger = logging.getLogger(__name__)


def format_scoreboard(pairs: Iterable[MatchupPair], title: str = "") -> str:
    lines = [title] if title else []
    lines.append("  # Team 1                 Pts   Pts Team 2                 Margin Leader")
    for idx, pair in enumerate(pairs, start=1):
        lines.append(
            f"{idx:>3} {pair.team1[:20]:<20} {pair.points1:>6.1f} {pair.points2:>5.1f} {pair.team2[:20]:<20}"
            f" {pair.margin:>6.1f} {pair.winner}"
        )
    return "\n".join(lines)


def format_series_table(pair: MatchupPair, home: Series, away: Series, every: int = 1) -> str:
    width = max(len(pair.team1), len(pair.team2), 6)
    lines = [f"Time         {pair.team1:>{width}} {pair.team2:>{width}}"]
    for idx in range(0, LAST_INDEX + 1, max(1, every)):
        lines.append(f"{fmt_tick_time(idx):<12} {home[idx]:>{width}.1f} {away[idx]:>{width}.1f}")
    return "\n".join(lines)


def _load_pairs(client: SleeperClient, league_id: str, week: int | None) -> tuple[int, list[MatchupPair]]:
    active_week = week if week is not None else client.current_week()
    bundle = client.league_bundle(league_id, active_week)
    return active_week, build_pairs(active_week, bundle.users, bundle.rosters, bundle.matchups)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="matchup-replay", description="Sleeper league scoreboard and matchup replay")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    board = sub.add_parser("scoreboard", help="Print the week's matchups")
    board.add_argument("league_id")
    board.add_argument("--week", type=int, default=None)
    board.add_argument("--sort", choices=("margin", "total"), default="margin")

    series = sub.add_parser("series", help="Print the simulated intraday series for one matchup")
    series.add_argument("league_id")
    series.add_argument("--week", type=int, default=None)
    series.add_argument("--matchup", type=int, default=1, help="1-based matchup number")
    series.add_argument("--every", type=int, default=6, help="print every Nth 10-minute tick")

    serve = sub.add_parser("serve", help="Run the dashboard API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "serve":
        uvicorn.run("matchup_replay.api:app", host=args.host, port=args.port)
        return 0

    settings = load_settings()
    client = SleeperClient(settings.sleeper_api, settings.timeout_seconds)
    try:
        week, pairs = _load_pairs(client, args.league_id, args.week)
    except SleeperApiError as exc:
        print(f"Sleeper sync failed: {exc}", file=sys.stderr)
        return 1

    if args.command == "scoreboard":
        print(format_scoreboard(sort_pairs(pairs, by=args.sort), title=f"Week {week}"))
        return 0

    if not 1 <= args.matchup <= len(pairs):
        print(f"Matchup {args.matchup} not found; week {week} has {len(pairs)} matchups", file=sys.stderr)
        return 1
    pair = pairs[args.matchup - 1]
    seed1, seed2 = pair.seeds
    total1, total2 = pair.series_totals
    home = generate_series(seed1, total1)
    away = generate_series(seed2, total2)
    print(format_series_table(pair, home, away, every=args.every))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
