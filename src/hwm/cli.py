from __future__ import annotations

import argparse
import logging
from pathlib import Path

from hwm.basketball.stats import league_leaders
from hwm.contracts import SimFidelity, StatStream
from hwm.core import PythonRandomSource
from hwm.league import build_demo_league, build_demo_season
from hwm.persistence import SaveStore, refresh_analytics
from hwm.simulation import SeasonRuntime

_LEADER_BOARD = ("points_per_game", "rebounds_per_game", "assists_per_game")


def _print_leaders(title: str, rows: list[tuple[str, float]]) -> None:
    print(title)
    for rank, (player_id, value) in enumerate(rows, start=1):
        print(f"  {rank:>2}. {player_id:<10} {value:6.1f}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Hardwood Manager: possession-based basketball season simulator")
    parser.add_argument("--seed", type=int, default=None, help="seed for deterministic dev/testing runs")
    parser.add_argument("--teams", type=int, default=4, help="demo teams in the league (2-6)")
    parser.add_argument("--games", type=int, default=6, help="games to simulate in schedule order")
    parser.add_argument(
        "--fidelity",
        choices=[f.value for f in SimFidelity],
        default=None,
        help="force one fidelity for every game (default: detailed for the user team, fast otherwise)",
    )
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--save", type=Path, default=None, help="SQLite save file to write after each game")
    parser.add_argument("--analytics", type=Path, default=None, help="DuckDB analytics file (requires --save)")
    parser.add_argument("--leaders", type=int, default=5, help="rows per leader board")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.analytics is not None and args.save is None:
        parser.error("--analytics requires --save")

    seed = args.seed if args.seed is not None else 7
    teams = build_demo_league(team_count=args.teams, seed=seed)
    season = build_demo_season(teams)
    runtime = SeasonRuntime(
        teams,
        season,
        random_source=PythonRandomSource(args.seed),
        store=SaveStore(args.save) if args.save is not None else None,
        forensic_dir=args.save.parent / "forensics" if args.save is not None else None,
        fidelity_override=SimFidelity(args.fidelity) if args.fidelity is not None else None,
    )

    for game in runtime.simulate_games(limit=args.games):
        print(f"{game.game_id}  {game.away_team_id} {game.away_score:>3} @ {game.home_team_id} {game.home_score:>3}")

    print()
    print("Standings")
    for row in runtime.standings():
        print(f"  {row.team_id:<4} {row.wins:>2}-{row.losses:<2} {row.win_pct:.3f}")

    stats = runtime.stat_book.stream(StatStream.REGULAR_SEASON)
    for metric in _LEADER_BOARD:
        print()
        _print_leaders(metric.replace("_", " "), league_leaders(stats, metric, limit=args.leaders))

    if args.analytics is not None:
        analytics = refresh_analytics(args.save, args.analytics, runtime.season.season_id)
        print()
        _print_leaders(
            "points per game (analytics)",
            analytics.league_leaders("points_per_game", runtime.season.season_id, limit=args.leaders),
        )


if __name__ == "__main__":
    main()
