from __future__ import annotations

from pathlib import Path
from typing import Any

import duckdb

from hwm.basketball.models import COUNTING_FIELDS
from hwm.persistence.sqlite_store import SaveStore

# metric -> SQL expression over the aggregated per-player CTE
LEADER_SQL: dict[str, str] = {
    "points_per_game": "points * 1.0 / games",
    "rebounds_per_game": "rebounds * 1.0 / games",
    "assists_per_game": "assists * 1.0 / games",
    "steals_per_game": "steals * 1.0 / games",
    "blocks_per_game": "blocks * 1.0 / games",
    "field_goal_percentage": "CASE WHEN field_goals_attempted = 0 THEN 0.0 ELSE field_goals_made * 100.0 / field_goals_attempted END",
    "three_point_percentage": "CASE WHEN three_pointers_attempted = 0 THEN 0.0 ELSE three_pointers_made * 100.0 / three_pointers_attempted END",
}


class AnalyticsStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> Any:
        return duckdb.connect(str(self.db_path))

    def initialize_schema(self) -> None:
        counting_columns = ",\n".join(f"{name} INTEGER" for name in COUNTING_FIELDS)
        with self.connect() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS mart_box_score_lines (
                    season_id VARCHAR,
                    game_id VARCHAR,
                    scheduled_date VARCHAR,
                    is_playoff_game BOOLEAN,
                    player_id VARCHAR,
                    team_id VARCHAR,
                    {counting_columns},
                    minutes_played DOUBLE,
                    PRIMARY KEY(game_id, player_id)
                );

                CREATE TABLE IF NOT EXISTS mart_team_games (
                    season_id VARCHAR,
                    game_id VARCHAR,
                    team_id VARCHAR,
                    opponent_id VARCHAR,
                    points_for INTEGER,
                    points_against INTEGER,
                    won BOOLEAN,
                    is_playoff_game BOOLEAN,
                    PRIMARY KEY(game_id, team_id)
                );
                """
            )

    def refresh_from_sqlite(self, sqlite_path: Path, season_id: str) -> int:
        """Re-derive the season's marts from the save; returns box-score lines loaded."""
        self.initialize_schema()
        save = SaveStore(sqlite_path)
        line_rows = [
            (r[0], r[1], r[2], bool(r[3]), *r[4:])
            for r in save.box_score_rows(season_id)
        ]
        with save.connect() as sconn:
            game_rows = sconn.execute(
                """
                SELECT game_id, home_team_id, away_team_id, home_score, away_score, is_playoff_game
                FROM games WHERE season_id = ? AND is_played = 1
                """,
                (season_id,),
            ).fetchall()
        team_rows: list[tuple[Any, ...]] = []
        for game_id, home_id, away_id, home_score, away_score, playoff in game_rows:
            team_rows.append((season_id, game_id, home_id, away_id, home_score, away_score, home_score > away_score, bool(playoff)))
            team_rows.append((season_id, game_id, away_id, home_id, away_score, home_score, away_score > home_score, bool(playoff)))

        with self.connect() as dconn:
            dconn.execute("DELETE FROM mart_box_score_lines WHERE season_id = ?", [season_id])
            dconn.execute("DELETE FROM mart_team_games WHERE season_id = ?", [season_id])
            self._insert_rows(dconn, "mart_box_score_lines", line_rows)
            self._insert_rows(dconn, "mart_team_games", team_rows)
        return len(line_rows)

    def _insert_rows(self, conn: Any, table: str, rows: list[tuple[Any, ...]]) -> None:
        if not rows:
            return
        values_placeholder = ",".join(["?"] * len(rows[0]))
        conn.executemany(f"INSERT INTO {table} VALUES ({values_placeholder})", rows)

    def league_leaders(
        self,
        metric: str,
        season_id: str,
        *,
        playoffs: bool = False,
        limit: int = 10,
        min_games: int = 1,
    ) -> list[tuple[str, float]]:
        if metric not in LEADER_SQL:
            raise KeyError(f"unknown leader metric '{metric}'")
        sums = ", ".join(f"SUM({name}) AS {name}" for name in COUNTING_FIELDS)
        with self.connect() as conn:
            rows = conn.execute(
                f"""
                WITH per_player AS (
                    SELECT player_id, COUNT(*) AS games, {sums}
                    FROM mart_box_score_lines
                    WHERE season_id = ? AND is_playoff_game = ?
                    GROUP BY player_id
                )
                SELECT player_id, {LEADER_SQL[metric]} AS value
                FROM per_player
                WHERE games >= ?
                ORDER BY value DESC, player_id
                LIMIT ?
                """,
                [season_id, playoffs, min_games, limit],
            ).fetchall()
        return [(str(r[0]), float(r[1])) for r in rows]

    def team_records(self, season_id: str) -> list[tuple[str, int, int, int]]:
        """(team_id, wins, losses, point differential) for regular-season games."""
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT team_id,
                       SUM(CASE WHEN won THEN 1 ELSE 0 END) AS wins,
                       SUM(CASE WHEN won THEN 0 ELSE 1 END) AS losses,
                       SUM(points_for - points_against) AS diff
                FROM mart_team_games
                WHERE season_id = ? AND NOT is_playoff_game
                GROUP BY team_id
                ORDER BY wins DESC, diff DESC, team_id
                """,
                [season_id],
            ).fetchall()
        return [(str(r[0]), int(r[1]), int(r[2]), int(r[3])) for r in rows]
