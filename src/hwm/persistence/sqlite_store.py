from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from hwm.basketball.models import COUNTING_FIELDS
from hwm.league.entities import Team
from hwm.league.games import Season
from hwm.persistence.codec import season_from_dict, season_to_dict, team_from_dict, team_to_dict
from hwm.persistence.migrations import MigrationRunner

logger = logging.getLogger(__name__)


class SaveStore:
    """Authoritative save file: season documents plus queryable game and box-score rows."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize_schema(self) -> None:
        with self.connect() as conn:
            applied = MigrationRunner(conn).apply()
        if applied:
            logger.debug("applied save migrations %s to %s", applied, self.db_path)

    def save_season(self, season: Season, teams: list[Team] | None = None) -> None:
        self.initialize_schema()
        if teams is not None:
            self.save_teams(season.season_id, teams)
        team_of = self._team_index(season.season_id)
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO seasons(season_id, year, user_team_id, document_json, updated_at)
                VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(season_id) DO UPDATE SET
                    year = excluded.year,
                    user_team_id = excluded.user_team_id,
                    document_json = excluded.document_json,
                    updated_at = excluded.updated_at
                """,
                (season.season_id, season.year, season.user_team_id, json.dumps(season_to_dict(season))),
            )
            for game in season.games:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO games(
                        game_id, season_id, scheduled_date, home_team_id, away_team_id,
                        home_score, away_score, is_played, is_playoff_game, series_id
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        game.game_id,
                        season.season_id,
                        game.scheduled_date.isoformat(),
                        game.home_team_id,
                        game.away_team_id,
                        game.home_score,
                        game.away_score,
                        int(game.is_played),
                        int(game.is_playoff_game),
                        game.series_id,
                    ),
                )
                conn.execute("DELETE FROM box_score_lines WHERE game_id = ?", (game.game_id,))
                if game.box_score is None:
                    continue
                placeholders = ", ".join(["?"] * (len(COUNTING_FIELDS) + 4))
                conn.executemany(
                    f"""
                    INSERT INTO box_score_lines(game_id, player_id, team_id, {", ".join(COUNTING_FIELDS)}, minutes_played)
                    VALUES ({placeholders})
                    """,
                    [
                        (
                            game.game_id,
                            pid,
                            team_of.get(pid, ""),
                            *(getattr(line, name) for name in COUNTING_FIELDS),
                            line.minutes_played,
                        )
                        for pid, line in game.box_score.items()
                    ],
                )

    def load_season(self, season_id: str) -> Season | None:
        self.initialize_schema()
        with self.connect() as conn:
            row = conn.execute("SELECT document_json FROM seasons WHERE season_id = ?", (season_id,)).fetchone()
        if row is None:
            return None
        return season_from_dict(json.loads(row[0]))

    def list_seasons(self) -> list[tuple[str, int]]:
        self.initialize_schema()
        with self.connect() as conn:
            rows = conn.execute("SELECT season_id, year FROM seasons ORDER BY year, season_id").fetchall()
        return [(str(r[0]), int(r[1])) for r in rows]

    def save_teams(self, season_id: str, teams: list[Team]) -> None:
        self.initialize_schema()
        with self.connect() as conn:
            for team in teams:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO teams(season_id, team_id, display_name, document_json)
                    VALUES (?, ?, ?, ?)
                    """,
                    (season_id, team.team_id, team.display_name, json.dumps(team_to_dict(team))),
                )

    def load_teams(self, season_id: str) -> list[Team]:
        self.initialize_schema()
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT document_json FROM teams WHERE season_id = ? ORDER BY team_id", (season_id,)
            ).fetchall()
        return [team_from_dict(json.loads(r[0])) for r in rows]

    def box_score_rows(self, season_id: str) -> list[tuple[Any, ...]]:
        """Flat per-player lines for played games, in schedule order."""
        self.initialize_schema()
        with self.connect() as conn:
            return conn.execute(
                f"""
                SELECT g.season_id, g.game_id, g.scheduled_date, g.is_playoff_game, b.player_id, b.team_id,
                       {", ".join("b." + name for name in COUNTING_FIELDS)}, b.minutes_played
                FROM box_score_lines b
                JOIN games g ON g.game_id = b.game_id
                WHERE g.season_id = ? AND g.is_played = 1
                ORDER BY g.scheduled_date, g.game_id, b.player_id
                """,
                (season_id,),
            ).fetchall()

    def _team_index(self, season_id: str) -> dict[str, str]:
        index: dict[str, str] = {}
        for team in self.load_teams(season_id):
            for player in team.players:
                index[player.player_id] = team.team_id
        return index
