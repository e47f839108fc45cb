from __future__ import annotations

import sqlite3

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY,
            applied_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS seasons (
            season_id TEXT PRIMARY KEY,
            year INTEGER NOT NULL,
            user_team_id TEXT NOT NULL,
            document_json TEXT NOT NULL,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS teams (
            season_id TEXT NOT NULL,
            team_id TEXT NOT NULL,
            display_name TEXT NOT NULL,
            document_json TEXT NOT NULL,
            PRIMARY KEY (season_id, team_id)
        );

        CREATE TABLE IF NOT EXISTS games (
            game_id TEXT PRIMARY KEY,
            season_id TEXT NOT NULL,
            scheduled_date TEXT NOT NULL,
            home_team_id TEXT NOT NULL,
            away_team_id TEXT NOT NULL,
            home_score INTEGER,
            away_score INTEGER,
            is_played INTEGER NOT NULL,
            is_playoff_game INTEGER NOT NULL,
            series_id TEXT,
            FOREIGN KEY (season_id) REFERENCES seasons(season_id) ON DELETE CASCADE
        );
        """,
    ),
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS box_score_lines (
            game_id TEXT NOT NULL,
            player_id TEXT NOT NULL,
            team_id TEXT NOT NULL,
            points INTEGER NOT NULL,
            rebounds INTEGER NOT NULL,
            assists INTEGER NOT NULL,
            field_goals_made INTEGER NOT NULL,
            field_goals_attempted INTEGER NOT NULL,
            three_pointers_made INTEGER NOT NULL,
            three_pointers_attempted INTEGER NOT NULL,
            turnovers INTEGER NOT NULL,
            steals INTEGER NOT NULL,
            blocks INTEGER NOT NULL,
            fouls INTEGER NOT NULL,
            free_throws_made INTEGER NOT NULL,
            free_throws_attempted INTEGER NOT NULL,
            minutes_played REAL NOT NULL,
            PRIMARY KEY (game_id, player_id),
            FOREIGN KEY (game_id) REFERENCES games(game_id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_games_season ON games(season_id, scheduled_date);
        """,
    ),
]


class MigrationRunner:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def apply(self) -> list[int]:
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT DEFAULT CURRENT_TIMESTAMP)"
        )
        applied = {row[0] for row in self.conn.execute("SELECT version FROM schema_migrations").fetchall()}
        newly_applied: list[int] = []
        for version, sql in MIGRATIONS:
            if version in applied:
                continue
            self.conn.executescript(sql)
            self.conn.execute("INSERT INTO schema_migrations(version) VALUES (?)", (version,))
            newly_applied.append(version)
        self.conn.commit()
        return newly_applied

    def current_version(self) -> int:
        row = self.conn.execute("SELECT MAX(version) FROM schema_migrations").fetchone()
        return int(row[0] or 0)
