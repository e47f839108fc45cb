from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import NoReturn

from hwm.basketball import GameOrchestrator, StatBook
from hwm.contracts import RandomSource, SimFidelity, StatStream, ValidationIssue
from hwm.core import (
    EngineIntegrityError,
    EventBus,
    contract_violation,
    gameplay_random,
    persist_forensic_artifact,
)
from hwm.league.entities import Team
from hwm.league.games import Game, Season
from hwm.persistence.sqlite_store import SaveStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StandingRow:
    team_id: str
    wins: int
    losses: int

    @property
    def games(self) -> int:
        return self.wins + self.losses

    @property
    def win_pct(self) -> float:
        return self.wins / self.games if self.games else 0.0


class SeasonRuntime:
    """Plays a season's fixtures in schedule order and keeps its stat streams current.

    The user's games run in detailed fidelity, everything else in fast
    fidelity. Each result is folded exactly once, in the order games finish.
    """

    def __init__(
        self,
        teams: list[Team],
        season: Season,
        user_team_id: str | None = None,
        random_source: RandomSource | None = None,
        event_bus: EventBus | None = None,
        *,
        store: SaveStore | None = None,
        forensic_dir: Path | None = None,
        fidelity_override: SimFidelity | None = None,
    ) -> None:
        self.teams = {t.team_id: t for t in teams}
        self.user_team_id = user_team_id or season.user_team_id
        self.rand = random_source or gameplay_random()
        self.event_bus = event_bus or EventBus()
        self.orchestrator = GameOrchestrator(self.rand.spawn("games"), event_bus=self.event_bus)
        self.store = store
        self.forensic_dir = forensic_dir
        self.fidelity_override = SimFidelity(fidelity_override) if fidelity_override is not None else None
        self.halted = False
        self.last_forensic_path: str | None = None

        played_ids = [g.game_id for g in season.games if g.is_played]
        self.stat_book = StatBook(
            regular_season=dict(season.season_stats or {}),
            playoffs=dict(season.playoff_stats or {}),
            folded_game_ids=played_ids,
        )
        self.season = season

    def team(self, team_id: str) -> Team:
        try:
            return self.teams[team_id]
        except KeyError:
            raise KeyError(f"unknown team '{team_id}'") from None

    def replace_team(self, team: Team) -> None:
        """Swap in a new team snapshot (role, rotation or coach change) for upcoming games."""
        self.team(team.team_id)
        self.teams[team.team_id] = team

    def fidelity_for(self, game: Game) -> SimFidelity:
        if self.fidelity_override is not None:
            return self.fidelity_override
        return SimFidelity.DETAILED if game.involves(self.user_team_id) else SimFidelity.FAST

    def simulate_next_game(self) -> Game | None:
        game = self.season.next_game
        if game is None:
            return None
        return self._play(game)

    def simulate_games(self, limit: int | None = None) -> list[Game]:
        played: list[Game] = []
        while limit is None or len(played) < limit:
            game = self.simulate_next_game()
            if game is None:
                break
            played.append(game)
        return played

    def simulate_user_game(self) -> Game | None:
        game = next((g for g in self.season.games if not g.is_played and g.involves(self.user_team_id)), None)
        if game is None:
            return None
        return self._play(game)

    def play_playoff_game(
        self,
        game_id: str,
        home_team_id: str,
        away_team_id: str,
        series_id: str | None = None,
        scheduled_date: date | None = None,
    ) -> Game:
        stub = Game(
            game_id=game_id,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            scheduled_date=scheduled_date or (self.season.games[-1].scheduled_date if self.season.games else date.today()),
            is_playoff_game=True,
            series_id=series_id,
        )
        if any(g.game_id == game_id for g in self.season.games):
            issue = ValidationIssue(
                code="DUPLICATE_GAME_ID",
                severity="blocking",
                field_path="game_id",
                entity_id=game_id,
                message=f"season {self.season.season_id} already has a game '{game_id}'",
            )
            self._halt(
                contract_violation(
                    engine_scope="season_runtime",
                    error_code="DUPLICATE_GAME_ID",
                    message=issue.message,
                    issues=[issue],
                    identifiers={"game_id": game_id, "season_id": self.season.season_id},
                    phase="playoff_schedule",
                )
            )
        self.season = self.season.with_game(stub)
        return self._play(stub)

    def standings(self) -> list[StandingRow]:
        rows = [StandingRow(team_id, *self.season.record_for(team_id)) for team_id in self.teams]
        rows.sort(key=lambda r: (-r.win_pct, -r.wins, r.team_id))
        return rows

    def _play(self, stub: Game) -> Game:
        if self.halted:
            raise RuntimeError(f"runtime halted after integrity failure; forensic={self.last_forensic_path}")
        try:
            played = self.orchestrator.simulate_game_record(
                stub,
                self.team(stub.home_team_id),
                self.team(stub.away_team_id),
                fidelity=self.fidelity_for(stub),
            )
        except EngineIntegrityError as exc:
            self._halt(exc)
        self._record(played)
        return played

    def _halt(self, exc: EngineIntegrityError) -> NoReturn:
        self.halted = True
        if self.forensic_dir is not None:
            self.last_forensic_path = str(persist_forensic_artifact(exc.artifact, self.forensic_dir))
        logger.error(
            "integrity failure on game %s: %s", exc.artifact.identifiers.get("game_id"), exc.artifact.error_code
        )
        raise exc

    def _record(self, game: Game) -> None:
        self.season = self.season.with_game(game)
        if self.stat_book.record_game(game):
            playoffs = self.stat_book.stream(StatStream.PLAYOFFS)
            self.season = replace(
                self.season,
                season_stats=dict(self.stat_book.stream(StatStream.REGULAR_SEASON)),
                playoff_stats=dict(playoffs) if playoffs else self.season.playoff_stats,
            )
        if self.store is not None:
            self.store.save_season(self.season, list(self.teams.values()))
