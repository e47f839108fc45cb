from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import TYPE_CHECKING

from hwm.contracts import StatStream

if TYPE_CHECKING:
    from hwm.basketball.models import BoxScore
    from hwm.basketball.stats import StatsMap

REGULAR_SEASON_GAMES = 82


@dataclass(frozen=True, slots=True)
class Game:
    game_id: str
    home_team_id: str
    away_team_id: str
    scheduled_date: date
    home_score: int | None = None
    away_score: int | None = None
    is_played: bool = False
    box_score: BoxScore | None = None
    is_playoff_game: bool = False
    series_id: str | None = None

    @property
    def home_team_won(self) -> bool:
        if not self.is_played or self.home_score is None or self.away_score is None:
            return False
        return self.home_score > self.away_score

    @property
    def away_team_won(self) -> bool:
        if not self.is_played or self.home_score is None or self.away_score is None:
            return False
        return self.away_score > self.home_score

    @property
    def winner_team_id(self) -> str | None:
        if self.home_team_won:
            return self.home_team_id
        if self.away_team_won:
            return self.away_team_id
        return None

    @property
    def stream(self) -> StatStream:
        return StatStream.PLAYOFFS if self.is_playoff_game else StatStream.REGULAR_SEASON

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def with_result(self, home_score: int, away_score: int, box_score: BoxScore | None) -> Game:
        if self.is_played:
            raise ValueError(f"game {self.game_id} is already played")
        return replace(self, home_score=home_score, away_score=away_score, is_played=True, box_score=box_score)


@dataclass(frozen=True, slots=True)
class Season:
    season_id: str
    year: int
    games: tuple[Game, ...]
    user_team_id: str
    season_stats: StatsMap | None = None
    playoff_stats: StatsMap | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "games", tuple(self.games))

    @property
    def games_played(self) -> int:
        return sum(1 for g in self.games if g.is_played)

    @property
    def games_remaining(self) -> int:
        return len(self.games) - self.games_played

    @property
    def is_complete(self) -> bool:
        return all(g.is_played for g in self.games)

    @property
    def next_game(self) -> Game | None:
        return next((g for g in self.games if not g.is_played), None)

    def record_for(self, team_id: str) -> tuple[int, int]:
        wins = losses = 0
        for game in self.games:
            if not game.is_played or not game.involves(team_id) or game.is_playoff_game:
                continue
            if game.winner_team_id == team_id:
                wins += 1
            else:
                losses += 1
        return wins, losses

    @property
    def wins(self) -> int:
        return self.record_for(self.user_team_id)[0]

    @property
    def losses(self) -> int:
        return self.record_for(self.user_team_id)[1]

    def game(self, game_id: str) -> Game:
        for g in self.games:
            if g.game_id == game_id:
                return g
        raise KeyError(f"season {self.season_id} has no game '{game_id}'")

    def with_game(self, game: Game) -> Season:
        if game.game_id not in {g.game_id for g in self.games}:
            return replace(self, games=self.games + (game,))
        return replace(self, games=tuple(game if g.game_id == game.game_id else g for g in self.games))

    def with_game_stats(self, game: Game) -> Season:
        """Fold a played game's box score into the stream it belongs to."""
        from hwm.basketball.stats import add_game

        if not game.is_played or game.box_score is None:
            return self
        if game.is_playoff_game:
            return replace(self, playoff_stats=add_game(self.playoff_stats, game.box_score))
        return replace(self, season_stats=add_game(self.season_stats, game.box_score))
