from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable, Iterable, Mapping

from hwm.basketball.models import BoxScore, PlayerGameStats
from hwm.contracts import StatStream

if TYPE_CHECKING:
    from hwm.league.games import Game

TOTAL_FIELDS: dict[str, str] = {
    "points": "total_points",
    "rebounds": "total_rebounds",
    "assists": "total_assists",
    "field_goals_made": "total_field_goals_made",
    "field_goals_attempted": "total_field_goals_attempted",
    "three_pointers_made": "total_three_pointers_made",
    "three_pointers_attempted": "total_three_pointers_attempted",
    "turnovers": "total_turnovers",
    "steals": "total_steals",
    "blocks": "total_blocks",
    "fouls": "total_fouls",
    "free_throws_made": "total_free_throws_made",
    "free_throws_attempted": "total_free_throws_attempted",
}


def _per_game(total: int, games: int) -> float:
    return total / games if games else 0.0


def _pct(made: int, attempted: int) -> float:
    return made / attempted * 100 if attempted else 0.0


@dataclass(frozen=True, slots=True)
class PlayerSeasonStats:
    """Cumulative totals for one player in one stream.

    Only counting totals and ``games_played`` are stored; every average and
    percentage is derived on read so it can never drift from the totals.
    """

    player_id: str
    games_played: int = 0
    total_points: int = 0
    total_rebounds: int = 0
    total_assists: int = 0
    total_field_goals_made: int = 0
    total_field_goals_attempted: int = 0
    total_three_pointers_made: int = 0
    total_three_pointers_attempted: int = 0
    total_turnovers: int = 0
    total_steals: int = 0
    total_blocks: int = 0
    total_fouls: int = 0
    total_free_throws_made: int = 0
    total_free_throws_attempted: int = 0
    total_minutes: float = 0.0

    @classmethod
    def empty(cls, player_id: str) -> PlayerSeasonStats:
        return cls(player_id=player_id)

    def add_game_stats(self, line: PlayerGameStats) -> PlayerSeasonStats:
        if line.player_id != self.player_id:
            raise ValueError(f"cannot fold stats for '{line.player_id}' into '{self.player_id}'")
        updates = {total: getattr(self, total) + getattr(line, stat) for stat, total in TOTAL_FIELDS.items()}
        return replace(
            self,
            games_played=self.games_played + 1,
            total_minutes=round(self.total_minutes + line.minutes_played, 2),
            **updates,
        )

    def merge(self, other: PlayerSeasonStats) -> PlayerSeasonStats:
        if other.player_id != self.player_id:
            raise ValueError(f"cannot merge stats for '{other.player_id}' into '{self.player_id}'")
        updates = {total: getattr(self, total) + getattr(other, total) for total in TOTAL_FIELDS.values()}
        return replace(
            self,
            games_played=self.games_played + other.games_played,
            total_minutes=round(self.total_minutes + other.total_minutes, 2),
            **updates,
        )

    @property
    def points_per_game(self) -> float:
        return _per_game(self.total_points, self.games_played)

    @property
    def rebounds_per_game(self) -> float:
        return _per_game(self.total_rebounds, self.games_played)

    @property
    def assists_per_game(self) -> float:
        return _per_game(self.total_assists, self.games_played)

    @property
    def turnovers_per_game(self) -> float:
        return _per_game(self.total_turnovers, self.games_played)

    @property
    def steals_per_game(self) -> float:
        return _per_game(self.total_steals, self.games_played)

    @property
    def blocks_per_game(self) -> float:
        return _per_game(self.total_blocks, self.games_played)

    @property
    def fouls_per_game(self) -> float:
        return _per_game(self.total_fouls, self.games_played)

    @property
    def three_point_attempts_per_game(self) -> float:
        return _per_game(self.total_three_pointers_attempted, self.games_played)

    @property
    def minutes_per_game(self) -> float:
        return self.total_minutes / self.games_played if self.games_played else 0.0

    @property
    def field_goal_percentage(self) -> float:
        return _pct(self.total_field_goals_made, self.total_field_goals_attempted)

    @property
    def three_point_percentage(self) -> float:
        return _pct(self.total_three_pointers_made, self.total_three_pointers_attempted)

    @property
    def free_throw_percentage(self) -> float:
        return _pct(self.total_free_throws_made, self.total_free_throws_attempted)

    @property
    def three_point_attempt_rate(self) -> float:
        return _pct(self.total_three_pointers_attempted, self.total_field_goals_attempted)


StatsMap = dict[str, PlayerSeasonStats]


def add_game(existing: Mapping[str, PlayerSeasonStats] | None, box_score: BoxScore) -> StatsMap:
    """Fold one completed game's box score into a stats map.

    ``existing`` may be ``None`` (no prior data, e.g. an older save); it is
    treated as an empty aggregate. The input mapping is never mutated.
    """
    updated: StatsMap = dict(existing or {})
    for player_id, line in box_score.items():
        current = updated.get(player_id) or PlayerSeasonStats.empty(player_id)
        updated[player_id] = current.add_game_stats(line)
    return updated


def fold_games(box_scores: Iterable[BoxScore], existing: Mapping[str, PlayerSeasonStats] | None = None) -> StatsMap:
    stats: StatsMap = dict(existing or {})
    for box_score in box_scores:
        stats = add_game(stats, box_score)
    return stats


LEADER_METRICS: dict[str, Callable[[PlayerSeasonStats], float]] = {
    "points_per_game": lambda s: s.points_per_game,
    "rebounds_per_game": lambda s: s.rebounds_per_game,
    "assists_per_game": lambda s: s.assists_per_game,
    "steals_per_game": lambda s: s.steals_per_game,
    "blocks_per_game": lambda s: s.blocks_per_game,
    "field_goal_percentage": lambda s: s.field_goal_percentage,
    "three_point_percentage": lambda s: s.three_point_percentage,
}


def league_leaders(
    stats: Mapping[str, PlayerSeasonStats],
    metric: str,
    limit: int = 10,
    min_games: int = 1,
) -> list[tuple[str, float]]:
    if metric not in LEADER_METRICS:
        raise KeyError(f"unknown leader metric '{metric}'")
    read = LEADER_METRICS[metric]
    rows = [(pid, read(s)) for pid, s in stats.items() if s.games_played >= min_games]
    rows.sort(key=lambda row: (-row[1], row[0]))
    return rows[:limit]


@dataclass(slots=True)
class StatBook:
    """Regular-season and playoff streams keyed by the same player ids."""

    regular_season: StatsMap = field(default_factory=dict)
    playoffs: StatsMap = field(default_factory=dict)
    folded_game_ids: list[str] = field(default_factory=list)

    def stream(self, stream: StatStream) -> StatsMap:
        return self.playoffs if stream == StatStream.PLAYOFFS else self.regular_season

    def record(self, game_id: str, box_score: BoxScore, stream: StatStream) -> bool:
        """Fold a game once; a game id already folded is ignored and returns False."""
        if game_id in self.folded_game_ids:
            return False
        if stream == StatStream.PLAYOFFS:
            self.playoffs = add_game(self.playoffs, box_score)
        else:
            self.regular_season = add_game(self.regular_season, box_score)
        self.folded_game_ids.append(game_id)
        return True

    def player(self, player_id: str, stream: StatStream = StatStream.REGULAR_SEASON) -> PlayerSeasonStats | None:
        return self.stream(stream).get(player_id)

    def record_game(self, game: Game) -> bool:
        if not game.is_played or game.box_score is None:
            raise ValueError(f"game {game.game_id} has no result to fold")
        return self.record(game.game_id, game.box_score, game.stream)
