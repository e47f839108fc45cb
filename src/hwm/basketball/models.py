from __future__ import annotations

from dataclasses import dataclass, field

from hwm.contracts import PossessionAction, PossessionResult

COUNTING_FIELDS: tuple[str, ...] = (
    "points",
    "rebounds",
    "assists",
    "field_goals_made",
    "field_goals_attempted",
    "three_pointers_made",
    "three_pointers_attempted",
    "turnovers",
    "steals",
    "blocks",
    "fouls",
    "free_throws_made",
    "free_throws_attempted",
)


def _pct(made: int, attempted: int) -> float:
    if attempted == 0:
        return 0.0
    return made / attempted * 100


@dataclass(frozen=True, slots=True)
class PlayerGameStats:
    """One player's line for a single game."""

    player_id: str
    points: int = 0
    rebounds: int = 0
    assists: int = 0
    field_goals_made: int = 0
    field_goals_attempted: int = 0
    three_pointers_made: int = 0
    three_pointers_attempted: int = 0
    turnovers: int = 0
    steals: int = 0
    blocks: int = 0
    fouls: int = 0
    free_throws_made: int = 0
    free_throws_attempted: int = 0
    minutes_played: float = 0.0

    @property
    def field_goal_percentage(self) -> float:
        return _pct(self.field_goals_made, self.field_goals_attempted)

    @property
    def three_point_percentage(self) -> float:
        return _pct(self.three_pointers_made, self.three_pointers_attempted)

    @property
    def free_throw_percentage(self) -> float:
        return _pct(self.free_throws_made, self.free_throws_attempted)


BoxScore = dict[str, PlayerGameStats]


@dataclass(slots=True)
class StatDelta:
    player_id: str
    stat: str
    amount: int = 1


@dataclass(slots=True)
class PossessionOutcome:
    """What happened on one possession; consumed by the box score, never persisted."""

    offense_team_id: str
    defense_team_id: str
    ball_handler_id: str
    action: PossessionAction
    result: PossessionResult
    shooter_id: str | None = None
    passer_id: str | None = None
    assister_id: str | None = None
    rebounder_id: str | None = None
    offensive_rebound: bool = False
    defender_id: str | None = None
    points: int = 0
    deltas: list[StatDelta] = field(default_factory=list)

    def credit(self, player_id: str, stat: str, amount: int = 1) -> None:
        if stat not in COUNTING_FIELDS:
            raise KeyError(f"unknown box score stat '{stat}'")
        self.deltas.append(StatDelta(player_id=player_id, stat=stat, amount=amount))


class BoxScoreBuilder:
    """Mutable per-game accumulator; frozen into a BoxScore once the game ends."""

    def __init__(self) -> None:
        self._lines: dict[str, dict[str, int]] = {}
        self._minutes: dict[str, float] = {}
        self._team_of: dict[str, str] = {}

    def register(self, player_id: str, team_id: str) -> None:
        self._team_of.setdefault(player_id, team_id)
        self._lines.setdefault(player_id, {name: 0 for name in COUNTING_FIELDS})
        self._minutes.setdefault(player_id, 0.0)

    def add(self, player_id: str, stat: str, amount: int = 1) -> None:
        if player_id not in self._lines:
            raise KeyError(f"player '{player_id}' is not registered in this box score")
        self._lines[player_id][stat] += amount

    def add_minutes(self, player_id: str, minutes: float) -> None:
        if player_id not in self._minutes:
            raise KeyError(f"player '{player_id}' is not registered in this box score")
        self._minutes[player_id] += minutes

    def apply(self, outcome: PossessionOutcome) -> None:
        for delta in outcome.deltas:
            self.add(delta.player_id, delta.stat, delta.amount)

    def team_points(self, team_id: str) -> int:
        return sum(line["points"] for pid, line in self._lines.items() if self._team_of[pid] == team_id)

    def build(self) -> BoxScore:
        return {
            pid: PlayerGameStats(player_id=pid, minutes_played=round(self._minutes[pid], 2), **line)
            for pid, line in self._lines.items()
        }
