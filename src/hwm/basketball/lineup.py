from __future__ import annotations

from dataclasses import dataclass, field

from hwm.contracts import Position
from hwm.league.entities import LINEUP_SIZE, MINUTES_PER_POSITION, Player, Team

QUARTERS = 4
QUARTER_MINUTES = MINUTES_PER_POSITION / QUARTERS


def resolve_on_court(team: Team) -> list[Player]:
    """The five players who start, ordered PG to C when a depth chart exists."""
    config = team.rotation_config
    if config is None:
        by_id = {p.player_id: p for p in team.players}
        return [by_id[pid] for pid in team.starting_lineup_ids if pid in by_id]
    by_id = {p.player_id: p for p in team.players}
    starters: list[Player] = []
    for position in Position:
        ordered = config.players_for_position(position)
        if ordered and ordered[0] in by_id:
            starters.append(by_id[ordered[0]])
    return starters


@dataclass(slots=True)
class PositionStint:
    player_id: str
    quarter_minutes: float


@dataclass(slots=True)
class MinutesPlan:
    """Per-position stints replayed identically in each quarter.

    Every player at a position plays ``minutes / 4`` of each quarter, in depth
    order, so the position totals exactly 12 minutes per quarter.
    """

    team_id: str
    stints: dict[Position, list[PositionStint]] = field(default_factory=dict)

    def participant_ids(self) -> list[str]:
        ids: list[str] = []
        for position in Position:
            for stint in self.stints.get(position, []):
                if stint.quarter_minutes > 0 and stint.player_id not in ids:
                    ids.append(stint.player_id)
        return ids

    def regulation_minutes(self) -> dict[str, float]:
        minutes: dict[str, float] = {}
        for stints in self.stints.values():
            for stint in stints:
                minutes[stint.player_id] = minutes.get(stint.player_id, 0.0) + stint.quarter_minutes * QUARTERS
        return {pid: m for pid, m in minutes.items() if m > 0}

    def on_court_ids(self, elapsed_in_quarter: float) -> list[str]:
        elapsed = max(0.0, min(QUARTER_MINUTES, elapsed_in_quarter))
        active: list[str] = []
        for position in Position:
            stints = [s for s in self.stints.get(position, []) if s.quarter_minutes > 0]
            if not stints:
                continue
            running = 0.0
            chosen = stints[-1].player_id
            for stint in stints:
                running += stint.quarter_minutes
                if elapsed < running:
                    chosen = stint.player_id
                    break
            active.append(chosen)
        return active


def minutes_plan(team: Team) -> MinutesPlan:
    config = team.rotation_config
    plan = MinutesPlan(team_id=team.team_id)
    if config is None:
        starters = resolve_on_court(team)
        for slot, player in zip(Position, starters):
            plan.stints[slot] = [PositionStint(player.player_id, QUARTER_MINUTES)]
        return plan
    for position in Position:
        plan.stints[position] = [
            PositionStint(pid, config.player_minutes.get(pid, 0) / QUARTERS)
            for pid in config.players_for_position(position)
        ]
    return plan


def lineup_is_complete(players: list[Player]) -> bool:
    return len(players) == LINEUP_SIZE and len({p.player_id for p in players}) == LINEUP_SIZE
