from __future__ import annotations

from typing import Callable

from hwm.contracts import Position
from hwm.league.entities import LINEUP_SIZE, Player, Team


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def point_guard_affinity(player: Player) -> float:
    base = player.passing * 0.4 + player.ball_handling * 0.3 + player.speed * 0.2
    return _clamp(base - (player.height_inches - 72) * 0.5)


def shooting_guard_affinity(player: Player) -> float:
    base = player.shooting * 0.35 + player.three_point * 0.35 + player.speed * 0.2
    bonus = 10.0 if 73 <= player.height_inches <= 78 else 0.0
    return _clamp(base + bonus)


def small_forward_affinity(player: Player) -> float:
    athleticism = (player.speed + player.stamina) / 2.0
    base = player.shooting * 0.25 + player.defense * 0.25 + athleticism * 0.25
    bonus = 25.0 if 76 <= player.height_inches <= 80 else 0.0
    return _clamp(base + bonus)


def power_forward_affinity(player: Player) -> float:
    base = player.rebounding * 0.35 + player.defense * 0.25 + player.shooting * 0.2
    return _clamp(base + (player.height_inches - 76) * 1.0)


def center_affinity(player: Player) -> float:
    base = player.rebounding * 0.35 + player.blocks * 0.3 + player.defense * 0.25
    return _clamp(base + (player.height_inches - 78) * 1.5)


AFFINITY_FUNCTIONS: dict[Position, Callable[[Player], float]] = {
    Position.PG: point_guard_affinity,
    Position.SG: shooting_guard_affinity,
    Position.SF: small_forward_affinity,
    Position.PF: power_forward_affinity,
    Position.C: center_affinity,
}


def affinity(player: Player, position: Position) -> float:
    return AFFINITY_FUNCTIONS[Position(position)](player)


def all_affinities(player: Player) -> dict[Position, float]:
    return {position: fn(player) for position, fn in AFFINITY_FUNCTIONS.items()}


def suggest_starting_lineup(team: Team) -> dict[Position, str]:
    """Greedy best-affinity pick per position, PG first, never reusing a player.

    Advisory only; the engine never calls this during simulation.
    """
    if len(team.players) < LINEUP_SIZE:
        raise ValueError(f"team {team.team_id} needs at least {LINEUP_SIZE} players for a lineup")
    taken: set[str] = set()
    lineup: dict[Position, str] = {}
    for position, fn in AFFINITY_FUNCTIONS.items():
        candidates = [p for p in team.players if p.player_id not in taken]
        best = max(candidates, key=lambda p: (fn(p), p.overall_rating, p.player_id))
        lineup[position] = best.player_id
        taken.add(best.player_id)
    return lineup
