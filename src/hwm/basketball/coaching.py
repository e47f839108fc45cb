from __future__ import annotations

from dataclasses import dataclass

from hwm.contracts import CoachingSpecialization
from hwm.league.entities import CoachProfile

_PRIMARY_WEIGHTS: dict[CoachingSpecialization, tuple[str, str, float]] = {
    CoachingSpecialization.OFFENSIVE: ("offense", "offensive", 0.002),
    CoachingSpecialization.DEFENSIVE: ("defense", "defensive", 0.002),
    CoachingSpecialization.PLAYER_DEVELOPMENT: ("development", "development", 0.001),
    CoachingSpecialization.TEAM_CHEMISTRY: ("chemistry", "chemistry", 0.001),
}


@dataclass(frozen=True, slots=True)
class CoachingBonuses:
    """Read-only bonuses handed over by the coaching subsystem.

    Each value is a fractional bonus (0.05 means +5%); all zero is neutral.
    """

    offense: float = 0.0
    defense: float = 0.0
    development: float = 0.0
    chemistry: float = 0.0

    @classmethod
    def neutral(cls) -> CoachingBonuses:
        return cls()

    @classmethod
    def from_coach(cls, coach: CoachProfile | None) -> CoachingBonuses:
        if coach is None:
            return cls.neutral()
        values = {"offense": 0.0, "defense": 0.0, "development": 0.0, "chemistry": 0.0}
        key, attribute, weight = _PRIMARY_WEIGHTS[coach.primary_specialization]
        values[key] += (coach.attribute(attribute) - 50) * weight
        if coach.secondary_specialization is not None:
            key, attribute, weight = _PRIMARY_WEIGHTS[coach.secondary_specialization]
            values[key] += (coach.attribute(attribute) - 50) * weight / 2
        experience = 1.0 + (coach.experience_level - 1) * 0.1
        return cls(**{k: v * experience for k, v in values.items()})


def development_rate_modifier(coach: CoachProfile | None, player_age: int) -> float:
    # Consumed by the player development subsystem, not by the possession loop.
    if coach is None:
        return 1.0
    modifier = 1.0 + CoachingBonuses.from_coach(coach).development
    if coach.primary_specialization == CoachingSpecialization.PLAYER_DEVELOPMENT and player_age < 25:
        modifier += 0.2
    modifier += (coach.experience_level - 1) * 0.05
    return modifier
