from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from hwm.basketball.coaching import CoachingBonuses
from hwm.basketball.roles import resolve_role
from hwm.contracts import Position, StatCategory
from hwm.league.entities import Player

_S = StatCategory

POSITION_MODIFIERS: dict[Position, dict[StatCategory, float]] = {
    Position.PG: {_S.USAGE: 1.30, _S.ASSIST: 1.15, _S.REBOUND: 0.85, _S.BLOCK: 0.70},
    Position.SG: {_S.THREE_POINT_ATTEMPT: 1.15},
    Position.SF: {_S.THREE_POINT_ATTEMPT: 0.95},
    Position.PF: {_S.REBOUND: 1.15, _S.BLOCK: 1.10, _S.THREE_POINT_ATTEMPT: 0.60, _S.POST_ATTEMPT: 1.15},
    Position.C: {
        _S.REBOUND: 1.25,
        _S.BLOCK: 1.20,
        _S.THREE_POINT_ATTEMPT: 0.25,
        _S.POST_ATTEMPT: 1.30,
        _S.USAGE: 0.75,
    },
}


def clamp_probability(value: float) -> float:
    if value != value:  # NaN
        return 0.0
    return max(0.0, min(1.0, value))


def clamp_band(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def scaled_probability(base: float, factor: float) -> float:
    return clamp_probability(clamp_probability(base) * max(0.0, factor))


@dataclass(frozen=True, slots=True)
class ModifierContext:
    coaching: CoachingBonuses = field(default_factory=CoachingBonuses.neutral)


NEUTRAL_CONTEXT = ModifierContext()


class ModifierProvider(Protocol):
    name: str

    def factor(self, player: Player, category: StatCategory, context: ModifierContext) -> float: ...


class PositionModifierProvider:
    name = "position"

    def __init__(self, table: dict[Position, dict[StatCategory, float]] | None = None) -> None:
        self._table = table or POSITION_MODIFIERS

    def factor(self, player: Player, category: StatCategory, context: ModifierContext) -> float:
        return self._table.get(player.position, {}).get(category, 1.0)


class RoleModifierProvider:
    name = "role"

    def factor(self, player: Player, category: StatCategory, context: ModifierContext) -> float:
        archetype = resolve_role(player.role_archetype_id).archetype
        # roles only shape the position they were designed for
        if archetype is None or archetype.position != player.position:
            return 1.0
        return archetype.modifier(category)


class CoachingModifierProvider:
    name = "coaching"

    def factor(self, player: Player, category: StatCategory, context: ModifierContext) -> float:
        bonuses = context.coaching
        if category == _S.SHOT_MAKE:
            value = 1.0 + bonuses.offense * 0.5
        elif category == _S.STEAL:
            value = 1.0 + bonuses.defense * 0.8
        elif category == _S.BLOCK:
            value = 1.0 + bonuses.defense * 0.6
        elif category == _S.DEFENSIVE_IMPACT:
            value = 1.0 + bonuses.defense * 0.5
        elif category == _S.ASSIST:
            value = 1.0 + bonuses.chemistry
        elif category == _S.TURNOVER:
            value = 1.0 - bonuses.chemistry * 0.5
        else:
            value = 1.0
        return max(0.0, value)


class ModifierPipeline:
    """Ordered providers whose factors compose by multiplication only."""

    def __init__(self, providers: Sequence[ModifierProvider] | None = None) -> None:
        self._providers: list[ModifierProvider] = list(
            providers
            if providers is not None
            else (PositionModifierProvider(), RoleModifierProvider(), CoachingModifierProvider())
        )
        # Built-in providers only read position, role id and coaching context.
        self._cacheable = providers is None
        self._cache: dict[tuple[Position, str | None, StatCategory, ModifierContext], float] = {}

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    def factor(self, player: Player, category: StatCategory, context: ModifierContext = NEUTRAL_CONTEXT) -> float:
        key = (player.position, player.role_archetype_id, category, context)
        if self._cacheable and key in self._cache:
            return self._cache[key]
        product = 1.0
        for provider in self._providers:
            product *= max(0.0, provider.factor(player, category, context))
        if self._cacheable:
            self._cache[key] = product
        return product

    def explain(
        self, player: Player, category: StatCategory, context: ModifierContext = NEUTRAL_CONTEXT
    ) -> dict[str, float]:
        return {p.name: p.factor(player, category, context) for p in self._providers}

    def apply(
        self, base: float, player: Player, category: StatCategory, context: ModifierContext = NEUTRAL_CONTEXT
    ) -> float:
        return scaled_probability(base, self.factor(player, category, context))
