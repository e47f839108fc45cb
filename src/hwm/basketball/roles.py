from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Mapping

from hwm.contracts import Position, StatCategory

if TYPE_CHECKING:
    from hwm.league.entities import Player

logger = logging.getLogger(__name__)


class RoleArchetypeId(str, Enum):
    PG_ALL_AROUND = "pg_allaround"
    PG_FLOOR_GENERAL = "pg_floor_general"
    PG_SLASHING_PLAYMAKER = "pg_slashing_playmaker"
    PG_OFFENSIVE_POINT = "pg_offensive_point"
    SG_THREE_LEVEL_SCORER = "sg_three_level_scorer"
    SG_THREE_AND_D = "sg_3_and_d"
    SG_MICROWAVE_SHOOTER = "sg_microwave_shooter"
    SF_POINT_FORWARD = "sf_point_forward"
    SF_THREE_AND_D_WING = "sf_3_and_d_wing"
    SF_ATHLETIC_FINISHER = "sf_athletic_finisher"
    PF_PLAYMAKING_BIG = "pf_playmaking_big"
    PF_STRETCH_FOUR = "pf_stretch_four"
    PF_RIM_RUNNER = "pf_rim_runner"
    C_PAINT_BEAST = "c_paint_beast"
    C_STRETCH_FIVE = "c_stretch_five"
    C_STANDARD_CENTER = "c_standard_center"


class RoleStatus(str, Enum):
    NONE = "none"
    KNOWN = "known"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class RoleArchetype:
    archetype_id: RoleArchetypeId
    name: str
    position: Position
    attribute_weights: Mapping[str, float]
    gameplay_modifiers: Mapping[StatCategory, float]

    def modifier(self, category: StatCategory) -> float:
        return self.gameplay_modifiers.get(category, 1.0)

    def fit_score(self, player: Player) -> float:
        """Weighted mean of the player's ratings against this archetype, 0..100."""
        total_weight = sum(self.attribute_weights.values())
        if total_weight <= 0:
            return 0.0
        score = sum(player.rating(name) * weight for name, weight in self.attribute_weights.items())
        return max(0.0, min(100.0, score / total_weight))


@dataclass(frozen=True, slots=True)
class RoleResolution:
    status: RoleStatus
    raw_id: str | None = None
    archetype: RoleArchetype | None = None

    def modifier(self, category: StatCategory) -> float:
        if self.archetype is None:
            return 1.0
        return self.archetype.modifier(category)


_A = RoleArchetypeId
_S = StatCategory

_ARCHETYPES: tuple[RoleArchetype, ...] = (
    RoleArchetype(
        _A.PG_ALL_AROUND,
        "All-Around PG",
        Position.PG,
        {"passing": 0.25, "shooting": 0.20, "ball_handling": 0.25, "speed": 0.20, "three_point": 0.10},
        {},
    ),
    RoleArchetype(
        _A.PG_FLOOR_GENERAL,
        "Floor General",
        Position.PG,
        {"passing": 0.45, "ball_handling": 0.30, "speed": 0.15, "defense": 0.10},
        {_S.ASSIST: 1.20, _S.SHOT_ATTEMPT: 0.85},
    ),
    RoleArchetype(
        _A.PG_SLASHING_PLAYMAKER,
        "Slashing Playmaker",
        Position.PG,
        {"post_shooting": 0.35, "speed": 0.25, "ball_handling": 0.20, "passing": 0.20},
        {_S.POST_ATTEMPT: 1.25, _S.THREE_POINT_ATTEMPT: 0.80},
    ),
    RoleArchetype(
        _A.PG_OFFENSIVE_POINT,
        "Offensive Point",
        Position.PG,
        {"shooting": 0.35, "three_point": 0.30, "passing": 0.20, "ball_handling": 0.15},
        {_S.SHOT_ATTEMPT: 1.15, _S.ASSIST: 0.90},
    ),
    RoleArchetype(
        _A.SG_THREE_LEVEL_SCORER,
        "Three-Level Scorer",
        Position.SG,
        {"shooting": 0.35, "three_point": 0.30, "ball_handling": 0.25, "speed": 0.10},
        {_S.SHOT_CREATION: 1.20, _S.ASSIST: 0.85},
    ),
    RoleArchetype(
        _A.SG_THREE_AND_D,
        "3-and-D",
        Position.SG,
        {"three_point": 0.40, "defense": 0.30, "steals": 0.20, "shooting": 0.10},
        {_S.THREE_POINT_ATTEMPT: 1.30, _S.STEAL: 1.25, _S.DEFENSIVE_IMPACT: 1.20},
    ),
    RoleArchetype(
        _A.SG_MICROWAVE_SHOOTER,
        "Microwave Shooter",
        Position.SG,
        {"shooting": 0.45, "three_point": 0.40, "speed": 0.10, "defense": 0.05},
        {_S.CATCH_AND_SHOOT: 1.35, _S.USAGE: 0.75},
    ),
    RoleArchetype(
        _A.SF_POINT_FORWARD,
        "Point Forward",
        Position.SF,
        {"passing": 0.35, "ball_handling": 0.25, "shooting": 0.20, "speed": 0.20},
        {_S.ASSIST: 1.25, _S.POST_ATTEMPT: 0.80},
    ),
    RoleArchetype(
        _A.SF_THREE_AND_D_WING,
        "3-and-D Wing",
        Position.SF,
        {"three_point": 0.30, "defense": 0.25, "steals": 0.20, "blocks": 0.15, "rebounding": 0.10},
        {_S.THREE_POINT_ATTEMPT: 1.25, _S.STEAL: 1.20, _S.BLOCK: 1.15, _S.REBOUND: 1.10},
    ),
    RoleArchetype(
        _A.SF_ATHLETIC_FINISHER,
        "Athletic Finisher",
        Position.SF,
        {"post_shooting": 0.40, "speed": 0.25, "rebounding": 0.20, "defense": 0.15},
        {_S.POST_ATTEMPT: 1.30, _S.THREE_POINT_ATTEMPT: 0.70},
    ),
    RoleArchetype(
        _A.PF_PLAYMAKING_BIG,
        "Playmaking Big",
        Position.PF,
        {"passing": 0.35, "rebounding": 0.30, "post_shooting": 0.20, "defense": 0.15},
        {_S.ASSIST: 1.20, _S.THREE_POINT_ATTEMPT: 0.75},
    ),
    RoleArchetype(
        _A.PF_STRETCH_FOUR,
        "Stretch Four",
        Position.PF,
        {"three_point": 0.35, "shooting": 0.30, "rebounding": 0.25, "defense": 0.10},
        {_S.THREE_POINT_ATTEMPT: 1.25},
    ),
    RoleArchetype(
        _A.PF_RIM_RUNNER,
        "Rim Runner",
        Position.PF,
        {"post_shooting": 0.40, "rebounding": 0.35, "blocks": 0.20, "speed": 0.05},
        {_S.POST_ATTEMPT: 1.35, _S.REBOUND: 1.20, _S.THREE_POINT_ATTEMPT: 0.10},
    ),
    RoleArchetype(
        _A.C_PAINT_BEAST,
        "Paint Beast",
        Position.C,
        {"post_shooting": 0.35, "blocks": 0.30, "rebounding": 0.25, "defense": 0.10},
        {_S.POST_ATTEMPT: 1.30, _S.BLOCK: 1.35, _S.THREE_POINT_ATTEMPT: 0.0},
    ),
    RoleArchetype(
        _A.C_STRETCH_FIVE,
        "Stretch Five",
        Position.C,
        {"three_point": 0.35, "shooting": 0.25, "rebounding": 0.25, "defense": 0.15},
        {_S.THREE_POINT_ATTEMPT: 1.30, _S.REBOUND: 1.0},
    ),
    RoleArchetype(
        _A.C_STANDARD_CENTER,
        "Standard Center",
        Position.C,
        {"rebounding": 0.30, "post_shooting": 0.25, "blocks": 0.25, "defense": 0.20},
        {_S.POST_ATTEMPT: 1.15, _S.REBOUND: 1.15, _S.BLOCK: 1.15},
    ),
)

ARCHETYPES: dict[RoleArchetypeId, RoleArchetype] = {a.archetype_id: a for a in _ARCHETYPES}

_NO_ROLE = RoleResolution(status=RoleStatus.NONE)
_warned_unknown: set[str] = set()


def get_archetype(archetype_id: RoleArchetypeId | str) -> RoleArchetype:
    return ARCHETYPES[RoleArchetypeId(archetype_id)]


def resolve_role(raw_id: str | None) -> RoleResolution:
    """Resolve a persisted role id.

    Stale or foreign ids resolve to UNKNOWN, which behaves exactly like no role.
    """
    if raw_id is None or raw_id == "":
        return _NO_ROLE
    try:
        archetype_id = RoleArchetypeId(raw_id)
    except ValueError:
        if raw_id not in _warned_unknown:
            _warned_unknown.add(raw_id)
            logger.debug("unknown role archetype id %r treated as no role", raw_id)
        return RoleResolution(status=RoleStatus.UNKNOWN, raw_id=raw_id)
    return RoleResolution(status=RoleStatus.KNOWN, raw_id=raw_id, archetype=ARCHETYPES[archetype_id])


def archetypes_for_position(position: Position | str) -> list[RoleArchetype]:
    try:
        position = Position(position)
    except ValueError:
        return []
    return [a for a in _ARCHETYPES if a.position == position]


def all_archetypes() -> list[RoleArchetype]:
    return list(_ARCHETYPES)


def fit_score(player: Player, archetype: RoleArchetype) -> float:
    return archetype.fit_score(player)


def fit_scores(player: Player) -> dict[RoleArchetypeId, float]:
    return {a.archetype_id: a.fit_score(player) for a in archetypes_for_position(player.position)}


def best_fit(player: Player) -> RoleArchetype | None:
    candidates = archetypes_for_position(player.position)
    if not candidates:
        return None
    return max(candidates, key=lambda a: (a.fit_score(player), a.archetype_id.value))
