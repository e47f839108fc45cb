from __future__ import annotations

import math

import pytest

from hwm.basketball import CoachingBonuses, ModifierContext, ModifierPipeline, RoleStatus, best_fit, resolve_role
from hwm.basketball.coaching import development_rate_modifier
from hwm.basketball.modifiers import POSITION_MODIFIERS, clamp_probability, scaled_probability
from hwm.basketball.roles import ARCHETYPES, RoleArchetypeId, all_archetypes, archetypes_for_position, fit_scores
from hwm.contracts import CoachingSpecialization, Position, StatCategory
from hwm.league import CoachProfile
from tests.helpers import make_player


def test_registry_has_sixteen_archetypes_split_by_position():
    assert len(all_archetypes()) == 16
    assert len(archetypes_for_position(Position.PG)) == 4
    for position in (Position.SG, Position.SF, Position.PF, Position.C):
        assert len(archetypes_for_position(position)) == 3
    assert archetypes_for_position("QB") == []


def test_pipeline_factor_is_product_of_providers():
    pipeline = ModifierPipeline()
    context = ModifierContext(coaching=CoachingBonuses(defense=0.05))
    player = make_player("C1", Position.C, role_archetype_id="c_standard_center")
    for category in StatCategory:
        parts = pipeline.explain(player, category, context)
        assert list(parts) == ["position", "role", "coaching"]
        assert math.isclose(pipeline.factor(player, category, context), math.prod(parts.values()))


def test_paint_beast_zero_three_point_factor_does_not_leak():
    pipeline = ModifierPipeline()
    beast = make_player("C1", Position.C, role_archetype_id=RoleArchetypeId.C_PAINT_BEAST.value)
    plain = make_player("C2", Position.C)

    assert pipeline.factor(beast, StatCategory.THREE_POINT_ATTEMPT) == 0.0
    assert math.isclose(pipeline.factor(beast, StatCategory.BLOCK), 1.20 * 1.35)
    assert math.isclose(pipeline.factor(beast, StatCategory.POST_ATTEMPT), 1.30 * 1.30)
    for category in (StatCategory.REBOUND, StatCategory.SHOT_MAKE, StatCategory.ASSIST, StatCategory.STEAL):
        assert pipeline.factor(beast, category) == pipeline.factor(plain, category)


def test_composed_probabilities_stay_in_unit_interval():
    pipeline = ModifierPipeline()
    hot = ModifierContext(coaching=CoachingBonuses(offense=2.0, defense=2.0, chemistry=2.0))
    cold = ModifierContext(coaching=CoachingBonuses(offense=-3.0, defense=-3.0, chemistry=-3.0))
    for archetype in all_archetypes():
        player = make_player("X", archetype.position, role_archetype_id=archetype.archetype_id.value)
        for category in StatCategory:
            for context in (hot, cold, ModifierContext()):
                for base in (-0.5, 0.0, 0.3, 0.99, 1.0, 4.0):
                    assert 0.0 <= pipeline.apply(base, player, category, context) <= 1.0


def test_clamp_helpers():
    assert clamp_probability(float("nan")) == 0.0
    assert clamp_probability(-0.1) == 0.0
    assert clamp_probability(1.7) == 1.0
    assert scaled_probability(0.5, -2.0) == 0.0
    assert scaled_probability(0.5, 3.0) == 1.0


def test_unknown_role_degrades_to_no_role():
    resolution = resolve_role("pg_retired_archetype")
    assert resolution.status == RoleStatus.UNKNOWN
    assert resolution.archetype is None
    assert resolve_role(None).status == RoleStatus.NONE
    assert resolve_role("").status == RoleStatus.NONE

    pipeline = ModifierPipeline()
    stale = make_player("P1", Position.PG, role_archetype_id="pg_retired_archetype")
    plain = make_player("P2", Position.PG)
    for category in StatCategory:
        assert pipeline.factor(stale, category) == pipeline.factor(plain, category)


def test_position_table_shapes_tendencies():
    assert POSITION_MODIFIERS[Position.PG][StatCategory.ASSIST] > 1.0
    assert POSITION_MODIFIERS[Position.C][StatCategory.THREE_POINT_ATTEMPT] < 0.5
    assert POSITION_MODIFIERS[Position.C][StatCategory.REBOUND] > 1.0


def test_fit_scores_bounded_and_best_fit_matches_profile():
    player = make_player("SG1", Position.SG, rating=50, three_point=95, defense=90, steals=90, shooting=40)
    scores = fit_scores(player)
    assert set(scores) == {a.archetype_id for a in archetypes_for_position(Position.SG)}
    assert all(0.0 <= s <= 100.0 for s in scores.values())
    assert best_fit(player).archetype_id == RoleArchetypeId.SG_THREE_AND_D

    maxed = make_player("C1", Position.C, rating=100)
    assert all(math.isclose(s, 100.0) for s in fit_scores(maxed).values())


def test_position_change_clears_foreign_role():
    center = make_player("C1", Position.C, role_archetype_id="c_paint_beast")
    assert center.with_position(Position.C).role_archetype_id == "c_paint_beast"
    moved = center.with_position(Position.PF)
    assert moved.position == Position.PF
    assert moved.role_archetype_id is None
    assert center.role_archetype_id == "c_paint_beast"


def test_role_from_another_position_is_rejected_or_neutral():
    guard = make_player("PG1", Position.PG)
    with pytest.raises(ValueError):
        guard.with_role("c_paint_beast")
    assert guard.with_role("pg_floor_general").role_archetype_id == "pg_floor_general"
    assert guard.with_role("pg_retired_archetype").role_archetype_id == "pg_retired_archetype"

    # loaded saves bypass the copy helper; the pipeline ignores the foreign role
    loaded = make_player("PG1", Position.PG, role_archetype_id="c_paint_beast")
    pipeline = ModifierPipeline()
    for category in StatCategory:
        assert pipeline.factor(loaded, category) == pipeline.factor(guard, category)


def test_ratings_clamped_on_construction():
    player = make_player("P1", Position.PG, shooting=140, defense=-12)
    assert player.shooting == 100
    assert player.defense == 0
    with pytest.raises(KeyError):
        player.with_ratings(dunking=90)


def test_coaching_bonuses_follow_specialization():
    coach = CoachProfile(
        coach_id="HC1",
        name="Coach",
        primary_specialization=CoachingSpecialization.DEFENSIVE,
        secondary_specialization=CoachingSpecialization.TEAM_CHEMISTRY,
        attributes={"defensive": 80, "chemistry": 70},
        experience_level=3,
    )
    bonuses = CoachingBonuses.from_coach(coach)
    assert math.isclose(bonuses.defense, 30 * 0.002 * 1.2)
    assert math.isclose(bonuses.chemistry, 20 * 0.001 / 2 * 1.2)
    assert bonuses.offense == 0.0
    assert CoachingBonuses.from_coach(None) == CoachingBonuses.neutral()

    pipeline = ModifierPipeline()
    player = make_player("SF1", Position.SF)
    context = ModifierContext(coaching=bonuses)
    assert pipeline.factor(player, StatCategory.STEAL, context) > pipeline.factor(player, StatCategory.STEAL)
    assert pipeline.factor(player, StatCategory.TURNOVER, context) < 1.0


def test_development_rate_modifier_rewards_young_players():
    coach = CoachProfile("HC2", "Dev", CoachingSpecialization.PLAYER_DEVELOPMENT, attributes={"development": 70})
    assert development_rate_modifier(None, 22) == 1.0
    assert development_rate_modifier(coach, 22) > development_rate_modifier(coach, 30)


def test_archetype_lookup_by_enum_value():
    assert ARCHETYPES[RoleArchetypeId("c_stretch_five")].name == "Stretch Five"
