from __future__ import annotations

from dataclasses import replace

import pytest

from hwm.basketball import LineupValidator, all_affinities, minutes_plan, resolve_on_court, suggest_starting_lineup
from hwm.basketball.affinity import affinity
from hwm.contracts import Position, ValidationError
from hwm.league import RotationConfig
from tests.helpers import make_player, make_team


def _codes(exc: ValidationError) -> set[str]:
    return {i.code for i in exc.issues}


def test_tall_rebounder_fits_center_best():
    big = make_player("BIG", Position.PF, rebounding=80, blocks=80, defense=70)
    scores = all_affinities(big)
    assert set(scores) == set(Position)
    assert max(scores, key=scores.get) == Position.C
    assert all(0.0 <= s <= 100.0 for s in scores.values())
    assert affinity(big, "C") == scores[Position.C]


def test_suggested_lineup_never_reuses_a_player():
    team = make_team("SUG")
    lineup = suggest_starting_lineup(team)
    assert list(lineup) == list(Position)
    assert len(set(lineup.values())) == 5

    short = replace(team, players=team.players[:4])
    with pytest.raises(ValueError):
        suggest_starting_lineup(short)


def test_on_court_uses_depth_chart_then_flagged_starters():
    team = make_team("DEP")
    assert [p.player_id for p in resolve_on_court(team)] == [f"DEP_{pos.value}1" for pos in Position]

    flagged = make_team("FLG", with_rotation=False).with_starting_lineup(
        ["FLG_C2", "FLG_PF2", "FLG_SF2", "FLG_SG2", "FLG_PG2"]
    )
    assert [p.player_id for p in resolve_on_court(flagged)] == ["FLG_C2", "FLG_PF2", "FLG_SF2", "FLG_SG2", "FLG_PG2"]


def test_minutes_plan_follows_rotation():
    plan = minutes_plan(make_team("MIN"))
    minutes = plan.regulation_minutes()
    assert sum(minutes.values()) == 240
    assert minutes["MIN_PG1"] == 34
    assert minutes["MIN_PG2"] == 14
    assert "MIN_PG3" not in plan.participant_ids()
    assert len(plan.participant_ids()) == 10

    assert plan.on_court_ids(0.0) == [f"MIN_{pos.value}1" for pos in Position]
    assert plan.on_court_ids(10.0) == [f"MIN_{pos.value}2" for pos in Position]


def test_minutes_plan_without_rotation_gives_starters_full_game():
    plan = minutes_plan(make_team("FUL", with_rotation=False))
    assert plan.regulation_minutes() == {f"FUL_{pos.value}1": 48 for pos in Position}
    assert plan.on_court_ids(11.5) == [f"FUL_{pos.value}1" for pos in Position]


def test_valid_team_passes_gate():
    result = LineupValidator().validate_team(make_team("OK"))
    assert result.ok
    assert result.issues == []


def test_roster_and_lineup_problems_are_blocking():
    team = make_team("BAD", with_rotation=False)
    short = replace(team, players=team.players[:14])
    with pytest.raises(ValidationError) as ex:
        LineupValidator().validate_team(short)
    assert "ROSTER_SIZE" in _codes(ex.value)

    dup = team.with_starting_lineup(["BAD_PG1", "BAD_PG1", "BAD_SF1", "BAD_PF1", "GHOST"])
    with pytest.raises(ValidationError) as ex:
        LineupValidator().validate_team(dup)
    assert {"DUPLICATE_LINEUP_PLAYER", "LINEUP_UNKNOWN_PLAYER"} <= _codes(ex.value)

    four = team.with_starting_lineup(["BAD_PG1", "BAD_SG1", "BAD_SF1", "BAD_PF1"])
    with pytest.raises(ValidationError) as ex:
        LineupValidator().validate_team(four)
    assert _codes(ex.value) == {"LINEUP_SIZE"}


def test_invalid_rotation_is_reported():
    team = make_team("ROT")
    config = team.rotation_config
    minutes = dict(config.player_minutes)
    minutes["ROT_PG2"] = 16
    minutes["GHOST"] = 0
    broken = team.with_rotation(RotationConfig(config.rotation_size, minutes, config.depth_chart))
    assert not broken.rotation_config.is_valid()
    with pytest.raises(ValidationError) as ex:
        LineupValidator().validate_team(broken)
    assert {"INVALID_ROTATION", "ROTATION_UNKNOWN_PLAYER"} <= _codes(ex.value)


def test_matchup_rejects_self_play_and_shared_players():
    team = make_team("SLF")
    with pytest.raises(ValidationError) as ex:
        LineupValidator().validate_matchup(team, team)
    assert {"SAME_TEAM_MATCHUP", "PLAYER_ON_BOTH_TEAMS"} <= _codes(ex.value)
    assert LineupValidator().validate_matchup(make_team("AAA"), make_team("BBB")).ok
