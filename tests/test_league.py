from __future__ import annotations

from dataclasses import FrozenInstanceError, replace
from datetime import date

import pytest

from hwm.contracts import Position
from hwm.league import DepthChartEntry, Game, build_demo_league, build_demo_season, build_demo_team
from tests.helpers import make_player, make_team


def test_ratings_clamped_and_derived_fields():
    player = make_player("p1", Position.C, rating=60, shooting=140, blocks=-5)
    assert player.shooting == 100
    assert player.blocks == 0
    assert 0 <= player.overall_rating <= 100
    assert player.height_formatted == "7'0\""
    with pytest.raises(FrozenInstanceError):
        player.shooting = 10  # type: ignore[misc]


def test_copy_helpers_leave_original_untouched():
    team = make_team("BOS")
    star = team.player("BOS_PG1").with_ratings(passing=95)
    updated = team.with_player(star)
    assert updated.player("BOS_PG1").passing == 95
    assert team.player("BOS_PG1").passing == 60
    with pytest.raises(KeyError):
        team.with_player(make_player("NOPE"))


def test_starting_lineup_prefers_rotation():
    team = make_team("BOS")
    flagged = [p.player_id for p in team.players if p.player_id.endswith("2")]
    team = team.with_starting_lineup(flagged)
    assert {p.player_id for p in team.starting_lineup} == {f"BOS_{pos.value}1" for pos in Position}
    without = team.with_rotation(None)
    assert {p.player_id for p in without.starting_lineup} == set(flagged)
    assert len(without.bench) == 10


def test_demo_rotation_is_valid():
    team = build_demo_team("BOS", "Boston", "Harbormen", seed=3)
    assert len(team.players) == 15
    assert team.rotation_config is not None
    assert team.rotation_config.validation_errors() == []
    assert team.rotation_config.total_minutes == 240
    assert build_demo_team("BOS", "Boston", "Harbormen", seed=3) == team


def test_rotation_rule_violations_are_reported():
    rotation = make_team("BOS").rotation_config
    assert rotation is not None

    minutes = dict(rotation.player_minutes, BOS_PG2=20)
    errors = replace(rotation, player_minutes=minutes).validation_errors()
    assert any("PG has 54 minutes" in e for e in errors)

    assert any("rotation size" in e for e in replace(rotation, rotation_size=11).validation_errors())

    doubled = rotation.depth_chart + (DepthChartEntry("BOS_PG1", Position.PG, 4),)
    errors = replace(rotation, depth_chart=doubled).validation_errors()
    assert any("BOS_PG1 appears more than once in the PG depth chart" in e for e in errors)
    assert any("PG has 82 minutes" in e for e in errors)

    without_centers =tuple(e for e in rotation.depth_chart if e.position != Position.C)
    assert any("position C must have" in e for e in replace(rotation, depth_chart=without_centers).validation_errors())


def test_game_result_helpers():
    game = Game("G1", "BOS", "CHI", date(2026, 10, 20))
    assert game.winner_team_id is None
    played = game.with_result(101, 99, None)
    assert played.home_team_won and not played.away_team_won
    assert played.winner_team_id == "BOS"
    assert not game.is_played
    with pytest.raises(ValueError):
        played.with_result(90, 80, None)


def test_demo_season_is_full_round_robin():
    teams = build_demo_league(team_count=4)
    season = build_demo_season(teams, rounds=2)
    assert len(season.games) == 24
    assert season.next_game == season.games[0]
    assert season.games_played == 0 and not season.is_complete
    assert (season.wins, season.losses) == (0, 0)
    with pytest.raises(ValueError):
        build_demo_league(team_count=1)
