from __future__ import annotations

import json
from dataclasses import replace
from datetime import date

from hwm.basketball import GameOrchestrator, ModifierPipeline
from hwm.basketball.stats import fold_games
from hwm.contracts import Position, SimFidelity, StatCategory
from hwm.core import seeded_random
from hwm.league import Game, Season, build_demo_league
from hwm.persistence.codec import (
    game_from_dict,
    game_to_dict,
    player_from_dict,
    player_to_dict,
    playoff_stats_from_dict,
    playoff_stats_to_dict,
    season_from_dict,
    season_stats_from_dict,
    season_stats_to_dict,
    season_to_dict,
    team_from_dict,
    team_to_dict,
)
from tests.helpers import make_player


def _roundtrip(encode, decode, value):
    # Through JSON text so only plain structures survive.
    return decode(json.loads(json.dumps(encode(value))))


def _played_game(is_playoff_game: bool = False) -> Game:
    home, away = build_demo_league(team_count=2, seed=5)
    return GameOrchestrator(seeded_random(5)).simulate(
        home,
        away,
        SimFidelity.FAST,
        game_id="2026_G001",
        scheduled_date=date(2026, 10, 20),
        is_playoff_game=is_playoff_game,
        series_id="S1" if is_playoff_game else None,
    )


def test_player_roundtrip_with_and_without_role():
    plain = make_player("P1", Position.PG, rating=71, three_point=88)
    assert _roundtrip(player_to_dict, player_from_dict, plain) == plain
    roled = plain.with_role("pg_floor_general")
    assert _roundtrip(player_to_dict, player_from_dict, roled) == roled
    assert player_to_dict(roled)["roleArchetypeId"] == "pg_floor_general"
    assert player_to_dict(plain)["ballHandling"] == 71


def test_team_roundtrip_keeps_rotation_and_coach():
    for team in build_demo_league(team_count=3, seed=9):
        assert _roundtrip(team_to_dict, team_from_dict, team) == team
    bare = replace(build_demo_league(team_count=2)[0], rotation_config=None, coach=None)
    doc = team_to_dict(bare)
    assert "rotationConfig" not in doc and "coach" not in doc
    assert _roundtrip(team_to_dict, team_from_dict, bare) == bare


def test_game_roundtrip_played_and_unplayed():
    played = _played_game()
    assert _roundtrip(game_to_dict, game_from_dict, played) == played
    playoff = _played_game(is_playoff_game=True)
    assert _roundtrip(game_to_dict, game_from_dict, playoff) == playoff
    stub = Game("2026_G002", "BOS", "CHI", date(2026, 10, 21))
    assert _roundtrip(game_to_dict, game_from_dict, stub) == stub
    assert game_to_dict(stub)["homeScore"] is None


def test_stats_and_season_roundtrip():
    regular = _played_game()
    playoff = _played_game(is_playoff_game=True)
    season_stats = fold_games([regular.box_score])
    playoff_stats = fold_games([playoff.box_score])
    assert _roundtrip(season_stats_to_dict, season_stats_from_dict, season_stats) == season_stats
    assert _roundtrip(playoff_stats_to_dict, playoff_stats_from_dict, playoff_stats) == playoff_stats
    assert season_stats_to_dict(None) is None

    season = Season("season_2026", 2026, (regular, replace(playoff, game_id="2026_P001")), "BOS", season_stats, playoff_stats)
    assert _roundtrip(season_to_dict, season_from_dict, season) == season
    minimal = Season("season_2027", 2027, (), "BOS")
    assert _roundtrip(season_to_dict, season_from_dict, minimal) == minimal


def test_legacy_documents_load_with_defaults():
    legacy_player = {"id": "OLD1", "name": "Old Timer", "heightInches": 80, "shooting": 70, "position": "SF"}
    player = player_from_dict(legacy_player)
    assert player.role_archetype_id is None
    assert player.blocks == 50 and player.post_shooting == 50

    positionless = player_from_dict({"id": "OLD2", "name": "Big", "heightInches": 86, "rebounding": 90, "blocks": 90, "defense": 80})
    assert positionless.position == Position.C

    legacy_game = {
        "id": "G_OLD",
        "homeTeamId": "BOS",
        "awayTeamId": "CHI",
        "homeScore": 101,
        "awayScore": 97,
        "isPlayed": True,
        "scheduledDate": "2025-11-02T19:30:00.000",
    }
    game = game_from_dict(legacy_game)
    assert game.box_score is None
    assert not game.is_playoff_game
    assert game.series_id is None
    assert game.scheduled_date == date(2025, 11, 2)

    old_line = game_from_dict({**legacy_game, "boxScore": {"P1": {"playerId": "P1", "points": 12}}}).box_score["P1"]
    assert old_line.fouls == 0 and old_line.free_throws_attempted == 0 and old_line.minutes_played == 0.0

    legacy_season = {"id": "season_2025", "year": 2025, "games": [legacy_game], "userTeamId": "BOS"}
    season = season_from_dict(legacy_season)
    assert season.season_stats is None
    assert season.playoff_stats is None
    assert season.wins == 1


def test_stale_role_survives_load_and_acts_as_no_role():
    doc = player_to_dict(make_player("P1", Position.C))
    doc["roleArchetypeId"] = "c_removed_in_update"
    player = player_from_dict(doc)
    assert player.role_archetype_id == "c_removed_in_update"
    pipeline = ModifierPipeline()
    assert pipeline.factor(player, StatCategory.THREE_POINT_ATTEMPT) == pipeline.factor(
        player.with_role(None), StatCategory.THREE_POINT_ATTEMPT
    )
