from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from hwm.contracts import SimFidelity, StatStream
from hwm.core import EngineIntegrityError, EventBus, seeded_random
from hwm.league import build_demo_league, build_demo_season
from hwm.simulation import SeasonRuntime


def _runtime(seed: int = 3, **kwargs) -> SeasonRuntime:
    teams = build_demo_league(team_count=4, seed=seed)
    return SeasonRuntime(teams, build_demo_season(teams), random_source=seeded_random(seed), **kwargs)


def test_games_played_in_schedule_order_and_folded_once():
    runtime = _runtime()
    order = [g.game_id for g in runtime.season.games]
    played = runtime.simulate_games(limit=5)

    assert [g.game_id for g in played] == order[:5]
    assert runtime.season.games_played == 5
    assert runtime.stat_book.folded_game_ids == order[:5]
    for game in played:
        assert runtime.season.game(game.game_id) == game

    stats = runtime.season.season_stats
    total_points = sum(s.total_points for s in stats.values())
    assert total_points == sum(g.home_score + g.away_score for g in played)
    boxes_with = [g for g in played if "BOS_PG1" in g.box_score]
    assert stats["BOS_PG1"].games_played == len(boxes_with)


def test_standings_add_up():
    runtime = _runtime()
    runtime.simulate_games()
    assert runtime.season.is_complete
    assert runtime.simulate_next_game() is None
    rows = runtime.standings()
    assert len(rows) == 4
    assert sum(r.wins for r in rows) == len(runtime.season.games)
    assert sum(r.losses for r in rows) == len(runtime.season.games)
    assert all(r.games == 6 for r in rows)
    assert [r.win_pct for r in rows] == sorted((r.win_pct for r in rows), reverse=True)


def test_user_games_run_detailed_others_fast():
    runtime = _runtime()
    user_game = next(g for g in runtime.season.games if g.involves("BOS"))
    other_game = next(g for g in runtime.season.games if not g.involves("BOS"))
    assert runtime.fidelity_for(user_game) == SimFidelity.DETAILED
    assert runtime.fidelity_for(other_game) == SimFidelity.FAST

    forced = _runtime(fidelity_override=SimFidelity.FAST)
    assert forced.fidelity_for(user_game) == SimFidelity.FAST

    played = runtime.simulate_user_game()
    assert played.involves("BOS") and played.is_played


def test_playoff_games_fold_into_playoff_stream_only():
    runtime = _runtime()
    runtime.simulate_games(limit=3)
    regular_before = dict(runtime.stat_book.stream(StatStream.REGULAR_SEASON))

    game = runtime.play_playoff_game("PO_R1_G1", "BOS", "CHI", series_id="R1_BOS_CHI")
    assert game.is_playoff_game
    assert runtime.stat_book.stream(StatStream.REGULAR_SEASON) == regular_before
    playoffs = runtime.season.playoff_stats
    assert set(playoffs) == set(game.box_score)
    assert all(s.games_played == 1 for s in playoffs.values())
    assert sum(sum(runtime.season.record_for(team_id)) for team_id in runtime.teams) == 6


def test_events_reach_shared_bus():
    bus = EventBus()
    runtime = _runtime(event_bus=bus)
    runtime.simulate_games(limit=2)
    assert bus.emitted_count("game") == 2


def test_integrity_failure_halts_runtime(tmp_path: Path):
    runtime = _runtime(forensic_dir=tmp_path / "forensics")
    bos = runtime.team("BOS")
    runtime.replace_team(replace(bos, players=bos.players[:14]))

    with pytest.raises(EngineIntegrityError):
        runtime.simulate_next_game()
    assert runtime.halted
    assert runtime.last_forensic_path is not None
    assert Path(runtime.last_forensic_path).exists()
    assert runtime.season.games_played == 0

    with pytest.raises(RuntimeError):
        runtime.simulate_next_game()


def test_replace_team_rejects_unknown_team():
    runtime = _runtime()
    outsider = build_demo_league(team_count=6)[5]
    with pytest.raises(KeyError):
        runtime.replace_team(outsider)


def test_playoff_game_cannot_reuse_a_scheduled_game_id(tmp_path: Path):
    runtime = _runtime(forensic_dir=tmp_path / "forensics")
    first = runtime.simulate_next_game()
    regular_before = dict(runtime.stat_book.stream(StatStream.REGULAR_SEASON))

    with pytest.raises(EngineIntegrityError) as exc:
        runtime.play_playoff_game(first.game_id, first.away_team_id, first.home_team_id)

    assert exc.value.error_code == "DUPLICATE_GAME_ID"
    assert runtime.season.game(first.game_id) == first
    assert runtime.stat_book.stream(StatStream.REGULAR_SEASON) == regular_before
    assert runtime.season.playoff_stats is None
    assert runtime.halted
    assert Path(runtime.last_forensic_path).exists()
