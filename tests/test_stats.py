from __future__ import annotations

from datetime import date
from itertools import permutations

import pytest

from hwm.basketball import PlayerGameStats, PlayerSeasonStats, StatBook, add_game, league_leaders
from hwm.basketball.stats import fold_games
from hwm.contracts import StatStream
from hwm.league import Game, Season


def _box(**lines: dict[str, int]) -> dict[str, PlayerGameStats]:
    return {pid: PlayerGameStats(player_id=pid, **values) for pid, values in lines.items()}


G1 = _box(P1={"points": 20, "field_goals_made": 8, "field_goals_attempted": 15, "minutes_played": 34.0}, P2={"points": 4})
G2 = _box(P1={"points": 31, "three_pointers_made": 3, "three_pointers_attempted": 7, "minutes_played": 36.5})
G3 = _box(P1={"points": 0, "turnovers": 4}, P3={"rebounds": 12, "blocks": 3})


def test_first_game_folds_into_missing_aggregate():
    stats = add_game(None, G1)
    assert stats["P1"].games_played == 1
    assert stats["P1"].total_points == 20
    assert stats["P2"].points_per_game == 4.0


def test_fold_is_order_independent():
    results = [fold_games(order) for order in permutations([G1, G2, G3])]
    assert all(r == results[0] for r in results)
    p1 = results[0]["P1"]
    assert p1.games_played == 3
    assert p1.total_points == 51
    assert p1.total_minutes == pytest.approx(70.5)
    assert results[0]["P3"].games_played == 1


def test_fold_does_not_mutate_input():
    existing = add_game(None, G1)
    snapshot = dict(existing)
    add_game(existing, G2)
    assert existing == snapshot


def test_derived_metrics_computed_from_totals():
    stats = fold_games([G1, G2])["P1"]
    assert stats.points_per_game == pytest.approx(25.5)
    assert stats.field_goal_percentage == pytest.approx(8 / 15 * 100)
    assert stats.three_point_percentage == pytest.approx(3 / 7 * 100)
    assert stats.free_throw_percentage == 0.0
    assert PlayerSeasonStats.empty("P9").points_per_game == 0.0


def test_cannot_fold_foreign_line():
    with pytest.raises(ValueError):
        PlayerSeasonStats.empty("P1").add_game_stats(PlayerGameStats(player_id="P2"))
    merged = PlayerSeasonStats(player_id="P1", games_played=2, total_points=10).merge(
        PlayerSeasonStats(player_id="P1", games_played=1, total_points=5)
    )
    assert (merged.games_played, merged.total_points) == (3, 15)


def test_stat_book_keeps_streams_apart_and_folds_once():
    book = StatBook()
    regular = Game("R1", "A", "B", date(2026, 10, 20), 100, 90, True, G1)
    playoff = Game("PO1", "A", "B", date(2027, 4, 20), 101, 99, True, G2, is_playoff_game=True)

    assert book.record_game(regular)
    assert book.record_game(playoff)
    assert not book.record_game(regular)

    assert book.player("P1").total_points == 20
    assert book.player("P1").games_played == 1
    assert book.player("P1", StatStream.PLAYOFFS).total_points == 31
    assert "P2" not in book.stream(StatStream.PLAYOFFS)

    with pytest.raises(ValueError):
        book.record_game(Game("U1", "A", "B", date(2026, 10, 21)))


def test_league_leaders_order_and_filters():
    stats = fold_games([G1, G2, G3])
    assert league_leaders(stats, "points_per_game", limit=2) == [("P1", pytest.approx(17.0)), ("P2", 4.0)]
    assert league_leaders(stats, "rebounds_per_game", limit=1) == [("P3", 12.0)]
    assert league_leaders(stats, "points_per_game", min_games=2) == [("P1", pytest.approx(17.0))]
    with pytest.raises(KeyError):
        league_leaders(stats, "dunks_per_game")


def test_season_folds_game_into_its_stream():
    season = Season("season_2026", 2026, (), "A")
    game = Game("R1", "A", "B", date(2026, 10, 20), 100, 90, True, G1)
    folded = season.with_game(game).with_game_stats(game)
    assert folded.season_stats["P1"].total_points == 20
    assert folded.playoff_stats is None
    assert folded.games_played == 1
    assert folded.wins == 1 and folded.losses == 0
