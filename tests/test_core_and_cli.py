from __future__ import annotations

import sys

import pytest

from hwm import cli
from hwm.contracts import NarrativeEvent
from hwm.core import EventBus, make_id, now_utc, seeded_random, stable_id, weighted_choice


def _event(scope: str) -> NarrativeEvent:
    return NarrativeEvent(make_id("evt"), now_utc(), scope, "note", [], [], [], "info")


def test_spawned_streams_are_reproducible_and_independent():
    a = seeded_random(42).spawn("game:G1")
    b = seeded_random(42).spawn("game:G1")
    c = seeded_random(42).spawn("game:G2")
    draws_a = [a.rand() for _ in range(5)]
    assert draws_a == [b.rand() for _ in range(5)]
    assert draws_a != [c.rand() for _ in range(5)]
    assert c.lineage == "root/game:G2"


def test_spawn_ignores_parent_draws():
    parent = seeded_random(9)
    first = parent.spawn("season").rand()
    parent.rand()
    parent.rand()
    assert parent.spawn("season").rand() == first


def test_weighted_choice_rules():
    rand = seeded_random(1)
    assert {weighted_choice(rand, ["a", "b", "c"], [0.0, 1.0, 0.0]) for _ in range(200)} == {"b"}
    assert {weighted_choice(rand, ["a", "b"], [0.0, -1.0]) for _ in range(200)} == {"a", "b"}
    with pytest.raises(ValueError):
        weighted_choice(rand, [], [])
    with pytest.raises(ValueError):
        weighted_choice(rand, ["a"], [1.0, 2.0])


def test_event_bus_scoped_subscriptions():
    bus = EventBus(history_size=2)
    games: list[NarrativeEvent] = []
    everything: list[NarrativeEvent] = []
    bus.subscribe_narrative(games.append, scope="game")
    bus.subscribe_narrative(everything.append)

    for scope in ("game", "season", "game"):
        bus.publish_narrative(_event(scope))

    assert len(games) == 2
    assert len(everything) == 3
    assert bus.emitted_count() == 3
    assert bus.emitted_count("season") == 1
    assert len(bus.recent()) == 2


def test_stable_ids():
    assert stable_id("game", 2026, "BOS", "CHI") == stable_id("game", 2026, "BOS", "CHI")
    assert stable_id("game", 2026, "BOS", "CHI") != stable_id("game", 2026, "CHI", "BOS")
    assert make_id("req") != make_id("req")


def test_cli_runs_demo_slate(tmp_path, monkeypatch, capsys):
    save = tmp_path / "save.db"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "hwm",
            "--seed",
            "11",
            "--games",
            "3",
            "--save",
            str(save),
            "--analytics",
            str(tmp_path / "analytics.duckdb"),
        ],
    )
    cli.main()
    out = capsys.readouterr().out
    assert "Standings" in out
    assert "points per game (analytics)" in out
    assert out.count(" @ ") == 3
    assert save.exists()


def test_cli_rejects_analytics_without_save(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["hwm", "--analytics", "x.duckdb"])
    with pytest.raises(SystemExit):
        cli.main()
