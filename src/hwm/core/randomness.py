from __future__ import annotations

import hashlib
import random
from typing import Any, Sequence, TypeVar

from hwm.contracts import RandomSource

T = TypeVar("T")


def _child_seed(parent_seed: int, substream_id: str) -> int:
    digest = hashlib.sha256(f"{parent_seed}:{substream_id}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


class PythonRandomSource(RandomSource):
    """``random.Random`` behind the engine's RandomSource protocol.

    A seeded source derives every substream from its seed and the substream
    name only, so ``spawn("game:G1")`` replays identically no matter how many
    draws the parent has made. Unseeded sources hand out fresh OS entropy.
    """

    def __init__(self, seed: int | None = None, lineage: str = "root") -> None:
        self._seed = seed
        self._lineage = lineage
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def lineage(self) -> str:
        return self._lineage

    def rand(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)

    def choice(self, items: Sequence[Any]) -> Any:
        if not items:
            raise ValueError("cannot choose from an empty sequence")
        return items[self._rng.randrange(len(items))]

    def shuffle(self, items: list[Any]) -> None:
        self._rng.shuffle(items)

    def spawn(self, substream_id: str) -> PythonRandomSource:
        lineage = f"{self._lineage}/{substream_id}"
        if self._seed is None:
            return PythonRandomSource(seed=None, lineage=lineage)
        return PythonRandomSource(seed=_child_seed(self._seed, substream_id), lineage=lineage)

    def __repr__(self) -> str:
        return f"PythonRandomSource(seed={self._seed!r}, lineage={self._lineage!r})"


def gameplay_random() -> PythonRandomSource:
    return PythonRandomSource(seed=None)


def seeded_random(seed: int) -> PythonRandomSource:
    return PythonRandomSource(seed=seed)


def weighted_choice(rand: RandomSource, items: Sequence[T], weights: Sequence[float]) -> T:
    """Pick one item proportionally to its weight.

    Non-positive weights never win; when every weight is non-positive the pick
    falls back to a uniform choice so a fully suppressed group still yields a
    participant.
    """
    if not items:
        raise ValueError("weighted_choice items must not be empty")
    if len(items) != len(weights):
        raise ValueError("weighted_choice items and weights must be the same length")
    clean = [w if w > 0.0 else 0.0 for w in weights]
    total = sum(clean)
    if total <= 0.0:
        return rand.choice(list(items))
    target = rand.rand() * total
    running = 0.0
    for item, weight in zip(items, clean):
        running += weight
        if target < running:
            return item
    return next(item for item, weight in zip(reversed(items), reversed(clean)) if weight > 0.0)
