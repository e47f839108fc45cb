from __future__ import annotations

from collections import defaultdict, deque
from typing import Callable, DefaultDict

from hwm.contracts import NarrativeEvent

NarrativeHandler = Callable[[NarrativeEvent], None]


class EventBus:
    """In-process fan-out for narrative events emitted by the engine."""

    def __init__(self, history_size: int = 256) -> None:
        self._handlers: list[tuple[str | None, NarrativeHandler]] = []
        self._counter: DefaultDict[str, int] = defaultdict(int)
        self._history: deque[NarrativeEvent] = deque(maxlen=history_size)

    def subscribe_narrative(self, handler: NarrativeHandler, scope: str | None = None) -> None:
        self._handlers.append((scope, handler))

    def publish_narrative(self, event: NarrativeEvent) -> None:
        self._counter[event.scope] += 1
        self._history.append(event)
        for scope, handler in self._handlers:
            if scope is None or scope == event.scope:
                handler(event)

    def emitted_count(self, scope: str | None = None) -> int:
        if scope is None:
            return sum(self._counter.values())
        return self._counter[scope]

    def recent(self, scope: str | None = None) -> list[NarrativeEvent]:
        return [e for e in self._history if scope is None or e.scope == scope]
