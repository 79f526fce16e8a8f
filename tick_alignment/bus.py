"""Deferred signal delivery.

Publishers (the state store, mostly) queue named signals during a tick; the
signal system delivers them once per tick, after commands and timers ran.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable

from tick_alignment.types import TickContext

logger = logging.getLogger(__name__)

_Handler = Callable[[str, dict[str, Any]], None]


class SignalBus:

    def __init__(self) -> None:
        self._handlers: dict[str, list[_Handler]] = {}
        self._outbox: deque[tuple[str, dict[str, Any]]] = deque()
        self.delivered = 0

    def subscribe(self, signal_name: str, handler: _Handler) -> None:
        self._handlers.setdefault(signal_name, []).append(handler)

    def unsubscribe(self, signal_name: str, handler: _Handler) -> None:
        handlers = self._handlers.get(signal_name, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._handlers.pop(signal_name, None)

    def subscribers(self, signal_name: str) -> int:
        return len(self._handlers.get(signal_name, ()))

    def publish(self, signal_name: str, **data: Any) -> None:
        self._outbox.append((signal_name, data))

    def pending(self) -> int:
        return len(self._outbox)

    def flush(self) -> int:
        """Deliver what was queued before this call; return how many went out.

        Signals published by a handler stay queued for the next flush.
        """
        batch = len(self._outbox)
        for _ in range(batch):
            signal_name, data = self._outbox.popleft()
            handlers = tuple(self._handlers.get(signal_name, ()))
            if not handlers:
                logger.debug("signal %s had no subscribers", signal_name)
            for handler in handlers:
                handler(signal_name, data)
            self.delivered += 1
        return batch

    def clear(self) -> None:
        self._outbox.clear()


def make_signal_system(bus: SignalBus) -> Callable[[TickContext], None]:
    def signal_system(ctx: TickContext) -> None:
        bus.flush()

    return signal_system
