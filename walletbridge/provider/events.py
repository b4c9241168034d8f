"""Minimal listener registry for provider events (connect, accountsChanged, ...)."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

from loguru import logger

Listener = Callable[..., Any]


def _schedule(event: str, coro: Any) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        logger.warning("Async listener for {} needs a running event loop, skipped", event)
        return
    loop.create_task(coro)


class EventEmitter:
    def __init__(self) -> None:
        self._listeners: dict[str, list[tuple[Listener, bool]]] = {}

    def on(self, event: str, listener: Listener) -> Listener:
        self._listeners.setdefault(event, []).append((listener, False))
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        self._listeners.setdefault(event, []).append((listener, True))
        return listener

    def remove_listener(self, event: str, listener: Listener) -> None:
        rows = self._listeners.get(event)
        if not rows:
            return
        self._listeners[event] = [row for row in rows if row[0] is not listener]

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener for ``event``; a failing listener does not stop the rest."""
        rows = self._listeners.get(event)
        if not rows:
            return False
        self._listeners[event] = [row for row in rows if not row[1]]
        for listener, _ in rows:
            try:
                outcome = listener(*args)
                if inspect.iscoroutine(outcome):
                    _schedule(event, outcome)
            except Exception:
                logger.exception("Listener for provider event {} failed", event)
        return True
