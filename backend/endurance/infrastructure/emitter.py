"""Lifecycle Event Emitter — publish/subscribe between the core and listener units.

Invariants:
    - Handlers run in subscription order; async handlers are awaited one at a time
    - A failing handler is logged and does not stop the others
    - APP_STARTED is emitted once per application, after all routes are mounted
"""

import inspect
import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    MODULES_LOADED = "modules_loaded"
    ROUTES_MOUNTED = "routes_mounted"
    APP_STARTED = "app_started"


Handler = Callable[..., Any]


class EventEmitter:
    """Publish/subscribe helper; listener units subscribe through on()."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._emitted: set[str] = set()

    def on(self, event: str | EventType, handler: Handler | None = None):
        """Subscribe; usable as `emitter.on(evt, fn)` or as a decorator `@emitter.on(evt)`."""
        key = _key(event)
        if handler is not None:
            self._handlers[key].append(handler)
            return handler

        def decorator(fn: Handler) -> Handler:
            self._handlers[key].append(fn)
            return fn
        return decorator

    def off(self, event: str | EventType, handler: Handler) -> None:
        handlers = self._handlers.get(_key(event), [])
        if handler in handlers:
            handlers.remove(handler)

    async def emit(self, event: str | EventType, payload: Any = None) -> int:
        """Call every handler for event; returns how many succeeded."""
        key = _key(event)
        self._emitted.add(key)
        succeeded = 0
        for handler in list(self._handlers.get(key, [])):
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
                succeeded += 1
            except Exception as e:
                logger.error(f"Handler for {key} failed: {e}", exc_info=True)
        return succeeded

    def has_emitted(self, event: str | EventType) -> bool:
        return _key(event) in self._emitted

    def listeners(self, event: str | EventType) -> list[Handler]:
        return list(self._handlers.get(_key(event), []))


def _key(event: str | EventType) -> str:
    return event.value if isinstance(event, EventType) else event
