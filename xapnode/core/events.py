from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class ConnectionEvent(StrEnum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    LOST_CONNECTION = "lost-connection"
    MESSAGE = "message"
    HEARTBEAT = "heartbeat"
    ERROR = "error"


class EventRouter:
    """Maps connection events to subscribed handlers (plain or async)."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._handlers: Dict[ConnectionEvent, List[Handler]] = {}
        self._pending: Set[asyncio.Future] = set()
        self.logger = log or logger

    def register(self, event: ConnectionEvent, handler: Handler) -> Handler:
        self._handlers.setdefault(ConnectionEvent(event), []).append(handler)
        return handler

    def unregister(self, event: ConnectionEvent, handler: Handler) -> None:
        handlers = self._handlers.get(ConnectionEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def dispatch(self, event: ConnectionEvent, *args: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    self._track(asyncio.ensure_future(result))
            except Exception as exc:
                self.logger.exception("Handler error for %s: %s", event.value, exc)

    def _track(self, future: asyncio.Future) -> None:
        self._pending.add(future)
        future.add_done_callback(self._finished)

    def _finished(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            self.logger.error("Async handler failed: %s", future.exception())
