"""Domain events and a dispatcher that fans them out to registered handlers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


class HandlerAlreadyRegisteredError(Exception):
    """Raised when the same handler is registered twice for one event."""

    def __init__(self, message: str = "handler already registered") -> None:
        super().__init__(message)


@dataclass
class Event:
    """A named event carrying an arbitrary payload."""

    name: str
    payload: Any = None

    @property
    def date_time(self) -> datetime:
        """The moment the event is read."""
        return datetime.now(timezone.utc)


@dataclass
class TransactionCreated(Event):
    """Raised after a transfer between accounts is stored."""

    name: str = "transaction_created"


@dataclass
class BalanceUpdated(Event):
    """Raised after account balances change."""

    name: str = "balance_updated"


class EventHandler(ABC):
    """Something that reacts to a dispatched event."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """React to the event."""


class EventDispatcher:
    """Keeps handlers per event name and runs them when an event is dispatched."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def register(self, event_name: str, handler: EventHandler) -> None:
        """Add a handler for an event name; the same handler may be added once."""
        handlers = self._handlers.get(event_name, [])
        if any(existing is handler for existing in handlers):
            raise HandlerAlreadyRegisteredError()
        self._handlers[event_name] = [*handlers, handler]

    def dispatch(self, event: Event) -> None:
        """Run every handler of the event concurrently and wait for all of them."""
        handlers = self._handlers.get(event.name)
        if not handlers:
            return
        with ThreadPoolExecutor(max_workers=len(handlers)) as pool:
            futures = []
            for handler in handlers:
                logger.info("Dispatching event %s", event.name)
                futures.append(pool.submit(handler.handle, event))
        for future in futures:
            future.result()

    def remove(self, event_name: str, handler: EventHandler) -> None:
        """Drop a handler from an event name; unknown handlers are ignored."""
        handlers = self._handlers.get(event_name)
        if handlers is None:
            return
        for position, existing in enumerate(handlers):
            if existing is handler:
                del handlers[position]
                return

    def has(self, event_name: str, handler: EventHandler) -> bool:
        """Tell whether the handler is registered for the event name."""
        return any(existing is handler for existing in self._handlers.get(event_name, ()))

    def clear(self) -> None:
        """Forget every registered handler."""
        self._handlers = {}

    def handlers_for(self, event_name: str) -> tuple[EventHandler, ...]:
        """The handlers registered for an event name, in registration order."""
        return tuple(self._handlers.get(event_name, ()))