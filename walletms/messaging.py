"""Publishing and consuming JSON messages on named topics, and event handlers that publish."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from walletms.events import Event, EventHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Message:
    """A message on a topic: raw value bytes and an optional key."""

    topic: str
    value: bytes
    key: bytes | None = None


class _Putter(Protocol):
    def put(self, item: Message) -> None: ...


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


class Producer:
    """Serialises messages as JSON and hands them to a send function."""

    def __init__(self, send: Callable[[Message], object]) -> None:
        self.send = send

    def publish(self, msg: Any, key: bytes | None, topic: str) -> Message:
        """Encode msg as JSON and send it to the topic; returns the sent message."""
        value = json.dumps(msg, default=_encode).encode()
        message = Message(topic=topic, value=value, key=key)
        self.send(message)
        return message


class Consumer:
    """Reads messages from a source and forwards those of the subscribed topics."""

    def __init__(self, source: Iterable[Message], topics: Iterable[str]) -> None:
        self.source = source
        self.topics = list(topics)

    def consume(self, queue: _Putter) -> None:
        """Put every message of a subscribed topic on the queue until the source ends."""
        for message in self.source:
            if message.topic in self.topics:
                queue.put(message)


def _publish_event(producer: Producer, event: Event, topic: str) -> None:
    try:
        producer.publish(event, None, topic)
    except Exception as err:  # a failed publish must not break the dispatch
        logger.error("Error to publish message to kafka: %s", err)
        return
    logger.info("Publishing message to kafka %s", event.payload)


class TransactionCreatedHandler(EventHandler):
    """Publishes transaction events on the transactions topic."""

    topic = "transactions"

    def __init__(self, producer: Producer) -> None:
        self.producer = producer

    def handle(self, event: Event) -> None:
        """Publish the event; failures are logged and swallowed."""
        _publish_event(self.producer, event, self.topic)


class BalanceUpdatedHandler(EventHandler):
    """Publishes balance events on the balances topic."""

    topic = "balances"

    def __init__(self, producer: Producer) -> None:
        self.producer = producer

    def handle(self, event: Event) -> None:
        """Publish the event; failures are logged and swallowed."""
        _publish_event(self.producer, event, self.topic)