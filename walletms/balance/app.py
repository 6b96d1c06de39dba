"""Balance service: applies published transfers and serves account balances over HTTP."""

from __future__ import annotations

import _thread
import argparse
import dataclasses
import json
import logging
import queue
import sqlite3
import threading
from collections.abc import Callable, Iterable, Iterator, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from werkzeug.wrappers import Request, Response

from walletms.balance.database import AccountDB
from walletms.balance.usecases import (
    FindByIDInput,
    FindByIDUseCase,
    ProcessTransactionInput,
    ProcessTransactionUseCase,
    ReportBalanceForAccountUseCase,
)
from walletms.messaging import Consumer, Message
from walletms.web import WebServer

logger = logging.getLogger(__name__)

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS accounts "
    "(id varchar(255), client_id varchar(255), balance int, created_at date)"
)

_TOPICS = ("transactions",)


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def _json_response(data: Any) -> Response:
    body = json.dumps(dataclasses.asdict(data), default=_encode)
    return Response(body, status=200, mimetype="application/json")


def ping(request: Request) -> Response:
    """Answer a health check."""
    return Response("pong", status=200, mimetype="text/plain")


def find_account_handler(use_case: FindByIDUseCase) -> Callable[..., Response]:
    """Build the handler that answers with an account as JSON."""

    def handler(request: Request, id: str = "") -> Response:  # noqa: A002 - route parameter
        if not id:
            return Response("id is required", status=400, mimetype="text/plain")
        try:
            account = use_case.execute(FindByIDInput(id=id))
        except Exception as err:
            return Response(str(err), status=500, mimetype="text/plain")
        return _json_response(account)

    return handler


def report_balance_handler(use_case: ReportBalanceForAccountUseCase) -> Callable[..., Response]:
    """Build the handler that answers with an account's balance as JSON."""

    def handler(request: Request, id: str = "") -> Response:  # noqa: A002 - route parameter
        if not id:
            return Response("id is required", status=400, mimetype="text/plain")
        try:
            balance = use_case.execute(id)
        except Exception as err:
            return Response(str(err), status=500, mimetype="text/plain")
        return _json_response(balance)

    return handler


def process_messages(messages: Iterable[Message], use_case: ProcessTransactionUseCase) -> None:
    """Apply every transaction message to the balances.

    A message that cannot be decoded raises ValueError and ends processing;
    a transfer that fails is logged and the next message is handled.
    """
    for message in messages:
        logger.info("Message Received: %s", message.value.decode(errors="replace"))
        try:
            dto = ProcessTransactionInput.from_dict(json.loads(message.value))
        except ValueError as err:
            raise ValueError(f"Error to unmarshal message: {err}") from err
        try:
            use_case.execute(dto)
        except Exception as err:
            logger.error("Error processing transaction: %s", err)


def build_server(account_db: Any, address: str) -> WebServer:
    """Wire the balance service's read routes on an account repository."""
    find_use_case = FindByIDUseCase(account_db)
    report_use_case = ReportBalanceForAccountUseCase(account_db)

    server = WebServer(address, method="GET")
    server.add_handler("/ping", ping)
    server.add_handler("/accounts/{id}", find_account_handler(find_use_case))
    server.add_handler("/balances/{id}", report_balance_handler(report_use_case))
    return server


def _follow(path: Path, stop: threading.Event, poll: float = 0.5) -> Iterator[Message]:
    """Yield messages appended to a JSON-lines file until stop is set."""
    path.touch(exist_ok=True)
    with path.open("r", encoding="utf-8") as stream:
        while not stop.is_set():
            line = stream.readline()
            if not line:
                stop.wait(poll)
                continue
            try:
                record = json.loads(line)
                key = record.get("key")
                yield Message(
                    topic=str(record["topic"]),
                    value=json.dumps(record["value"]).encode(),
                    key=key.encode() if isinstance(key, str) else None,
                )
            except (ValueError, KeyError, TypeError, AttributeError):
                continue


def _run_processor(messages: Iterable[Message], use_case: ProcessTransactionUseCase) -> None:
    try:
        process_messages(messages, use_case)
    except ValueError as err:
        logger.critical("%s", err)
        _thread.interrupt_main()


def main(argv: Sequence[str] | None = None) -> None:
    """Start the balance service."""
    parser = argparse.ArgumentParser(description="Balance service")
    parser.add_argument("--database", default="balances.db", help="SQLite database file")
    parser.add_argument("--address", default="0.0.0.0:3003", help="host:port to listen on")
    parser.add_argument(
        "--messages", default="messages.jsonl", help="file the wallet publishes messages to"
    )
    args = parser.parse_args(argv)

    connection = sqlite3.connect(args.database, isolation_level=None, check_same_thread=False)
    stop = threading.Event()
    try:
        connection.execute(_SCHEMA)
        account_db = AccountDB(connection)
        use_case = ProcessTransactionUseCase(account_db)

        inbox: queue.Queue[Message | None] = queue.Queue()
        consumer = Consumer(_follow(Path(args.messages), stop), _TOPICS)
        threading.Thread(target=consumer.consume, args=(inbox,), daemon=True).start()
        threading.Thread(
            target=_run_processor, args=(iter(inbox.get, None), use_case), daemon=True
        ).start()

        server = build_server(account_db, args.address)
        port = args.address.rpartition(":")[2]
        logger.info("Server started on port %s", port)
        print(f"Server started on port {port}")
        server.start()
    finally:
        stop.set()
        connection.close()