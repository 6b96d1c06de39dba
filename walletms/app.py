"""Wallet service: wiring of repositories, use cases, events and HTTP routes."""

from __future__ import annotations

import argparse
import json
import sqlite3
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from werkzeug.wrappers import Request, Response

from walletms.database import AccountDB, ClientDB, TransactionDB
from walletms.events import BalanceUpdated, EventDispatcher, TransactionCreated
from walletms.messaging import BalanceUpdatedHandler, Message, Producer, TransactionCreatedHandler
from walletms.uow import UnitOfWork
from walletms.usecases import CreateAccountUseCase, CreateClientUseCase, CreateTransactionUseCase
from walletms.web import AccountHandler, ClientHandler, TransactionHandler, WebServer

_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS clients "
    "(id varchar(255), name varchar(255), email varchar(255), created_at date)",
    "CREATE TABLE IF NOT EXISTS accounts "
    "(id varchar(255), client_id varchar(255), balance int, created_at date)",
    "CREATE TABLE IF NOT EXISTS transactions "
    "(id varchar(255), account_id_from varchar(255), account_id_to varchar(255), "
    "amount int, created_at date)",
)


def ping(request: Request) -> Response:
    """Answer a health check."""
    return Response("pong", status=200, mimetype="text/plain")


def build_server(connection: Any, producer: Producer, address: str) -> WebServer:
    """Wire the wallet's use cases on a database connection and a producer."""
    dispatcher = EventDispatcher()
    dispatcher.register("transaction_created", TransactionCreatedHandler(producer))
    dispatcher.register("balance_updated", BalanceUpdatedHandler(producer))

    client_db = ClientDB(connection)
    account_db = AccountDB(connection)

    unit_of_work = UnitOfWork(connection)
    unit_of_work.register("AccountDB", AccountDB)
    unit_of_work.register("TransactionDB", TransactionDB)

    create_client = CreateClientUseCase(client_db)
    create_account = CreateAccountUseCase(account_db, client_db)
    create_transaction = CreateTransactionUseCase(
        unit_of_work, TransactionCreated(), BalanceUpdated(), dispatcher
    )

    server = WebServer(address)
    server.add_handler("/clients", ClientHandler(create_client).create_client)
    server.add_handler("/accounts", AccountHandler(create_account).create_account)
    server.add_handler(
        "/transactions", TransactionHandler(create_transaction).create_transaction
    )
    server.add_handler("/ping", ping)
    return server


class _JsonLinesSink:
    """Appends every sent message to a file, one JSON object per line."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def __call__(self, message: Message) -> None:
        record = {
            "topic": message.topic,
            "key": message.key.decode() if message.key is not None else None,
            "value": json.loads(message.value),
        }
        with self._lock, self.path.open("a", encoding="utf-8") as stream:
            stream.write(json.dumps(record) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Start the wallet service."""
    parser = argparse.ArgumentParser(description="Wallet service")
    parser.add_argument("--database", default="wallet.db", help="SQLite database file")
    parser.add_argument("--address", default="0.0.0.0:8080", help="host:port to listen on")
    parser.add_argument(
        "--messages", default="messages.jsonl", help="file that receives published messages"
    )
    args = parser.parse_args(argv)

    connection = sqlite3.connect(args.database, isolation_level=None, check_same_thread=False)
    try:
        for statement in _SCHEMA:
            connection.execute(statement)
        producer = Producer(_JsonLinesSink(Path(args.messages)))
        server = build_server(connection, producer, args.address)
        port = args.address.rpartition(":")[2]
        print(f"Server started on port {port}")
        server.start()
    finally:
        connection.close()