"""Repositories that store clients, accounts and transactions through a DB-API connection."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from walletms.entity import Account, Client, Transaction


class RecordNotFoundError(LookupError):
    """Raised when a row looked up by id does not exist."""


@contextmanager
def _cursor(connection: Any) -> Iterator[Any]:
    cursor = connection.cursor()
    try:
        yield cursor
    finally:
        cursor.close()


def _to_db_time(value: datetime) -> str:
    return value.isoformat()


def _from_db_time(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    return datetime.fromisoformat(str(value))


def _timestamps(created_at: Any) -> dict[str, datetime]:
    created = _from_db_time(created_at)
    return {"created_at": created} if created is not None else {}


class ClientDB:
    """Client repository."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def get(self, client_id: str) -> Client:
        """Load the client with this id."""
        with _cursor(self.connection) as cursor:
            cursor.execute(
                "SELECT id, name, email, created_at FROM clients WHERE id = ?",
                (client_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"client {client_id!r} not found")
        found_id, name, email, created_at = row
        return Client(name=name, email=email, id=found_id, **_timestamps(created_at))

    def save(self, client: Client) -> None:
        """Insert a new client row."""
        with _cursor(self.connection) as cursor:
            cursor.execute(
                "INSERT INTO clients (id, name, email, created_at) VALUES (?, ?, ?, ?)",
                (client.id, client.name, client.email, _to_db_time(client.created_at)),
            )


class AccountDB:
    """Account repository."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def find_by_id(self, account_id: str) -> Account:
        """Load the account with this id together with its client."""
        with _cursor(self.connection) as cursor:
            cursor.execute(
                "SELECT a.id, a.client_id, a.balance, a.created_at, "
                "c.id, c.name, c.email, c.created_at "
                "FROM accounts a INNER JOIN clients c ON a.client_id = c.id "
                "WHERE a.id = ?",
                (account_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"account {account_id!r} not found")
        found_id, _client_id, balance, created_at, client_id, name, email, client_created = row
        client = Client(name=name, email=email, id=client_id, **_timestamps(client_created))
        return Account(
            client=client,
            id=found_id,
            balance=float(balance),
            **_timestamps(created_at),
        )

    def save(self, account: Account) -> None:
        """Insert a new account row."""
        if account.client is None:
            raise ValueError("client is required")
        with _cursor(self.connection) as cursor:
            cursor.execute(
                "INSERT INTO accounts (id, client_id, balance, created_at) VALUES (?, ?, ?, ?)",
                (account.id, account.client.id, account.balance, _to_db_time(account.created_at)),
            )

    def update_balance(self, account: Account) -> None:
        """Store the account's current balance."""
        with _cursor(self.connection) as cursor:
            cursor.execute(
                "UPDATE accounts SET balance = ? WHERE id = ?",
                (account.balance, account.id),
            )


class TransactionDB:
    """Transaction repository."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def create(self, transaction: Transaction) -> None:
        """Insert a transaction row."""
        with _cursor(self.connection) as cursor:
            cursor.execute(
                "INSERT INTO transactions "
                "(id, account_id_from, account_id_to, amount, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    transaction.id,
                    transaction.account_from.id,
                    transaction.account_to.id,
                    transaction.amount,
                    _to_db_time(transaction.created_at),
                ),
            )