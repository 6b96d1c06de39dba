"""Account repository of the balance service."""

from __future__ import annotations

from contextlib import closing
from datetime import datetime
from typing import Any

from walletms.balance.entity import Account
from walletms.database import RecordNotFoundError


def _parse_time(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    return datetime.fromisoformat(str(value))


class AccountDB:
    """Reads and updates account balances through a DB-API connection."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def find_by_id(self, account_id: str) -> Account:
        """Load the account with this id."""
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(
                "SELECT a.id, a.client_id, a.balance, a.created_at FROM accounts a WHERE a.id = ?",
                (account_id,),
            )
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(f"account {account_id!r} not found")
        found_id, client_id, balance, created_at = row
        return Account(
            id=found_id,
            client_id=client_id,
            balance=float(balance),
            created_at=_parse_time(created_at),
        )

    def update_balance(self, account: Account) -> None:
        """Store the account's current balance."""
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(
                "UPDATE accounts SET balance = ? WHERE id = ?",
                (account.balance, account.id),
            )