"""Wallet domain entities: clients, accounts and transfers between accounts."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


class DomainError(ValueError):
    """Raised when an entity would be created or left in an invalid state."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(eq=False)
class Client:
    """A wallet customer that owns accounts."""

    name: str
    email: str
    id: str = field(default_factory=_new_id)
    accounts: list[Account] = field(default_factory=list, repr=False)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise DomainError unless name and email are set."""
        if not self.name:
            raise DomainError("name is required")
        if not self.email:
            raise DomainError("email is required")

    def update(self, name: str, email: str) -> None:
        """Change name and e-mail, then validate the result."""
        self.name = name
        self.email = email
        self.validate()

    def add_account(self, account: Account) -> None:
        """Attach an account that belongs to this client."""
        if account.client is None or account.client.id != self.id:
            raise DomainError("accounts does not bellow to this client")
        self.accounts.append(account)


@dataclass(eq=False)
class Account:
    """A balance held by a client."""

    client: Client | None
    id: str = field(default_factory=_new_id)
    balance: float = 0.0
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise DomainError unless the account has a client."""
        if self.client is None:
            raise DomainError("client is required")

    def credit(self, amount: float) -> None:
        """Add a positive amount to the balance."""
        if amount <= 0:
            raise DomainError("amount must be greater than zero")
        self.balance += amount
        self.updated_at = _now()

    def debit(self, amount: float) -> None:
        """Take a positive amount, no larger than the balance, from the balance."""
        if amount <= 0:
            raise DomainError("amount must be greater than zero")
        if self.balance < amount:
            raise DomainError("insufficient funds")
        self.balance -= amount
        self.updated_at = _now()


@dataclass(eq=False)
class Transaction:
    """A transfer between two accounts, carried out when it is created."""

    account_from: Account
    account_to: Account
    amount: float
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        self.validate()
        self.execute()

    def validate(self) -> None:
        """Raise DomainError unless the amount is positive and covered."""
        if self.amount <= 0:
            raise DomainError("amount must be greater than zero")
        if self.account_from.balance < self.amount:
            raise DomainError("insufficient balance")

    def execute(self) -> None:
        """Move the amount from the source account to the target account."""
        self.account_from.debit(self.amount)
        self.account_to.credit(self.amount)