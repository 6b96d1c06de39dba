"""Account as seen by the balance service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from walletms.entity import DomainError


@dataclass(eq=False)
class Account:
    """An account balance mirrored from the wallet service."""

    id: str
    client_id: str
    balance: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise DomainError unless id and client are set and the balance is not negative."""
        if not self.id:
            raise DomainError("id is required")
        if not self.client_id:
            raise DomainError("client is required")
        if self.balance < 0:
            raise DomainError("balance must be greater than or equal to zero")

    def credit(self, amount: float) -> None:
        """Add a positive amount to the balance."""
        if amount <= 0:
            raise DomainError("amount must be greater than zero")
        self.balance += amount
        self.updated_at = datetime.now(timezone.utc)

    def debit(self, amount: float) -> None:
        """Take a positive amount, no larger than the balance, from the balance."""
        if amount <= 0:
            raise DomainError("amount must be greater than zero")
        if self.balance < amount:
            raise DomainError("insufficient funds")
        self.balance -= amount
        self.updated_at = datetime.now(timezone.utc)