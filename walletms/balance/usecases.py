"""Balance service use cases: looking up accounts and applying transfers."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from walletms.balance.entity import Account
from walletms.rollback import Rollback

logger = logging.getLogger(__name__)


class AccountGateway(Protocol):
    """Storage for the balance service's accounts."""

    def find_by_id(self, account_id: str) -> Account:
        """Load an account by id."""

    def update_balance(self, account: Account) -> None:
        """Store an account's balance."""


@dataclass
class FindByIDInput:
    id: str


class FindByIDUseCase:
    """Looks up one account."""

    def __init__(self, account_repository: AccountGateway) -> None:
        self.account_repository = account_repository

    def execute(self, input_dto: FindByIDInput) -> Account:
        """Return the account with the requested id."""
        return self.account_repository.find_by_id(input_dto.id)


@dataclass
class TransactionPayload:
    id: str = ""
    account_from: str = ""
    account_to: str = ""
    amount: float = 0.0


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _number(data: Mapping[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


@dataclass
class ProcessTransactionInput:
    name: str = ""
    payload: TransactionPayload = field(default_factory=TransactionPayload)

    @classmethod
    def from_dict(cls, data: Any) -> ProcessTransactionInput:
        """Build the input from a decoded transaction message; missing fields take defaults."""
        if not isinstance(data, Mapping):
            raise ValueError("transaction message must be a JSON object")
        payload = data.get("payload")
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError("payload must be a JSON object")
        return cls(
            name=_text(data, "name"),
            payload=TransactionPayload(
                id=_text(payload, "id"),
                account_from=_text(payload, "account_from"),
                account_to=_text(payload, "account_to"),
                amount=_number(payload, "amount"),
            ),
        )


class ProcessTransactionUseCase:
    """Applies a transfer to the stored balances, undoing the debit if the credit fails."""

    def __init__(self, account_repository: AccountGateway) -> None:
        self.account_repository = account_repository

    def execute(self, input_dto: ProcessTransactionInput) -> None:
        """Debit the source account and credit the target account."""
        payload = input_dto.payload
        rollback = Rollback()

        account_from = self.account_repository.find_by_id(payload.account_from)
        account_to = self.account_repository.find_by_id(payload.account_to)

        account_from.debit(payload.amount)

        def restore_source() -> None:
            try:
                account_from.credit(payload.amount)
            except Exception:
                logger.error("Error to credit accountFrom in rollback")
            try:
                self.account_repository.update_balance(account_from)
            except Exception:
                logger.error("Error to update accountFrom in rollback")

        rollback.add("Debit accountFrom", restore_source)

        self.account_repository.update_balance(account_from)

        try:
            account_to.credit(payload.amount)
            self.account_repository.update_balance(account_to)
        except Exception:
            rollback.do()
            raise


@dataclass
class BalanceOutput:
    account_id: str
    balance: float


class ReportBalanceForAccountUseCase:
    """Reports an account's balance."""

    def __init__(self, account_repository: AccountGateway) -> None:
        self.account_repository = account_repository

    def execute(self, account_id: str) -> BalanceOutput:
        """Return the id and balance of the account."""
        account = self.account_repository.find_by_id(account_id)
        return BalanceOutput(account_id=account.id, balance=account.balance)