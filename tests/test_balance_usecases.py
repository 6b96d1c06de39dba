from __future__ import annotations

import pytest

from walletms.balance.entity import Account
from walletms.balance.usecases import (
    BalanceOutput,
    FindByIDInput,
    FindByIDUseCase,
    ProcessTransactionInput,
    ProcessTransactionUseCase,
    ReportBalanceForAccountUseCase,
    TransactionPayload,
)
from walletms.database import RecordNotFoundError
from walletms.entity import DomainError


class FakeRepository:
    def __init__(self, balances, failing_updates=()):
        self.balances = dict(balances)
        self.failing_updates = set(failing_updates)
        self.updates = []

    def find_by_id(self, account_id):
        if account_id not in self.balances:
            raise RecordNotFoundError(account_id)
        return Account(id=account_id, client_id="client-" + account_id, balance=self.balances[account_id])

    def update_balance(self, account):
        self.updates.append(account.id)
        if account.id in self.failing_updates:
            raise RuntimeError("update failed")
        self.balances[account.id] = account.balance


def _transfer(source, target, amount):
    return ProcessTransactionInput(
        name="transaction_created",
        payload=TransactionPayload(id="t1", account_from=source, account_to=target, amount=amount),
    )


def test_find_by_id_returns_account():
    repo = FakeRepository({"a": 10.0})
    account = FindByIDUseCase(repo).execute(FindByIDInput(id="a"))
    assert account.id == "a"
    assert account.balance == 10.0


def test_find_by_id_unknown_raises():
    with pytest.raises(RecordNotFoundError):
        FindByIDUseCase(FakeRepository({})).execute(FindByIDInput(id="x"))


def test_process_transaction_moves_balance():
    repo = FakeRepository({"a": 100.0, "b": 0.0})
    ProcessTransactionUseCase(repo).execute(_transfer("a", "b", 100.0))
    assert repo.balances == {"a": 0.0, "b": 100.0}
    assert repo.updates == ["a", "b"]


def test_process_transaction_insufficient_funds():
    repo = FakeRepository({"a": 10.0, "b": 0.0})
    with pytest.raises(DomainError, match="insufficient funds"):
        ProcessTransactionUseCase(repo).execute(_transfer("a", "b", 100.0))
    assert repo.balances == {"a": 10.0, "b": 0.0}
    assert repo.updates == []


def test_process_transaction_unknown_target():
    repo = FakeRepository({"a": 100.0})
    with pytest.raises(RecordNotFoundError):
        ProcessTransactionUseCase(repo).execute(_transfer("a", "missing", 100.0))
    assert repo.updates == []


def test_process_transaction_restores_source_when_target_update_fails():
    repo = FakeRepository({"a": 100.0, "b": 0.0}, failing_updates={"b"})
    with pytest.raises(RuntimeError):
        ProcessTransactionUseCase(repo).execute(_transfer("a", "b", 100.0))
    assert repo.balances == {"a": 100.0, "b": 0.0}
    assert repo.updates == ["a", "b", "a"]


def test_from_dict_reads_message():
    dto = ProcessTransactionInput.from_dict(
        {
            "name": "transaction_created",
            "payload": {"id": "t1", "account_from": "a", "account_to": "b", "amount": 100},
        }
    )
    assert dto == _transfer("a", "b", 100.0)


def test_from_dict_defaults_missing_fields():
    dto = ProcessTransactionInput.from_dict({"name": "transaction_created"})
    assert dto.payload == TransactionPayload()


def test_from_dict_rejects_bad_types():
    with pytest.raises(ValueError):
        ProcessTransactionInput.from_dict({"payload": {"amount": "many"}})
    with pytest.raises(ValueError):
        ProcessTransactionInput.from_dict(["not", "an", "object"])


def test_report_balance():
    repo = FakeRepository({"a": 42.5})
    assert ReportBalanceForAccountUseCase(repo).execute("a") == BalanceOutput(account_id="a", balance=42.5)


def test_report_balance_unknown_account():
    with pytest.raises(RecordNotFoundError):
        ReportBalanceForAccountUseCase(FakeRepository({})).execute("a")