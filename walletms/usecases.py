"""Wallet use cases: creating clients, accounts and transfers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from walletms.entity import Account, Client, Transaction
from walletms.events import Event, EventDispatcher
from walletms.uow import UnitOfWork

logger = logging.getLogger(__name__)


class AccountGateway(Protocol):
    """Storage for accounts."""

    def save(self, account: Account) -> None:
        """Store a new account."""

    def find_by_id(self, account_id: str) -> Account:
        """Load an account by id."""

    def update_balance(self, account: Account) -> None:
        """Store an account's balance."""


class ClientGateway(Protocol):
    """Storage for clients."""

    def get(self, client_id: str) -> Client:
        """Load a client by id."""

    def save(self, client: Client) -> None:
        """Store a new client."""


class TransactionGateway(Protocol):
    """Storage for transactions."""

    def create(self, transaction: Transaction) -> None:
        """Store a transaction."""


@dataclass
class CreateClientInput:
    name: str
    email: str


@dataclass
class CreateClientOutput:
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class CreateClientUseCase:
    """Creates and stores a client."""

    def __init__(self, client_gateway: ClientGateway) -> None:
        self.client_gateway = client_gateway

    def execute(self, input_dto: CreateClientInput) -> CreateClientOutput:
        """Validate and store a new client."""
        client = Client(name=input_dto.name, email=input_dto.email)
        try:
            self.client_gateway.save(client)
        except Exception as err:
            logger.error("Error saving client: %s", err)
            raise
        return CreateClientOutput(
            id=client.id,
            name=client.name,
            email=client.email,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )


@dataclass
class CreateAccountInput:
    client_id: str


@dataclass
class CreateAccountOutput:
    id: str


class CreateAccountUseCase:
    """Opens an account for an existing client."""

    def __init__(self, account_gateway: AccountGateway, client_gateway: ClientGateway) -> None:
        self.account_gateway = account_gateway
        self.client_gateway = client_gateway

    def execute(self, input_dto: CreateAccountInput) -> CreateAccountOutput:
        """Look up the client, then create and store an empty account for it."""
        client = self.client_gateway.get(input_dto.client_id)
        account = Account(client=client)
        self.account_gateway.save(account)
        return CreateAccountOutput(id=account.id)


@dataclass
class CreateTransactionInput:
    account_id_from: str
    account_id_to: str
    amount: float


@dataclass
class CreateTransactionOutput:
    id: str = ""
    account_from: str = ""
    account_to: str = ""
    amount: float = 0.0


@dataclass
class BalanceUpdatedOutput:
    account_id_from: str = ""
    account_id_to: str = ""
    balance_account_id_from: float = 0.0
    balance_account_id_to: float = 0.0


class CreateTransactionUseCase:
    """Moves money between two accounts in one unit of work and announces it."""

    def __init__(
        self,
        unit_of_work: UnitOfWork,
        transaction_created: Event,
        balance_updated: Event,
        dispatcher: EventDispatcher,
    ) -> None:
        self.unit_of_work = unit_of_work
        self.transaction_created = transaction_created
        self.balance_updated = balance_updated
        self.dispatcher = dispatcher

    def execute(self, input_dto: CreateTransactionInput) -> CreateTransactionOutput:
        """Transfer the amount, store the result and dispatch both events."""
        output = CreateTransactionOutput()
        balances = BalanceUpdatedOutput()

        def transfer(uow: UnitOfWork) -> None:
            accounts: AccountGateway = uow.get_repository("AccountDB")
            account_from = accounts.find_by_id(input_dto.account_id_from)
            account_to = uow.get_repository("AccountDB").find_by_id(input_dto.account_id_to)
            transaction = Transaction(account_from, account_to, input_dto.amount)
            uow.get_repository("AccountDB").update_balance(account_from)
            uow.get_repository("AccountDB").update_balance(account_to)
            transactions: TransactionGateway = uow.get_repository("TransactionDB")
            transactions.create(transaction)

            output.id = transaction.id
            output.account_from = transaction.account_from.id
            output.account_to = transaction.account_to.id
            output.amount = transaction.amount

            balances.account_id_from = input_dto.account_id_from
            balances.account_id_to = input_dto.account_id_to
            balances.balance_account_id_from = account_from.balance
            balances.balance_account_id_to = account_to.balance

        try:
            self.unit_of_work.do(transfer)
        except Exception as err:
            logger.error("Error to execute transaction: %s", err)
            raise

        self.transaction_created.payload = output
        self.dispatcher.dispatch(self.transaction_created)

        self.balance_updated.payload = balances
        self.dispatcher.dispatch(self.balance_updated)
        return output