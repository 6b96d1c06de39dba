import sqlite3
import threading

import pytest

from walletms.database import AccountDB, ClientDB, RecordNotFoundError, TransactionDB
from walletms.entity import Account, Client, DomainError
from walletms.events import BalanceUpdated, EventDispatcher, EventHandler, TransactionCreated
from walletms.uow import UnitOfWork
from walletms.usecases import (
    BalanceUpdatedOutput,
    CreateAccountInput,
    CreateAccountUseCase,
    CreateClientInput,
    CreateClientUseCase,
    CreateTransactionInput,
    CreateTransactionUseCase,
)

SCHEMA = """
CREATE TABLE clients (id varchar(255), name varchar(255), email varchar(255), created_at date);
CREATE TABLE accounts (id varchar(255), client_id varchar(255), balance int, created_at date);
CREATE TABLE transactions (id varchar(255), account_id_from varchar(255),
    account_id_to varchar(255), amount int, created_at date);
"""


class FakeClientGateway:
    def __init__(self, clients=()):
        self.clients = {client.id: client for client in clients}
        self.saved = []
        self.get_calls = []

    def get(self, client_id):
        self.get_calls.append(client_id)
        try:
            return self.clients[client_id]
        except KeyError:
            raise RecordNotFoundError(client_id) from None

    def save(self, client):
        self.saved.append(client)


class FakeAccountGateway:
    def __init__(self):
        self.saved = []

    def save(self, account):
        self.saved.append(account)

    def find_by_id(self, account_id):
        raise RecordNotFoundError(account_id)

    def update_balance(self, account):
        pass


class Recorder(EventHandler):
    def __init__(self):
        self.seen = []
        self._lock = threading.Lock()

    def handle(self, event):
        with self._lock:
            self.seen.append((event.name, event.payload))


def test_create_client_use_case():
    gateway = FakeClientGateway()
    out = CreateClientUseCase(gateway).execute(CreateClientInput("Fabio", "fabio@example.com"))
    assert out.name == "Fabio"
    assert out.email == "fabio@example.com"
    assert len(gateway.saved) == 1
    assert gateway.saved[0].id == out.id


def test_create_client_invalid_does_not_save():
    gateway = FakeClientGateway()
    with pytest.raises(DomainError):
        CreateClientUseCase(gateway).execute(CreateClientInput("", ""))
    assert gateway.saved == []


def test_create_account_use_case():
    client = Client(name="Rafa", email="rafa@example.com")
    clients = FakeClientGateway([client])
    accounts = FakeAccountGateway()
    output = CreateAccountUseCase(accounts, clients).execute(CreateAccountInput(client.id))
    assert clients.get_calls == [client.id]
    assert len(accounts.saved) == 1
    assert accounts.saved[0].id == output.id
    assert accounts.saved[0].client is client
    assert accounts.saved[0].balance == 0


def test_create_account_unknown_client():
    accounts = FakeAccountGateway()
    with pytest.raises(RecordNotFoundError):
        CreateAccountUseCase(accounts, FakeClientGateway()).execute(CreateAccountInput("nope"))
    assert accounts.saved == []


@pytest.fixture
def wallet():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.executescript(SCHEMA)
    client1 = Client(name="Rafa", email="rafa@example.com")
    client2 = Client(name="Suzi", email="suzie@example.com")
    account1 = Account(client=client1)
    account1.credit(1000)
    account2 = Account(client=client2)
    account2.credit(500)
    for client in (client1, client2):
        ClientDB(conn).save(client)
    for account in (account1, account2):
        AccountDB(conn).save(account)
    conn.commit()

    uow = UnitOfWork(conn)
    uow.register("AccountDB", AccountDB)
    uow.register("TransactionDB", TransactionDB)
    dispatcher = EventDispatcher()
    recorder = Recorder()
    dispatcher.register("transaction_created", recorder)
    dispatcher.register("balance_updated", recorder)
    use_case = CreateTransactionUseCase(uow, TransactionCreated(), BalanceUpdated(), dispatcher)
    yield conn, uow, use_case, recorder, account1, account2
    conn.close()


def test_create_transaction_use_case(wallet):
    conn, uow, use_case, recorder, account1, account2 = wallet
    output = use_case.execute(CreateTransactionInput(account1.id, account2.id, 100))
    assert output.account_from == account1.id
    assert output.account_to == account2.id
    assert output.amount == 100
    assert AccountDB(conn).find_by_id(account1.id).balance == 900.0
    assert AccountDB(conn).find_by_id(account2.id).balance == 600.0
    assert conn.execute("SELECT id FROM transactions").fetchall() == [(output.id,)]
    assert uow.transaction is None
    assert recorder.seen == [
        ("transaction_created", output),
        ("balance_updated", BalanceUpdatedOutput(account1.id, account2.id, 900.0, 600.0)),
    ]


def test_create_transaction_insufficient_funds_rolls_back(wallet):
    conn, uow, use_case, recorder, account1, account2 = wallet
    with pytest.raises(DomainError):
        use_case.execute(CreateTransactionInput(account1.id, account2.id, 5000))
    assert AccountDB(conn).find_by_id(account1.id).balance == 1000.0
    assert AccountDB(conn).find_by_id(account2.id).balance == 500.0
    assert recorder.seen == []
    assert uow.transaction is None


def test_create_transaction_unknown_account(wallet):
    conn, uow, use_case, recorder, account1, _ = wallet
    with pytest.raises(RecordNotFoundError):
        use_case.execute(CreateTransactionInput(account1.id, "missing", 10))
    assert conn.execute("SELECT count(*) FROM transactions").fetchone() == (0,)
    assert recorder.seen == []