import sqlite3

import pytest

from walletms.database import AccountDB, ClientDB, RecordNotFoundError, TransactionDB
from walletms.entity import Account, Client, Transaction

SCHEMA = """
CREATE TABLE clients (id varchar(255), name varchar(255), email varchar(255), created_at date);
CREATE TABLE accounts (id varchar(255), client_id varchar(255), balance int, created_at date);
CREATE TABLE transactions (id varchar(255), account_id_from varchar(255),
    account_id_to varchar(255), amount int, created_at date);
"""


@pytest.fixture
def connection():
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA)
    yield conn
    conn.close()


def test_client_save_stores_row(connection):
    client = Client(name="Test", email="test@example.com", id="1")
    ClientDB(connection).save(client)
    rows = connection.execute("SELECT id, name, email FROM clients").fetchall()
    assert rows == [("1", "Test", "test@example.com")]


def test_client_get_returns_saved_client(connection):
    db = ClientDB(connection)
    client = Client(name="John", email="john@example.com")
    db.save(client)
    found = db.get(client.id)
    assert found.id == client.id
    assert found.name == "John"
    assert found.email == "john@example.com"
    assert found.created_at == client.created_at


def test_client_get_missing_raises(connection):
    with pytest.raises(RecordNotFoundError):
        ClientDB(connection).get("missing")


def test_account_save_stores_row(connection):
    client = Client(name="John", email="john@example.com")
    account = Account(client=client)
    AccountDB(connection).save(account)
    rows = connection.execute("SELECT id, client_id, balance FROM accounts").fetchall()
    assert rows == [(account.id, client.id, 0)]


def test_account_find_by_id_joins_client(connection):
    client = Client(name="John", email="john@example.com")
    ClientDB(connection).save(client)
    account = Account(client=client)
    db = AccountDB(connection)
    db.save(account)
    found = db.find_by_id(account.id)
    assert found.id == account.id
    assert found.client.id == client.id
    assert found.balance == account.balance
    assert found.client.name == "John"
    assert found.client.email == "john@example.com"


def test_account_find_by_id_missing_raises(connection):
    with pytest.raises(RecordNotFoundError):
        AccountDB(connection).find_by_id("missing")


def test_account_update_balance(connection):
    client = Client(name="John", email="john@example.com")
    ClientDB(connection).save(client)
    account = Account(client=client)
    db = AccountDB(connection)
    db.save(account)
    account.credit(250)
    db.update_balance(account)
    assert db.find_by_id(account.id).balance == 250.0


def test_transaction_create_stores_row(connection):
    account_from = Account(client=Client(name="John", email="john@example.com"), balance=1000.0)
    account_to = Account(client=Client(name="John2", email="john2@example.com"), balance=1000.0)
    transaction = Transaction(account_from, account_to, 100.0)
    TransactionDB(connection).create(transaction)
    rows = connection.execute(
        "SELECT id, account_id_from, account_id_to, amount FROM transactions"
    ).fetchall()
    assert rows == [(transaction.id, account_from.id, account_to.id, 100)]