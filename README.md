# walletms

Two small services for a digital wallet. The package also holds the domain
model, the storage layer and the event machinery that the services are built
on.

## The wallet service

The wallet service manages clients, their accounts and transfers between
accounts. Start it with:

    walletms

The command takes these options:

| Option       | Default          | Meaning                                   |
|--------------|------------------|-------------------------------------------|
| `--database` | `wallet.db`      | SQLite database file                      |
| `--address`  | `0.0.0.0:8080`   | host:port to listen on                    |
| `--messages` | `messages.jsonl` | file that receives published messages     |

On start the command creates the `clients`, `accounts` and `transactions`
tables if they are missing.

Every route answers `POST` requests only, `/ping` included:

| Path            | Body                                                                | Result                                        |
|-----------------|---------------------------------------------------------------------|-----------------------------------------------|
| `/clients`      | `{"name": "...", "email": "..."}`                                   | the new client: id, name, email and its times |
| `/accounts`     | `{"client_id": "..."}`                                              | `{"id": "..."}` of the new account            |
| `/transactions` | `{"account_id_from": "...", "account_id_to": "...", "amount": 100}` | `id`, `account_from`, `account_to`, `amount`  |
| `/ping`         | none                                                                | `pong`                                        |

A successful request is answered with status `200` and a JSON body. The
request is answered with `400` in these cases:

- the body is not valid JSON;
- the body is not a JSON object;
- a field has the wrong type.

The request is answered with `500` when the operation fails. Examples are an
empty name or e-mail, an unknown client or account, and a transfer larger
than the source balance. For `/clients` and `/transactions` the error text is
the body of that answer. For `/accounts` the answer has no body.

A transfer runs inside a `UnitOfWork`. The unit of work commits the
connection when the transfer succeeds and rolls it back when the transfer
fails. The `walletms` command opens its SQLite database in autocommit mode,
so each statement is stored as soon as it runs.

After a transfer the service publishes two events:

- `transaction_created` on the `transactions` topic;
- `balance_updated` on the `balances` topic.

Each message is appended to the `--messages` file as one JSON object per
line, with the keys `topic`, `key` and `value`. The `value` holds the event's
`name` and `payload`.

## The balance service

The balance service keeps its own copy of account balances. Start it with:

    walletms-balance

The command takes these options:

| Option       | Default          | Meaning                                   |
|--------------|------------------|-------------------------------------------|
| `--database` | `balances.db`    | SQLite database file                      |
| `--address`  | `0.0.0.0:3003`   | host:port to listen on                    |
| `--messages` | `messages.jsonl` | file the wallet service publishes to      |

The service follows the `--messages` file and takes the messages of the
`transactions` topic. For each transfer it debits the source account and
credits the target account. If the credit step fails, the debit is undone
through a `Rollback`.

A transfer that fails is logged, and the next message is handled. A message
that cannot be decoded stops the processing and interrupts the service.

Every route answers `GET` requests only:

| Path             | Result                                                                  |
|------------------|-------------------------------------------------------------------------|
| `/accounts/{id}` | the stored account: `id`, `client_id`, `balance`, `created_at`, `updated_at` |
| `/balances/{id}` | `{"account_id": "...", "balance": ...}`                                 |
| `/ping`          | `pong`                                                                  |

A lookup that fails, such as an unknown account, is answered with `500` and
the error text.

## What the package does not do

- The services do not connect to a message broker. Published messages are
  exchanged only through the JSON-lines file that both commands point at.
- Storage is SQLite only. The repositories use `?` placeholders on a DB-API
  connection.
- The balance service creates its `accounts` table, but nothing fills it.
  Its accounts must already be in that table before transfers for them can
  be applied.

## Using the library

- `walletms.entity` holds the domain model: `Client`, `Account` and
  `Transaction`. Rule violations raise `DomainError`, for example:
  - an empty name or e-mail;
  - an account without a client;
  - a credit or debit that is not positive;
  - a debit larger than the balance;
  - adding an account to a client that does not own it.

  A `Transaction` moves its amount as soon as it is created.
- `walletms.events` provides `Event`, `TransactionCreated`, `BalanceUpdated`,
  `EventHandler` and `EventDispatcher`.
  - `register`, `remove`, `has`, `clear` and `handlers_for` manage the
    handlers for each event name.
  - Registering the same handler twice raises
    `HandlerAlreadyRegisteredError`.
  - `dispatch` runs all handlers of an event in threads and waits for them.
- `walletms.uow` provides `UnitOfWork`.
  - `register` and `get_repository` build named repositories on a shared
    connection.
  - `do(fn)` commits when `fn` returns and rolls back when it raises.
  - Misuse raises `UnitOfWorkError`, for example starting a second
    transaction or rolling back when none is open.
- `walletms.rollback` provides `Rollback`. `add` collects named compensating
  actions. `do` runs them newest first and returns their names in the order
  they ran.
- `walletms.database` provides `ClientDB`, `AccountDB` and `TransactionDB`.
  `walletms.balance.database` provides the balance service's `AccountDB`. A
  missing row raises `RecordNotFoundError`.
- `walletms.messaging` provides the following:
  - `Message`.
  - `Producer`, which encodes a message as JSON and passes it to a send
    function.
  - `Consumer`, which forwards the messages of its topics from a source to a
    queue.
  - `TransactionCreatedHandler` and `BalanceUpdatedHandler`, which publish
    events on `transactions` and `balances`.
- `walletms.usecases` and `walletms.balance.usecases` hold the operations of
  both services:
  - in `walletms.usecases`: `CreateClientUseCase`, `CreateAccountUseCase` and
    `CreateTransactionUseCase`;
  - in `walletms.balance.usecases`: `FindByIDUseCase`,
    `ProcessTransactionUseCase` and `ReportBalanceForAccountUseCase`.
- `walletms.web` provides `WebServer`, a WSGI router for one HTTP method with
  `{name}` path parameters. It also provides the wallet's `ClientHandler`,
  `AccountHandler` and `TransactionHandler`.
- `walletms.app.build_server` and `walletms.balance.app.build_server` wire a
  complete server without starting it. `build_app()` on the result gives a
  WSGI application.

## Tests

The test suite uses pytest. Install it through the `test` extra.