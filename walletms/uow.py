"""Unit of work that shares one database transaction between repositories."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

RepositoryFactory = Callable[[Any], Any]
T = TypeVar("T")


class UnitOfWorkError(RuntimeError):
    """Raised when a unit of work is misused or cannot finish cleanly."""


class UnitOfWork:
    """Builds repositories on a shared transaction and commits or rolls it back.

    The connection is a DB-API connection; its commit and rollback end the
    transaction, which the repositories receive as the connection itself.
    """

    def __init__(self, connection: Any) -> None:
        self.connection = connection
        self.transaction: Any | None = None
        self.repositories: dict[str, RepositoryFactory] = {}

    def register(self, name: str, factory: RepositoryFactory) -> None:
        """Make a repository factory available under a name."""
        self.repositories[name] = factory

    def unregister(self, name: str) -> None:
        """Forget the repository factory with this name."""
        self.repositories.pop(name, None)

    def _begin(self) -> None:
        self.transaction = self.connection

    def get_repository(self, name: str) -> Any:
        """Build the named repository on the current transaction, starting one if needed."""
        try:
            factory = self.repositories[name]
        except KeyError:
            raise UnitOfWorkError(f"repository {name!r} is not registered") from None
        if self.transaction is None:
            self._begin()
        return factory(self.transaction)

    def do(self, fn: Callable[[UnitOfWork], T]) -> T:
        """Run fn inside a new transaction, committing on success and rolling back on error."""
        if self.transaction is not None:
            raise UnitOfWorkError("transaction already started")
        self._begin()
        try:
            result = fn(self)
        except Exception as err:
            try:
                self.rollback()
            except Exception as rollback_err:
                raise UnitOfWorkError(
                    f"original error: {err}, rollback error: {rollback_err}"
                ) from err
            raise
        self.commit_or_rollback()
        return result

    def rollback(self) -> None:
        """Undo the current transaction."""
        if self.transaction is None:
            raise UnitOfWorkError("no transaction to rollback")
        self.transaction.rollback()
        self.transaction = None

    def commit_or_rollback(self) -> None:
        """Commit the current transaction, rolling it back if the commit fails."""
        if self.transaction is None:
            raise UnitOfWorkError("no transaction to commit")
        try:
            self.transaction.commit()
        except Exception as err:
            try:
                self.rollback()
            except Exception as rollback_err:
                raise UnitOfWorkError(
                    f"original error: {err}, rollback error: {rollback_err}"
                ) from err
            raise
        self.transaction = None