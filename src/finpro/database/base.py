"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Union

# Import entities directly to avoid circular import through domain/__init__.py
from finpro.domain.entities import (
    Account,
    AppSettings,
    Budget,
    Category,
    Debt,
    EntityKind,
    LedgerSnapshot,
    Obligation,
    Transaction,
)

Record = Union[Account, Category, Transaction, Debt, Obligation, Budget]


def record_id(record: Record) -> str:
    """Return the storage key of a record (budgets are keyed by category)."""
    if isinstance(record, Budget):
        return record.category_id
    return record.id


class Database(ABC):
    """Abstract persistence interface for finpro.

    Implementations store the entity collections named by ``EntityKind``.
    Every write outside an ``atomic()`` block is durable on return; writes
    inside one become durable together when the block exits.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize storage schema (create tables or an empty document)."""
        pass

    @abstractmethod
    def load_all(self) -> LedgerSnapshot:
        """Read every entity collection plus the settings.

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    def insert(self, kind: EntityKind, record: Record) -> Record:
        """Store a new record that already carries its id. Returns the record."""
        pass

    @abstractmethod
    def update(self, kind: EntityKind, record_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given fields of an existing record.

        Raises:
            NotFoundError: If no record has this id
        """
        pass

    @abstractmethod
    def remove(self, kind: EntityKind, record_id: str) -> None:
        """Delete a record. Absent records are ignored."""
        pass

    @abstractmethod
    def upsert_settings(self, settings: AppSettings) -> None:
        """Create or replace the settings record."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group the writes issued inside the block into one durable unit.

        Raises:
            PersistenceError: If the unit cannot be made durable; none of its
                writes are kept
        """
        pass
