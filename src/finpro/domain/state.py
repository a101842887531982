"""Application state: the single owned ledger snapshot.

Services never keep their own copies of entities. They read
``FinanceState.snapshot``, compute a replacement snapshot, and hand it to
``commit`` together with the adapter writes that make it durable.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Sequence
from uuid import uuid4

import structlog

from finpro.domain.defaults import INITIAL_ACCOUNTS, INITIAL_CATEGORIES
from finpro.domain.entities import (
    Account,
    Category,
    EntityKind,
    LedgerSnapshot,
    Transaction,
)
from finpro.domain.errors import DomainError

if TYPE_CHECKING:
    from finpro.database.base import Database, Record

logger = structlog.get_logger(__name__)

Write = Callable[["Database"], None]

_EPOCH = datetime.min.replace(tzinfo=UTC)


def new_id() -> str:
    """Return a fresh opaque entity id."""
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)


def insert_op(kind: EntityKind, record: Record) -> Write:
    def write(db: Database) -> None:
        db.insert(kind, record)

    return write


def update_op(kind: EntityKind, record_id: str, fields: dict[str, Any]) -> Write:
    def write(db: Database) -> None:
        db.update(kind, record_id, fields)

    return write


def remove_op(kind: EntityKind, record_id: str) -> Write:
    def write(db: Database) -> None:
        db.remove(kind, record_id)

    return write


def transaction_sort_key(transaction: Transaction) -> tuple:
    return (transaction.date, transaction.created_at or _EPOCH)


def order_transactions(transactions: Iterable[Transaction]) -> tuple[Transaction, ...]:
    """Most recent date first; same-date ties newest insertion first."""
    return tuple(sorted(transactions, key=transaction_sort_key, reverse=True))


def replace_item(items: Sequence[Any], item: Any, key: str = "id") -> tuple:
    """Return ``items`` with the element sharing ``item``'s key swapped in."""
    item_key = getattr(item, key)
    return tuple(item if getattr(existing, key) == item_key else existing for existing in items)


def without(items: Sequence[Any], item_id: str, key: str = "id") -> tuple:
    """Return ``items`` minus the element whose key is ``item_id``."""
    return tuple(existing for existing in items if getattr(existing, key) != item_id)


class FinanceState:
    """Owns the in-memory ledger snapshot and its persistence adapter."""

    def __init__(self, db: Database):
        """Initialize finance state.

        Args:
            db: Database instance (any adapter)
        """
        self.db = db
        self._snapshot: Optional[LedgerSnapshot] = None

    @property
    def snapshot(self) -> LedgerSnapshot:
        """Current snapshot, loading it on first access."""
        if self._snapshot is None:
            self.load()
        return self._snapshot

    def load(self) -> LedgerSnapshot:
        """Read everything from the adapter, seeding an empty store.

        A store without accounts or categories gets the default ones so the
        ledger always has at least one of each.
        """
        snapshot = self.db.load_all()
        writes: list[Write] = []

        if not snapshot.categories:
            categories = tuple(
                Category(id=new_id(), name=name, color=color, icon=icon)
                for name, color, icon in INITIAL_CATEGORIES
            )
            snapshot = replace(snapshot, categories=categories)
            writes.extend(insert_op(EntityKind.CATEGORY, c) for c in categories)

        if not snapshot.accounts:
            accounts = tuple(
                Account(id=new_id(), name=name, type=type_, balance=balance, color=color, icon=icon)
                for name, type_, balance, color, icon in INITIAL_ACCOUNTS
            )
            snapshot = replace(snapshot, accounts=accounts)
            writes.extend(insert_op(EntityKind.ACCOUNT, a) for a in accounts)

        if writes:
            with self.db.atomic():
                for write in writes:
                    write(self.db)
            logger.info("state.seeded", writes=len(writes))

        self._snapshot = snapshot
        return snapshot

    def resync(self) -> LedgerSnapshot:
        """Discard the cached snapshot and re-read it from the adapter."""
        self._snapshot = self.db.load_all()
        logger.debug("state.resynced")
        return self._snapshot

    def commit(self, snapshot: LedgerSnapshot, writes: Sequence[Write]) -> LedgerSnapshot:
        """Apply ``snapshot`` optimistically and persist ``writes`` as one unit.

        If the adapter rejects the unit, the cached snapshot is reconciled
        (re-read from the adapter, or rolled back to the previous snapshot if
        that read fails too) and the error is re-raised.

        Raises:
            PersistenceError: If the writes could not be made durable
        """
        previous = self.snapshot
        self._snapshot = snapshot
        try:
            with self.db.atomic():
                for write in writes:
                    write(self.db)
        except DomainError as e:
            logger.warning("state.commit_failed", error=str(e))
            self._reconcile(previous)
            raise
        return snapshot

    def _reconcile(self, previous: LedgerSnapshot) -> None:
        try:
            self.resync()
        except DomainError as e:
            logger.error("state.resync_failed", error=str(e))
            self._snapshot = previous
