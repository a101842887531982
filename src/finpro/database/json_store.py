"""Local JSON file database implementation.

The whole ledger lives in one JSON document, one list of snake_case records
per entity kind plus a settings object. Every durable write rewrites the
document through a temporary file and ``os.replace`` so a crash never leaves
a half-written file behind.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import structlog

from finpro.database.base import Database, Record, record_id
from finpro.database.mappers import (
    fields_to_json,
    json_to_domain,
    json_to_settings,
    record_to_json,
)
from finpro.domain.entities import AppSettings, EntityKind, LedgerSnapshot
from finpro.domain.errors import NotFoundError, PersistenceError

logger = structlog.get_logger(__name__)

COLLECTIONS = {
    EntityKind.ACCOUNT: "accounts",
    EntityKind.CATEGORY: "categories",
    EntityKind.TRANSACTION: "transactions",
    EntityKind.DEBT: "debts",
    EntityKind.OBLIGATION: "obligations",
    EntityKind.BUDGET: "budgets",
}


def _key_field(kind: EntityKind) -> str:
    return "category_id" if kind == EntityKind.BUDGET else "id"


def _empty_document() -> dict[str, Any]:
    document: dict[str, Any] = {name: [] for name in COLLECTIONS.values()}
    document["settings"] = None
    return document


class JSONFileDatabase(Database):
    """Single-file JSON implementation of Database interface."""

    def __init__(self, path: str | Path):
        """Initialize JSON database.

        Args:
            path: Location of the JSON document (created on first write)
        """
        self.path = Path(path)
        self._document: dict[str, Any] | None = None
        self._depth = 0

    def connect(self) -> None:
        """Read the document from disk."""
        self._document = self._read()

    def disconnect(self) -> None:
        """Drop the cached document."""
        self._document = None

    def initialize_schema(self) -> None:
        """Create an empty document if the file does not exist yet."""
        if not self.path.exists():
            self._document = _empty_document()
            self._flush()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return _empty_document()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Could not read {self.path}: expected a JSON object")
        document = _empty_document()
        for name in COLLECTIONS.values():
            records = data.get(name) or []
            if not isinstance(records, list):
                raise PersistenceError(f"Could not read {self.path}: '{name}' must be a list")
            document[name] = records
        document["settings"] = data.get("settings")
        return document

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._document, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("database.write_failed", path=str(self.path), error=str(e))
            raise PersistenceError(f"Could not save changes to {self.path}: {e}") from e

    def _doc(self) -> dict[str, Any]:
        if self._document is None:
            self._document = self._read()
        return self._document

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Buffer writes and flush the document once; restore it on failure."""
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        saved = copy.deepcopy(self._doc())
        self._depth = 1
        try:
            yield
        except Exception:
            self._document = saved
            raise
        finally:
            self._depth = 0

        try:
            self._flush()
        except PersistenceError:
            self._document = saved
            raise

    def load_all(self) -> LedgerSnapshot:
        """Validate and convert every stored record."""
        if self._depth == 0:
            self._document = self._read()
        document = self._document
        collections = {
            kind: tuple(json_to_domain(kind, item) for item in document[name])
            for kind, name in COLLECTIONS.items()
        }
        transactions = sorted(
            collections[EntityKind.TRANSACTION],
            key=lambda t: (t.date, t.created_at.isoformat() if t.created_at else ""),
            reverse=True,
        )
        settings = document.get("settings")
        return LedgerSnapshot(
            accounts=collections[EntityKind.ACCOUNT],
            categories=collections[EntityKind.CATEGORY],
            transactions=tuple(transactions),
            debts=collections[EntityKind.DEBT],
            obligations=collections[EntityKind.OBLIGATION],
            budgets=collections[EntityKind.BUDGET],
            settings=json_to_settings(settings) if settings is not None else AppSettings(),
        )

    def insert(self, kind: EntityKind, record: Record) -> Record:
        """Append a record. Returns it unchanged."""
        with self.atomic():
            records = self._doc()[COLLECTIONS[kind]]
            key = _key_field(kind)
            new_id = record_id(record)
            if any(item.get(key) == new_id for item in records):
                raise PersistenceError(f"{kind.value.capitalize()} {new_id} already exists")
            records.append(record_to_json(record))
        return record

    def update(self, kind: EntityKind, record_id: str, fields: dict[str, Any]) -> None:
        """Overwrite fields of an existing record."""
        key = _key_field(kind)
        with self.atomic():
            for item in self._doc()[COLLECTIONS[kind]]:
                if item.get(key) == record_id:
                    item.update(fields_to_json(fields))
                    return
            raise NotFoundError(f"{kind.value.capitalize()} {record_id} not found")

    def remove(self, kind: EntityKind, record_id: str) -> None:
        """Delete a record if it exists."""
        name = COLLECTIONS[kind]
        key = _key_field(kind)
        with self.atomic():
            records = self._doc()[name]
            self._doc()[name] = [item for item in records if item.get(key) != record_id]

    def upsert_settings(self, settings: AppSettings) -> None:
        """Replace the settings object."""
        with self.atomic():
            self._doc()["settings"] = record_to_json(settings)
