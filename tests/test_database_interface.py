"""Contract tests shared by every storage adapter."""

import json
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from finpro.database.factories import create_database, create_json_database
from finpro.database.json_store import JSONFileDatabase
from finpro.database.sqlalchemy_db import SQLAlchemyDatabase
from finpro.domain.entities import (
    Account,
    AccountType,
    AppSettings,
    Attachment,
    Budget,
    Category,
    Debt,
    EntityKind,
    Obligation,
    Transaction,
    TransactionType,
)
from finpro.domain.errors import NotFoundError, PersistenceError


def make_account(id_="acc", balance="10.00"):
    return Account(id=id_, name=f"Account {id_}", type=AccountType.BANK, balance=Decimal(balance))


def make_transaction(id_, day, created_at):
    return Transaction(
        id=id_,
        amount=Decimal("5.00"),
        category_id="cat",
        account_id="acc",
        date=day,
        type=TransactionType.EXPENSE,
        description=id_,
        attachments=(Attachment(name="a.txt", type="text/plain", data="eA=="),),
        created_at=created_at,
    )


class TestAdapterContract:
    """Every adapter stores and returns the same snapshot."""

    def test_empty_store(self, any_db):
        snapshot = any_db.load_all()
        assert snapshot.accounts == ()
        assert snapshot.transactions == ()
        assert snapshot.settings == AppSettings()

    def test_round_trip_every_kind(self, any_db):
        records = {
            EntityKind.ACCOUNT: make_account(),
            EntityKind.CATEGORY: Category(id="cat", name="Food"),
            EntityKind.DEBT: Debt(
                id="debt",
                name="Loan",
                total_amount=Decimal("100.00"),
                remaining_amount=Decimal("40.00"),
                interest_rate=Decimal("3.50"),
                due_date=date(2024, 5, 1),
            ),
            EntityKind.OBLIGATION: Obligation(
                id="obl",
                description="Rent",
                amount=Decimal("800.00"),
                category_id="cat",
                account_id="acc",
                due_date=date(2024, 5, 1),
                is_recurring=True,
            ),
            EntityKind.BUDGET: Budget(category_id="cat", limit=Decimal("250.00")),
            EntityKind.TRANSACTION: make_transaction(
                "t1", date(2024, 1, 2), datetime(2024, 1, 2, 9, tzinfo=UTC)
            ),
        }
        for kind, record in records.items():
            assert any_db.insert(kind, record) == record

        snapshot = any_db.load_all()
        assert snapshot.accounts == (records[EntityKind.ACCOUNT],)
        assert snapshot.categories == (records[EntityKind.CATEGORY],)
        assert snapshot.debts == (records[EntityKind.DEBT],)
        assert snapshot.obligations == (records[EntityKind.OBLIGATION],)
        assert snapshot.budgets == (records[EntityKind.BUDGET],)
        assert snapshot.transactions == (records[EntityKind.TRANSACTION],)

    def test_update_fields(self, any_db):
        any_db.insert(EntityKind.ACCOUNT, make_account())
        any_db.update(EntityKind.ACCOUNT, "acc", {"balance": Decimal("-3.25"), "type": AccountType.CARD})

        (account,) = any_db.load_all().accounts
        assert account.balance == Decimal("-3.25")
        assert account.type == AccountType.CARD

    def test_update_budget_by_category(self, any_db):
        any_db.insert(EntityKind.BUDGET, Budget(category_id="cat", limit=Decimal("1.00")))
        any_db.update(EntityKind.BUDGET, "cat", {"limit": Decimal("2.00")})
        assert any_db.load_all().budgets == (Budget(category_id="cat", limit=Decimal("2.00")),)

    def test_update_missing_raises(self, any_db):
        with pytest.raises(NotFoundError):
            any_db.update(EntityKind.ACCOUNT, "missing", {"name": "x"})

    def test_remove_is_idempotent(self, any_db):
        any_db.insert(EntityKind.ACCOUNT, make_account())
        any_db.remove(EntityKind.ACCOUNT, "acc")
        any_db.remove(EntityKind.ACCOUNT, "acc")
        assert any_db.load_all().accounts == ()

    def test_transactions_load_most_recent_first(self, any_db):
        noon = datetime(2024, 1, 1, 12, tzinfo=UTC)
        any_db.insert(EntityKind.TRANSACTION, make_transaction("old", date(2024, 1, 1), noon))
        any_db.insert(EntityKind.TRANSACTION, make_transaction("newer", date(2024, 1, 1), noon + timedelta(minutes=1)))
        any_db.insert(EntityKind.TRANSACTION, make_transaction("latest", date(2024, 2, 1), noon))

        assert [t.id for t in any_db.load_all().transactions] == ["latest", "newer", "old"]

    def test_atomic_rolls_back_every_write(self, any_db):
        any_db.insert(EntityKind.ACCOUNT, make_account())

        with pytest.raises(NotFoundError):
            with any_db.atomic():
                any_db.update(EntityKind.ACCOUNT, "acc", {"balance": Decimal("99.00")})
                any_db.insert(EntityKind.CATEGORY, Category(id="cat", name="Food"))
                any_db.update(EntityKind.ACCOUNT, "missing", {"balance": Decimal("1.00")})

        snapshot = any_db.load_all()
        assert snapshot.accounts == (make_account(),)
        assert snapshot.categories == ()

    def test_atomic_commits_together(self, any_db):
        with any_db.atomic():
            any_db.insert(EntityKind.ACCOUNT, make_account("a"))
            any_db.insert(EntityKind.ACCOUNT, make_account("b"))
        assert {a.id for a in any_db.load_all().accounts} == {"a", "b"}

    def test_settings_upsert(self, any_db):
        any_db.upsert_settings(AppSettings(currency="€"))
        any_db.upsert_settings(AppSettings(currency="£", user_name="Ana"))
        assert any_db.load_all().settings == AppSettings(currency="£", user_name="Ana")


class TestJSONFileDatabase:
    """JSON-specific behavior."""

    def test_survives_reopen(self, temp_json_db):
        temp_json_db.insert(EntityKind.ACCOUNT, make_account())
        reopened = create_json_database(temp_json_db.database_path)
        reopened.connect()
        assert reopened.load_all().accounts == (make_account(),)

    def test_document_is_snake_case(self, temp_json_db):
        temp_json_db.insert(EntityKind.DEBT, Debt(
            id="d", name="Loan", total_amount=Decimal("10"), remaining_amount=Decimal("5")
        ))
        with open(temp_json_db.database_path, encoding="utf-8") as handle:
            document = json.load(handle)
        (debt,) = document["debts"]
        assert debt["total_amount"] == "10"
        assert debt["remaining_amount"] == "5"
        assert debt["type"] == "other"

    def test_duplicate_insert_rejected(self, temp_json_db):
        temp_json_db.insert(EntityKind.ACCOUNT, make_account())
        with pytest.raises(PersistenceError, match="already exists"):
            temp_json_db.insert(EntityKind.ACCOUNT, make_account())

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        db = JSONFileDatabase(path)
        with pytest.raises(PersistenceError, match="Could not read"):
            db.connect()

    def test_malformed_record(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"accounts": [{"id": "a", "name": "A", "type": "bank"}]}), encoding="utf-8")
        db = JSONFileDatabase(path)
        db.connect()
        with pytest.raises(PersistenceError, match="Malformed account record a"):
            db.load_all()

    def test_failed_single_write_is_not_kept(self, temp_json_db, monkeypatch):
        """A write whose flush failed must not reappear with the next flush."""
        real_flush = temp_json_db._flush
        calls = []

        def flaky_flush():
            calls.append(1)
            if len(calls) == 1:
                raise PersistenceError("disk full")
            real_flush()

        monkeypatch.setattr(temp_json_db, "_flush", flaky_flush)

        with pytest.raises(PersistenceError, match="disk full"):
            temp_json_db.insert(EntityKind.ACCOUNT, make_account("lost"))
        temp_json_db.insert(EntityKind.ACCOUNT, make_account("kept"))

        reopened = create_json_database(temp_json_db.database_path)
        reopened.connect()
        assert [a.id for a in reopened.load_all().accounts] == ["kept"]

    def test_failed_update_leaves_record_unchanged(self, temp_json_db, monkeypatch):
        temp_json_db.insert(EntityKind.ACCOUNT, make_account())

        real_flush = temp_json_db._flush
        read_only = [True]

        def guarded_flush():
            if read_only[0]:
                raise PersistenceError("read-only filesystem")
            real_flush()

        monkeypatch.setattr(temp_json_db, "_flush", guarded_flush)
        with pytest.raises(PersistenceError):
            temp_json_db.update(EntityKind.ACCOUNT, "acc", {"balance": Decimal("99.00")})
        read_only[0] = False

        temp_json_db.upsert_settings(AppSettings(currency="€"))
        assert temp_json_db.load_all().accounts == (make_account(),)

    def test_sees_writes_from_another_handle(self, temp_json_db):
        other = create_json_database(temp_json_db.database_path)
        other.connect()
        other.insert(EntityKind.ACCOUNT, make_account())
        assert temp_json_db.load_all().accounts == (make_account(),)


def test_sqlite_sees_writes_from_another_handle(temp_db):
    temp_db.insert(EntityKind.ACCOUNT, make_account())
    temp_db.load_all()

    other = create_database(temp_db.database_path, storage="sqlite")
    other.update(EntityKind.ACCOUNT, "acc", {"balance": Decimal("42.00")})
    other.disconnect()

    assert temp_db.load_all().accounts[0].balance == Decimal("42.00")


def test_factory_selects_backend(tmp_path, monkeypatch):
    assert isinstance(create_database(str(tmp_path / "a.db")), SQLAlchemyDatabase)
    assert isinstance(create_database(str(tmp_path / "a.json"), storage="JSON"), JSONFileDatabase)
    monkeypatch.setenv("FINPRO_STORAGE", "json")
    assert isinstance(create_database(str(tmp_path / "b.json")), JSONFileDatabase)
    with pytest.raises(ValueError, match="Unknown storage backend"):
        create_database(str(tmp_path / "c"), storage="postgres")
