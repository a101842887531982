"""Tests for FinanceState loading, seeding and failed commits."""

from datetime import date
from decimal import Decimal

import pytest

from finpro.domain.defaults import INITIAL_ACCOUNTS, INITIAL_CATEGORIES
from finpro.domain.errors import PersistenceError
from finpro.domain.state import FinanceState
from finpro.domain.transaction import TransactionService


def test_empty_store_is_seeded(any_db):
    snapshot = FinanceState(any_db).load()

    assert [c.name for c in snapshot.categories] == [name for name, _, _ in INITIAL_CATEGORIES]
    assert [a.name for a in snapshot.accounts] == [name for name, *_ in INITIAL_ACCOUNTS]
    assert any_db.load_all().categories == snapshot.categories


def test_seeding_happens_once(any_db):
    first = FinanceState(any_db).load()
    second = FinanceState(any_db).load()
    assert second.accounts == first.accounts
    assert len(any_db.load_all().categories) == len(INITIAL_CATEGORIES)


def test_snapshot_loads_lazily(temp_db):
    state = FinanceState(temp_db)
    assert len(state.snapshot.accounts) == 2


class TestFailedCommit:
    """A rejected write leaves the in-memory ledger matching the store."""

    def test_failed_write_resyncs(self, state, transaction_service, bank, food, monkeypatch):
        before = state.snapshot

        def refuse(kind, record):
            raise PersistenceError("disk full")

        monkeypatch.setattr(state.db, "insert", refuse)

        with pytest.raises(PersistenceError, match="disk full"):
            transaction_service.create_transaction(
                type="expense", amount="10", account_id=bank.id, category_id=food.id, date=date(2024, 1, 1)
            )

        assert state.snapshot.transactions == ()
        assert state.snapshot.get_account(bank.id).balance == before.get_account(bank.id).balance

    def test_partial_unit_is_rolled_back(self, state, transaction_service, bank, food, monkeypatch):
        """The insert succeeds but the balance write fails; neither is kept."""
        real_update = state.db.update

        def fail_balance(kind, record_id, fields):
            if "balance" in fields:
                raise PersistenceError("balance write failed")
            real_update(kind, record_id, fields)

        monkeypatch.setattr(state.db, "update", fail_balance)

        with pytest.raises(PersistenceError):
            transaction_service.create_transaction(
                type="expense", amount="10", account_id=bank.id, category_id=food.id, date=date(2024, 1, 1)
            )

        assert state.db.load_all().transactions == ()
        assert state.snapshot.transactions == ()
        assert state.snapshot.get_account(bank.id).balance == Decimal("0")

    def test_unreadable_store_restores_previous_snapshot(self, state, transaction_service, bank, food, monkeypatch):
        before = state.snapshot

        def refuse(*args, **kwargs):
            raise PersistenceError("offline")

        monkeypatch.setattr(state.db, "insert", refuse)
        monkeypatch.setattr(state.db, "load_all", refuse)

        with pytest.raises(PersistenceError, match="offline"):
            transaction_service.create_transaction(
                type="expense", amount="10", account_id=bank.id, category_id=food.id, date=date(2024, 1, 1)
            )

        assert state.snapshot == before


def test_json_failed_flush_keeps_file(temp_json_db, monkeypatch):
    state = FinanceState(temp_json_db)
    state.load()
    service = TransactionService(state)
    bank = next(a for a in state.snapshot.accounts if a.name == "Banco Principal")
    food = next(c for c in state.snapshot.categories if c.name == "Alimentación")

    def broken_flush():
        raise PersistenceError("read-only filesystem")

    monkeypatch.setattr(temp_json_db, "_flush", broken_flush)

    with pytest.raises(PersistenceError):
        service.create_transaction(
            type="expense", amount="10", account_id=bank.id, category_id=food.id, date=date(2024, 1, 1)
        )

    assert temp_json_db.load_all().transactions == ()
    assert state.snapshot.transactions == ()
