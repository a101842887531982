"""Tests for the obligation lifecycle."""

from datetime import date
from decimal import Decimal

import pytest

from finpro.domain.entities import Obligation, ObligationStatus, TransactionType
from finpro.domain.errors import (
    NotFoundError,
    PersistenceError,
    SettlementError,
    ValidationError,
)
from finpro.domain.obligation import (
    classify,
    days_between,
    next_due_date,
    sort_by_due_date,
    upcoming_obligations,
)


def make_obligation(due, is_paid=False, id_="o"):
    return Obligation(
        id=id_,
        description="Rent",
        amount=Decimal("10"),
        category_id="c",
        account_id="a",
        due_date=due,
        is_paid=is_paid,
    )


@pytest.fixture
def rent(obligation_service, bank, categories):
    return obligation_service.create_obligation(
        description="Alquiler",
        amount="50",
        category_id=categories["Vivienda"].id,
        account_id=bank.id,
        due_date=date(2025, 1, 15),
        is_recurring=True,
    )


class TestMarkAsPaid:
    """Tests for settling obligations."""

    def test_recurring_scenario(self, state, obligation_service, rent, bank):
        """Paying a recurring obligation records one expense and one successor."""
        result = obligation_service.mark_as_paid(rent.id, today=date(2025, 1, 14))

        assert result.obligation.is_paid
        assert state.snapshot.get_obligation(rent.id).is_paid

        txn = result.transaction
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == Decimal("50")
        assert txn.account_id == bank.id
        assert txn.category_id == rent.category_id
        assert txn.date == date(2025, 1, 14)
        assert txn.description == "Pago: Alquiler"

        successor = result.successor
        assert successor.due_date == date(2025, 2, 15)
        assert successor.is_recurring
        assert not successor.is_paid
        assert successor.description == rent.description
        assert state.snapshot.get_account(bank.id).balance == Decimal("-50")

    def test_paying_twice_settles_once(self, state, obligation_service, rent):
        obligation_service.mark_as_paid(rent.id, today=date(2025, 1, 14))
        assert obligation_service.mark_as_paid(rent.id, today=date(2025, 1, 14)) is None

        assert len(state.snapshot.transactions) == 1
        assert len(state.snapshot.obligations) == 2

    def test_paid_state_survives_reload(self, state, obligation_service, rent):
        obligation_service.mark_as_paid(rent.id)
        reloaded = state.resync()
        assert reloaded.get_obligation(rent.id).is_paid
        assert len(reloaded.obligations) == 2

    def test_one_off_has_no_successor(self, state, obligation_service, bank, food):
        once = obligation_service.create_obligation(
            description="Cena", amount="30", category_id=food.id, account_id=bank.id, due_date=date(2025, 1, 1)
        )
        result = obligation_service.mark_as_paid(once.id)
        assert result.successor is None
        assert len(state.snapshot.obligations) == 1

    def test_missing_obligation_is_noop(self, state, obligation_service):
        before = state.snapshot
        assert obligation_service.mark_as_paid("missing") is None
        assert state.snapshot == before

    def test_partial_failure_is_reported(self, state, obligation_service, rent, monkeypatch):
        """Both steps run; a failing settlement is surfaced with the successor kept."""

        def fail(**kwargs):
            raise PersistenceError("disk full")

        monkeypatch.setattr(obligation_service.transactions, "create_transaction", fail)

        with pytest.raises(SettlementError) as excinfo:
            obligation_service.mark_as_paid(rent.id, today=date(2025, 1, 14))

        error = excinfo.value
        assert len(error.failures) == 1
        assert isinstance(error.failures[0], PersistenceError)
        assert error.result.transaction is None
        assert error.result.successor is not None
        assert state.snapshot.get_obligation(rent.id).is_paid
        assert state.snapshot.get_obligation(error.result.successor.id) is not None

    def test_failed_paid_flag_stops_settlement(self, state, obligation_service, rent, monkeypatch):
        def broken_update(kind, record_id, fields):
            raise PersistenceError("read-only store")

        monkeypatch.setattr(state.db, "update", broken_update)

        with pytest.raises(PersistenceError):
            obligation_service.mark_as_paid(rent.id)

        assert not state.snapshot.get_obligation(rent.id).is_paid
        assert state.snapshot.transactions == ()


class TestRecurrence:
    """Month arithmetic for recurring obligations."""

    @pytest.mark.parametrize(
        "due,expected",
        [
            (date(2025, 1, 15), date(2025, 2, 15)),
            (date(2025, 1, 31), date(2025, 2, 28)),
            (date(2024, 1, 31), date(2024, 2, 29)),
            (date(2025, 3, 31), date(2025, 4, 30)),
            (date(2025, 12, 10), date(2026, 1, 10)),
        ],
    )
    def test_next_due_date_clamps_to_month_end(self, due, expected):
        assert next_due_date(due) == expected


class TestClassification:
    """Due-status classification."""

    def test_statuses(self, today):
        window = 3
        assert classify(make_obligation(today, is_paid=True), today, window) == ObligationStatus.PAID
        assert classify(make_obligation(date(2024, 3, 14)), today, window) == ObligationStatus.OVERDUE
        assert classify(make_obligation(today), today, window) == ObligationStatus.DUE_TODAY
        assert classify(make_obligation(date(2024, 3, 18)), today, window) == ObligationStatus.UPCOMING
        assert classify(make_obligation(date(2024, 3, 19)), today, window) == ObligationStatus.SCHEDULED

    def test_window_is_configurable(self, today):
        obligation = make_obligation(date(2024, 3, 21))
        assert classify(obligation, today, 3) == ObligationStatus.SCHEDULED
        assert classify(obligation, today, 7) == ObligationStatus.UPCOMING

    def test_upcoming_includes_today_and_sorts(self, today):
        obligations = [
            make_obligation(date(2024, 3, 17), id_="late"),
            make_obligation(today, id_="now"),
            make_obligation(date(2024, 3, 14), id_="overdue"),
            make_obligation(date(2024, 3, 16), is_paid=True, id_="paid"),
            make_obligation(date(2024, 3, 30), id_="far"),
        ]
        assert [o.id for o in upcoming_obligations(obligations, today, 3)] == ["now", "late"]

    def test_sort_and_days_between(self):
        a = make_obligation(date(2024, 5, 1), id_="a")
        b = make_obligation(date(2024, 4, 1), id_="b")
        assert [o.id for o in sort_by_due_date([a, b])] == ["b", "a"]
        assert days_between(date(2024, 3, 1), date(2024, 3, 4)) == 3
        assert days_between(date(2024, 3, 4), date(2024, 3, 1)) == -3

    def test_service_windows(self, obligation_service, bank, food):
        base = date(2024, 3, 15)
        for days in (2, 6):
            obligation_service.create_obligation(
                description=f"in {days}",
                amount="1",
                category_id=food.id,
                account_id=bank.id,
                due_date=date(2024, 3, 15 + days),
            )
        assert [o.description for o in obligation_service.upcoming(today=base)] == ["in 2"]
        assert [o.description for o in obligation_service.alerts(today=base)] == ["in 2", "in 6"]


class TestObligationCrud:
    """Create, update and delete."""

    def test_create_validates(self, obligation_service, bank, food):
        with pytest.raises(ValidationError, match="greater than zero"):
            obligation_service.create_obligation("X", "0", food.id, bank.id, date(2024, 1, 1))
        with pytest.raises(ValidationError, match="description"):
            obligation_service.create_obligation("  ", "5", food.id, bank.id, date(2024, 1, 1))
        with pytest.raises(ValidationError, match="not found"):
            obligation_service.create_obligation("X", "5", "nope", bank.id, date(2024, 1, 1))
        with pytest.raises(ValidationError, match="Invalid due date"):
            obligation_service.create_obligation("X", "5", food.id, bank.id, "31/02/2024")
        with pytest.raises(ValidationError, match="Invalid amount"):
            obligation_service.create_obligation("X", "NaN", food.id, bank.id, date(2024, 1, 1))

    def test_create_accepts_iso_string(self, obligation_service, bank, food):
        obligation = obligation_service.create_obligation("X", "5", food.id, bank.id, "2024-06-01")
        assert obligation.due_date == date(2024, 6, 1)

    def test_update(self, state, obligation_service, rent):
        updated = obligation_service.update_obligation(rent.id, amount="75", is_recurring=False)
        assert updated.amount == Decimal("75")
        assert not updated.is_recurring
        assert state.resync().get_obligation(rent.id).amount == Decimal("75")

    def test_update_missing(self, obligation_service):
        with pytest.raises(NotFoundError):
            obligation_service.update_obligation("missing", amount="1")

    def test_delete_keeps_settlement(self, state, obligation_service, rent):
        result = obligation_service.mark_as_paid(rent.id)
        obligation_service.delete_obligation(rent.id)
        obligation_service.delete_obligation(rent.id)

        assert state.snapshot.get_obligation(rent.id) is None
        assert state.snapshot.get_transaction(result.transaction.id) is not None
