"""Tests for the pure balance mutation engine."""

from datetime import date
from decimal import Decimal

import pytest

from finpro.domain.balance import (
    account_deltas,
    apply_effect,
    changed,
    net_effect,
    reverse_effect,
)
from finpro.domain.entities import Account, AccountType, Debt, Transaction, TransactionType
from finpro.domain.errors import ValidationError


def make_accounts():
    return {
        "a": Account(id="a", name="A", type=AccountType.BANK, balance=Decimal("100")),
        "b": Account(id="b", name="B", type=AccountType.CASH, balance=Decimal("50")),
    }


def make_debts():
    return {
        "d": Debt(
            id="d",
            name="Loan",
            total_amount=Decimal("1000"),
            remaining_amount=Decimal("900"),
        )
    }


def txn(type_, amount, account_id="a", **kwargs):
    return Transaction(
        id="t",
        amount=Decimal(amount),
        category_id="c",
        account_id=account_id,
        date=date(2024, 1, 1),
        type=type_,
        **kwargs,
    )


class TestApplyEffect:
    """Tests for apply_effect per transaction type."""

    def test_income_credits_account(self):
        accounts, _ = apply_effect(txn(TransactionType.INCOME, "20"), make_accounts(), {})
        assert accounts["a"].balance == Decimal("120")
        assert accounts["b"].balance == Decimal("50")

    def test_expense_debits_account(self):
        accounts, _ = apply_effect(txn(TransactionType.EXPENSE, "30"), make_accounts(), {})
        assert accounts["a"].balance == Decimal("70")

    def test_expense_may_overdraw(self):
        accounts, _ = apply_effect(txn(TransactionType.EXPENSE, "150"), make_accounts(), {})
        assert accounts["a"].balance == Decimal("-50")

    def test_transfer_moves_between_accounts(self):
        transfer = txn(TransactionType.TRANSFER, "40", target_account_id="b")
        accounts, _ = apply_effect(transfer, make_accounts(), {})
        assert accounts["a"].balance == Decimal("60")
        assert accounts["b"].balance == Decimal("90")
        assert net_effect(transfer) == Decimal("0")

    def test_debt_payment_debits_account_and_reduces_debt(self):
        payment = txn(TransactionType.DEBT_PAYMENT, "100", debt_id="d")
        accounts, debts = apply_effect(payment, make_accounts(), make_debts())
        assert accounts["a"].balance == Decimal("0")
        assert debts["d"].remaining_amount == Decimal("800")

    def test_debt_payment_floors_remaining_at_zero(self):
        payment = txn(TransactionType.DEBT_PAYMENT, "950", debt_id="d")
        _, debts = apply_effect(payment, make_accounts(), make_debts())
        assert debts["d"].remaining_amount == Decimal("0")

    def test_inputs_are_not_mutated(self):
        accounts = make_accounts()
        apply_effect(txn(TransactionType.EXPENSE, "30"), accounts, {})
        assert accounts["a"].balance == Decimal("100")


class TestValidation:
    """Invalid transactions are rejected before anything changes."""

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amount(self, amount):
        with pytest.raises(ValidationError, match="greater than zero"):
            apply_effect(txn(TransactionType.EXPENSE, amount), make_accounts(), {})

    def test_unknown_account(self):
        with pytest.raises(ValidationError, match="not found"):
            apply_effect(txn(TransactionType.EXPENSE, "5", account_id="zzz"), make_accounts(), {})

    def test_transfer_without_target(self):
        with pytest.raises(ValidationError, match="target"):
            apply_effect(txn(TransactionType.TRANSFER, "5"), make_accounts(), {})

    def test_transfer_to_same_account(self):
        with pytest.raises(ValidationError, match="differ"):
            apply_effect(
                txn(TransactionType.TRANSFER, "5", target_account_id="a"), make_accounts(), {}
            )

    def test_transfer_to_unknown_account(self):
        with pytest.raises(ValidationError, match="not found"):
            apply_effect(
                txn(TransactionType.TRANSFER, "5", target_account_id="zzz"), make_accounts(), {}
            )

    def test_debt_payment_unknown_debt(self):
        with pytest.raises(ValidationError, match="Debt zzz not found"):
            apply_effect(
                txn(TransactionType.DEBT_PAYMENT, "5", debt_id="zzz"), make_accounts(), make_debts()
            )


class TestReverseEffect:
    """Reversal restores the state before the transaction."""

    @pytest.mark.parametrize(
        "transaction",
        [
            txn(TransactionType.INCOME, "25"),
            txn(TransactionType.EXPENSE, "25"),
            txn(TransactionType.TRANSFER, "25", target_account_id="b"),
            txn(TransactionType.DEBT_PAYMENT, "25", debt_id="d"),
        ],
        ids=["income", "expense", "transfer", "debt_payment"],
    )
    def test_apply_then_reverse_is_identity(self, transaction):
        accounts, debts = make_accounts(), make_debts()
        applied = apply_effect(transaction, accounts, debts)
        restored_accounts, restored_debts = reverse_effect(transaction, *applied)
        assert restored_accounts == accounts
        assert restored_debts == debts

    def test_reversal_caps_remaining_at_total(self):
        debts = make_debts()
        payment = txn(TransactionType.DEBT_PAYMENT, "500", debt_id="d")
        _, reversed_debts = reverse_effect(payment, make_accounts(), debts)
        assert reversed_debts["d"].remaining_amount == Decimal("1000")

    @pytest.mark.parametrize("undo,left", [("first", "500"), ("second", "300")])
    def test_reversal_accounts_for_floored_payments(self, undo, left):
        """Payments of 700 and 500 overshoot a 1000 debt; undoing one leaves the other applied."""
        debts = {
            "d": Debt(id="d", name="Loan", total_amount=Decimal("1000"), remaining_amount=Decimal("1000"))
        }
        first = txn(TransactionType.DEBT_PAYMENT, "700", debt_id="d")
        second = txn(TransactionType.DEBT_PAYMENT, "500", debt_id="d")
        accounts, debts = apply_effect(first, make_accounts(), debts)
        accounts, debts = apply_effect(second, accounts, debts)
        assert debts["d"].remaining_amount == Decimal("0")
        assert debts["d"].overpaid_amount == Decimal("200")

        undone, kept = (first, second) if undo == "first" else (second, first)
        accounts, debts = reverse_effect(undone, accounts, debts)
        assert debts["d"].remaining_amount == Decimal(left)
        assert debts["d"].overpaid_amount == Decimal("0")

        _, debts = reverse_effect(kept, accounts, debts)
        assert debts["d"].remaining_amount == Decimal("1000")


def test_account_deltas_for_transfer():
    transfer = txn(TransactionType.TRANSFER, "10", target_account_id="b")
    assert account_deltas(transfer) == {"a": Decimal("-10"), "b": Decimal("10")}


def test_changed_reports_only_modified_ids():
    before = make_accounts()
    after, _ = apply_effect(txn(TransactionType.INCOME, "1"), before, {})
    assert changed(before, after) == ["a"]
