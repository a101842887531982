"""Debt domain service."""

from __future__ import annotations

from dataclasses import replace
from datetime import date as date_type
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog

from finpro.domain.category import fallback_category_id
from finpro.domain.defaults import (
    DEBT_CATEGORY_NAME,
    DEBT_PAYMENT_LABEL,
    INSTALLMENT_LABEL,
    INSTALLMENTS_PER_YEAR,
)
from finpro.domain.entities import (
    Debt,
    DebtProgress,
    DebtType,
    EntityKind,
    Obligation,
    Transaction,
    TransactionType,
)
from finpro.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    debt_delete_blocked,
    debt_not_found,
)
from finpro.domain.obligation import to_due_date
from finpro.domain.state import (
    FinanceState,
    Write,
    insert_op,
    new_id,
    remove_op,
    replace_item,
    update_op,
    without,
)
from finpro.domain.transaction import TransactionService, to_amount

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


def to_debt_type(value: DebtType | str) -> DebtType:
    """Coerce a string to DebtType, raising ValidationError if unknown."""
    try:
        return DebtType(value)
    except ValueError as e:
        valid = ", ".join(t.value for t in DebtType)
        raise ValidationError(f"Unknown debt type '{value}'. Valid types: {valid}") from e


def check_amounts(total_amount: Decimal, remaining_amount: Decimal) -> None:
    """Raise ValidationError unless 0 <= remaining <= total and total > 0."""
    if total_amount <= 0:
        raise ValidationError(f"Debt total must be greater than zero (got {total_amount})")
    if remaining_amount < 0:
        raise ValidationError(f"Remaining amount cannot be negative (got {remaining_amount})")
    if remaining_amount > total_amount:
        raise ValidationError(
            f"Remaining amount {remaining_amount} exceeds the total {total_amount}"
        )


def installment_amount(total_amount: Decimal) -> Decimal:
    """Monthly installment for a debt repaid over one year."""
    return (total_amount / INSTALLMENTS_PER_YEAR).quantize(CENT, rounding=ROUND_HALF_UP)


def debt_progress(debt: Debt) -> DebtProgress:
    """How much of ``debt`` has been repaid."""
    paid = debt.total_amount - debt.remaining_amount
    fraction = float(paid / debt.total_amount) if debt.total_amount > 0 else 0.0
    return DebtProgress(
        debt_id=debt.id,
        paid_amount=paid,
        fraction_paid=fraction,
        is_finished=debt.remaining_amount <= 0,
    )


class DebtService:
    """Service for debts and the payments that pay them down."""

    def __init__(self, state: FinanceState, transactions: Optional[TransactionService] = None):
        """Initialize debt service.

        Args:
            state: Shared finance state
            transactions: Service used to record payments
        """
        self.state = state
        self.transactions = transactions or TransactionService(state)

    def create_debt(
        self,
        name: str,
        total_amount: Decimal | str,
        remaining_amount: Optional[Decimal | str] = None,
        type: DebtType | str = DebtType.OTHER,
        interest_rate: Optional[Decimal | str] = None,
        due_date: Optional[date_type | str] = None,
        icon: str = "📉",
        color: str = "#6366f1",
        schedule_installment: bool = False,
    ) -> Debt:
        """Create a debt.

        Args:
            name: Debt name
            total_amount: Original amount owed
            remaining_amount: Outstanding amount, defaults to the total
            type: credit_card, loan, mortgage, vehicle or other
            interest_rate: Optional annual rate, informational
            due_date: Optional next due date
            icon: Display icon
            color: Display color
            schedule_installment: With a due date, also schedule a recurring
                monthly obligation of total/12 on the debt category, paid
                from the first account

        Raises:
            ValidationError: If the name is empty or the amounts are out of bounds
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Debt name is required")
        total = to_amount(total_amount)
        remaining = total if remaining_amount is None else to_amount(remaining_amount)
        check_amounts(total, remaining)

        debt = Debt(
            id=new_id(),
            name=name,
            total_amount=total,
            remaining_amount=remaining,
            type=to_debt_type(type),
            icon=icon,
            color=color,
            interest_rate=None if interest_rate is None else to_amount(interest_rate),
            due_date=None if due_date is None else to_due_date(due_date),
        )

        snapshot = self.state.snapshot
        new_snapshot = replace(snapshot, debts=snapshot.debts + (debt,))
        writes: list[Write] = [insert_op(EntityKind.DEBT, debt)]

        if schedule_installment and debt.due_date is not None:
            installment = Obligation(
                id=new_id(),
                description=INSTALLMENT_LABEL.format(name=debt.name),
                amount=installment_amount(total),
                category_id=fallback_category_id(snapshot, DEBT_CATEGORY_NAME),
                account_id=snapshot.accounts[0].id,
                due_date=debt.due_date,
                is_recurring=True,
            )
            new_snapshot = replace(
                new_snapshot, obligations=new_snapshot.obligations + (installment,)
            )
            writes.append(insert_op(EntityKind.OBLIGATION, installment))

        self.state.commit(new_snapshot, writes)
        logger.info("debt.created", debt_id=debt.id, total=str(total), installment=len(writes) > 1)
        return debt

    def get_debt(self, debt_id: str) -> Optional[Debt]:
        """Get debt by ID, or None if not found."""
        return self.state.snapshot.get_debt(debt_id)

    def list_debts(self) -> list[Debt]:
        return list(self.state.snapshot.debts)

    def update_debt(
        self,
        debt_id: str,
        name: Optional[str] = None,
        total_amount: Optional[Decimal | str] = None,
        remaining_amount: Optional[Decimal | str] = None,
        type: Optional[DebtType | str] = None,
        interest_rate: Optional[Decimal | str] = None,
        due_date: Optional[date_type | str] = None,
        icon: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Debt:
        """Update debt fields that are provided.

        Raises:
            NotFoundError: If the debt doesn't exist
            ValidationError: If the resulting amounts are out of bounds
        """
        snapshot = self.state.snapshot
        debt = snapshot.get_debt(debt_id)
        if debt is None:
            raise NotFoundError(debt_not_found(debt_id))

        changes = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Debt name is required")
            changes["name"] = name.strip()
        if total_amount is not None:
            changes["total_amount"] = to_amount(total_amount)
        if remaining_amount is not None:
            # a manual correction replaces whatever payments had overshot
            changes["remaining_amount"] = to_amount(remaining_amount)
            changes["overpaid_amount"] = Decimal("0")
        if type is not None:
            changes["type"] = to_debt_type(type)
        if interest_rate is not None:
            changes["interest_rate"] = to_amount(interest_rate)
        if due_date is not None:
            changes["due_date"] = to_due_date(due_date)
        if icon is not None:
            changes["icon"] = icon
        if color is not None:
            changes["color"] = color
        if not changes:
            return debt

        updated = replace(debt, **changes)
        check_amounts(updated.total_amount, updated.remaining_amount)
        self.state.commit(
            replace(snapshot, debts=replace_item(snapshot.debts, updated)),
            [update_op(EntityKind.DEBT, debt_id, changes)],
        )
        return updated

    def delete_debt(self, debt_id: str) -> None:
        """Delete a debt.

        Deleting an id that does not exist is a no-op.

        Raises:
            DependencyError: If payments still reference the debt
        """
        snapshot = self.state.snapshot
        if snapshot.get_debt(debt_id) is None:
            return
        payments = sum(1 for t in snapshot.transactions if t.debt_id == debt_id)
        if payments:
            raise DependencyError(debt_delete_blocked(debt_id, payments))

        self.state.commit(
            replace(snapshot, debts=without(snapshot.debts, debt_id)),
            [remove_op(EntityKind.DEBT, debt_id)],
        )
        logger.info("debt.deleted", debt_id=debt_id)

    def record_payment(
        self,
        debt_id: str,
        amount: Decimal | str,
        account_id: str,
        date: Optional[date_type] = None,
    ) -> Transaction:
        """Pay toward a debt from an account.

        Records a debt_payment transaction on the debt category, which lowers
        both the account balance and the debt's remaining amount.

        Raises:
            NotFoundError: If the debt doesn't exist
            ValidationError: If the amount or account is invalid
        """
        debt = self.state.snapshot.get_debt(debt_id)
        if debt is None:
            raise NotFoundError(debt_not_found(debt_id))
        return self.transactions.create_transaction(
            type=TransactionType.DEBT_PAYMENT,
            amount=amount,
            account_id=account_id,
            date=date or date_type.today(),
            description=DEBT_PAYMENT_LABEL.format(name=debt.name),
            debt_id=debt_id,
        )

    def progress(self, debt_id: str) -> DebtProgress:
        """Repayment progress of a debt.

        Raises:
            NotFoundError: If the debt doesn't exist
        """
        debt = self.state.snapshot.get_debt(debt_id)
        if debt is None:
            raise NotFoundError(debt_not_found(debt_id))
        return debt_progress(debt)
