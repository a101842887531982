"""Obligation lifecycle: scheduling, settlement and due-status classification.

An obligation is pending until it is marked paid, which is terminal. Paying
records the settlement expense and, for recurring obligations, schedules the
next instance one calendar month later.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date as date_type
from decimal import Decimal
from typing import Iterable, Optional

import structlog
from dateutil.relativedelta import relativedelta

from finpro.config import FinanceSettings, get_settings
from finpro.domain.defaults import SETTLEMENT_LABEL
from finpro.domain.entities import (
    EntityKind,
    Obligation,
    ObligationStatus,
    SettlementResult,
    TransactionType,
)
from finpro.domain.errors import (
    DomainError,
    NotFoundError,
    SettlementError,
    ValidationError,
    account_not_found,
    amount_not_positive,
    category_not_found,
    obligation_not_found,
)
from finpro.domain.state import (
    FinanceState,
    insert_op,
    new_id,
    remove_op,
    replace_item,
    update_op,
    without,
)
from finpro.domain.transaction import TransactionService, to_amount

logger = structlog.get_logger(__name__)


def days_between(start: date_type, end: date_type) -> int:
    """Whole days from ``start`` to ``end`` (negative when ``end`` is earlier)."""
    return (end - start).days


def next_due_date(due_date: date_type) -> date_type:
    """Advance one calendar month, clamping to the last day of shorter months."""
    return due_date + relativedelta(months=1)


def classify(obligation: Obligation, today: date_type, window_days: int) -> ObligationStatus:
    """Classify an obligation relative to ``today``.

    ``upcoming`` covers 1..window_days days ahead; anything later is
    ``scheduled``.
    """
    if obligation.is_paid:
        return ObligationStatus.PAID
    days = days_between(today, obligation.due_date)
    if days < 0:
        return ObligationStatus.OVERDUE
    if days == 0:
        return ObligationStatus.DUE_TODAY
    if days <= window_days:
        return ObligationStatus.UPCOMING
    return ObligationStatus.SCHEDULED


def is_upcoming(obligation: Obligation, today: date_type, days_ahead: int) -> bool:
    """True for unpaid obligations due between today and ``days_ahead`` days out."""
    if obligation.is_paid:
        return False
    return 0 <= days_between(today, obligation.due_date) <= days_ahead


def is_overdue(obligation: Obligation, today: date_type) -> bool:
    """True for unpaid obligations whose due date has passed."""
    return not obligation.is_paid and obligation.due_date < today


def sort_by_due_date(obligations: Iterable[Obligation]) -> list[Obligation]:
    """Soonest due first."""
    return sorted(obligations, key=lambda o: o.due_date)


def upcoming_obligations(
    obligations: Iterable[Obligation], today: date_type, days_ahead: int
) -> list[Obligation]:
    """Unpaid obligations due within ``days_ahead`` days, soonest first."""
    return sort_by_due_date(o for o in obligations if is_upcoming(o, today, days_ahead))


def to_due_date(value: date_type | str) -> date_type:
    """Accept a date or an ISO string, raising ValidationError otherwise."""
    if isinstance(value, date_type):
        return value
    try:
        return date_type.fromisoformat(str(value))
    except ValueError as e:
        raise ValidationError(f"Invalid due date '{value}'") from e


class ObligationService:
    """Service for scheduled payment obligations."""

    def __init__(
        self,
        state: FinanceState,
        transactions: Optional[TransactionService] = None,
        settings: Optional[FinanceSettings] = None,
    ):
        """Initialize obligation service.

        Args:
            state: Shared finance state
            transactions: Service used to record settlements
            settings: Window configuration (defaults to get_settings())
        """
        self.state = state
        self.transactions = transactions or TransactionService(state)
        self.settings = settings or get_settings()

    def _validate(self, obligation: Obligation) -> None:
        if not obligation.description:
            raise ValidationError("Obligation description is required")
        if obligation.amount <= 0:
            raise ValidationError(amount_not_positive(obligation.amount))
        snapshot = self.state.snapshot
        if snapshot.get_category(obligation.category_id) is None:
            raise ValidationError(category_not_found(obligation.category_id))
        if snapshot.get_account(obligation.account_id) is None:
            raise ValidationError(account_not_found(obligation.account_id))

    def create_obligation(
        self,
        description: str,
        amount: Decimal | str,
        category_id: str,
        account_id: str,
        due_date: date_type | str,
        is_recurring: bool = False,
    ) -> Obligation:
        """Schedule a new pending obligation.

        Raises:
            ValidationError: If a field is missing or a reference doesn't resolve
        """
        obligation = Obligation(
            id=new_id(),
            description=(description or "").strip(),
            amount=to_amount(amount),
            category_id=category_id,
            account_id=account_id,
            due_date=to_due_date(due_date),
            is_paid=False,
            is_recurring=is_recurring,
        )
        self._validate(obligation)

        snapshot = self.state.snapshot
        self.state.commit(
            replace(snapshot, obligations=snapshot.obligations + (obligation,)),
            [insert_op(EntityKind.OBLIGATION, obligation)],
        )
        logger.info(
            "obligation.created",
            obligation_id=obligation.id,
            due_date=obligation.due_date.isoformat(),
            recurring=is_recurring,
        )
        return obligation

    def get_obligation(self, obligation_id: str) -> Optional[Obligation]:
        """Get obligation by ID, or None if not found."""
        return self.state.snapshot.get_obligation(obligation_id)

    def list_obligations(self, include_paid: bool = True) -> list[Obligation]:
        """List obligations, soonest due first."""
        obligations = self.state.snapshot.obligations
        if not include_paid:
            obligations = tuple(o for o in obligations if not o.is_paid)
        return sort_by_due_date(obligations)

    def update_obligation(
        self,
        obligation_id: str,
        description: Optional[str] = None,
        amount: Optional[Decimal | str] = None,
        category_id: Optional[str] = None,
        account_id: Optional[str] = None,
        due_date: Optional[date_type | str] = None,
        is_recurring: Optional[bool] = None,
    ) -> Obligation:
        """Edit an obligation. Payment status cannot be changed here.

        Raises:
            NotFoundError: If the obligation doesn't exist
            ValidationError: If the edited obligation is invalid
        """
        snapshot = self.state.snapshot
        obligation = snapshot.get_obligation(obligation_id)
        if obligation is None:
            raise NotFoundError(obligation_not_found(obligation_id))

        changes = {}
        if description is not None:
            changes["description"] = description.strip()
        if amount is not None:
            changes["amount"] = to_amount(amount)
        if category_id is not None:
            changes["category_id"] = category_id
        if account_id is not None:
            changes["account_id"] = account_id
        if due_date is not None:
            changes["due_date"] = to_due_date(due_date)
        if is_recurring is not None:
            changes["is_recurring"] = is_recurring
        if not changes:
            return obligation

        updated = replace(obligation, **changes)
        self._validate(updated)
        self.state.commit(
            replace(snapshot, obligations=replace_item(snapshot.obligations, updated)),
            [update_op(EntityKind.OBLIGATION, obligation_id, changes)],
        )
        return updated

    def mark_as_paid(
        self, obligation_id: str, today: Optional[date_type] = None
    ) -> Optional[SettlementResult]:
        """Settle an obligation.

        Marks it paid, records the settlement expense dated ``today`` and, if
        it recurs, schedules the next one a month after its due date. Absent or
        already-paid obligations are left alone and None is returned, so
        repeated calls never settle twice.

        Raises:
            PersistenceError: If the paid flag could not be saved (nothing else
                is attempted)
            SettlementError: If the settlement transaction or the successor
                could not be created; both are always attempted
        """
        snapshot = self.state.snapshot
        obligation = snapshot.get_obligation(obligation_id)
        if obligation is None or obligation.is_paid:
            logger.debug("obligation.pay_skipped", obligation_id=obligation_id)
            return None

        today = today or date_type.today()
        paid = replace(obligation, is_paid=True)
        self.state.commit(
            replace(snapshot, obligations=replace_item(snapshot.obligations, paid)),
            [update_op(EntityKind.OBLIGATION, obligation_id, {"is_paid": True})],
        )
        logger.info("obligation.paid", obligation_id=obligation_id)

        failures: list[DomainError] = []

        transaction = None
        try:
            transaction = self.transactions.create_transaction(
                type=TransactionType.EXPENSE,
                amount=obligation.amount,
                account_id=obligation.account_id,
                category_id=obligation.category_id,
                date=today,
                description=SETTLEMENT_LABEL.format(description=obligation.description),
            )
        except DomainError as e:
            logger.error("obligation.settlement_failed", obligation_id=obligation_id, error=str(e))
            failures.append(e)

        successor = None
        if obligation.is_recurring:
            try:
                successor = self.create_obligation(
                    description=obligation.description,
                    amount=obligation.amount,
                    category_id=obligation.category_id,
                    account_id=obligation.account_id,
                    due_date=next_due_date(obligation.due_date),
                    is_recurring=True,
                )
            except DomainError as e:
                logger.error("obligation.rollover_failed", obligation_id=obligation_id, error=str(e))
                failures.append(e)

        result = SettlementResult(obligation=paid, transaction=transaction, successor=successor)
        if failures:
            details = "; ".join(str(f) for f in failures)
            raise SettlementError(
                f"Obligation {obligation_id} is paid but settlement was incomplete: {details}",
                result=result,
                failures=tuple(failures),
            )
        return result

    def delete_obligation(self, obligation_id: str) -> None:
        """Remove an obligation. Settlement transactions already recorded stay.

        Deleting an id that does not exist is a no-op.
        """
        snapshot = self.state.snapshot
        if snapshot.get_obligation(obligation_id) is None:
            return
        self.state.commit(
            replace(snapshot, obligations=without(snapshot.obligations, obligation_id)),
            [remove_op(EntityKind.OBLIGATION, obligation_id)],
        )
        logger.info("obligation.deleted", obligation_id=obligation_id)

    def status(self, obligation: Obligation, today: Optional[date_type] = None) -> ObligationStatus:
        """Classify using the generic upcoming window."""
        return classify(
            obligation, today or date_type.today(), self.settings.upcoming_window_days
        )

    def upcoming(
        self, today: Optional[date_type] = None, days_ahead: Optional[int] = None
    ) -> list[Obligation]:
        """Unpaid obligations due soon (generic window unless ``days_ahead`` given)."""
        if days_ahead is None:
            days_ahead = self.settings.upcoming_window_days
        return upcoming_obligations(
            self.state.snapshot.obligations, today or date_type.today(), days_ahead
        )

    def alerts(self, today: Optional[date_type] = None) -> list[Obligation]:
        """Unpaid obligations due within the dashboard alert window."""
        return self.upcoming(today=today, days_ahead=self.settings.alert_window_days)
