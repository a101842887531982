"""Aggregates and read models built from a ledger snapshot."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from finpro.config import FinanceSettings, get_settings
from finpro.domain.entities import (
    Account,
    CategoryTotal,
    Debt,
    FinanceOverview,
    LedgerSnapshot,
    Period,
    PeriodTotals,
    Transaction,
    TransactionType,
)
from finpro.domain.obligation import upcoming_obligations
from finpro.domain.state import FinanceState

ZERO = Decimal("0")

OUTFLOW_TYPES = (TransactionType.EXPENSE, TransactionType.DEBT_PAYMENT)


def net_worth(accounts: Iterable[Account]) -> Decimal:
    """Sum of all account balances."""
    return sum((a.balance for a in accounts), ZERO)


def total_outstanding_debt(debts: Iterable[Debt]) -> Decimal:
    """Sum of remaining amounts over all debts."""
    return sum((d.remaining_amount for d in debts), ZERO)


def _in_period(transaction: Transaction, period: Optional[Period]) -> bool:
    return period is None or period.contains(transaction.date)


def income_for_period(transactions: Iterable[Transaction], period: Optional[Period] = None) -> Decimal:
    """Total income in ``period`` (all time when None)."""
    return sum(
        (
            t.amount
            for t in transactions
            if t.type == TransactionType.INCOME and _in_period(t, period)
        ),
        ZERO,
    )


def expense_for_period(transactions: Iterable[Transaction], period: Optional[Period] = None) -> Decimal:
    """Total outflow in ``period``: expenses plus debt payments. Transfers are excluded."""
    return sum(
        (t.amount for t in transactions if t.type in OUTFLOW_TYPES and _in_period(t, period)),
        ZERO,
    )


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    return income_for_period(transactions)


def total_expense(transactions: Iterable[Transaction]) -> Decimal:
    return expense_for_period(transactions)


def category_expense_breakdown(
    snapshot: LedgerSnapshot, period: Optional[Period] = None
) -> list[CategoryTotal]:
    """Outflow per category in ``period``, largest first.

    Categories without spending are omitted.
    """
    amounts: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in snapshot.transactions:
        if txn.type in OUTFLOW_TYPES and _in_period(txn, period):
            amounts[txn.category_id] += txn.amount

    totals = []
    for category_id, amount in amounts.items():
        category = snapshot.get_category(category_id)
        name = category.name if category else category_id
        totals.append(CategoryTotal(category_id=category_id, category_name=name, amount=amount))
    return sorted(totals, key=lambda t: t.amount, reverse=True)


def monthly_series(transactions: Iterable[Transaction], year: int) -> list[PeriodTotals]:
    """Income and expense for each month of ``year``, January first."""
    transactions = list(transactions)
    return [
        PeriodTotals(
            label=f"{year:04d}-{month:02d}",
            income=income_for_period(transactions, Period(year, month)),
            expense=expense_for_period(transactions, Period(year, month)),
        )
        for month in range(1, 13)
    ]


def daily_expense_series(
    transactions: Iterable[Transaction], today: date, days: int = 7
) -> list[PeriodTotals]:
    """Income and expense per day for the ``days`` days ending today, oldest first."""
    by_day: dict[date, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        by_day[txn.date].append(txn)

    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        bucket = by_day.get(day, [])
        series.append(
            PeriodTotals(
                label=day.isoformat(),
                income=income_for_period(bucket),
                expense=expense_for_period(bucket),
            )
        )
    return series


class SummaryService:
    """Service for dashboard and analysis read models."""

    def __init__(self, state: FinanceState, settings: Optional[FinanceSettings] = None):
        """Initialize summary service.

        Args:
            state: Shared finance state
            settings: Window configuration (defaults to get_settings())
        """
        self.state = state
        self.settings = settings or get_settings()

    def overview(self, today: Optional[date] = None, period: Optional[Period] = None) -> FinanceOverview:
        """Build the dashboard overview.

        Args:
            today: Reference day for due alerts (defaults to today)
            period: Restrict income and expense totals; None means all time

        Returns:
            FinanceOverview with obligations due within the alert window
        """
        snapshot = self.state.snapshot
        today = today or date.today()
        return FinanceOverview(
            net_worth=net_worth(snapshot.accounts),
            total_outstanding_debt=total_outstanding_debt(snapshot.debts),
            total_income=income_for_period(snapshot.transactions, period),
            total_expense=expense_for_period(snapshot.transactions, period),
            upcoming_obligations=tuple(
                upcoming_obligations(snapshot.obligations, today, self.settings.alert_window_days)
            ),
        )

    def category_breakdown(self, period: Optional[Period] = None) -> list[CategoryTotal]:
        return category_expense_breakdown(self.state.snapshot, period)

    def monthly(self, year: int) -> list[PeriodTotals]:
        return monthly_series(self.state.snapshot.transactions, year)

    def daily(self, today: Optional[date] = None, days: int = 7) -> list[PeriodTotals]:
        return daily_expense_series(self.state.snapshot.transactions, today or date.today(), days)
