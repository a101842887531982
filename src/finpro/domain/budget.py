"""Budget domain service and spending evaluation."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from finpro.domain.entities import (
    Budget,
    BudgetStatus,
    EntityKind,
    Period,
    Transaction,
    TransactionType,
)
from finpro.domain.errors import ValidationError, category_not_found
from finpro.domain.state import FinanceState, insert_op, remove_op, replace_item, update_op, without
from finpro.domain.transaction import to_amount

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")


def spent_for_category(
    category_id: str,
    transactions: Iterable[Transaction],
    period: Optional[Period] = None,
) -> Decimal:
    """Sum expense transactions in a category.

    Only ``expense`` transactions count; debt payments and transfers never
    consume a budget.
    """
    return sum(
        (
            t.amount
            for t in transactions
            if t.type == TransactionType.EXPENSE
            and t.category_id == category_id
            and (period is None or period.contains(t.date))
        ),
        ZERO,
    )


def progress(spent: Decimal, limit: Decimal) -> float:
    """Fraction of the limit used, clamped to [0, 1]. Zero when no limit is set."""
    if limit <= 0:
        return 0.0
    return float(min(spent / limit, Decimal("1")))


def is_over(spent: Decimal, limit: Decimal) -> bool:
    """True when a positive limit has been exceeded."""
    return limit > 0 and spent > limit


class BudgetService:
    """Service for per-category spending limits."""

    def __init__(self, state: FinanceState):
        """Initialize budget service.

        Args:
            state: Shared finance state
        """
        self.state = state

    def set_budget(self, category_id: str, limit: Decimal | str) -> Budget:
        """Create or replace the limit for a category.

        A limit of 0 is stored and means "no budget".

        Raises:
            ValidationError: If the category is unknown or the limit negative
        """
        snapshot = self.state.snapshot
        if snapshot.get_category(category_id) is None:
            raise ValidationError(category_not_found(category_id))
        limit = to_amount(limit)
        if limit < 0:
            raise ValidationError(f"Budget limit cannot be negative (got {limit})")

        budget = Budget(category_id=category_id, limit=limit)
        if snapshot.get_budget(category_id) is None:
            budgets = snapshot.budgets + (budget,)
            write = insert_op(EntityKind.BUDGET, budget)
        else:
            budgets = replace_item(snapshot.budgets, budget, key="category_id")
            write = update_op(EntityKind.BUDGET, category_id, {"limit": limit})

        self.state.commit(replace(snapshot, budgets=budgets), [write])
        logger.info("budget.set", category_id=category_id, limit=str(limit))
        return budget

    def remove_budget(self, category_id: str) -> None:
        """Remove a category's budget. Missing budgets are ignored."""
        snapshot = self.state.snapshot
        if snapshot.get_budget(category_id) is None:
            return
        self.state.commit(
            replace(snapshot, budgets=without(snapshot.budgets, category_id, key="category_id")),
            [remove_op(EntityKind.BUDGET, category_id)],
        )

    def get_budget(self, category_id: str) -> Optional[Budget]:
        return self.state.snapshot.get_budget(category_id)

    def list_budgets(self) -> list[Budget]:
        return list(self.state.snapshot.budgets)

    def evaluate(self, period: Optional[Period] = None) -> list[BudgetStatus]:
        """Compare spending with each budget.

        Args:
            period: Restrict spending to a month or year; None counts every
                transaction

        Returns:
            One status per budget whose category still exists
        """
        snapshot = self.state.snapshot
        statuses = []
        for budget in snapshot.budgets:
            category = snapshot.get_category(budget.category_id)
            if category is None:
                continue
            spent = spent_for_category(budget.category_id, snapshot.transactions, period)
            statuses.append(
                BudgetStatus(
                    category_id=budget.category_id,
                    category_name=category.name,
                    limit=budget.limit,
                    spent=spent,
                    progress=progress(spent, budget.limit),
                    is_over=is_over(spent, budget.limit),
                )
            )
        return statuses
