"""Category domain service."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import structlog

from finpro.domain.entities import Category, EntityKind, LedgerSnapshot
from finpro.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    category_not_found,
    last_item_delete_blocked,
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

logger = structlog.get_logger(__name__)


def find_category_by_name(snapshot: LedgerSnapshot, name: str) -> Optional[Category]:
    """Return the category with exactly this name, if any."""
    return next((c for c in snapshot.categories if c.name == name), None)


def fallback_category_id(snapshot: LedgerSnapshot, name: str) -> str:
    """Return the id of the named reserved category, else the first category."""
    category = find_category_by_name(snapshot, name)
    if category is not None:
        return category.id
    if not snapshot.categories:
        raise ValidationError("No categories available")
    return snapshot.categories[0].id


class CategoryService:
    """Service for managing categories."""

    def __init__(self, state: FinanceState):
        """Initialize category service.

        Args:
            state: Shared finance state
        """
        self.state = state

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        for cat in self.state.snapshot.categories:
            if cat.id != exclude_id and cat.name == name:
                raise ValidationError(f"Category with name '{name}' already exists")
        return name

    def create_category(self, name: str, color: str = "#64748b", icon: str = "📦") -> Category:
        """Create a category.

        Raises:
            ValidationError: If the name is empty or already used
        """
        category = Category(id=new_id(), name=self._check_name(name), color=color, icon=icon)
        snapshot = self.state.snapshot
        self.state.commit(
            replace(snapshot, categories=snapshot.categories + (category,)),
            [insert_op(EntityKind.CATEGORY, category)],
        )
        logger.info("category.created", category_id=category.id, name=category.name)
        return category

    def get_category(self, category_id: str) -> Optional[Category]:
        """Get category by ID, or None if not found."""
        return self.state.snapshot.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name, or None if not found."""
        return find_category_by_name(self.state.snapshot, name)

    def list_categories(self) -> list[Category]:
        """List all categories in creation order."""
        return list(self.state.snapshot.categories)

    def update_category(
        self,
        category_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Category:
        """Update category fields that are provided.

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If the new name is empty or already used
        """
        snapshot = self.state.snapshot
        category = snapshot.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))

        changes = {}
        if name is not None:
            changes["name"] = self._check_name(name, exclude_id=category_id)
        if color is not None:
            changes["color"] = color
        if icon is not None:
            changes["icon"] = icon
        if not changes:
            return category

        updated = replace(category, **changes)
        self.state.commit(
            replace(snapshot, categories=replace_item(snapshot.categories, updated)),
            [update_op(EntityKind.CATEGORY, category_id, changes)],
        )
        return updated

    def delete_category(self, category_id: str) -> None:
        """Delete a category and its budget.

        Deleting an id that does not exist is a no-op.

        Raises:
            DependencyError: If it is the last category, or transactions or
                obligations still use it
        """
        snapshot = self.state.snapshot
        if snapshot.get_category(category_id) is None:
            return

        if len(snapshot.categories) <= 1:
            raise DependencyError(last_item_delete_blocked("category", category_id))

        in_use = sum(1 for t in snapshot.transactions if t.category_id == category_id)
        in_use += sum(1 for o in snapshot.obligations if o.category_id == category_id)
        if in_use:
            raise DependencyError(
                f"Cannot delete category {category_id}: it is used by {in_use} "
                f"transaction{'s' if in_use != 1 else ''} or obligation{'s' if in_use != 1 else ''}"
            )

        writes = [remove_op(EntityKind.CATEGORY, category_id)]
        budgets = snapshot.budgets
        if snapshot.get_budget(category_id) is not None:
            budgets = without(budgets, category_id, key="category_id")
            writes.insert(0, remove_op(EntityKind.BUDGET, category_id))

        self.state.commit(
            replace(
                snapshot,
                categories=without(snapshot.categories, category_id),
                budgets=budgets,
            ),
            writes,
        )
        logger.info("category.deleted", category_id=category_id)
