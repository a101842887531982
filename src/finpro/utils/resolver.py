"""Resolve user-typed names or ids to entity ids."""

from typing import Iterable, Protocol


class _Named(Protocol):
    id: str
    name: str


def _resolve(kind: str, items: Iterable[_Named], value: str) -> str:
    items = list(items)
    for item in items:
        if item.id == value:
            return item.id
    matches = [item for item in items if item.name.lower() == value.strip().lower()]
    if len(matches) == 1:
        return matches[0].id
    if len(matches) > 1:
        raise ValueError(f"{kind} name '{value}' is ambiguous; use its id")
    raise ValueError(f"{kind} '{value}' not found")


def resolve_account(account_service, account: str) -> str:
    """Resolve account name or ID to account ID.

    Raises:
        ValueError: If account is not found
    """
    return _resolve("Account", account_service.list_accounts(), account)


def resolve_category(category_service, category: str) -> str:
    """Resolve category name or ID to category ID.

    Raises:
        ValueError: If category is not found
    """
    return _resolve("Category", category_service.list_categories(), category)


def resolve_debt(debt_service, debt: str) -> str:
    """Resolve debt name or ID to debt ID.

    Raises:
        ValueError: If debt is not found
    """
    return _resolve("Debt", debt_service.list_debts(), debt)
