"""Mapper functions to convert between domain models and storage records.

This layer isolates the conversion logic: SQLAlchemy rows and snake_case JSON
records on one side, frozen domain entities on the other. Records coming from
storage are validated here rather than trusted.
"""

from dataclasses import asdict, fields as dataclass_fields
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from finpro.domain import entities as domain
from finpro.domain.entities import EntityKind
from finpro.domain.errors import PersistenceError
from finpro.database.models import (
    Account as ORMAccount,
    Budget as ORMBudget,
    Category as ORMCategory,
    Debt as ORMDebt,
    Obligation as ORMObligation,
    Settings as ORMSettings,
    Transaction as ORMTransaction,
)

ORM_MODELS = {
    EntityKind.ACCOUNT: ORMAccount,
    EntityKind.CATEGORY: ORMCategory,
    EntityKind.TRANSACTION: ORMTransaction,
    EntityKind.DEBT: ORMDebt,
    EntityKind.OBLIGATION: ORMObligation,
    EntityKind.BUDGET: ORMBudget,
}

DOMAIN_TYPES = {
    EntityKind.ACCOUNT: domain.Account,
    EntityKind.CATEGORY: domain.Category,
    EntityKind.TRANSACTION: domain.Transaction,
    EntityKind.DEBT: domain.Debt,
    EntityKind.OBLIGATION: domain.Obligation,
    EntityKind.BUDGET: domain.Budget,
}


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; stored stamps are always UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        balance=Decimal(orm_account.balance),
        color=orm_account.color,
        icon=orm_account.icon,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        color=orm_category.color,
        icon=orm_category.icon,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        amount=Decimal(orm_transaction.amount),
        category_id=orm_transaction.category_id,
        account_id=orm_transaction.account_id,
        target_account_id=orm_transaction.target_account_id,
        debt_id=orm_transaction.debt_id,
        description=orm_transaction.description or "",
        date=orm_transaction.date,
        type=domain.TransactionType(orm_transaction.type),
        attachments=tuple(
            domain.Attachment(**item) for item in (orm_transaction.attachments or [])
        ),
        created_at=_aware(orm_transaction.created_at),
    )


def debt_to_domain(orm_debt: ORMDebt) -> domain.Debt:
    """Convert SQLAlchemy Debt model to domain Debt entity."""
    return domain.Debt(
        id=orm_debt.id,
        name=orm_debt.name,
        total_amount=Decimal(orm_debt.total_amount),
        remaining_amount=Decimal(orm_debt.remaining_amount),
        overpaid_amount=Decimal(orm_debt.overpaid_amount or 0),
        interest_rate=(
            Decimal(orm_debt.interest_rate) if orm_debt.interest_rate is not None else None
        ),
        due_date=orm_debt.due_date,
        type=domain.DebtType(orm_debt.type),
        icon=orm_debt.icon,
        color=orm_debt.color,
    )


def obligation_to_domain(orm_obligation: ORMObligation) -> domain.Obligation:
    """Convert SQLAlchemy Obligation model to domain Obligation entity."""
    return domain.Obligation(
        id=orm_obligation.id,
        description=orm_obligation.description,
        amount=Decimal(orm_obligation.amount),
        category_id=orm_obligation.category_id,
        account_id=orm_obligation.account_id,
        due_date=orm_obligation.due_date,
        is_paid=bool(orm_obligation.is_paid),
        is_recurring=bool(orm_obligation.is_recurring),
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(category_id=orm_budget.category_id, limit=Decimal(orm_budget.limit))


def settings_to_domain(orm_settings: ORMSettings) -> domain.AppSettings:
    """Convert SQLAlchemy Settings model to domain AppSettings."""
    return domain.AppSettings(
        user_name=orm_settings.user_name,
        currency=orm_settings.currency,
        primary_color=orm_settings.primary_color,
        secondary_color=orm_settings.secondary_color,
        accent_color=orm_settings.accent_color,
        logo=orm_settings.logo,
        ai_api_key=orm_settings.ai_api_key,
    )


ORM_TO_DOMAIN = {
    EntityKind.ACCOUNT: account_to_domain,
    EntityKind.CATEGORY: category_to_domain,
    EntityKind.TRANSACTION: transaction_to_domain,
    EntityKind.DEBT: debt_to_domain,
    EntityKind.OBLIGATION: obligation_to_domain,
    EntityKind.BUDGET: budget_to_domain,
}


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


def fields_to_columns(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert domain field values into column values (enums, attachments)."""
    converted = {}
    for name, value in fields.items():
        if name == "attachments":
            value = [asdict(item) if not isinstance(item, dict) else item for item in value]
        converted[name] = _plain(value)
    return converted


def record_to_columns(record: Any) -> dict[str, Any]:
    """Convert a domain record into keyword arguments for its ORM model."""
    return fields_to_columns(
        {f.name: getattr(record, f.name) for f in dataclass_fields(record)}
    )


# JSON records


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, list):
        return [_json_value(item) for item in value]
    if isinstance(value, dict):
        return {key: _json_value(item) for key, item in value.items()}
    return value


def fields_to_json(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert domain field values into JSON-safe snake_case values."""
    return {name: _json_value(value) for name, value in fields_to_columns(fields).items()}


def record_to_json(record: Any) -> dict[str, Any]:
    """Convert a domain record (or settings) into a JSON-safe dict."""
    return _json_value(record_to_columns(record))


def _decimal(data: dict, key: str, optional: bool = False) -> Optional[Decimal]:
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise KeyError(key)
    return Decimal(str(value))


def _date(data: dict, key: str, optional: bool = False) -> Optional[date]:
    value = data.get(key)
    if value is None:
        if optional:
            return None
        raise KeyError(key)
    return date.fromisoformat(value)


def _json_to_domain(kind: EntityKind, data: dict) -> Any:
    if kind == EntityKind.ACCOUNT:
        return domain.Account(
            id=data["id"],
            name=data["name"],
            type=domain.AccountType(data["type"]),
            balance=_decimal(data, "balance"),
            color=data.get("color", "#6366f1"),
            icon=data.get("icon", "🏦"),
        )
    if kind == EntityKind.CATEGORY:
        return domain.Category(
            id=data["id"],
            name=data["name"],
            color=data.get("color", "#64748b"),
            icon=data.get("icon", "📦"),
        )
    if kind == EntityKind.TRANSACTION:
        created_at = data.get("created_at")
        return domain.Transaction(
            id=data["id"],
            amount=_decimal(data, "amount"),
            category_id=data["category_id"],
            account_id=data["account_id"],
            target_account_id=data.get("target_account_id"),
            debt_id=data.get("debt_id"),
            description=data.get("description") or "",
            date=_date(data, "date"),
            type=domain.TransactionType(data["type"]),
            attachments=tuple(
                domain.Attachment(name=a["name"], type=a["type"], data=a["data"])
                for a in data.get("attachments") or []
            ),
            created_at=_aware(datetime.fromisoformat(created_at)) if created_at else None,
        )
    if kind == EntityKind.DEBT:
        return domain.Debt(
            id=data["id"],
            name=data["name"],
            total_amount=_decimal(data, "total_amount"),
            remaining_amount=_decimal(data, "remaining_amount"),
            overpaid_amount=_decimal(data, "overpaid_amount", optional=True) or Decimal("0"),
            interest_rate=_decimal(data, "interest_rate", optional=True),
            due_date=_date(data, "due_date", optional=True),
            type=domain.DebtType(data.get("type", "other")),
            icon=data.get("icon", "📉"),
            color=data.get("color", "#6366f1"),
        )
    if kind == EntityKind.OBLIGATION:
        return domain.Obligation(
            id=data["id"],
            description=data["description"],
            amount=_decimal(data, "amount"),
            category_id=data["category_id"],
            account_id=data["account_id"],
            due_date=_date(data, "due_date"),
            is_paid=bool(data.get("is_paid", False)),
            is_recurring=bool(data.get("is_recurring", False)),
        )
    return domain.Budget(category_id=data["category_id"], limit=_decimal(data, "limit"))


def json_to_domain(kind: EntityKind, data: Any) -> Any:
    """Build a domain record from a JSON record, validating its shape.

    Raises:
        PersistenceError: If the record is missing fields or has bad values
    """
    if not isinstance(data, dict):
        raise PersistenceError(f"Malformed {kind.value} record: expected an object")
    try:
        return _json_to_domain(kind, data)
    except (KeyError, TypeError, ValueError, InvalidOperation) as e:
        raise PersistenceError(f"Malformed {kind.value} record {data.get('id', '?')}: {e}") from e


def json_to_settings(data: Any) -> domain.AppSettings:
    """Build AppSettings from a JSON object, ignoring unknown keys."""
    if not isinstance(data, dict):
        raise PersistenceError("Malformed settings record: expected an object")
    known = {f.name for f in dataclass_fields(domain.AppSettings)}
    return domain.AppSettings(**{k: v for k, v in data.items() if k in known})
