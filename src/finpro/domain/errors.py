"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class PersistenceError(DomainError):
    """Durable write or read failed after validation succeeded."""


class SettlementError(DomainError):
    """Marking an obligation as paid only partially succeeded.

    The obligation itself is paid; ``result`` holds what was created and
    ``failures`` lists each step that failed.
    """

    def __init__(self, message: str, result, failures: tuple[Exception, ...]):
        super().__init__(message)
        self.result = result
        self.failures = failures


class ExternalServiceError(Exception):
    """AI collaborator unavailable, unauthorized or rate limited.

    Never a ledger fault: callers recover it into a fallback value.
    """


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def debt_not_found(debt_id: str) -> str:
    """Return message for missing debt."""
    return f"Debt {debt_id} not found"


def obligation_not_found(obligation_id: str) -> str:
    """Return message for missing obligation."""
    return f"Obligation {obligation_id} not found"


def amount_not_positive(amount) -> str:
    """Return message for a non-positive amount."""
    return f"Amount must be greater than zero (got {amount})"


def last_item_delete_blocked(kind: str, item_id: str) -> str:
    """Return message when deleting would leave no accounts or categories."""
    return f"Cannot delete {kind} {item_id}: at least one {kind} must remain"


def account_delete_blocked(
    account_id: str, transaction_count: int, obligation_count: int
) -> str:
    """Return message when account has dependent transactions or obligations."""
    parts = []
    if transaction_count > 0:
        parts.append(
            f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}"
        )
    if obligation_count > 0:
        parts.append(
            f"{obligation_count} pending obligation{'s' if obligation_count != 1 else ''}"
        )
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )


def debt_delete_blocked(debt_id: str, payment_count: int) -> str:
    """Return message when a debt still has payments on record."""
    return (
        f"Cannot delete debt {debt_id}: it has {payment_count} "
        f"payment{'s' if payment_count != 1 else ''}. Delete them first."
    )
