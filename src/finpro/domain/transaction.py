"""Transaction domain service."""

from __future__ import annotations

from dataclasses import replace
from datetime import date as date_type
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

import structlog

from finpro.domain.balance import apply_effect, changed, reverse_effect
from finpro.domain.category import fallback_category_id
from finpro.domain.defaults import DEBT_CATEGORY_NAME, TRANSFER_CATEGORY_NAME
from finpro.domain.entities import (
    Attachment,
    EntityKind,
    LedgerSnapshot,
    Transaction,
    TransactionType,
)
from finpro.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    transaction_not_found,
)
from finpro.domain.state import (
    FinanceState,
    Write,
    insert_op,
    new_id,
    order_transactions,
    remove_op,
    update_op,
    utc_now,
    without,
)

logger = structlog.get_logger(__name__)


def to_amount(value: Any) -> Decimal:
    """Coerce a user-supplied amount to Decimal.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(f"Invalid amount '{value}'") from e
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount '{value}'")
    return amount


def to_transaction_type(value: TransactionType | str) -> TransactionType:
    """Coerce a string to TransactionType, raising ValidationError if unknown."""
    try:
        return TransactionType(value)
    except ValueError as e:
        valid = ", ".join(t.value for t in TransactionType)
        raise ValidationError(f"Unknown transaction type '{value}'. Valid types: {valid}") from e


def balance_writes(before: LedgerSnapshot, accounts: dict, debts: dict) -> list[Write]:
    """Return adapter writes for every account and debt whose balance moved."""
    old_accounts = {a.id: a for a in before.accounts}
    old_debts = {d.id: d for d in before.debts}
    writes = [
        update_op(EntityKind.ACCOUNT, account_id, {"balance": accounts[account_id].balance})
        for account_id in changed(old_accounts, accounts)
    ]
    writes.extend(
        update_op(
            EntityKind.DEBT,
            debt_id,
            {
                "remaining_amount": debts[debt_id].remaining_amount,
                "overpaid_amount": debts[debt_id].overpaid_amount,
            },
        )
        for debt_id in changed(old_debts, debts)
    )
    return writes


class TransactionService:
    """Service for recording transactions and keeping balances consistent.

    Every change is expressed as balance effects: creating applies the
    transaction's effect, deleting reverses it, and updating reverses the old
    version before applying the new one.
    """

    def __init__(self, state: FinanceState):
        """Initialize transaction service.

        Args:
            state: Shared finance state
        """
        self.state = state

    def _normalize(self, snapshot: LedgerSnapshot, transaction: Transaction) -> Transaction:
        """Drop references that do not apply to the type and resolve the category."""
        target = transaction.target_account_id
        debt_id = transaction.debt_id
        if transaction.type != TransactionType.TRANSFER:
            target = None
        if transaction.type != TransactionType.DEBT_PAYMENT:
            debt_id = None

        category_id = transaction.category_id
        if not category_id:
            if transaction.type == TransactionType.TRANSFER:
                category_id = fallback_category_id(snapshot, TRANSFER_CATEGORY_NAME)
            elif transaction.type == TransactionType.DEBT_PAYMENT:
                category_id = fallback_category_id(snapshot, DEBT_CATEGORY_NAME)
            else:
                raise ValidationError("Category is required")
        if snapshot.get_category(category_id) is None:
            raise ValidationError(category_not_found(category_id))

        if transaction.date is None:
            raise ValidationError("Date is required")

        return replace(
            transaction,
            target_account_id=target,
            debt_id=debt_id,
            category_id=category_id,
            description=(transaction.description or "").strip(),
        )

    def create_transaction(
        self,
        type: TransactionType | str,
        amount: Decimal | str,
        account_id: str,
        date: date_type,
        category_id: Optional[str] = None,
        description: str = "",
        target_account_id: Optional[str] = None,
        debt_id: Optional[str] = None,
        attachments: Iterable[Attachment] = (),
    ) -> Transaction:
        """Record a transaction and apply its balance effect.

        Args:
            type: income, expense, transfer or debt_payment
            amount: Positive amount
            account_id: Source account (the only account for non-transfers)
            date: Transaction date
            category_id: Category; transfers and debt payments default to the
                reserved Transferencia / Deudas categories
            description: Free text
            target_account_id: Destination account, transfers only
            debt_id: Debt being paid, debt payments only
            attachments: Files passed through verbatim

        Returns:
            The created transaction

        Raises:
            ValidationError: If the amount is not positive or a reference does
                not resolve; nothing is changed
            PersistenceError: If the adapter rejected the writes
        """
        snapshot = self.state.snapshot
        transaction = self._normalize(
            snapshot,
            Transaction(
                id=new_id(),
                amount=to_amount(amount),
                category_id=category_id,
                account_id=account_id,
                target_account_id=target_account_id,
                debt_id=debt_id,
                description=description,
                date=date,
                type=to_transaction_type(type),
                attachments=tuple(attachments),
                created_at=utc_now(),
            ),
        )

        accounts, debts = apply_effect(
            transaction,
            {a.id: a for a in snapshot.accounts},
            {d.id: d for d in snapshot.debts},
        )

        new_snapshot = replace(
            snapshot,
            transactions=order_transactions(snapshot.transactions + (transaction,)),
            accounts=tuple(accounts.values()),
            debts=tuple(debts.values()),
        )
        writes = [insert_op(EntityKind.TRANSACTION, transaction)]
        writes.extend(balance_writes(snapshot, accounts, debts))
        self.state.commit(new_snapshot, writes)

        logger.info(
            "transaction.created",
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=str(transaction.amount),
            account_id=transaction.account_id,
        )
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.state.snapshot.get_transaction(transaction_id)

    def update_transaction(
        self,
        transaction_id: str,
        type: Optional[TransactionType | str] = None,
        amount: Optional[Decimal | str] = None,
        account_id: Optional[str] = None,
        date: Optional[date_type] = None,
        category_id: Optional[str] = None,
        description: Optional[str] = None,
        target_account_id: Optional[str] = None,
        debt_id: Optional[str] = None,
        attachments: Optional[Iterable[Attachment]] = None,
    ) -> Transaction:
        """Replace a transaction, moving balances as if it were re-created.

        Only provided fields change. The old version's effect is reversed and
        the new version's effect applied, so type, amount and account changes
        all keep balances consistent. The id and insertion order are kept.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the merged transaction is invalid; nothing is changed
            PersistenceError: If the adapter rejected the writes
        """
        snapshot = self.state.snapshot
        old = snapshot.get_transaction(transaction_id)
        if old is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        changes: dict[str, Any] = {}
        if type is not None:
            changes["type"] = to_transaction_type(type)
        if amount is not None:
            changes["amount"] = to_amount(amount)
        if account_id is not None:
            changes["account_id"] = account_id
        if date is not None:
            changes["date"] = date
        if category_id is not None:
            changes["category_id"] = category_id
        if description is not None:
            changes["description"] = description
        if target_account_id is not None:
            changes["target_account_id"] = target_account_id
        if debt_id is not None:
            changes["debt_id"] = debt_id
        if attachments is not None:
            changes["attachments"] = tuple(attachments)

        new = self._normalize(snapshot, replace(old, **changes))

        accounts, debts = reverse_effect(
            old,
            {a.id: a for a in snapshot.accounts},
            {d.id: d for d in snapshot.debts},
        )
        accounts, debts = apply_effect(new, accounts, debts)

        new_snapshot = replace(
            snapshot,
            transactions=order_transactions(without(snapshot.transactions, old.id) + (new,)),
            accounts=tuple(accounts.values()),
            debts=tuple(debts.values()),
        )
        replaced_fields = {
            "type": new.type,
            "amount": new.amount,
            "account_id": new.account_id,
            "date": new.date,
            "category_id": new.category_id,
            "description": new.description,
            "target_account_id": new.target_account_id,
            "debt_id": new.debt_id,
            "attachments": new.attachments,
        }
        writes = [update_op(EntityKind.TRANSACTION, new.id, replaced_fields)]
        writes.extend(balance_writes(snapshot, accounts, debts))
        self.state.commit(new_snapshot, writes)

        logger.info("transaction.updated", transaction_id=new.id, fields=sorted(changes))
        return new

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction and reverse its balance effect.

        Deleting an id that does not exist is a no-op, so retries are safe.

        Raises:
            PersistenceError: If the adapter rejected the writes
        """
        snapshot = self.state.snapshot
        old = snapshot.get_transaction(transaction_id)
        if old is None:
            logger.debug("transaction.delete_missing", transaction_id=transaction_id)
            return

        accounts, debts = reverse_effect(
            old,
            {a.id: a for a in snapshot.accounts},
            {d.id: d for d in snapshot.debts},
        )
        new_snapshot = replace(
            snapshot,
            transactions=without(snapshot.transactions, old.id),
            accounts=tuple(accounts.values()),
            debts=tuple(debts.values()),
        )
        writes = [remove_op(EntityKind.TRANSACTION, old.id)]
        writes.extend(balance_writes(snapshot, accounts, debts))
        self.state.commit(new_snapshot, writes)

        logger.info("transaction.deleted", transaction_id=old.id)

    def list_transactions(
        self,
        start_date: Optional[date_type] = None,
        end_date: Optional[date_type] = None,
        account_id: Optional[str] = None,
        category_id: Optional[str] = None,
        type: Optional[TransactionType | str] = None,
    ) -> list[Transaction]:
        """List transactions with filters, most recent first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            account_id: Optional account filter (matches source or transfer target)
            category_id: Optional category filter
            type: Optional transaction type filter

        Returns:
            List of transaction entities
        """
        wanted_type = to_transaction_type(type) if type is not None else None
        result = []
        for txn in self.state.snapshot.transactions:
            if start_date is not None and txn.date < start_date:
                continue
            if end_date is not None and txn.date > end_date:
                continue
            if account_id is not None and account_id not in (txn.account_id, txn.target_account_id):
                continue
            if category_id is not None and txn.category_id != category_id:
                continue
            if wanted_type is not None and txn.type != wanted_type:
                continue
            result.append(txn)
        return result
