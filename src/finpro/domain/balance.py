"""Balance mutation engine.

Pure functions translating a transaction into account and debt balance
changes. Callers pass the current accounts and debts keyed by id and get new
mappings back; nothing is mutated in place, so a failed validation leaves the
inputs untouched and a transfer either moves both sides or neither.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Mapping

from finpro.domain.entities import Account, Debt, Transaction, TransactionType
from finpro.domain.errors import (
    ValidationError,
    account_not_found,
    amount_not_positive,
    debt_not_found,
)

AccountMap = dict[str, Account]
DebtMap = dict[str, Debt]


def account_deltas(transaction: Transaction) -> dict[str, Decimal]:
    """Return the signed balance change per account caused by a transaction."""
    amount = transaction.amount
    if transaction.type == TransactionType.INCOME:
        return {transaction.account_id: amount}
    if transaction.type == TransactionType.TRANSFER:
        return {
            transaction.account_id: -amount,
            transaction.target_account_id: amount,
        }
    # expense and debt_payment both leave the source account
    return {transaction.account_id: -amount}


def net_effect(transaction: Transaction) -> Decimal:
    """Return the change a transaction makes to the sum of all balances."""
    return sum(account_deltas(transaction).values(), Decimal("0"))


def validate_effect(
    transaction: Transaction, accounts: Mapping[str, Account], debts: Mapping[str, Debt]
) -> None:
    """Check that every entity a transaction touches exists.

    Raises:
        ValidationError: On a non-positive amount, an unknown account or debt,
            or a transfer without a distinct target account
    """
    if transaction.amount is None or not transaction.amount.is_finite():
        raise ValidationError(f"Invalid amount '{transaction.amount}'")
    if transaction.amount <= 0:
        raise ValidationError(amount_not_positive(transaction.amount))

    if transaction.account_id not in accounts:
        raise ValidationError(account_not_found(transaction.account_id))

    if transaction.type == TransactionType.TRANSFER:
        target = transaction.target_account_id
        if not target:
            raise ValidationError("Transfer requires a target account")
        if target == transaction.account_id:
            raise ValidationError("Transfer target must differ from the source account")
        if target not in accounts:
            raise ValidationError(account_not_found(target))

    if transaction.type == TransactionType.DEBT_PAYMENT:
        if not transaction.debt_id:
            raise ValidationError("Debt payment requires a debt")
        if transaction.debt_id not in debts:
            raise ValidationError(debt_not_found(transaction.debt_id))


def apply_effect(
    transaction: Transaction, accounts: Mapping[str, Account], debts: Mapping[str, Debt]
) -> tuple[AccountMap, DebtMap]:
    """Apply a transaction's effect and return the new accounts and debts.

    Debt payments decrease the debt's remaining amount, floored at zero. The
    part of a payment the floor cuts off is kept in ``overpaid_amount``.
    """
    validate_effect(transaction, accounts, debts)
    return _shift(transaction, accounts, debts, sign=1)


def reverse_effect(
    transaction: Transaction, accounts: Mapping[str, Account], debts: Mapping[str, Debt]
) -> tuple[AccountMap, DebtMap]:
    """Undo a transaction's effect and return the new accounts and debts.

    Reverting a debt payment first gives back any overpaid amount, then
    increases the remaining amount, capped at the debt's total amount.
    """
    validate_effect(transaction, accounts, debts)
    return _shift(transaction, accounts, debts, sign=-1)


def _shift(
    transaction: Transaction,
    accounts: Mapping[str, Account],
    debts: Mapping[str, Debt],
    sign: int,
) -> tuple[AccountMap, DebtMap]:
    new_accounts = dict(accounts)
    for account_id, delta in account_deltas(transaction).items():
        account = new_accounts[account_id]
        new_accounts[account_id] = replace(account, balance=account.balance + sign * delta)

    new_debts = dict(debts)
    if transaction.type == TransactionType.DEBT_PAYMENT:
        debt = new_debts[transaction.debt_id]
        unfloored = debt.remaining_amount - debt.overpaid_amount - sign * transaction.amount
        zero = Decimal("0")
        new_debts[debt.id] = replace(
            debt,
            remaining_amount=min(debt.total_amount, max(zero, unfloored)),
            overpaid_amount=max(zero, -unfloored),
        )

    return new_accounts, new_debts


def changed(before: Mapping[str, object], after: Mapping[str, object]) -> list[str]:
    """Return ids whose entity differs between two mappings."""
    return [key for key, value in after.items() if before.get(key) != value]
