"""Account domain service."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Optional

import structlog

from finpro.domain.entities import Account, AccountType, EntityKind
from finpro.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
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
from finpro.domain.transaction import to_amount

logger = structlog.get_logger(__name__)


def to_account_type(value: AccountType | str) -> AccountType:
    """Coerce a string to AccountType, raising ValidationError if unknown."""
    try:
        return AccountType(value)
    except ValueError as e:
        valid = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Unknown account type '{value}'. Valid types: {valid}") from e


class AccountService:
    """Service for managing accounts.

    Balances are normally moved only by transactions; ``update_account``
    accepts a balance solely as an explicit correction.
    """

    def __init__(self, state: FinanceState):
        """Initialize account service.

        Args:
            state: Shared finance state
        """
        self.state = state

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")
        for acc in self.state.snapshot.accounts:
            if acc.id != exclude_id and acc.name == name:
                raise ValidationError(f"Account with name '{name}' already exists")
        return name

    def create_account(
        self,
        name: str,
        type: AccountType | str = AccountType.BANK,
        balance: Decimal | str = Decimal("0"),
        color: str = "#6366f1",
        icon: str = "🏦",
    ) -> Account:
        """Create a new account.

        Args:
            name: Account name
            type: bank, cash or card
            balance: Opening balance (may be negative, e.g. for cards)
            color: Display color
            icon: Display icon

        Returns:
            The created account

        Raises:
            ValidationError: If account name already exists or a field is invalid
        """
        account = Account(
            id=new_id(),
            name=self._check_name(name),
            type=to_account_type(type),
            balance=to_amount(balance),
            color=color,
            icon=icon,
        )
        snapshot = self.state.snapshot
        self.state.commit(
            replace(snapshot, accounts=snapshot.accounts + (account,)),
            [insert_op(EntityKind.ACCOUNT, account)],
        )
        logger.info("account.created", account_id=account.id, name=account.name)
        return account

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.state.snapshot.get_account(account_id)

    def list_accounts(self) -> list[Account]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return list(self.state.snapshot.accounts)

    def update_account(
        self,
        account_id: str,
        name: Optional[str] = None,
        type: Optional[AccountType | str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        balance: Optional[Decimal | str] = None,
    ) -> Account:
        """Update account fields that are provided.

        Args:
            account_id: Account ID to update
            name: New name
            type: New account type
            color: New color
            icon: New icon
            balance: Corrected balance; bypasses transaction effects

        Raises:
            NotFoundError: If account not found
            ValidationError: If name already exists or a field is invalid
        """
        snapshot = self.state.snapshot
        account = snapshot.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        changes = {}
        if name is not None:
            changes["name"] = self._check_name(name, exclude_id=account_id)
        if type is not None:
            changes["type"] = to_account_type(type)
        if color is not None:
            changes["color"] = color
        if icon is not None:
            changes["icon"] = icon
        if balance is not None:
            changes["balance"] = to_amount(balance)
        if not changes:
            return account

        updated = replace(account, **changes)
        self.state.commit(
            replace(snapshot, accounts=replace_item(snapshot.accounts, updated)),
            [update_op(EntityKind.ACCOUNT, account_id, changes)],
        )
        if "balance" in changes:
            logger.warning(
                "account.balance_corrected",
                account_id=account_id,
                old=str(account.balance),
                new=str(updated.balance),
            )
        return updated

    def delete_account(self, account_id: str) -> None:
        """Delete an account.

        Deleting an id that does not exist is a no-op.

        Raises:
            DependencyError: If it is the last account, or transactions or
                pending obligations still reference it
        """
        snapshot = self.state.snapshot
        if snapshot.get_account(account_id) is None:
            return

        if len(snapshot.accounts) <= 1:
            raise DependencyError(last_item_delete_blocked("account", account_id))

        transaction_count = sum(
            1
            for t in snapshot.transactions
            if account_id in (t.account_id, t.target_account_id)
        )
        obligation_count = sum(
            1 for o in snapshot.obligations if o.account_id == account_id and not o.is_paid
        )
        if transaction_count > 0 or obligation_count > 0:
            raise DependencyError(
                account_delete_blocked(account_id, transaction_count, obligation_count)
            )

        self.state.commit(
            replace(snapshot, accounts=without(snapshot.accounts, account_id)),
            [remove_op(EntityKind.ACCOUNT, account_id)],
        )
        logger.info("account.deleted", account_id=account_id)
