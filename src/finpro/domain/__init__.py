"""Domain layer for finpro application."""

from finpro.domain.state import FinanceState
from finpro.domain.transaction import TransactionService
from finpro.domain.account import AccountService
from finpro.domain.category import CategoryService
from finpro.domain.obligation import ObligationService
from finpro.domain.budget import BudgetService
from finpro.domain.debt import DebtService
from finpro.domain.settings import SettingsService
from finpro.domain.summary import SummaryService

__all__ = [
    "FinanceState",
    "TransactionService",
    "AccountService",
    "CategoryService",
    "ObligationService",
    "BudgetService",
    "DebtService",
    "SettingsService",
    "SummaryService",
]
