"""Domain model entities for finpro.

These are pure data classes representing business concepts, independent of
the storage schema. Adapters map their own records to and from these types.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Kind of balance-holding account."""

    BANK = "bank"
    CASH = "cash"
    CARD = "card"


class TransactionType(str, Enum):
    """How a transaction moves money."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    DEBT_PAYMENT = "debt_payment"


class DebtType(str, Enum):
    """Kind of liability."""

    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    MORTGAGE = "mortgage"
    VEHICLE = "vehicle"
    OTHER = "other"


class ObligationStatus(str, Enum):
    """Due status of a scheduled obligation relative to a given day."""

    PAID = "paid"
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING = "upcoming"
    SCHEDULED = "scheduled"


class EntityKind(str, Enum):
    """Entity collections a persistence adapter stores."""

    ACCOUNT = "account"
    CATEGORY = "category"
    TRANSACTION = "transaction"
    DEBT = "debt"
    OBLIGATION = "obligation"
    BUDGET = "budget"


@dataclass(frozen=True)
class Account:
    """Balance-holding account domain entity."""

    id: str
    name: str
    type: AccountType
    balance: Decimal
    color: str = "#6366f1"
    icon: str = "🏦"


@dataclass(frozen=True)
class Category:
    """Category domain entity."""

    id: str
    name: str
    color: str = "#64748b"
    icon: str = "📦"


@dataclass(frozen=True)
class Attachment:
    """File attached to a transaction (base64 payload, passed through)."""

    name: str
    type: str
    data: str


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity.

    ``amount`` is always positive; ``type`` decides the direction.
    ``created_at`` orders transactions that share the same date.
    """

    id: str
    amount: Decimal
    category_id: str
    account_id: str
    date: date
    type: TransactionType
    description: str = ""
    target_account_id: Optional[str] = None
    debt_id: Optional[str] = None
    attachments: tuple[Attachment, ...] = ()
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Debt:
    """Liability with a shrinking remaining balance."""

    id: str
    name: str
    total_amount: Decimal
    remaining_amount: Decimal
    type: DebtType = DebtType.OTHER
    icon: str = "📉"
    color: str = "#6366f1"
    interest_rate: Optional[Decimal] = None
    due_date: Optional[date] = None
    # payments beyond the floor at zero; reversals consume this first
    overpaid_amount: Decimal = Decimal("0")


@dataclass(frozen=True)
class Obligation:
    """Scheduled payment commitment."""

    id: str
    description: str
    amount: Decimal
    category_id: str
    account_id: str
    due_date: date
    is_paid: bool = False
    is_recurring: bool = False


@dataclass(frozen=True)
class Budget:
    """Spending cap for one category. A limit of 0 means no budget set."""

    category_id: str
    limit: Decimal


@dataclass(frozen=True)
class AppSettings:
    """Per-user preferences, passed through verbatim."""

    user_name: str = "Usuario"
    currency: str = "$"
    primary_color: str = "#4f46e5"
    secondary_color: str = "#10b981"
    accent_color: str = "#f59e0b"
    logo: Optional[str] = None
    ai_api_key: Optional[str] = None


@dataclass(frozen=True)
class LedgerSnapshot:
    """Immutable bundle of every entity a user owns."""

    accounts: tuple[Account, ...] = ()
    categories: tuple[Category, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    debts: tuple[Debt, ...] = ()
    obligations: tuple[Obligation, ...] = ()
    budgets: tuple[Budget, ...] = ()
    settings: AppSettings = field(default_factory=AppSettings)

    def get_account(self, account_id: Optional[str]) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    def get_category(self, category_id: Optional[str]) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def get_debt(self, debt_id: Optional[str]) -> Optional[Debt]:
        return next((d for d in self.debts if d.id == debt_id), None)

    def get_obligation(self, obligation_id: str) -> Optional[Obligation]:
        return next((o for o in self.obligations if o.id == obligation_id), None)

    def get_budget(self, category_id: str) -> Optional[Budget]:
        return next((b for b in self.budgets if b.category_id == category_id), None)


@dataclass(frozen=True)
class Period:
    """A calendar month, or a whole year when ``month`` is None."""

    year: int
    month: Optional[int] = None

    def contains(self, day: date) -> bool:
        if day.year != self.year:
            return False
        return self.month is None or day.month == self.month


@dataclass(frozen=True)
class BudgetStatus:
    """Spent-versus-limit evaluation for one category."""

    category_id: str
    category_name: str
    limit: Decimal
    spent: Decimal
    progress: float
    is_over: bool


@dataclass(frozen=True)
class DebtProgress:
    """How much of a debt has been repaid."""

    debt_id: str
    paid_amount: Decimal
    fraction_paid: float
    is_finished: bool


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of marking an obligation as paid."""

    obligation: Obligation
    transaction: Optional[Transaction] = None
    successor: Optional[Obligation] = None


@dataclass(frozen=True)
class CategoryTotal:
    """Amount spent in one category over a period."""

    category_id: str
    category_name: str
    amount: Decimal


@dataclass(frozen=True)
class PeriodTotals:
    """Income, expense and their difference for one bucket of time."""

    label: str
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class FinanceOverview:
    """Dashboard read model: headline aggregates plus due alerts."""

    net_worth: Decimal
    total_outstanding_debt: Decimal
    total_income: Decimal
    total_expense: Decimal
    upcoming_obligations: tuple[Obligation, ...] = ()
