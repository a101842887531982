"""Shared pytest fixtures for finpro tests."""

import os
import tempfile
from datetime import date

import pytest

from finpro.config import FinanceSettings
from finpro.database.factories import create_json_database, create_sqlite_database
from finpro.domain.account import AccountService
from finpro.domain.budget import BudgetService
from finpro.domain.category import CategoryService
from finpro.domain.debt import DebtService
from finpro.domain.obligation import ObligationService
from finpro.domain.settings import SettingsService
from finpro.domain.state import FinanceState
from finpro.domain.summary import SummaryService
from finpro.domain.transaction import TransactionService


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the user's environment and .env files."""
    for name in ("FINPRO_DB_PATH", "FINPRO_STORAGE", "GEMINI_API_KEY", "FINPRO_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    from finpro.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def temp_json_db(tmp_path):
    """Create a temporary JSON file database for testing."""
    db_path = tmp_path / "ledger.json"
    db = create_json_database(database_path=str(db_path))
    db.database_path = str(db_path)
    db.connect()
    db.initialize_schema()
    yield db
    db.disconnect()


@pytest.fixture(params=["sqlite", "json"])
def any_db(request):
    """Run a test against both storage adapters."""
    fixture = "temp_db" if request.param == "sqlite" else "temp_json_db"
    return request.getfixturevalue(fixture)


@pytest.fixture
def state(temp_db):
    """FinanceState over a freshly seeded SQLite database."""
    finance_state = FinanceState(temp_db)
    finance_state.load()
    return finance_state


@pytest.fixture
def finance_settings():
    """Settings with the default alert windows."""
    return FinanceSettings(alert_window_days=7, upcoming_window_days=3)


@pytest.fixture
def transaction_service(state):
    return TransactionService(state)


@pytest.fixture
def account_service(state):
    return AccountService(state)


@pytest.fixture
def category_service(state):
    return CategoryService(state)


@pytest.fixture
def obligation_service(state, transaction_service, finance_settings):
    return ObligationService(state, transaction_service, finance_settings)


@pytest.fixture
def budget_service(state):
    return BudgetService(state)


@pytest.fixture
def debt_service(state, transaction_service):
    return DebtService(state, transaction_service)


@pytest.fixture
def settings_service(state):
    return SettingsService(state)


@pytest.fixture
def summary_service(state, finance_settings):
    return SummaryService(state, finance_settings)


@pytest.fixture
def accounts(state):
    """Seeded accounts by name."""
    return {acc.name: acc for acc in state.snapshot.accounts}


@pytest.fixture
def categories(state):
    """Seeded categories by name."""
    return {cat.name: cat for cat in state.snapshot.categories}


@pytest.fixture
def bank(accounts):
    return accounts["Banco Principal"]


@pytest.fixture
def cash(accounts):
    return accounts["Efectivo"]


@pytest.fixture
def food(categories):
    return categories["Alimentación"]


@pytest.fixture
def today():
    return date(2024, 3, 15)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
