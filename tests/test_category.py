"""Tests for categories: service rules and CLI commands."""

from datetime import date

import pytest

from finpro.cli.main import cli
from finpro.domain.errors import DependencyError, NotFoundError, ValidationError


def test_seeded_categories(category_service):
    names = [c.name for c in category_service.list_categories()]
    assert "Transferencia" in names
    assert "Deudas" in names
    assert names[0] == "Alimentación"


def test_create_and_get_by_name(category_service):
    created = category_service.create_category("Salud", icon="💊")
    assert category_service.get_category_by_name("Salud") == created


def test_create_blank_name(category_service):
    with pytest.raises(ValidationError, match="required"):
        category_service.create_category("   ")


def test_create_duplicate(category_service):
    with pytest.raises(ValidationError, match="already exists"):
        category_service.create_category("Vivienda")


def test_update(category_service, food):
    updated = category_service.update_category(food.id, name="Comida", color="#000000")
    assert updated.name == "Comida"
    assert category_service.get_category(food.id).color == "#000000"


def test_update_missing(category_service):
    with pytest.raises(NotFoundError):
        category_service.update_category("missing", name="X")


def test_delete_removes_budget(state, category_service, budget_service):
    category = category_service.create_category("Viajes")
    budget_service.set_budget(category.id, "300")

    category_service.delete_category(category.id)

    assert state.snapshot.get_category(category.id) is None
    assert state.snapshot.get_budget(category.id) is None
    assert state.resync().get_budget(category.id) is None


def test_delete_in_use(category_service, transaction_service, bank, food):
    transaction_service.create_transaction(
        type="expense", amount="5", account_id=bank.id, category_id=food.id, date=date(2024, 1, 1)
    )
    with pytest.raises(DependencyError, match="used by 1"):
        category_service.delete_category(food.id)


def test_delete_used_by_obligation(category_service, obligation_service, bank, food):
    obligation_service.create_obligation("Mercado", "50", food.id, bank.id, date(2024, 1, 1))
    with pytest.raises(DependencyError):
        category_service.delete_category(food.id)


def test_cannot_delete_last_category(category_service):
    categories = category_service.list_categories()
    for category in categories[:-1]:
        category_service.delete_category(category.id)
    with pytest.raises(DependencyError, match="at least one category"):
        category_service.delete_category(categories[-1].id)


def test_delete_missing_is_noop(state, category_service):
    before = state.snapshot
    category_service.delete_category("missing")
    assert state.snapshot == before


class TestCategoryCommands:
    """Tests for the category CLI group."""

    def test_list(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])
        assert result.exit_code == 0
        assert "Alimentación" in result.output
        assert "Deudas" in result.output

    def test_create(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "category", "create", "Salud"]
        )
        assert result.exit_code == 0
        assert "Created category 'Salud'" in result.output

    def test_update_by_name(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "category", "update", "Otros", "--name", "Varios"],
        )
        assert result.exit_code == 0
        assert "Updated category 'Varios'" in result.output

    def test_delete(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "category", "delete", "Otros", "--yes"]
        )
        assert result.exit_code == 0
        assert "Deleted category 'Otros'" in result.output

    def test_delete_unknown(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "category", "delete", "Nope", "--yes"]
        )
        assert result.exit_code == 1
        assert "Category 'Nope' not found" in result.output
