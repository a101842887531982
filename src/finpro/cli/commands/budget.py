"""Budget commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import balance_or_exit, money, resolve_or_exit
from finpro.domain.budget import BudgetService
from finpro.domain.category import CategoryService
from finpro.domain.errors import DomainError
from finpro.utils.date_parser import parse_period
from finpro.utils.resolver import resolve_category


@click.group()
def budget_group():
    """Manage category budgets."""
    pass


@budget_group.command("set")
@click.argument("category", metavar="CATEGORY")
@click.argument("limit", metavar="LIMIT")
@click.pass_context
def set_budget(ctx, category: str, limit: str):
    """Set the spending limit for a category. A limit of 0 removes the cap.

    Examples:
        finpro budget set Alimentación 400
    """
    state = ctx.obj["state"]
    category_id = resolve_or_exit(ctx, resolve_category, CategoryService(state), category)
    amount = balance_or_exit(ctx, limit)
    try:
        budget = BudgetService(state).set_budget(category_id, amount)
        click.echo(f"Budget for '{category}' set to {money(budget.limit, state.snapshot.settings.currency)}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("remove")
@click.argument("category", metavar="CATEGORY")
@click.pass_context
def remove_budget(ctx, category: str):
    """Remove a category's budget."""
    state = ctx.obj["state"]
    category_id = resolve_or_exit(ctx, resolve_category, CategoryService(state), category)
    try:
        BudgetService(state).remove_budget(category_id)
        click.echo(f"Removed budget for '{category}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("list")
@click.option(
    "--period",
    default="this-month",
    show_default=True,
    help="all, this-month, last-month, this-year, last-year, YYYY or YYYY-MM",
)
@click.pass_context
def list_budgets(ctx, period: str):
    """Show spending against each budget."""
    state = ctx.obj["state"]
    try:
        selected = parse_period(period)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    statuses = BudgetService(state).evaluate(selected)
    if not statuses:
        click.echo("No budgets set.")
        return

    currency = state.snapshot.settings.currency
    click.echo("\nBudgets:")
    click.echo("-" * 80)
    for status in statuses:
        flag = "  OVER" if status.is_over else ""
        click.echo(
            f"{status.category_name:20s} | {money(status.spent, currency):>12s} / "
            f"{money(status.limit, currency):>12s} | {status.progress:4.0%}{flag}"
        )


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
