"""Summary command."""

from datetime import date

import click

from finpro.cli.resolution import money
from finpro.domain.summary import SummaryService
from finpro.utils.date_parser import parse_period


@click.command("summary")
@click.option(
    "--period",
    default="all",
    show_default=True,
    help="all, this-month, last-month, this-year, last-year, YYYY or YYYY-MM",
)
@click.option("--by-category", is_flag=True, help="Break spending down by category")
@click.option("--monthly", type=int, metavar="YEAR", help="Show month-by-month totals for YEAR")
@click.option("--daily", type=int, metavar="DAYS", help="Show day-by-day totals for the last DAYS days")
@click.pass_context
def summary(ctx, period: str, by_category: bool, monthly: int | None, daily: int | None):
    """Show the financial overview.

    Examples:
        finpro summary
        finpro summary --period this-month --by-category
        finpro summary --monthly 2024
    """
    state = ctx.obj["state"]
    service = SummaryService(state)
    currency = state.snapshot.settings.currency

    try:
        selected = parse_period(period)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    today = date.today()
    overview = service.overview(today=today, period=selected)
    click.echo(f"\nNet worth:         {money(overview.net_worth, currency)}")
    click.echo(f"Outstanding debt:  {money(overview.total_outstanding_debt, currency)}")
    click.echo(f"Income:            {money(overview.total_income, currency)}")
    click.echo(f"Expenses:          {money(overview.total_expense, currency)}")

    if overview.upcoming_obligations:
        click.echo("\nDue soon:")
        for obligation in overview.upcoming_obligations:
            click.echo(
                f"  {obligation.due_date} | {money(obligation.amount, currency):>12s} | {obligation.description}"
            )

    if by_category:
        click.echo("\nSpending by category:")
        for total in service.category_breakdown(selected):
            click.echo(f"  {total.category_name:20s} {money(total.amount, currency):>12s}")

    if monthly is not None:
        click.echo(f"\nMonthly totals {monthly}:")
        for row in service.monthly(monthly):
            click.echo(
                f"  {row.label} | in {money(row.income, currency):>12s} | "
                f"out {money(row.expense, currency):>12s} | {money(row.balance, currency):>12s}"
            )

    if daily is not None:
        click.echo(f"\nLast {daily} days:")
        for row in service.daily(today=today, days=daily):
            click.echo(f"  {row.label} | out {money(row.expense, currency):>12s}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
