"""Scheduled payment commands."""

from datetime import date as date_type

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import amount_or_exit, date_or_exit, money, resolve_or_exit
from finpro.domain.account import AccountService
from finpro.domain.category import CategoryService
from finpro.domain.errors import DomainError
from finpro.domain.obligation import ObligationService
from finpro.utils.resolver import resolve_account, resolve_category


def _print_obligations(service: ObligationService, obligations, currency: str, today) -> None:
    click.echo("-" * 90)
    for obligation in obligations:
        status = service.status(obligation, today)
        recurring = " (monthly)" if obligation.is_recurring else ""
        click.echo(
            f"{obligation.id} | {obligation.due_date} | {status.value:9s} | "
            f"{money(obligation.amount, currency):>12s} | {obligation.description}{recurring}"
        )


@click.group()
def obligation_group():
    """Manage scheduled payments."""
    pass


@obligation_group.command("create")
@click.argument("description")
@click.option("--amount", required=True, help="Amount due")
@click.option("--due-date", required=True, help="Due date (YYYY-MM-DD or relative)")
@click.option("--account", required=True, help="Paying account name or ID")
@click.option("--category", required=True, help="Category name or ID")
@click.option("--recurring", is_flag=True, help="Repeat every month once paid")
@click.pass_context
def create_obligation(ctx, description, amount, due_date, account, category, recurring):
    """Schedule a payment.

    Examples:
        finpro obligation create "Alquiler" --amount 800 --due-date 2024-02-01 \\
            --account "Banco Principal" --category Vivienda --recurring
    """
    state = ctx.obj["state"]
    service = ObligationService(state)
    account_id = resolve_or_exit(ctx, resolve_account, AccountService(state), account)
    category_id = resolve_or_exit(ctx, resolve_category, CategoryService(state), category)
    obligation_amount = amount_or_exit(ctx, amount)
    due = date_or_exit(ctx, due_date)

    try:
        obligation = service.create_obligation(
            description=description,
            amount=obligation_amount,
            category_id=category_id,
            account_id=account_id,
            due_date=due,
            is_recurring=recurring,
        )
        click.echo(f"Scheduled '{obligation.description}' for {obligation.due_date} (ID: {obligation.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@obligation_group.command("list")
@click.option("--pending", is_flag=True, help="Hide paid obligations")
@click.pass_context
def list_obligations(ctx, pending: bool):
    """List scheduled payments, soonest first."""
    state = ctx.obj["state"]
    service = ObligationService(state)
    obligations = service.list_obligations(include_paid=not pending)
    if not obligations:
        click.echo("No obligations found.")
        return
    click.echo("\nObligations:")
    _print_obligations(service, obligations, state.snapshot.settings.currency, date_type.today())


@obligation_group.command("upcoming")
@click.option("--days", type=int, help="Days ahead to include (defaults to the configured window)")
@click.pass_context
def upcoming_obligations(ctx, days: int | None):
    """List unpaid obligations due soon."""
    state = ctx.obj["state"]
    service = ObligationService(state)
    today = date_type.today()
    obligations = service.upcoming(today=today, days_ahead=days)
    if not obligations:
        click.echo("Nothing due soon.")
        return
    click.echo("\nDue soon:")
    _print_obligations(service, obligations, state.snapshot.settings.currency, today)


@obligation_group.command("pay")
@click.argument("obligation_id")
@click.option("--date", help="Settlement date (defaults to today)")
@click.pass_context
def pay_obligation(ctx, obligation_id: str, date: str | None):
    """Mark an obligation as paid and record the payment.

    Recurring obligations get their next instance scheduled one month later.
    """
    service = ObligationService(ctx.obj["state"])
    today = date_or_exit(ctx, date) if date else None

    try:
        result = service.mark_as_paid(obligation_id, today=today)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if result is None:
        click.echo(f"Obligation {obligation_id} is already paid or does not exist.")
        return
    click.echo(f"Paid '{result.obligation.description}'")
    if result.transaction is not None:
        click.echo(f"  Recorded transaction {result.transaction.id}")
    if result.successor is not None:
        click.echo(f"  Next due {result.successor.due_date} (ID: {result.successor.id})")


@obligation_group.command("delete")
@click.argument("obligation_id")
@click.pass_context
def delete_obligation(ctx, obligation_id: str):
    """Delete an obligation. Recorded payments are kept."""
    service = ObligationService(ctx.obj["state"])
    try:
        service.delete_obligation(obligation_id)
        click.echo(f"Deleted obligation {obligation_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register obligation commands with main CLI."""
    cli.add_command(obligation_group, name="obligation")
