"""Debt management commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import (
    amount_or_exit,
    balance_or_exit,
    date_or_exit,
    money,
    resolve_or_exit,
)
from finpro.domain.account import AccountService
from finpro.domain.debt import DebtService
from finpro.domain.entities import DebtType
from finpro.domain.errors import DomainError
from finpro.utils.resolver import resolve_account, resolve_debt

DEBT_TYPES = [t.value for t in DebtType]


@click.group()
def debt_group():
    """Manage debts."""
    pass


@debt_group.command("create")
@click.argument("name", metavar="DEBT_NAME")
@click.option("--total", required=True, help="Original amount owed")
@click.option("--remaining", help="Outstanding amount (defaults to the total)")
@click.option("--type", "debt_type", type=click.Choice(DEBT_TYPES), default="other", show_default=True)
@click.option("--interest-rate", help="Annual interest rate, informational")
@click.option("--due-date", help="Next due date")
@click.option(
    "--schedule-installment",
    is_flag=True,
    help="Also schedule a recurring monthly payment of total/12 (needs --due-date)",
)
@click.pass_context
def create_debt(ctx, name, total, remaining, debt_type, interest_rate, due_date, schedule_installment):
    """Create a debt.

    Examples:
        finpro debt create "Coche" --total 12000 --type vehicle
        finpro debt create "Préstamo" --total 2400 --due-date 2024-06-05 --schedule-installment
    """
    service = DebtService(ctx.obj["state"])
    total_amount = amount_or_exit(ctx, total)
    remaining_amount = balance_or_exit(ctx, remaining) if remaining is not None else None
    rate = balance_or_exit(ctx, interest_rate) if interest_rate is not None else None
    due = date_or_exit(ctx, due_date) if due_date is not None else None

    try:
        debt = service.create_debt(
            name=name,
            total_amount=total_amount,
            remaining_amount=remaining_amount,
            type=debt_type,
            interest_rate=rate,
            due_date=due,
            schedule_installment=schedule_installment,
        )
        click.echo(f"Created debt '{debt.name}' (ID: {debt.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@debt_group.command("list")
@click.pass_context
def list_debts(ctx):
    """List debts with their repayment progress."""
    state = ctx.obj["state"]
    service = DebtService(state)
    currency = state.snapshot.settings.currency

    debts = service.list_debts()
    if not debts:
        click.echo("No debts found.")
        return

    click.echo("\nDebts:")
    click.echo("-" * 90)
    for debt in debts:
        progress = service.progress(debt.id)
        status = "paid off" if progress.is_finished else f"{progress.fraction_paid:.0%} repaid"
        click.echo(
            f"{debt.id} | {debt.name:20s} | {money(debt.remaining_amount, currency):>12s} of "
            f"{money(debt.total_amount, currency):>12s} | {status}"
        )


@debt_group.command("pay")
@click.argument("debt", metavar="DEBT")
@click.option("--amount", required=True, help="Payment amount")
@click.option("--account", required=True, help="Paying account name or ID")
@click.option("--date", default="today", show_default=True, help="Payment date")
@click.pass_context
def pay_debt(ctx, debt: str, amount: str, account: str, date: str):
    """Record a payment toward a debt.

    DEBT can be a debt name or ID.
    """
    state = ctx.obj["state"]
    service = DebtService(state)
    debt_id = resolve_or_exit(ctx, resolve_debt, service, debt)
    account_id = resolve_or_exit(ctx, resolve_account, AccountService(state), account)
    payment_amount = amount_or_exit(ctx, amount)
    payment_date = date_or_exit(ctx, date)

    try:
        txn = service.record_payment(debt_id, payment_amount, account_id, date=payment_date)
        remaining = service.get_debt(debt_id).remaining_amount
        currency = state.snapshot.settings.currency
        click.echo(f"Recorded payment {txn.id}: {txn.description}")
        click.echo(f"  Remaining: {money(remaining, currency)}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@debt_group.command("delete")
@click.argument("debt", metavar="DEBT")
@click.pass_context
def delete_debt(ctx, debt: str):
    """Delete a debt without payments on record."""
    service = DebtService(ctx.obj["state"])
    debt_id = resolve_or_exit(ctx, resolve_debt, service, debt)
    try:
        service.delete_debt(debt_id)
        click.echo(f"Deleted debt {debt_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register debt commands with main CLI."""
    cli.add_command(debt_group, name="debt")
