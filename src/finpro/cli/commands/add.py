"""Add transaction command."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import amount_or_exit, date_or_exit, money, resolve_or_exit
from finpro.domain.account import AccountService
from finpro.domain.category import CategoryService
from finpro.domain.debt import DebtService
from finpro.domain.entities import TransactionType
from finpro.domain.errors import DomainError
from finpro.domain.transaction import TransactionService
from finpro.utils.resolver import resolve_account, resolve_category, resolve_debt

TRANSACTION_TYPES = [t.value for t in TransactionType]


@click.command("add")
@click.option(
    "--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), default="expense", show_default=True
)
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Positive transaction amount (e.g., 123.45)")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--category", help="Category name or ID (transfers and debt payments have defaults)")
@click.option("--description", default="", help="Transaction description")
@click.option("--to", "target", help="Target account name or ID (transfers)")
@click.option("--debt", help="Debt name or ID (debt payments)")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    account: str,
    amount: str,
    date: str,
    category: str | None,
    description: str,
    target: str | None,
    debt: str | None,
):
    """Record a transaction and update balances.

    Examples:
        finpro add --account Efectivo --amount 12.50 --category Alimentación
        finpro add --type income --account "Banco Principal" --amount 2000 --category Salario
        finpro add --type transfer --account "Banco Principal" --to Efectivo --amount 100
        finpro add --type debt_payment --account "Banco Principal" --debt "Coche" --amount 250
    """
    state = ctx.obj["state"]
    account_service = AccountService(state)
    transaction_service = TransactionService(state)

    account_id = resolve_or_exit(ctx, resolve_account, account_service, account)
    target_id = None
    if target is not None:
        target_id = resolve_or_exit(ctx, resolve_account, account_service, target)
    category_id = None
    if category is not None:
        category_id = resolve_or_exit(ctx, resolve_category, CategoryService(state), category)
    debt_id = None
    if debt is not None:
        debt_id = resolve_or_exit(ctx, resolve_debt, DebtService(state), debt)

    txn_date = date_or_exit(ctx, date)
    txn_amount = amount_or_exit(ctx, amount)

    try:
        txn = transaction_service.create_transaction(
            type=txn_type,
            amount=txn_amount,
            account_id=account_id,
            date=txn_date,
            category_id=category_id,
            description=description,
            target_account_id=target_id,
            debt_id=debt_id,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    currency = state.snapshot.settings.currency
    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Type: {txn.type.value}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  Amount: {money(txn.amount, currency)}")
    if txn.description:
        click.echo(f"  Description: {txn.description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
