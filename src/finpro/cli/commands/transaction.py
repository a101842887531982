"""Transaction management commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import amount_or_exit, date_or_exit, money, resolve_or_exit
from finpro.domain.account import AccountService
from finpro.domain.category import CategoryService
from finpro.domain.entities import TransactionType
from finpro.domain.errors import DomainError
from finpro.domain.transaction import TransactionService
from finpro.utils.resolver import resolve_account, resolve_category

TRANSACTION_TYPES = [t.value for t in TransactionType]


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--account", help="Account name or ID (matches source or transfer target)")
@click.option("--category", help="Category name or ID")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="Transaction type")
@click.pass_context
def list_transactions(ctx, start_date, end_date, account, category, txn_type):
    """View transactions, most recent first."""
    state = ctx.obj["state"]
    service = TransactionService(state)

    start = date_or_exit(ctx, start_date) if start_date else None
    end = date_or_exit(ctx, end_date) if end_date else None
    account_id = None
    if account:
        account_id = resolve_or_exit(ctx, resolve_account, AccountService(state), account)
    category_id = None
    if category:
        category_id = resolve_or_exit(ctx, resolve_category, CategoryService(state), category)

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        account_id=account_id,
        category_id=category_id,
        type=txn_type,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    snapshot = state.snapshot
    accounts = {acc.id: acc.name for acc in snapshot.accounts}
    categories = {cat.id: cat.name for cat in snapshot.categories}
    currency = snapshot.settings.currency

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    for txn in transactions:
        account_name = accounts.get(txn.account_id, "Unknown")
        if txn.target_account_id:
            account_name = f"{account_name} -> {accounts.get(txn.target_account_id, 'Unknown')}"
        click.echo(
            f"{txn.id} | {txn.date} | {txn.type.value:12s} | {money(txn.amount, currency):>12s} | "
            f"{account_name:25s} | {categories.get(txn.category_id, ''):15s} | {txn.description}"
        )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--type", "txn_type", type=click.Choice(TRANSACTION_TYPES), help="New type")
@click.option("--account", help="Account name or ID")
@click.option("--to", "target", help="Target account name or ID (transfers)")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Positive transaction amount")
@click.option("--category", help="Category name or ID")
@click.option("--description", help="Transaction description")
@click.pass_context
def update_transaction(ctx, transaction_id, txn_type, account, target, date, amount, category, description):
    """Update a transaction and re-balance the affected accounts.

    Updates only the fields that are provided.

    Examples:
        finpro transaction update 3f2a... --amount 75.00
        finpro transaction update 3f2a... --type income --category Salario
    """
    state = ctx.obj["state"]
    service = TransactionService(state)
    account_service = AccountService(state)

    account_id = resolve_or_exit(ctx, resolve_account, account_service, account) if account else None
    target_id = resolve_or_exit(ctx, resolve_account, account_service, target) if target else None
    category_id = None
    if category:
        category_id = resolve_or_exit(ctx, resolve_category, CategoryService(state), category)
    txn_date = date_or_exit(ctx, date) if date is not None else None
    txn_amount = amount_or_exit(ctx, amount) if amount is not None else None

    try:
        service.update_transaction(
            transaction_id,
            type=txn_type,
            amount=txn_amount,
            account_id=account_id,
            date=txn_date,
            category_id=category_id,
            description=description,
            target_account_id=target_id,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str):
    """Delete a transaction and reverse its effect on balances."""
    service = TransactionService(ctx.obj["state"])
    if service.get_transaction(transaction_id) is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
