"""Account management commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import balance_or_exit, money, resolve_or_exit
from finpro.domain.account import AccountService
from finpro.domain.entities import AccountType
from finpro.domain.errors import DomainError
from finpro.utils.resolver import resolve_account

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="bank", show_default=True)
@click.option("--balance", default="0", help="Opening balance (may be negative)")
@click.option("--color", default="#6366f1", show_default=True)
@click.option("--icon", default="🏦", show_default=True)
@click.pass_context
def create_account(ctx, name: str, account_type: str, balance: str, color: str, icon: str):
    """Create a new account.

    Examples:
        finpro account create "Ahorros" --type bank --balance 1500
        finpro account create "Visa" --type card --balance -200
    """
    service = AccountService(ctx.obj["state"])
    opening = balance_or_exit(ctx, balance)

    try:
        account = service.create_account(
            name=name, type=account_type, balance=opening, color=color, icon=icon
        )
        click.echo(f"Created account '{account.name}' (ID: {account.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    state = ctx.obj["state"]
    service = AccountService(state)
    currency = state.snapshot.settings.currency

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        click.echo(
            f"{acc.id} | {acc.name:20s} | {acc.type.value:5s} | {money(acc.balance, currency):>14s}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--color", help="New color")
@click.option("--icon", help="New icon")
@click.option("--balance", help="Corrected balance (bypasses transactions)")
@click.pass_context
def update_account(ctx, account: str, name, account_type, color, icon, balance) -> None:
    """Update an account.

    ACCOUNT can be an account name or ID.

    Examples:
        finpro account update "Efectivo" --name "Cartera"
        finpro account update "Banco Principal" --balance 2500
    """
    service = AccountService(ctx.obj["state"])
    account_id = resolve_or_exit(ctx, resolve_account, service, account)
    corrected = balance_or_exit(ctx, balance) if balance is not None else None

    try:
        updated = service.update_account(
            account_id,
            name=name,
            type=account_type,
            color=color,
            icon=icon,
            balance=corrected,
        )
        click.echo(f"Updated account '{updated.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account can only be deleted if no transactions or pending
    obligations reference it, and it is not the last account.
    """
    service = AccountService(ctx.obj["state"])
    account_id = resolve_or_exit(ctx, resolve_account, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
