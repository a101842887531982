"""AI insights commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import money
from finpro.domain.errors import DomainError
from finpro.domain.transaction import TransactionService
from finpro.insights.advisor import FinancialAdvisor


def _advisor(ctx) -> FinancialAdvisor:
    return ctx.obj.get("advisor") or FinancialAdvisor()


@click.command("insights")
@click.pass_context
def insights(ctx):
    """Ask the AI advisor to analyze your finances.

    Uses the API key stored in settings (``settings set ai_api_key``) or the
    GEMINI_API_KEY environment variable.
    """
    click.echo(_advisor(ctx).analyze_finances(ctx.obj["state"].snapshot))


@click.command("voice")
@click.argument("text")
@click.option("--save", is_flag=True, help="Record the draft without asking")
@click.pass_context
def voice(ctx, text: str, save: bool):
    """Turn a sentence into a transaction draft and optionally record it.

    Examples:
        finpro voice "gasté 12 euros en el supermercado con efectivo"
    """
    state = ctx.obj["state"]
    snapshot = state.snapshot
    draft = _advisor(ctx).parse_voice_command(
        text,
        snapshot.categories,
        snapshot.accounts,
        currency=snapshot.settings.currency,
        api_key=snapshot.settings.ai_api_key,
    )
    if draft is None:
        click.echo("Error: Could not understand the sentence. Try again or use 'add'.", err=True)
        ctx.exit(1)

    category = snapshot.get_category(draft.category_id)
    account = snapshot.get_account(draft.account_id)
    click.echo(f"  Type: {draft.type.value}")
    click.echo(f"  Amount: {money(draft.amount, snapshot.settings.currency)}")
    click.echo(f"  Category: {category.name}")
    click.echo(f"  Account: {account.name}")
    click.echo(f"  Date: {draft.date}")
    click.echo(f"  Description: {draft.description}")

    if not save and not click.confirm("Record this transaction?"):
        click.echo("Discarded.")
        return

    try:
        txn = TransactionService(state).create_transaction(
            type=draft.type,
            amount=draft.amount,
            account_id=draft.account_id,
            date=draft.date,
            category_id=draft.category_id,
            description=draft.description,
        )
        click.echo(f"Created transaction {txn.id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register AI commands with main CLI."""
    cli.add_command(insights)
    cli.add_command(voice)
