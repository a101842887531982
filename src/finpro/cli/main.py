"""Main CLI entry point."""

import click

from finpro.config import get_settings
from finpro.database.factories import STORAGE_BACKENDS, create_database
from finpro.domain.state import FinanceState
from finpro.log import configure_logging

# Import and register all commands at module level
from finpro.cli.commands import (
    account,
    add,
    budget,
    category,
    debt,
    insights,
    obligation,
    settings,
    summary,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINPRO_DB_PATH environment variable)",
    envvar="FINPRO_DB_PATH",
)
@click.option(
    "--storage",
    type=click.Choice(STORAGE_BACKENDS, case_sensitive=False),
    help="Storage backend (overrides FINPRO_STORAGE environment variable)",
    envvar="FINPRO_STORAGE",
)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, storage: str | None, debug: bool):
    """finpro - personal finance ledger.

    Track accounts, transactions, debts, scheduled payments and budgets, and
    ask an AI advisor for insights.
    """
    ctx.ensure_object(dict)
    configure_logging(debug=debug or get_settings().debug)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(database_path=db_path, storage=storage)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["state"] = FinanceState(db)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
debt.register_commands(cli)
obligation.register_commands(cli)
budget.register_commands(cli)
summary.register_commands(cli)
settings.register_commands(cli)
insights.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
