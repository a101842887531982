"""CLI error handling helpers."""

import click

from finpro.domain.errors import DomainError, SettlementError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, SettlementError):
        for failure in error.failures:
            click.echo(f"  - {failure}", err=True)
    ctx.exit(1)
