"""CLI helpers for resolving names and parsing typed values."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable

import click

from finpro.utils.amount_parser import parse_amount, parse_balance
from finpro.utils.date_parser import parse_date


def resolve_or_exit(ctx: click.Context, resolver: Callable[[object, str], str], service, value: str) -> str:
    """Resolve a name or ID with ``resolver``, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolver(service, value)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)


def date_or_exit(ctx: click.Context, value: str) -> date:
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def amount_or_exit(ctx: click.Context, value: str) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def balance_or_exit(ctx: click.Context, value: str) -> Decimal:
    try:
        return parse_balance(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def money(value: Decimal, currency: str = "$") -> str:
    """Format an amount for display, e.g. ``$1,234.50`` or ``-$20.00``."""
    sign = "-" if value < 0 else ""
    return f"{sign}{currency}{abs(value):,.2f}"
