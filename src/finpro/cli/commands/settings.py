"""Settings commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.domain.errors import DomainError
from finpro.domain.settings import SETTING_NAMES, SettingsService


@click.group()
def settings_group():
    """Show or change preferences."""
    pass


@settings_group.command("show")
@click.pass_context
def show_settings(ctx):
    """Show current preferences."""
    current = SettingsService(ctx.obj["state"]).get_settings()
    for name in SETTING_NAMES:
        value = getattr(current, name)
        if name == "ai_api_key" and value:
            value = "****" + value[-4:]
        click.echo(f"{name}: {value if value is not None else ''}")


@settings_group.command("set")
@click.argument("name", type=click.Choice(SETTING_NAMES))
@click.argument("value")
@click.pass_context
def set_setting(ctx, name: str, value: str):
    """Change one preference. Use an empty VALUE to clear logo or ai_api_key.

    Examples:
        finpro settings set currency €
        finpro settings set user_name "Ana"
    """
    if value == "" and name in ("logo", "ai_api_key"):
        value = None
    try:
        SettingsService(ctx.obj["state"]).update_settings(**{name: value})
        click.echo(f"Updated {name}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
