"""Category management commands."""

import click

from finpro.cli.error_handling import handle_domain_error
from finpro.cli.resolution import resolve_or_exit
from finpro.domain.category import CategoryService
from finpro.domain.errors import DomainError
from finpro.utils.resolver import resolve_category


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name", metavar="CATEGORY_NAME")
@click.option("--color", default="#64748b", show_default=True)
@click.option("--icon", default="📦", show_default=True)
@click.pass_context
def create_category(ctx, name: str, color: str, icon: str):
    """Create a new category.

    Examples:
        finpro category create "Salud" --icon "💊"
    """
    service = CategoryService(ctx.obj["state"])
    try:
        category = service.create_category(name=name, color=color, icon=icon)
        click.echo(f"Created category '{category.name}' (ID: {category.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    service = CategoryService(ctx.obj["state"])
    categories = service.list_categories()
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 60)
    for cat in categories:
        click.echo(f"{cat.id} | {cat.icon} {cat.name}")


@category_group.command("update")
@click.argument("category", metavar="CATEGORY")
@click.option("--name", help="New name")
@click.option("--color", help="New color")
@click.option("--icon", help="New icon")
@click.pass_context
def update_category(ctx, category: str, name, color, icon):
    """Update a category. CATEGORY can be a category name or ID."""
    service = CategoryService(ctx.obj["state"])
    category_id = resolve_or_exit(ctx, resolve_category, service, category)
    try:
        updated = service.update_category(category_id, name=name, color=color, icon=icon)
        click.echo(f"Updated category '{updated.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category", metavar="CATEGORY")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_category(ctx, category: str, yes: bool):
    """Delete a category and its budget.

    CATEGORY can be a category name or ID. Categories still used by
    transactions or obligations cannot be deleted.
    """
    service = CategoryService(ctx.obj["state"])
    category_id = resolve_or_exit(ctx, resolve_category, service, category)
    category_obj = service.get_category(category_id)

    if not yes and not click.confirm(f"Are you sure you want to delete category '{category_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_category(category_id)
        click.echo(f"Deleted category '{category_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
