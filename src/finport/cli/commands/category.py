"""Category management commands."""

import click
from finport.cli.error_handling import handle_domain_error
from finport.domain.category import CategoryService
from finport.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    service = CategoryService(ctx.obj["db"])

    categories = service.list_categories(ctx.obj["owner"])
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"{cat.name} (ID: {cat.id})")


@category_group.command("create")
@click.argument("name")
@click.pass_context
def create_category(ctx, name: str):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(ctx.obj["owner"], name=name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created category '{name}' (ID: {category_id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
