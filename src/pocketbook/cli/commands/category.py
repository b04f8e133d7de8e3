"""Category management commands."""

import click
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.ledger_loading import run
from pocketbook.domain.category import CategoryService
from pocketbook.domain.errors import DomainError


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--kind", type=click.Choice(["income", "expense"], case_sensitive=False), help="Only show one kind")
@click.pass_context
def list_categories(ctx, kind: str | None):
    """List categories."""
    service = CategoryService(ctx.obj["gateway"])

    try:
        categories = run(service.list_categories(kind=kind))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not categories:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo("\nCategories:")
    for cat in categories:
        click.echo(f"  {cat.name:<24} {cat.kind.value:<8} (ID: {cat.id})")


@category_group.command("create")
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    default="expense",
    help="Kind of transaction the category classifies (default: expense)",
)
@click.pass_context
def create_category(ctx, name: str, kind: str):
    """Create a new category."""
    service = CategoryService(ctx.obj["gateway"])

    try:
        category = run(service.create_category(name=name, kind=kind))
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created category '{category.name}' (ID: {category.id})")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
