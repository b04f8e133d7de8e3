"""Initialize default categories."""

import click
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.ledger_loading import run
from pocketbook.domain.category import CategoryService
from pocketbook.domain.errors import DomainError


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default income and expense categories."""
    service = CategoryService(ctx.obj["gateway"])

    try:
        created = run(service.init_defaults())
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not created:
        click.echo("Default categories already exist.")
        return

    click.echo(f"Created {len(created)} categories:")
    for cat in created:
        click.echo(f"  {cat.name} ({cat.kind.value})")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
