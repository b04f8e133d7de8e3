"""Add transaction command."""

import click
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.ledger_loading import format_amount, load_ledger, run
from pocketbook.domain.category import CategoryService
from pocketbook.domain.entities import TransactionDraft
from pocketbook.domain.errors import DomainError
from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.date_parser import parse_date


@click.command("add")
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45)")
@click.option(
    "--kind",
    required=True,
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Income or expense",
)
@click.option("--category", help="Category name or ID")
@click.option(
    "--date",
    default="today",
    show_default=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--note", help="Free-text note")
@click.pass_context
def add_transaction(ctx, amount: str, kind: str, category: str | None, date: str, note: str | None):
    """Add a transaction.

    Examples:
        pocketbook add --amount 1000 --kind income --category Salary
        pocketbook add --amount 45.90 --kind expense --category Food --date yesterday
    """
    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    ledger = load_ledger(ctx)

    category_id = None
    try:
        if category:
            category_id = run(CategoryService(ledger.gateway).resolve(category)).id
        draft = TransactionDraft(
            amount=txn_amount,
            kind=kind,
            category_id=category_id,
            date=txn_date,
            note=note,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    mutation = run(ledger.add_transaction(draft))
    if not mutation.ok:
        ctx.exit(1)

    saved = mutation.result
    click.echo(f"Created transaction {saved.id}")
    click.echo(f"  Date: {saved.date}")
    click.echo(f"  Amount: {format_amount(saved.amount)} ({saved.kind.value})")
    if category:
        click.echo(f"  Category: {category}")
    if note:
        click.echo(f"  Note: {note}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
