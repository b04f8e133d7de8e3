"""Transaction management commands."""

import click
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.ledger_loading import format_amount, load_ledger, run
from pocketbook.domain.category import CategoryService, category_label
from pocketbook.domain.errors import DomainError
from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.date_parser import parse_date, parse_month


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--month", help="Only show one month (YYYY-MM or relative like 'this month')")
@click.option("--kind", type=click.Choice(["income", "expense"], case_sensitive=False), help="Only show one kind")
@click.pass_context
def list_transactions(ctx, month: str | None, kind: str | None):
    """View transactions, newest first."""
    try:
        month_key = parse_month(month) if month else None
    except DomainError as e:
        handle_domain_error(ctx, e)

    ledger = load_ledger(ctx)
    transactions = ledger.month_transactions(month_key) if month_key else list(ledger.state.transactions)
    if kind:
        transactions = [txn for txn in transactions if txn.kind.value == kind.lower()]

    if not transactions:
        click.echo("No transactions found.")
        return

    try:
        labels = run(CategoryService(ledger.gateway).labels())
    except DomainError:
        labels = {}

    transactions.sort(key=lambda txn: str(txn.date), reverse=True)
    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<34} {'Date':<12} {'Kind':<8} {'Amount':>12}  {'Category':<16} {'Note':<14}")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<34} {str(txn.date):<12} {txn.kind.value:<8} {format_amount(txn.amount):>12}  "
            f"{category_label(txn.category_id, labels)[:16]:<16} {(txn.note or '')[:14]:<14}"
        )


@transaction_group.command("update")
@click.argument("transaction_id")
@click.option("--amount", help="New amount")
@click.option("--kind", type=click.Choice(["income", "expense"], case_sensitive=False), help="New kind")
@click.option("--category", help="Category name or ID, or empty string to clear")
@click.option("--date", help="New date (YYYY-MM-DD or relative like 'today')")
@click.option("--note", help="New note, or empty string to clear")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: str,
    amount: str | None,
    kind: str | None,
    category: str | None,
    date: str | None,
    note: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        pocketbook transaction update 3f2a... --amount 75.00
        pocketbook transaction update 3f2a... --category ""  # Clear category
    """
    patch = {}
    if amount is not None:
        try:
            patch["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    if date is not None:
        try:
            patch["date"] = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    if kind is not None:
        patch["kind"] = kind
    if note is not None:
        patch["note"] = note

    if not patch and category is None:
        click.echo("Error: Nothing to update.", err=True)
        ctx.exit(1)

    ledger = load_ledger(ctx)
    try:
        if category is not None:
            patch["category_id"] = run(CategoryService(ledger.gateway).resolve(category)).id if category else None
        mutation = run(ledger.update_transaction(transaction_id, patch))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not mutation.ok:
        ctx.exit(1)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_id")
@click.pass_context
def delete_transaction(ctx, transaction_id: str) -> None:
    """Delete a transaction."""
    ledger = load_ledger(ctx)
    try:
        mutation = run(ledger.delete_transaction(transaction_id))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not mutation.ok:
        ctx.exit(1)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
