"""Summary commands."""

from datetime import date

import click
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.ledger_loading import format_amount, load_ledger, run
from pocketbook.domain.category import CategoryService, label_breakdown
from pocketbook.domain.entities import MonthSummary
from pocketbook.domain.errors import DomainError
from pocketbook.utils.date_parser import month_key, parse_month


def _resolve_month(ctx, month: str | None) -> str:
    """Parse a month argument, defaulting to the current month."""
    if not month:
        return month_key(date.today())
    try:
        return parse_month(month)
    except DomainError as e:
        handle_domain_error(ctx, e)


def _print_summary_table(summaries: list[MonthSummary]) -> None:
    click.echo("-" * 58)
    click.echo(f"{'Month':<10} {'Income':>15} {'Expense':>15} {'Balance':>15}")
    click.echo("-" * 58)
    for item in summaries:
        click.echo(
            f"{item.month:<10} {format_amount(item.income):>15} "
            f"{format_amount(item.expense):>15} {format_amount(item.balance):>15}"
        )


@click.group()
def summary_group():
    """Show monthly summaries."""
    pass


@summary_group.command("month")
@click.argument("month", required=False)
@click.pass_context
def month_summary(ctx, month: str | None):
    """Show income, expense and balance for MONTH (default: this month)."""
    month = _resolve_month(ctx, month)
    ledger = load_ledger(ctx)
    summary = ledger.month_summary(month)

    click.echo(f"\nSummary for {month}:")
    click.echo(f"  Income:  {format_amount(summary.income)}")
    click.echo(f"  Expense: {format_amount(summary.expense)}")
    click.echo(f"  Balance: {format_amount(summary.balance)}")

    try:
        converted = ledger.converted_month_summary(month)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if converted is not None:
        rate = ledger.exchange_rate(month)
        click.echo(f"\nAt rate {rate.value}:")
        click.echo(f"  Income:  {format_amount(converted.income)}")
        click.echo(f"  Expense: {format_amount(converted.expense)}")
        click.echo(f"  Balance: {format_amount(converted.balance)}")


@summary_group.command("trend")
@click.option("--months", "count", type=click.IntRange(min=1), default=6, show_default=True, help="Number of months")
@click.option("--to", "to_month", help="Newest month to show (default: this month)")
@click.pass_context
def trend(ctx, count: int, to_month: str | None):
    """Show the last N months, oldest first."""
    reference = _resolve_month(ctx, to_month)
    ledger = load_ledger(ctx)
    click.echo(f"\nLast {count} month(s) through {reference}:")
    _print_summary_table(ledger.last_n_months_summary(count, reference))


@summary_group.command("all")
@click.option("--newest-first", is_flag=True, help="List the most recent month first")
@click.pass_context
def all_months(ctx, newest_first: bool):
    """Show every month that has transactions."""
    ledger = load_ledger(ctx)
    summaries = ledger.all_months_summary(newest_first=newest_first)
    if not summaries:
        click.echo("No transactions found.")
        return
    _print_summary_table(summaries)


@summary_group.command("categories")
@click.argument("month", required=False)
@click.option(
    "--kind",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    default="expense",
    show_default=True,
    help="Kind of transactions to break down",
)
@click.pass_context
def categories(ctx, month: str | None, kind: str):
    """Show totals per category for MONTH (default: this month)."""
    month = _resolve_month(ctx, month)
    ledger = load_ledger(ctx)
    breakdown = ledger.category_breakdown(month, kind)
    if not breakdown:
        click.echo(f"No {kind} transactions in {month}.")
        return

    try:
        labels = run(CategoryService(ledger.gateway).labels())
    except DomainError:
        labels = {}

    total = sum(entry.amount for entry in breakdown)
    click.echo(f"\n{kind.capitalize()} by category for {month}:")
    click.echo("-" * 48)
    for label, entry in label_breakdown(breakdown, labels):
        share = (entry.amount / total * 100) if total else 0
        click.echo(f"{label[:24]:<24} {format_amount(entry.amount):>14} {share:>6.0f}%")
    click.echo("-" * 48)
    click.echo(f"{'Total':<24} {format_amount(total):>14}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
