"""Exchange rate commands."""

import click
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.ledger_loading import load_ledger, run
from pocketbook.domain.errors import DomainError
from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.date_parser import parse_month


@click.group()
def rate_group():
    """Manage monthly exchange rates."""
    pass


@rate_group.command("set")
@click.argument("month")
@click.argument("value")
@click.pass_context
def set_rate(ctx, month: str, value: str):
    """Set the exchange rate for MONTH (YYYY-MM) to VALUE."""
    try:
        month = parse_month(month)
        rate_value = parse_amount(value)
    except ValueError as e:
        handle_domain_error(ctx, e)

    ledger = load_ledger(ctx)
    try:
        mutation = run(ledger.update_exchange_rate(month, rate_value))
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not mutation.ok:
        ctx.exit(1)
    click.echo(f"Exchange rate for {month} set to {mutation.result.value}")


@rate_group.command("show")
@click.argument("month", required=False)
@click.pass_context
def show_rate(ctx, month: str | None):
    """Show the rate for MONTH, or every recorded rate."""
    if month:
        try:
            month = parse_month(month)
        except DomainError as e:
            handle_domain_error(ctx, e)

    ledger = load_ledger(ctx)
    if month:
        rate = ledger.exchange_rate(month)
        if rate is None:
            click.echo(f"No exchange rate set for {month}.")
            return
        rates = [rate]
    else:
        rates = sorted(ledger.state.exchange_rates, key=lambda item: item.month)
        if not rates:
            click.echo("No exchange rates set.")
            return

    for rate in rates:
        click.echo(f"{rate.month}  {rate.value:>12}  (updated {rate.updated_at:%Y-%m-%d %H:%M})")


def register_commands(cli):
    """Register rate commands with main CLI."""
    cli.add_command(rate_group, name="rate")
