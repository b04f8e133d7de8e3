"""Main CLI entry point."""

import logging

import click
from pocketbook.cache import create_local_cache
from pocketbook.database.factories import create_sqlite_gateway
from pocketbook.domain.ledger import Ledger
from pocketbook.domain.notifications import ERROR, Notification, Notifier

# Import and register all commands at module level
from pocketbook.cli.commands import (
    add,
    category,
    init_categories,
    rate,
    summary,
    transaction,
)


def echo_error_notification(notification: Notification) -> None:
    """Print failure notifications; commands report their own successes."""
    if notification.level == ERROR:
        click.echo(f"Error: {notification.title}: {notification.message}", err=True)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETBOOK_DB_PATH environment variable)",
    envvar="POCKETBOOK_DB_PATH",
)
@click.option(
    "--cache-dir",
    type=click.Path(),
    help="Directory for the local snapshot cache (overrides POCKETBOOK_CACHE_DIR)",
    envvar="POCKETBOOK_CACHE_DIR",
)
@click.option(
    "--owner",
    help="Owner whose data is used (overrides POCKETBOOK_OWNER, default 'local')",
    envvar="POCKETBOOK_OWNER",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, cache_dir: str | None, owner: str | None, verbose: bool):
    """Pocketbook - personal income and expense tracking.

    Record transactions by category, review monthly summaries and keep a
    manually entered exchange rate per month.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize the gateway only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        gateway = create_sqlite_gateway(database_path=db_path, owner_id=owner)
        ctx.call_on_close(gateway.close)
        notifier = Notifier()
        notifier.subscribe(echo_error_notification)
        cache = create_local_cache(cache_dir=cache_dir, owner_id=gateway.owner_id)
        ctx.obj["gateway"] = gateway
        ctx.obj["ledger"] = Ledger(gateway, cache=cache, notifier=notifier)


# Register all commands
init_categories.register_commands(cli)
category.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
summary.register_commands(cli)
rate.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
