"""CLI helpers for running ledger coroutines."""

import asyncio
from typing import Any, Coroutine

import click

from pocketbook.domain.ledger import Ledger


def run(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a coroutine to completion from a synchronous command."""
    return asyncio.run(coro)


def load_ledger(ctx: click.Context) -> Ledger:
    """Return the context's ledger with cached data, refreshed from the store.

    If the store cannot be reached the cached snapshot is kept and the
    failure is reported through the notifier.
    """
    ledger: Ledger = ctx.obj["ledger"]
    ledger.load_cached()
    run(ledger.refresh())
    return ledger


def format_amount(amount) -> str:
    return f"{amount:,.2f}"
