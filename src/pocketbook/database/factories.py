"""Gateway factory functions."""

import os
from pathlib import Path
from typing import Optional

from pocketbook.database.sqlalchemy_db import SQLAlchemyGateway

DEFAULT_OWNER = "local"


def resolve_owner(owner_id: Optional[str] = None) -> str:
    """Return the owner id, falling back to POCKETBOOK_OWNER, then 'local'."""
    return owner_id or os.environ.get("POCKETBOOK_OWNER") or DEFAULT_OWNER


def create_sqlite_gateway(
    database_path: Optional[str] = None, owner_id: Optional[str] = None
) -> SQLAlchemyGateway:
    """Create a SQLite-backed gateway.

    Args:
        database_path: Path to SQLite database file. If None, checks POCKETBOOK_DB_PATH
            environment variable, then defaults to ~/.pocketbook/pocketbook.db
        owner_id: Owner the gateway is scoped to. If None, checks POCKETBOOK_OWNER,
            then defaults to 'local'

    Returns:
        SQLAlchemyGateway instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("POCKETBOOK_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".pocketbook"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pocketbook.db")

    return SQLAlchemyGateway(f"sqlite:///{database_path}", owner_id=resolve_owner(owner_id))
