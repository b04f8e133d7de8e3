"""Data gateway layer for pocketbook."""

from pocketbook.database.base import DataGateway
from pocketbook.database.factories import create_sqlite_gateway

__all__ = ["DataGateway", "create_sqlite_gateway"]
