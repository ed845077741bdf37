"""
Connection handling for the backing database.

No driver layer: psycopg, pymysql and trino are installed via pip;
BackingDatabaseConfig (product_type, hosts, ...) is enough.
"""

from .drivers import PLACEHOLDERS, close_quiet, connect, execute
from .health import health_check
from .manager import ConnectionManager

__all__ = [
    "PLACEHOLDERS",
    "connect",
    "execute",
    "close_quiet",
    "health_check",
    "ConnectionManager",
]
