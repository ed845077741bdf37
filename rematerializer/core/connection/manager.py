"""
Connection manager for one backing database.

Owns a single connection and the cursor the rematerializer reuses for its
prepared lookup. Two states: disconnected (no connection, no cursor) and
connected (connection, cursor created on demand). The cursor never outlives
its connection.

Not thread-safe; the owning Rematerializer serializes access.
"""

import logging
from typing import Any, NamedTuple

from rematerializer.core.errors import ConnectivityError
from rematerializer.schemas import BackingDatabaseConfig

from .drivers import close_quiet, connect
from .health import health_check

_log = logging.getLogger(__name__)


class _Live(NamedTuple):
    conn: Any
    host: str


def _driver_reports_closed(conn: Any) -> bool:
    """Cheap, I/O-free check of the driver's own closed flag, where it has one."""
    closed = getattr(conn, "closed", None)
    if isinstance(closed, bool):  # psycopg
        return closed
    is_open = getattr(conn, "open", None)
    if isinstance(is_open, bool):  # pymysql
        return not is_open
    return False


class ConnectionManager:
    """Single connection to the backing database, reopened lazily after disconnect."""

    def __init__(self, config: BackingDatabaseConfig) -> None:
        self._config = config
        self._live: _Live | None = None
        self._cursor: Any = None

    @property
    def config(self) -> BackingDatabaseConfig:
        return self._config

    @property
    def host(self) -> str | None:
        """Host of the live connection, if any."""
        return self._live.host if self._live is not None else None

    @property
    def connection(self) -> Any:
        return self._live.conn if self._live is not None else None

    @property
    def has_cursor(self) -> bool:
        return self._cursor is not None

    def is_connected(self) -> bool:
        return self._live is not None

    def ensure_connected(self) -> None:
        """
        No-op when connected. Otherwise try each configured host in order and
        keep the first connection that opens. Raises ConnectivityError if none does.
        """
        if self._live is not None:
            if not _driver_reports_closed(self._live.conn):
                return
            _log.warning("Connection to %s was closed by the driver; reconnecting", self._live.host)
            self.disconnect()

        failures: list[str] = []
        for host in self._config.hosts:
            try:
                conn = connect(self._config, host)
            except Exception as e:
                _log.warning(
                    "Cannot connect to %s at %s:%s: %s",
                    self._config.product_type.value,
                    host,
                    self._config.resolved_port,
                    e,
                )
                failures.append(f"{host}: {e}")
                continue
            self._live = _Live(conn=conn, host=host)
            _log.info(
                "Connected to %s at %s:%s/%s",
                self._config.product_type.value,
                host,
                self._config.resolved_port,
                self._config.database,
            )
            return

        raise ConnectivityError(
            f"Cannot connect to {self._config.product_type.value} database "
            f"{self._config.database!r}; tried {len(failures)} host(s): " + "; ".join(failures)
        )

    def cursor(self) -> Any:
        """Return the reusable cursor, creating it on the live connection if needed."""
        if self._live is None:
            raise ConnectivityError("Not connected")
        if self._cursor is None:
            self._cursor = self._live.conn.cursor()
        return self._cursor

    def disconnect(self) -> None:
        """Close the cursor, then the connection. Idempotent; close errors become warnings."""
        if self._cursor is not None:
            err = close_quiet(self._cursor)
            self._cursor = None
            if err is not None:
                _log.warning("Got this while trying to close the cursor: %s", err)

        if self._live is not None:
            live = self._live
            self._live = None
            err = close_quiet(live.conn)
            if err is not None:
                _log.warning("Got this while trying to disconnect from %s: %s", live.host, err)
            else:
                _log.info("Disconnected from %s", live.host)

    def ping(self) -> bool:
        """True if the live connection answers SELECT 1. Diagnostics only."""
        if self._live is None:
            return False
        return health_check(self._live.conn, self._config.product_type)
