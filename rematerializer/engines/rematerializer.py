"""
Rematerializer: fetch one row by primary key from the backing database when
the LRU cache misses.

Flow per fetch: connect (lazily) -> reuse or create the cursor -> bind the key
values by logical type -> execute the prepared SELECT -> map the row into
cache order and types.

Any failure marks the instance broken, is logged with the stage it happened
in, and tears the connection down so the next call starts clean. Nothing is
retried inside a call. ``is_broken`` is cleared only by a successful
``configure``.

configure, fetch and disconnect hold an instance lock; one instance serves
one call at a time.
"""

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from rematerializer.core.config import settings
from rematerializer.core.connection import ConnectionManager, execute
from rematerializer.core.errors import ConfigurationError, RematerializerError
from rematerializer.core.metrics import LatencyReporter, PrometheusLatencyReporter, now_ms
from rematerializer.core.param_type import bind_params
from rematerializer.core.registry import ColumnTypeRegistry
from rematerializer.engines.row_mapper import map_row
from rematerializer.engines.sql.query_builder import build_select_sql
from rematerializer.schemas import (
    BackingDatabaseConfig,
    FetchResult,
    FetchStatus,
    RematerializerConfig,
)

_log = logging.getLogger(__name__)


class Rematerializer:
    """Backs one cache table with one table of an external SQL database."""

    def __init__(
        self,
        *,
        latency_reporter: LatencyReporter | None = None,
        connection_factory: Any = ConnectionManager,
    ) -> None:
        self._lock = threading.Lock()
        self._reporter: LatencyReporter = latency_reporter or PrometheusLatencyReporter()
        self._connection_factory = connection_factory
        self._config: RematerializerConfig | None = None
        self._connections: ConnectionManager | None = None
        self._select_sql: str | None = None
        self._broken = False
        self._last_error: BaseException | None = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def is_broken(self) -> bool:
        """True once any configure/fetch stage has failed, until the next good configure."""
        return self._broken

    @property
    def last_error(self) -> BaseException | None:
        return self._last_error

    @property
    def config(self) -> RematerializerConfig | None:
        return self._config

    @property
    def select_sql(self) -> str | None:
        return self._select_sql

    @property
    def latency_reporter(self) -> LatencyReporter:
        return self._reporter

    @property
    def has_prepared_query(self) -> bool:
        """True while a cursor for the SELECT is held on a live connection."""
        return self._connections is not None and self._connections.has_cursor

    def is_connected(self) -> bool:
        return self._connections is not None and self._connections.is_connected()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(
        self,
        schema_name: str,
        table_name: str,
        properties: Mapping[str, Any],
        registry: ColumnTypeRegistry,
    ) -> bool:
        """
        Store configuration, build the SELECT and connect.

        Invalid properties or an unreachable database do not raise: the
        instance is marked broken and the error logged. Returns True when the
        rematerializer is healthy afterwards. A configuration that parsed but
        could not connect is kept, so a later fetch can still recover.
        """
        if not isinstance(properties, Mapping):
            raise TypeError(f"properties must be a mapping, got: {type(properties).__name__}")
        if not isinstance(registry, ColumnTypeRegistry):
            raise TypeError(f"registry must be a ColumnTypeRegistry, got: {type(registry).__name__}")

        with self._lock:
            self._disconnect()
            self._config = None
            self._connections = None
            self._select_sql = None

            try:
                config = self._build_config(schema_name, table_name, properties, registry)
                product_type = config.database.product_type
                self._select_sql = build_select_sql(
                    config.schema_name,
                    config.table_name,
                    registry.pk_columns,
                    registry.column_names,
                    product_type,
                )
                self._config = config
                self._connections = self._connection_factory(config.database)
                self._connections.ensure_connected()
            except RematerializerError as e:
                self._broken = True
                self._last_error = e
                _log.error("Rematerializer for %s.%s is broken: %s", schema_name, table_name, e)
                return False

            self._broken = False
            self._last_error = None
            _log.info(
                "Rematerializer configured for %s.%s on %s",
                schema_name,
                table_name,
                product_type.value,
            )
            return True

    @staticmethod
    def _build_config(
        schema_name: str,
        table_name: str,
        properties: Mapping[str, Any],
        registry: ColumnTypeRegistry,
    ) -> RematerializerConfig:
        database = BackingDatabaseConfig.from_properties(properties)
        try:
            return RematerializerConfig(
                schema_name=schema_name,
                table_name=table_name,
                database=database,
                registry=registry,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid schema or table name: {e.errors()[0].get('msg')}") from e

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def fetch(self, pk_values: Sequence[Any], pk_count: int | None = None) -> tuple[Any, ...] | None:
        """
        Values of the row with this primary key, in cache column order.

        Returns None both when no row matches and when the fetch failed; use
        ``is_broken`` or ``fetch_result`` to tell them apart.
        """
        return self.fetch_result(pk_values, pk_count).values

    def fetch_result(self, pk_values: Sequence[Any], pk_count: int | None = None) -> FetchResult:
        """Like ``fetch`` but reports FOUND / ABSENT / FAILED explicitly."""
        if pk_count is None:
            pk_count = len(pk_values)
        stage = "connect"

        with self._lock:
            start = now_ms()
            try:
                if self._config is None or self._connections is None or self._select_sql is None:
                    raise ConfigurationError("Rematerializer is not configured")
                config = self._config
                product_type = config.database.product_type

                self._connections.ensure_connected()

                stage = "prepare"
                cursor = self._connections.cursor()

                stage = "bind"
                params = bind_params(pk_values, pk_count, config.registry)

                stage = "execute"
                execute(cursor, self._select_sql, params, product_type=product_type)
                row = cursor.fetchone()
                self._report_latency(f"{product_type.value}_query_ms", start)

                if row is None:
                    return FetchResult(FetchStatus.ABSENT)

                stage = "map"
                return FetchResult(FetchStatus.FOUND, map_row(row, config.registry))
            except Exception as e:
                self._broken = True
                self._last_error = e
                _log.error(
                    "Rematerializer.fetch failed at %s stage for %s: %s",
                    stage,
                    self._table_label(),
                    e,
                    exc_info=True,
                )
                self._disconnect()
                return FetchResult(FetchStatus.FAILED, stage=stage, error=e)

    def _report_latency(self, metric_name: str, start: int) -> None:
        try:
            self._reporter.report_latency(metric_name, start, "", settings.LATENCY_SAMPLE_PERCENT)
        except Exception:
            _log.warning("Latency reporter raised for %s", metric_name, exc_info=True)

    def _table_label(self) -> str:
        if self._config is None:
            return "<unconfigured>"
        return f"{self._config.schema_name}.{self._config.table_name}"

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def disconnect(self) -> None:
        """Close the prepared cursor and the connection. Safe to call repeatedly."""
        with self._lock:
            self._disconnect()

    def _disconnect(self) -> None:
        if self._connections is not None:
            self._connections.disconnect()

    def __enter__(self) -> "Rematerializer":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()
