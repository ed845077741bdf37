"""
DB connection helpers for the backing database.

Uses psycopg (PostgreSQL), pymysql (MySQL), or trino (Trino) based on
product_type. Session settings (autocommit, statement timeout, application
name) are applied at connect time so every query on the connection inherits
them.
"""

from typing import Any

import psycopg
import pymysql
from trino.auth import BasicAuthentication
from trino.dbapi import connect as trino_connect

from rematerializer.core.config import settings
from rematerializer.models import ProductTypeEnum
from rematerializer.schemas import BackingDatabaseConfig

# DB-API paramstyle per product: psycopg and pymysql use "format", trino "qmark"
PLACEHOLDERS: dict[ProductTypeEnum, str] = {
    ProductTypeEnum.POSTGRES: "%s",
    ProductTypeEnum.MYSQL: "%s",
    ProductTypeEnum.TRINO: "?",
}


def _statement_timeout_ms() -> int | None:
    timeout_sec = settings.STATEMENT_TIMEOUT
    if timeout_sec is None or timeout_sec <= 0:
        return None
    return int(timeout_sec * 1000)


def connect(config: BackingDatabaseConfig, host: str) -> Any:
    """
    Open a connection to *host* using the credentials in *config*.

    Raises whatever the driver raises when the host is unreachable or the
    credentials are rejected; the caller decides how to report it.
    """
    pt = config.product_type
    port = config.resolved_port
    timeout = settings.CONNECT_TIMEOUT
    timeout_ms = _statement_timeout_ms()

    if pt == ProductTypeEnum.POSTGRES:
        kwargs: dict[str, Any] = {}
        if timeout_ms is not None:
            kwargs["options"] = f"-c statement_timeout={timeout_ms}"
        return psycopg.connect(
            host=host,
            port=port,
            dbname=config.database,
            user=config.username,
            password=config.password,
            connect_timeout=timeout,
            application_name=settings.APPLICATION_NAME,
            autocommit=True,
            **kwargs,
        )
    if pt == ProductTypeEnum.MYSQL:
        kwargs = {}
        if timeout_ms is not None:
            kwargs["init_command"] = f"SET SESSION max_execution_time = {timeout_ms}"
        return pymysql.connect(
            host=host,
            port=port,
            database=config.database,
            user=config.username,
            password=config.password,
            connect_timeout=timeout,
            autocommit=True,
            **kwargs,
        )
    if pt == ProductTypeEnum.TRINO:
        session_properties: dict[str, str] = {}
        if timeout_ms is not None:
            session_properties["query_max_execution_time"] = f"{timeout_ms}ms"
        auth = BasicAuthentication(config.username, config.password) if config.use_ssl else None
        return trino_connect(
            host=host,
            port=port,
            user=config.username,
            auth=auth,
            catalog=config.database,
            source=settings.APPLICATION_NAME,
            http_scheme="https" if config.use_ssl else "http",
            request_timeout=timeout,
            session_properties=session_properties or None,
        )
    raise ValueError(f"Unsupported product_type: {pt}")


def execute(
    cursor: Any,
    sql: str,
    params: list | tuple | None = None,
    *,
    product_type: ProductTypeEnum | None = None,
) -> Any:
    """
    Execute *sql* on an existing cursor and return the cursor.

    On Postgres the statement is prepared server-side so repeated lookups
    reuse the plan.
    """
    if product_type == ProductTypeEnum.POSTGRES:
        cursor.execute(sql, params, prepare=True)
    elif params is not None:
        cursor.execute(sql, params)
    else:
        cursor.execute(sql)
    return cursor


def close_quiet(resource: Any) -> BaseException | None:
    """Close a cursor or connection; return the close-time error instead of raising."""
    try:
        resource.close()
    except Exception as e:
        return e
    return None
