"""Unit tests for schemas: backing database properties parsing, FetchResult."""

import pytest

from rematerializer.core.errors import ConfigurationError
from rematerializer.models import ProductTypeEnum
from rematerializer.core.registry import ColumnTypeRegistry
from rematerializer.schemas import (
    BackingDatabaseConfig,
    FetchResult,
    FetchStatus,
    RematerializerConfig,
)


def test_properties_with_aliases_and_string_values() -> None:
    cfg = BackingDatabaseConfig.from_properties(
        {"hostnames": "a, b ,,c", "port": "6000", "sid": "orders", "user": "x", "password": "y"}
    )
    assert cfg.hosts == ("a", "b", "c")
    assert cfg.port == 6000
    assert cfg.database == "orders"
    assert cfg.username == "x"
    assert cfg.product_type == ProductTypeEnum.POSTGRES


def test_default_port_per_product() -> None:
    base = {"hosts": "h", "database": "d", "username": "u"}
    assert BackingDatabaseConfig.from_properties(base).resolved_port == 5432
    assert BackingDatabaseConfig.from_properties({**base, "product_type": "mysql"}).resolved_port == 3306
    assert BackingDatabaseConfig.from_properties({**base, "port": 15432}).resolved_port == 15432


def test_password_not_in_repr() -> None:
    cfg = BackingDatabaseConfig.from_properties(
        {"hosts": ["h"], "database": "d", "username": "u", "password": "hunter2"}
    )
    assert "hunter2" not in repr(cfg)


@pytest.mark.parametrize(
    "props",
    [
        {"database": "d", "username": "u"},
        {"hosts": " , ", "database": "d", "username": "u"},
        {"hosts": "h", "username": "u"},
        {"hosts": "h", "database": "d", "username": "u", "port": "0"},
        {"hosts": "h", "database": "d", "username": "u", "product_type": "oracle"},
        {"hosts": "h", "database": "d", "username": "u", "product_type": "trino", "use_ssl": True},
    ],
)
def test_invalid_properties(props: dict) -> None:
    with pytest.raises(ConfigurationError, match="Invalid backing database properties"):
        BackingDatabaseConfig.from_properties(props)


def test_config_is_immutable() -> None:
    cfg = BackingDatabaseConfig.from_properties({"hosts": "h", "database": "d", "username": "u"})
    with pytest.raises(Exception):
        cfg.database = "other"  # type: ignore[misc]


def test_fetch_result_ok() -> None:
    assert FetchResult(FetchStatus.FOUND, (1,)).ok is True
    assert FetchResult(FetchStatus.ABSENT).ok is True
    assert FetchResult(FetchStatus.FAILED, stage="bind").ok is False


def test_rematerializer_config_is_plain_value() -> None:
    """Two configurations built from the same inputs are equal."""
    database = BackingDatabaseConfig.from_properties({"hosts": "h", "database": "d", "username": "u"})
    registry = ColumnTypeRegistry([("id", "INTEGER")], ["id"])
    a = RematerializerConfig(schema_name="s", table_name="t", database=database, registry=registry)
    b = RematerializerConfig(schema_name="s", table_name="t", database=database, registry=registry)
    assert a == b
    assert set(RematerializerConfig.model_fields) == {"schema_name", "table_name", "database", "registry"}
