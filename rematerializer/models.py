"""
Rematerializer models.

Enums: ProductTypeEnum (backing database product), ColumnKind (logical column
types of the cache schema). ColumnDef pairs a column name with its kind.
"""

from enum import Enum
from typing import NamedTuple

from rematerializer.core.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ProductTypeEnum(str, Enum):
    """Supported backing database product types (postgres, mysql, trino)."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    TRINO = "trino"


class ColumnKind(str, Enum):
    """Logical column types of the cache schema."""

    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DECIMAL = "DECIMAL"
    VARCHAR = "VARCHAR"
    VARBINARY = "VARBINARY"
    TIMESTAMP = "TIMESTAMP"
    BOOLEAN = "BOOLEAN"

    @classmethod
    def parse(cls, value: "str | ColumnKind") -> "ColumnKind":
        """Accept a ColumnKind or a case-insensitive type name."""
        if isinstance(value, ColumnKind):
            return value
        if not isinstance(value, str):
            raise ConfigurationError(f"Column type must be a string, got: {type(value).__name__}")
        name = value.strip().upper()
        try:
            return cls(name)
        except ValueError as e:
            raise ConfigurationError(f"Unknown column type: {value!r}") from e

    @property
    def bits(self) -> int | None:
        """Bit width for integer kinds; None otherwise."""
        return _INTEGER_BITS.get(self)

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_BITS


_INTEGER_BITS: dict[ColumnKind, int] = {
    ColumnKind.TINYINT: 8,
    ColumnKind.SMALLINT: 16,
    ColumnKind.INTEGER: 32,
    ColumnKind.BIGINT: 64,
}


# ---------------------------------------------------------------------------
# Column definitions
# ---------------------------------------------------------------------------


class ColumnDef(NamedTuple):
    name: str
    kind: ColumnKind
