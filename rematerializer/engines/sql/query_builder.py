"""
SELECT statement for a primary-key lookup.

Built once per configuration; the text is immutable afterwards. Identifiers
are quoted for the backing dialect, values are never inlined: every key
column gets a driver placeholder.
"""

from collections.abc import Sequence

from rematerializer.core.connection import PLACEHOLDERS
from rematerializer.core.errors import ConfigurationError
from rematerializer.models import ProductTypeEnum

_QUOTES: dict[ProductTypeEnum, str] = {
    ProductTypeEnum.POSTGRES: '"',
    ProductTypeEnum.MYSQL: "`",
    ProductTypeEnum.TRINO: '"',
}


def quote_identifier(name: str, product_type: ProductTypeEnum) -> str:
    """
    Quote one identifier; embedded quote characters are doubled.

    For drivers using pyformat placeholders a literal % is written as %%.
    """
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError("Identifier must be a non-empty string")
    if "\x00" in name:
        raise ConfigurationError(f"Identifier contains NUL: {name!r}")
    q = _QUOTES[product_type]
    quoted = q + name.replace(q, q + q) + q
    if PLACEHOLDERS[product_type] == "%s":
        quoted = quoted.replace("%", "%%")
    return quoted


def build_select_sql(
    schema_name: str,
    table_name: str,
    pk_columns: Sequence[str],
    all_columns: Sequence[str],
    product_type: ProductTypeEnum = ProductTypeEnum.POSTGRES,
) -> str:
    """
    ``SELECT <all_columns> FROM <schema>.<table> WHERE <pk1> = ? AND ...``

    Columns appear in the given order, which is the order the cache expects
    values back in.
    """
    if not all_columns:
        raise ConfigurationError("At least one column is required")
    if not pk_columns:
        raise ConfigurationError("At least one primary-key column is required")
    missing = [c for c in pk_columns if c not in all_columns]
    if missing:
        raise ConfigurationError(f"Primary-key columns not in column list: {missing}")

    def q(name: str) -> str:
        return quote_identifier(name, product_type)

    ph = PLACEHOLDERS[product_type]
    select_list = ", ".join(q(c) for c in all_columns)
    where = " AND ".join(f"{q(c)} = {ph}" for c in pk_columns)
    return f"SELECT {select_list} FROM {q(schema_name)}.{q(table_name)} WHERE {where}"
