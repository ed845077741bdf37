"""
Primary-key parameter binding.

Converts each primary-key value to the Python type the DB-API drivers bind
for its column's logical type. Conversion never silently changes a value:
anything that cannot be represented exactly in the column's type raises
BindingError.
"""

from __future__ import annotations

import binascii
from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from rematerializer.core.errors import BindingError
from rematerializer.core.registry import ColumnTypeRegistry
from rematerializer.models import ColumnKind

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _int_range(bits: int) -> tuple[int, int]:
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def _coerce_integer(value: Any, kind: ColumnKind) -> int:
    if isinstance(value, bool):
        raise BindingError("Boolean not allowed for integer")
    if isinstance(value, int):
        x = value
    elif isinstance(value, (float, Decimal)):
        if isinstance(value, float) and not value.is_integer():
            raise BindingError(f"Expected integer, got float: {value}")
        if isinstance(value, Decimal) and (not value.is_finite() or value != value.to_integral_value()):
            raise BindingError(f"Expected integer, got decimal: {value}")
        x = int(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise BindingError("Value is empty")
        try:
            x = int(s)
        except ValueError as e:
            raise BindingError(f"Invalid integer: {s!r}") from e
    else:
        raise BindingError(f"Expected integer, got: {type(value).__name__}")

    lo, hi = _int_range(kind.bits or 64)
    if x < lo or x > hi:
        raise BindingError(f"Value {x} out of range for {kind.value} [{lo}, {hi}]")
    return x


def _coerce_float(value: Any, _kind: ColumnKind) -> float:
    if isinstance(value, bool):
        raise BindingError("Boolean not allowed for float")
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError as e:
            raise BindingError(f"Invalid number: {value!r}") from e
    raise BindingError(f"Expected number, got: {type(value).__name__}")


def _coerce_decimal(value: Any, _kind: ColumnKind) -> Decimal:
    if isinstance(value, bool):
        raise BindingError("Boolean not allowed for decimal")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float, str)):
        # str() keeps floats at their shortest repr (0.1 -> Decimal("0.1"))
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise BindingError(f"Invalid decimal: {value!r}") from e
    else:
        raise BindingError(f"Expected decimal, got: {type(value).__name__}")
    if not d.is_finite():
        raise BindingError(f"Decimal must be finite, got: {value!r}")
    return d


def _coerce_varchar(value: Any, _kind: ColumnKind) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    raise BindingError(f"Expected string, got: {type(value).__name__}")


def _coerce_varbinary(value: Any, _kind: ColumnKind) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return binascii.unhexlify(value.strip())
        except (binascii.Error, ValueError) as e:
            raise BindingError(f"Invalid hex string for varbinary: {value!r}") from e
    raise BindingError(f"Expected bytes or hex string, got: {type(value).__name__}")


def _coerce_timestamp(value: Any, _kind: ColumnKind) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, datetime.min.time())
    elif isinstance(value, int) and not isinstance(value, bool):
        # epoch microseconds, the cache's native timestamp unit
        try:
            return _EPOCH + timedelta(microseconds=value)
        except OverflowError as e:
            raise BindingError(f"Epoch microseconds out of range: {value}") from e
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise BindingError(f"Invalid ISO timestamp: {value!r}") from e
    else:
        raise BindingError(f"Expected timestamp, got: {type(value).__name__}")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    try:
        return dt.astimezone(timezone.utc)
    except OverflowError as e:
        raise BindingError(f"Timestamp out of range in UTC: {value!r}") from e


def _coerce_boolean(value: Any, _kind: ColumnKind) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value == 0:
            return False
        if value == 1:
            return True
        raise BindingError(f"Expected boolean, got integer: {value}")
    s = str(value).strip().lower()
    if s in ("true", "1", "yes"):
        return True
    if s in ("false", "0", "no"):
        return False
    raise BindingError(f"Expected boolean (true/false, 1/0, yes/no), got: {value!r}")


_COERCERS: dict[ColumnKind, Callable[[Any, ColumnKind], Any]] = {
    ColumnKind.TINYINT: _coerce_integer,
    ColumnKind.SMALLINT: _coerce_integer,
    ColumnKind.INTEGER: _coerce_integer,
    ColumnKind.BIGINT: _coerce_integer,
    ColumnKind.FLOAT: _coerce_float,
    ColumnKind.DECIMAL: _coerce_decimal,
    ColumnKind.VARCHAR: _coerce_varchar,
    ColumnKind.VARBINARY: _coerce_varbinary,
    ColumnKind.TIMESTAMP: _coerce_timestamp,
    ColumnKind.BOOLEAN: _coerce_boolean,
}


def coerce_param(value: Any, kind: ColumnKind) -> Any:
    """Convert one primary-key value for binding as *kind*. Raises BindingError."""
    if value is None:
        raise BindingError("Primary-key value is NULL")
    return _COERCERS[kind](value, kind)


def bind_params(
    pk_values: Sequence[Any],
    pk_count: int,
    registry: ColumnTypeRegistry,
) -> list[Any]:
    """
    Coerce the first ``min(len(pk_values), pk_count)`` primary-key values.

    Positions beyond that are not bound; a caller supplying fewer values than
    the key has predicate columns gets a statement the driver will reject.
    """
    n = min(len(pk_values), pk_count)
    if n > len(registry.pk_columns):
        raise BindingError(
            f"Got {n} primary-key values, table key has {len(registry.pk_columns)} column(s)"
        )
    params: list[Any] = []
    for i in range(n):
        col = registry.pk_column(i + 1)
        try:
            params.append(coerce_param(pk_values[i], registry.kind_of(col)))
        except BindingError as e:
            raise BindingError(f"Primary-key column '{col}' {e}") from e
    return params
