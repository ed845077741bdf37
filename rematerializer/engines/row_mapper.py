"""
Map a driver result row to the cache's value types.

- integer kinds: a Decimal is truncated toward zero and narrowed to the
  column's width with two's-complement wraparound (no range check)
- DECIMAL: Decimal passes through unchanged
- datetimes become timezone-aware UTC; a date in a TIMESTAMP column becomes
  midnight UTC
- anything else passes through unchanged
"""

from collections.abc import Sequence
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from rematerializer.core.errors import MappingError
from rematerializer.core.registry import ColumnTypeRegistry
from rematerializer.models import ColumnKind


def narrow_integer(value: Decimal, bits: int) -> int:
    """Drop the fraction, keep the low *bits* bits as a signed integer."""
    mask = (1 << bits) - 1
    n = int(value) & mask
    if n >= 1 << (bits - 1):
        n -= 1 << bits
    return n


def normalize_timestamp(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def map_value(value: Any, kind: ColumnKind) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        return normalize_timestamp(value)
    if isinstance(value, date) and kind == ColumnKind.TIMESTAMP:
        return datetime.combine(value, datetime.min.time(), tzinfo=timezone.utc)
    if isinstance(value, Decimal) and kind.is_integer:
        if not value.is_finite():
            raise MappingError(f"Cannot narrow {value} to {kind.value}")
        return narrow_integer(value, kind.bits)
    return value


def map_row(row: Sequence[Any], registry: ColumnTypeRegistry) -> tuple[Any, ...]:
    """Convert one result row, position by position, into cache order and types."""
    if len(row) != len(registry):
        raise MappingError(f"Result row has {len(row)} columns, expected {len(registry)}")
    out: list[Any] = []
    for i, value in enumerate(row):
        kind = registry.kind_of(i + 1)
        try:
            out.append(map_value(value, kind))
        except MappingError:
            raise
        except Exception as e:
            name = registry.columns[i].name
            raise MappingError(f"Column '{name}' ({kind.value}): {e}") from e
    return tuple(out)
