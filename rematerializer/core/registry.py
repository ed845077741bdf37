"""
Column type registry: logical type of each destination column, in cache
order, plus the backing table's primary-key column list.

Read-only after construction. Positions are 1-based, matching the driver's
parameter and result-column numbering.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from rematerializer.core.errors import ConfigurationError, MappingError
from rematerializer.models import ColumnDef, ColumnKind


class ColumnTypeRegistry:
    """Destination columns (ordered) and primary-key columns of one table."""

    def __init__(
        self,
        columns: Iterable[ColumnDef | tuple[str, Any]],
        pk_columns: Sequence[str],
    ) -> None:
        defs: list[ColumnDef] = []
        for col in columns:
            name, kind = col
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError("Column name must be a non-empty string")
            defs.append(ColumnDef(name.strip(), ColumnKind.parse(kind)))
        if not defs:
            raise ConfigurationError("At least one column is required")

        kinds: dict[str, ColumnKind] = {}
        for d in defs:
            if d.name in kinds:
                raise ConfigurationError(f"Duplicate column: {d.name!r}")
            kinds[d.name] = d.kind

        pks = [str(p).strip() for p in pk_columns]
        if not pks:
            raise ConfigurationError("At least one primary-key column is required")
        for p in pks:
            if p not in kinds:
                raise ConfigurationError(f"Primary-key column {p!r} is not a destination column")

        self._columns: tuple[ColumnDef, ...] = tuple(defs)
        self._kinds = kinds
        self._pk_columns: tuple[str, ...] = tuple(pks)

    @classmethod
    def from_mapping(cls, columns: dict[str, Any], pk_columns: Sequence[str]) -> "ColumnTypeRegistry":
        """Build from an ordered ``{name: kind}`` dict."""
        return cls(columns.items(), pk_columns)

    @property
    def columns(self) -> tuple[ColumnDef, ...]:
        return self._columns

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self._columns]

    @property
    def pk_columns(self) -> tuple[str, ...]:
        return self._pk_columns

    def __len__(self) -> int:
        return len(self._columns)

    def kind_of(self, column: str | int) -> ColumnKind:
        """Logical type of a column, by name or 1-based position."""
        if isinstance(column, int) and not isinstance(column, bool):
            if column < 1 or column > len(self._columns):
                raise MappingError(f"Column position {column} out of range 1..{len(self._columns)}")
            return self._columns[column - 1].kind
        try:
            return self._kinds[column]
        except KeyError:
            raise MappingError(f"Unknown column: {column!r}") from None

    def pk_column(self, position: int) -> str:
        """Name of the primary-key column at 1-based *position*."""
        if position < 1 or position > len(self._pk_columns):
            raise MappingError(
                f"Primary-key position {position} out of range 1..{len(self._pk_columns)}"
            )
        return self._pk_columns[position - 1]

    def __repr__(self) -> str:
        cols = ", ".join(f"{c.name} {c.kind.value}" for c in self._columns)
        return f"ColumnTypeRegistry(({cols}), pk={list(self._pk_columns)})"
