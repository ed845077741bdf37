"""
SQL generation for the primary-key lookup.

Exports: build_select_sql, quote_identifier.
"""

from rematerializer.engines.sql.query_builder import build_select_sql, quote_identifier

__all__ = [
    "build_select_sql",
    "quote_identifier",
]
