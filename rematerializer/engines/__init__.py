"""
Engines: Rematerializer (fetch pipeline), row mapping, SQL generation.
"""

from rematerializer.engines.rematerializer import Rematerializer
from rematerializer.engines.row_mapper import map_row
from rematerializer.engines.sql import build_select_sql

__all__ = [
    "Rematerializer",
    "map_row",
    "build_select_sql",
]
