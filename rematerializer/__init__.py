"""
Rematerializer: refill an LRU cache from an external SQL database on a miss.

Exports: Rematerializer, ColumnTypeRegistry, ColumnKind, ProductTypeEnum,
FetchResult, FetchStatus and the error classes.
"""

from rematerializer.core.errors import (
    BindingError,
    ConfigurationError,
    ConnectivityError,
    MappingError,
    RematerializerError,
)
from rematerializer.core.registry import ColumnTypeRegistry
from rematerializer.engines.rematerializer import Rematerializer
from rematerializer.models import ColumnDef, ColumnKind, ProductTypeEnum
from rematerializer.schemas import FetchResult, FetchStatus

__all__ = [
    "Rematerializer",
    "ColumnTypeRegistry",
    "ColumnDef",
    "ColumnKind",
    "ProductTypeEnum",
    "FetchResult",
    "FetchStatus",
    "RematerializerError",
    "ConfigurationError",
    "ConnectivityError",
    "BindingError",
    "MappingError",
]
