"""
Error taxonomy for the rematerializer.

Every fetch-time failure funnels into one recovery path (mark broken, log with
stage, disconnect), so these classes exist mainly to give logs and
FetchResult a precise cause.
"""


class RematerializerError(Exception):
    """Base class for all rematerializer errors."""

    pass


class ConfigurationError(RematerializerError, ValueError):
    """Invalid or missing configuration (properties, columns, primary key)."""

    pass


class ConnectivityError(RematerializerError):
    """Backing database unreachable, or no live connection to work with."""

    pass


class BindingError(RematerializerError, ValueError):
    """A primary-key value cannot be represented in its column's type."""

    pass


class MappingError(RematerializerError):
    """A result row could not be converted to the cache's value types."""

    pass
