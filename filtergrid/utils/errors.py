"""Exception types raised by filtergrid."""


class FilterGridError(Exception):
    """Base exception for filtergrid operations."""

    pass


class ConfigurationError(FilterGridError):
    """Raised when a configuration or filter file is missing or invalid."""

    pass


class InvalidFilterTreeError(FilterGridError):
    """Raised when a filter tree contains an unknown node kind or operator."""

    pass


class ExportError(FilterGridError):
    """Raised when a CSV export cannot be produced."""

    pass
