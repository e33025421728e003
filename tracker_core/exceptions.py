"""Domain-specific exceptions for the expense tracker core services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class PersistenceError(IOError):
    """Raised when the record store or settings document cannot be read or written."""


class ExportError(PersistenceError):
    """Raised when an export could not be written to its sink."""
