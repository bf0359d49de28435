"""Domain exceptions for logbook services."""


class LogbookServiceError(Exception):
    """Base exception for all logbook service errors."""
    pass


class LogEntryNotFoundError(LogbookServiceError):
    """Log entry does not exist or belongs to another user."""
    pass


class LogEntryLockedError(LogbookServiceError):
    """Log entry is bundled into an RMP and cannot be changed."""
    pass


class BundleNotFoundError(LogbookServiceError):
    """Bundle does not exist or belongs to another user."""
    pass


class InvalidBundleStatusError(LogbookServiceError):
    """Requested bundle status is not one of the known statuses."""
    pass
