"""
API exceptions for the logbook app.

Views translate the domain exceptions raised by ``apps.logbook.services``
into these, so every client error carries a stable ``code``.
"""
from rest_framework.exceptions import APIException


class LogEntryNotFound(APIException):
    """Log entry not found for the current user."""
    status_code = 404
    default_detail = 'Log entry not found.'
    default_code = 'log_entry_not_found'


class LogEntryLocked(APIException):
    """Log entry is bundled and therefore read-only."""
    status_code = 403
    default_detail = 'This entry is part of a submitted RMP and cannot be changed.'
    default_code = 'log_entry_locked'


class BundleNotFound(APIException):
    """Bundle not found for the current user."""
    status_code = 404
    default_detail = 'RMP not found.'
    default_code = 'bundle_not_found'


class InvalidBundleStatus(APIException):
    """Unknown bundle status."""
    status_code = 400
    default_detail = 'Invalid RMP status.'
    default_code = 'invalid_bundle_status'
