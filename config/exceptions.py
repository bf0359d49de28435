"""
Project-wide DRF exception handler.

DRF exceptions (validation, permission, not found) pass through unchanged.
Storage-layer failures escaping a service transaction are logged with full
detail and answered with a generic 500 body so no internals leak.
"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.error(
            "Transaction failed in %s: %s",
            view.__class__.__name__ if view else 'unknown view',
            exc,
            exc_info=exc,
        )
        return Response(
            {'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # Anything else goes to Django's handler500
    return None
