"""
Core Exceptions - Error Taxonomy for Kivvly

Three families of errors cross the views:

- AuthorizationError: caller is not signed in, has no profile, is banned or
  is not an admin. Pages redirect with a notice; the API answers 401/403.
- BackendOperationError: the database, object store or a remote service
  failed. Logged and surfaced as a notice; local state is left unchanged.
- SubmissionValidationError: user input rejected before any network call.

API responses follow a single format:
{
    "success": false,
    "message": "Human-readable message",
    "error_code": "MACHINE_READABLE_CODE",
    "errors": [...],
    "meta": {"timestamp": "ISO8601"}
}
"""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# DOMAIN EXCEPTIONS
# =============================================================================

class KivvlyError(Exception):
    """Base class for errors raised by Kivvly services."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = 'ERROR'
    default_message = 'An unexpected error occurred.'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class AuthorizationError(KivvlyError):
    """Caller lacks the identity, profile or role required."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = 'AUTHORIZATION_ERROR'
    default_message = 'You do not have permission to perform this action.'

    def __init__(self, message=None, reason='unauthorized', **extra):
        self.reason = reason
        super().__init__(message, reason=reason, **extra)


class AuthenticationRequired(AuthorizationError):
    """No signed-in identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = 'NOT_AUTHENTICATED'
    default_message = 'You must be logged in.'


class BackendOperationError(KivvlyError):
    """A read or write against the store or a remote service failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = 'BACKEND_ERROR'
    default_message = 'The operation could not be completed. Please try again.'


class StorageUploadError(BackendOperationError):
    """A blob could not be written to the object store."""

    error_code = 'STORAGE_UPLOAD_ERROR'
    default_message = 'The file could not be stored.'


class ImageUploadError(BackendOperationError):
    """One image of a submission failed to compress or upload."""

    error_code = 'IMAGE_UPLOAD_ERROR'
    default_message = 'Error uploading images'


class RecordNotFound(KivvlyError):
    """The targeted record does not exist (or no longer exists)."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = 'NOT_FOUND'
    default_message = 'The requested record was not found.'


class SubmissionValidationError(KivvlyError):
    """User input rejected before any remote call."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = 'VALIDATION_ERROR'
    default_message = 'The submitted data is invalid.'


# =============================================================================
# DRF EXCEPTION HANDLER
# =============================================================================

def error_envelope(message, error_code, errors=None, extra=None):
    meta = {'timestamp': timezone.now().isoformat()}
    if extra:
        meta.update(extra)
    return {
        'success': False,
        'data': None,
        'message': message,
        'error_code': error_code,
        'errors': errors or [],
        'meta': meta,
    }


def api_exception_handler(exc, context):
    """
    Format every API error with the standard envelope.

    Domain exceptions map to their own status code; DRF exceptions keep
    theirs; anything else becomes a logged 500.
    """
    if isinstance(exc, KivvlyError):
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__}: {exc.message}")
        return Response(
            error_envelope(exc.message, exc.error_code, extra=exc.extra),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)

    if response is None:
        logger.exception(f"Unhandled exception: {exc}")
        return Response(
            error_envelope('An unexpected error occurred.', 'INTERNAL_ERROR'),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        errors = []
        message = 'Validation failed.'
        if isinstance(exc.detail, dict):
            errors = [
                {'field': field, 'messages': msgs if isinstance(msgs, list) else [str(msgs)]}
                for field, msgs in exc.detail.items()
            ]
        elif isinstance(exc.detail, list):
            errors = [{'field': 'non_field_errors', 'messages': [str(e) for e in exc.detail]}]
            if exc.detail:
                message = str(exc.detail[0])
        else:
            message = str(exc.detail)
        response.data = error_envelope(message, 'VALIDATION_ERROR', errors=errors)
    else:
        message = str(exc.detail) if hasattr(exc, 'detail') else str(exc)
        response.data = error_envelope(message, str(getattr(exc, 'default_code', 'ERROR')).upper())

    return response
