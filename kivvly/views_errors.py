"""
Error handlers for Kivvly.

Pages get an error template; requests under /api/ (or asking for JSON) get
the same envelope as the DRF exception handler, with an ``error_id`` in
``meta`` that is also written to the log line.
"""

import logging
import uuid

from django.conf import settings
from django.http import JsonResponse
from django.shortcuts import render

from core.exceptions import error_envelope
from core.geocoding import client_ip

logger_client = logging.getLogger('kivvly.errors.client')  # 4xx
logger_server = logging.getLogger('kivvly.errors.server')  # 5xx

SUPPORT_EMAIL = getattr(settings, 'SUPPORT_EMAIL', 'support@kivvly.app')

ERRORS = {
    400: ('BAD_REQUEST', 'Bad request', 'The request could not be understood.'),
    403: ('FORBIDDEN', 'Access denied', 'You do not have permission to view this page.'),
    404: ('NOT_FOUND', 'Page not found', 'This page or place does not exist.'),
    500: ('INTERNAL_ERROR', 'Something went wrong', 'An unexpected error occurred. Please try again later.'),
}


def _wants_json(request):
    return (
        request.path.startswith('/api/')
        or request.content_type == 'application/json'
        or request.META.get('HTTP_ACCEPT', '').startswith('application/json')
    )


def _who(request):
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return f'user {user.pk}'
    return 'anonymous'


def _respond(request, status, exception=None):
    error_id = uuid.uuid4().hex[:8]
    code, title, message = ERRORS[status]
    line = f"{status} {request.path} id={error_id} {_who(request)} ip={client_ip(request)}"

    if status >= 500:
        logger_server.error(line, exc_info=True)
    elif status == 404:
        logger_client.info(line)
    else:
        logger_client.warning(f"{line} detail={exception or '-'}")

    if _wants_json(request):
        return JsonResponse(error_envelope(message, code, extra={'error_id': error_id}), status=status)

    context = {
        'title': title,
        'message': message,
        'error_id': error_id,
        'request_path': request.path,
        'support_email': SUPPORT_EMAIL,
        'is_authenticated': _who(request) != 'anonymous',
    }
    return render(request, f'errors/{status}.html', context, status=status)


def handler400(request, exception=None):
    return _respond(request, 400, exception)


def handler403(request, exception=None):
    return _respond(request, 403, exception)


def handler404(request, exception=None):
    return _respond(request, 404, exception)


def handler500(request):
    return _respond(request, 500)
