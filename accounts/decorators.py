"""
Accounts Decorators - Gating for Function-Based Views

USAGE:
    from accounts.decorators import identity_required, profile_required, admin_required

    @identity_required
    def add_place_view(request):
        # A signed-in identity exists
        ...

    @profile_required
    def dashboard_view(request):
        # Identity with a profile that is not banned
        ...

    @admin_required
    def admin_dashboard_view(request):
        # Profile with the admin flag
        ...

Refusals never fail hard: the visitor gets a transient notice and is
redirected (to the login page with a reason code, or to the map for
signed-in non-admins).
"""

import logging
from functools import wraps
from urllib.parse import urlencode

from django.contrib import messages
from django.contrib.auth import logout
from django.shortcuts import redirect
from django.urls import reverse

from core.geocoding import client_ip

logger = logging.getLogger('security.auth')

UNAUTHORIZED_MESSAGE = 'Unauthorized… You must be logged in to access this page.'
NOT_ONBOARDED_MESSAGE = 'No user document found. Please contact support.'
BANNED_MESSAGE = 'Your account has been banned.'
ACCESS_DENIED_MESSAGE = 'Access Denied: You do not have permission to view this section.'


def login_redirect(reason='unauthorized'):
    return redirect(f"{reverse('accounts:login')}?{urlencode({'reason': reason})}")


def _refuse(request, view_func, message, reason):
    logger.warning(
        f"ACCESS_REFUSED: {view_func.__name__} reason={reason} "
        f"from IP {client_ip(request)}"
    )
    messages.error(request, message)
    return login_redirect(reason)


def _gate(view_func, check):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        context = getattr(request, 'auth_context', None)
        refusal = check(request, view_func, context)
        if refusal is not None:
            return refusal
        return view_func(request, *args, **kwargs)
    return wrapper


def _check_identity(request, view_func, context, message=UNAUTHORIZED_MESSAGE):
    if context is None or context.resolving or not context.is_authenticated:
        return _refuse(request, view_func, message, 'unauthorized')
    return None


def _check_profile(request, view_func, context, message=UNAUTHORIZED_MESSAGE):
    refusal = _check_identity(request, view_func, context, message)
    if refusal is not None:
        return refusal
    if not context.is_onboarded:
        return _refuse(request, view_func, NOT_ONBOARDED_MESSAGE, 'unauthorized')
    if context.is_banned:
        logout(request)
        return _refuse(request, view_func, BANNED_MESSAGE, 'banned')
    return None


def identity_required(view_func=None, message=UNAUTHORIZED_MESSAGE):
    """Require a signed-in identity; the profile may be missing."""
    def decorator(func):
        return _gate(func, lambda request, view, context: _check_identity(request, view, context, message))
    if view_func is not None:
        return decorator(view_func)
    return decorator


def profile_required(view_func=None, message=UNAUTHORIZED_MESSAGE):
    """Require an identity with a profile that is not banned."""
    def decorator(func):
        return _gate(func, lambda request, view, context: _check_profile(request, view, context, message))
    if view_func is not None:
        return decorator(view_func)
    return decorator


def admin_required(view_func):
    """Require an admin profile; other signed-in users go back to the map."""
    def check(request, view, context):
        refusal = _check_profile(request, view, context)
        if refusal is not None:
            return refusal
        if not context.is_admin:
            logger.warning(
                f"ADMIN_REQUIRED: {view.__name__} refused for user {context.identity_id} "
                f"from IP {client_ip(request)}"
            )
            messages.error(request, ACCESS_DENIED_MESSAGE)
            return redirect('places:discovery')
        return None
    return _gate(view_func, check)
