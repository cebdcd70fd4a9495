"""
Accounts Permissions - DRF permission classes

Server-side counterparts of the page gating decorators:

- HasProfile: signed in, onboarded and not banned
- IsProfileAdmin: HasProfile plus the admin flag
"""

from rest_framework import permissions

from accounts.context import auth_context_for
from accounts.decorators import ACCESS_DENIED_MESSAGE, BANNED_MESSAGE, NOT_ONBOARDED_MESSAGE


class HasProfile(permissions.BasePermission):
    """
    Permission check for identities with a usable profile.

    Requires:
    - User to be authenticated
    - A profile row keyed by the user's id
    - The profile not to be banned
    """

    message = NOT_ONBOARDED_MESSAGE

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        context = auth_context_for(request)
        if context.is_banned:
            self.message = BANNED_MESSAGE
            return False
        return context.is_onboarded


class IsProfileAdmin(HasProfile):
    """Only profiles carrying the admin flag."""

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if not auth_context_for(request).is_admin:
            self.message = ACCESS_DENIED_MESSAGE
            return False
        return True
