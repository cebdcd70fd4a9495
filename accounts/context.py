"""
Auth/Profile Context

Single answer to "who is signed in and what may they do" for one request.

The context holds three values:
- identity: the signed-in CustomUser, or None
- profile: the identity's ProfileRecord, or None when the identity has no
  profile (signed in but not onboarded) or the profile could not be read
- resolving: True while a session change is being processed; gated views
  must not render while it is set

Collaborators are injected so tests can drive the state machine with fakes:
- identity_refresher(identity) -> identity: re-reads the identity so an
  out-of-band email verification is visible
- profile_loader(identity) -> ProfileRecord | None: point read
- profile_healer(identity): marks the stored profile as verified

Usage:
    context = AuthProfileContext()
    context.subscribe(request)          # follow sign-in / sign-out
    context.on_session_change(request.user)
    ...
    context.close()
"""

import dataclasses
import logging
import uuid

from django.contrib.auth.signals import user_logged_in, user_logged_out
from django.db import DatabaseError

from accounts.models import UserProfile
from accounts.repository import ProfileRepository
from core.exceptions import BackendOperationError

logger = logging.getLogger(__name__)


def refresh_identity(identity):
    identity.refresh_from_db()
    return identity


def load_profile(identity):
    return ProfileRepository.get(identity.pk)


def heal_profile(identity):
    UserProfile.objects.filter(pk=identity.pk).update(is_verified=UserProfile.Verification.YES)


class AuthProfileContext:

    def __init__(self, identity_refresher=None, profile_loader=None, profile_healer=None):
        self._refresh = identity_refresher or refresh_identity
        self._load = profile_loader or load_profile
        self._heal = profile_healer or heal_profile
        self.identity = None
        self.profile = None
        self.resolving = False
        self._request = None
        self._dispatch_uid = f'auth-profile-context-{uuid.uuid4()}'

    # ==================== LIFECYCLE ====================

    def subscribe(self, request):
        """Follow sign-in and sign-out events raised for ``request``."""
        self._request = request
        user_logged_in.connect(self._on_logged_in, weak=False, dispatch_uid=f'{self._dispatch_uid}-in')
        user_logged_out.connect(self._on_logged_out, weak=False, dispatch_uid=f'{self._dispatch_uid}-out')

    def close(self):
        user_logged_in.disconnect(dispatch_uid=f'{self._dispatch_uid}-in')
        user_logged_out.disconnect(dispatch_uid=f'{self._dispatch_uid}-out')
        self._request = None

    def _on_logged_in(self, sender, request=None, user=None, **kwargs):
        if request is not self._request:
            return
        self.on_session_change(user)

    def _on_logged_out(self, sender, request=None, user=None, **kwargs):
        if request is not self._request:
            return
        self.on_session_change(None)

    # ==================== STATE MACHINE ====================

    def on_session_change(self, identity):
        self.resolving = True
        try:
            if identity is None or not getattr(identity, 'is_authenticated', False):
                self.identity = None
                self.profile = None
                return

            self.identity = identity
            try:
                self.identity = self._refresh(identity) or identity
                profile = self._load(self.identity)
                if (
                    profile is not None
                    and profile.is_verified == UserProfile.Verification.NO
                    and self.identity.email_verified
                ):
                    self._heal(self.identity)
                    profile = dataclasses.replace(profile, is_verified=UserProfile.Verification.YES)
                    logger.info(f"Marked profile {self.identity.pk} as verified")
                self.profile = profile
            except (DatabaseError, BackendOperationError) as e:
                logger.error(f"Resolving profile for {identity.pk} failed: {e}")
                self.profile = None
        finally:
            self.resolving = False

    # ==================== HELPERS ====================

    @property
    def identity_id(self):
        return self.identity.pk if self.identity is not None else None

    @property
    def is_authenticated(self):
        return self.identity is not None

    @property
    def is_onboarded(self):
        return self.profile is not None

    @property
    def is_admin(self):
        return self.profile is not None and self.profile.is_admin

    @property
    def is_banned(self):
        return self.profile is not None and self.profile.is_banned


def auth_context_for(request):
    """
    Context for ``request``, resolving it when the authenticated user differs
    from the one the middleware saw (DRF token authentication).
    """
    user = getattr(request, 'user', None)
    identity = user if user is not None and user.is_authenticated else None
    django_request = getattr(request, '_request', request)

    context = getattr(django_request, 'auth_context', None)
    if context is not None and context.identity_id == (identity.pk if identity else None):
        return context

    context = AuthProfileContext()
    context.on_session_change(identity)
    django_request.auth_context = context
    return context
