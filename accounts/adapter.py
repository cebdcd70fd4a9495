"""
Custom allauth adapter for Google sign-in.

- First sign-in creates the profile (verified, short display name, provider
  photo as avatar)
- Banned profiles are refused and sent back to the login page
"""

import logging

from allauth.core.exceptions import ImmediateHttpResponse
from allauth.socialaccount.adapter import DefaultSocialAccountAdapter
from django.contrib import messages

from accounts.decorators import login_redirect
from accounts.models import GOOGLE_PROVIDER
from accounts.repository import ProfileRepository
from accounts.services import BANNED_MESSAGE, create_federated_profile

security_logger = logging.getLogger('security.auth')


def _provider_details(sociallogin):
    data = sociallogin.account.extra_data or {}
    return data.get('name'), data.get('picture')


class KivvlySocialAccountAdapter(DefaultSocialAccountAdapter):

    def pre_social_login(self, request, sociallogin):
        if not sociallogin.is_existing:
            return

        user = sociallogin.user
        profile = ProfileRepository.get(user.pk)
        if profile is None:
            name, picture = _provider_details(sociallogin)
            profile = create_federated_profile(user, name, picture)

        if profile.is_banned:
            security_logger.warning(f"LOGIN_REFUSED: user {user.pk} reason=banned provider=google")
            messages.error(request, BANNED_MESSAGE)
            raise ImmediateHttpResponse(login_redirect('banned'))

    def save_user(self, request, sociallogin, form=None):
        user = super().save_user(request, sociallogin, form)
        name, picture = _provider_details(sociallogin)

        user.email_verified = True
        user.display_name = name or ''
        user.photo_url = picture or ''
        user.link_provider(GOOGLE_PROVIDER)
        user.save(update_fields=['email_verified', 'display_name', 'photo_url', 'auth_providers'])

        create_federated_profile(user, name, picture)
        return user
