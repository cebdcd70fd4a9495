"""
Google Sign-in Adapter Tests
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from allauth.core.exceptions import ImmediateHttpResponse
from django.contrib.messages.storage.fallback import FallbackStorage
from django.contrib.sessions.backends.db import SessionStore
from django.test import RequestFactory

from accounts.adapter import KivvlySocialAccountAdapter
from accounts.models import UserProfile
from conftest import BannedProfileFactory, GoogleUserFactory


def _request():
    request = RequestFactory().get('/oauth/google/login/callback/')
    request.session = SessionStore()
    request._messages = FallbackStorage(request)
    return request


def _sociallogin(user, existing=True, name='Grace Hopper-Smith', picture='https://lh3.example.com/g.jpg'):
    return SimpleNamespace(
        is_existing=existing,
        user=user,
        account=SimpleNamespace(extra_data={'name': name, 'picture': picture}),
    )


@pytest.mark.django_db
class TestPreSocialLogin:

    def test_missing_profile_is_created(self):
        user = GoogleUserFactory()
        KivvlySocialAccountAdapter().pre_social_login(_request(), _sociallogin(user))

        profile = UserProfile.objects.get(pk=user.pk)
        assert profile.display_name == 'Grace Hopp'
        assert profile.is_verified == UserProfile.Verification.YES
        assert profile.avatar_url == 'https://lh3.example.com/g.jpg'

    @pytest.mark.security
    def test_banned_profile_is_refused(self):
        banned = BannedProfileFactory(user=GoogleUserFactory())

        with pytest.raises(ImmediateHttpResponse) as exc:
            KivvlySocialAccountAdapter().pre_social_login(_request(), _sociallogin(banned.user))

        assert exc.value.response.status_code == 302
        assert exc.value.response.url.endswith('?reason=banned')

    def test_new_identity_is_left_to_save_user(self):
        user = GoogleUserFactory()
        KivvlySocialAccountAdapter().pre_social_login(_request(), _sociallogin(user, existing=False))
        assert not UserProfile.objects.filter(pk=user.pk).exists()


@pytest.mark.django_db
class TestSaveUser:

    def test_marks_identity_verified_and_creates_profile(self):
        user = GoogleUserFactory(email_verified=False, auth_providers=[])
        sociallogin = _sociallogin(user, existing=False, name='Linus')

        with patch('allauth.socialaccount.adapter.DefaultSocialAccountAdapter.save_user', return_value=user):
            KivvlySocialAccountAdapter().save_user(_request(), sociallogin)

        user.refresh_from_db()
        assert user.email_verified is True
        assert 'google.com' in user.auth_providers
        assert UserProfile.objects.get(pk=user.pk).display_name == 'Linus'
