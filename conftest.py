"""
Kivvly Test Configuration - pytest fixtures and factories

This module provides:
- pytest-django configuration (kivvly.settings_test)
- factory_boy factories for identities, profiles and venues
- Shared fixtures for signed-in visitors, admins and API clients

RUNNING TESTS:
# Run all tests
pytest -v

# Run by app
pytest accounts/tests -v
pytest places/tests -v

# Run by marker
pytest -m security -v
pytest -m workflow -v
"""

import io
from unittest.mock import patch

import factory
import pytest
import requests
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from factory.django import DjangoModelFactory
from PIL import Image
from rest_framework.test import APIClient

TEST_PASSWORD = 'testpass123'


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for CustomUser model."""

    class Meta:
        model = 'accounts.CustomUser'
        django_get_or_create = ('email',)

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    display_name = factory.Faker('first_name')
    email_verified = True
    auth_providers = factory.LazyFunction(lambda: ['password'])
    is_active = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to handle password properly."""
        password = kwargs.pop('password', TEST_PASSWORD)
        user = super()._create(model_class, *args, **kwargs)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user


class GoogleUserFactory(UserFactory):
    """Identity created through Google sign-in (no password provider)."""

    auth_providers = factory.LazyFunction(lambda: ['google.com'])
    password = None


class UserProfileFactory(DjangoModelFactory):
    """Factory for UserProfile model."""

    class Meta:
        model = 'accounts.UserProfile'
        django_get_or_create = ('user',)

    user = factory.SubFactory(UserFactory)
    display_name = factory.LazyAttribute(lambda o: (o.user.display_name or 'Member')[:30])
    email = factory.LazyAttribute(lambda o: o.user.email)
    job_occupation = 'Software Developer'
    is_admin = False
    is_banned = False
    is_verified = 'yes'


class AdminProfileFactory(UserProfileFactory):
    is_admin = True


class BannedProfileFactory(UserProfileFactory):
    is_banned = True


# ============================================================================
# VENUE FACTORIES
# ============================================================================

class VenueFactory(DjangoModelFactory):
    """Factory for Venue model (pending unless stated)."""

    class Meta:
        model = 'places.Venue'

    user = factory.SubFactory(UserFactory)
    name = factory.Sequence(lambda n: f"Cafe {n}")
    address = factory.Faker('street_address')
    lat = factory.Faker('pyfloat', min_value=-60, max_value=60)
    lng = factory.Faker('pyfloat', min_value=-170, max_value=170)
    amenities = factory.LazyFunction(lambda: ['wifi'])
    images = factory.LazyFunction(lambda: ['https://cdn.example.com/places/1/a.jpg'])
    status = 'pending'


class ApprovedVenueFactory(VenueFactory):
    status = 'approved'


class RejectedVenueFactory(VenueFactory):
    status = 'rejected'


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    """Provide UserFactory for tests."""
    return UserFactory


@pytest.fixture
def profile_factory(db):
    """Provide UserProfileFactory for tests."""
    return UserProfileFactory


@pytest.fixture
def venue_factory(db):
    """Provide VenueFactory for tests."""
    return VenueFactory


@pytest.fixture
def approved_venue_factory(db):
    """Provide ApprovedVenueFactory for tests."""
    return ApprovedVenueFactory


@pytest.fixture
def profile(db):
    """Regular verified member."""
    return UserProfileFactory()


@pytest.fixture
def admin_profile(db):
    return AdminProfileFactory()


@pytest.fixture
def banned_profile(db):
    return BannedProfileFactory()


@pytest.fixture
def member_client(client, profile):
    client.force_login(profile.user)
    return client


@pytest.fixture
def admin_client(client, admin_profile):
    """Django test client signed in as an admin profile."""
    client.force_login(admin_profile.user)
    return client


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_api_client(admin_profile):
    api = APIClient()
    api.force_authenticate(user=admin_profile.user)
    return api


@pytest.fixture
def member_api_client(profile):
    api = APIClient()
    api.force_authenticate(user=profile.user)
    return api


def make_image_file(name='photo.jpg', size=(64, 48), color=(200, 120, 40), fmt='JPEG'):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format=fmt)
    return SimpleUploadedFile(name, buffer.getvalue(), content_type='image/jpeg')


@pytest.fixture
def image_file():
    """Factory for small uploaded JPEG files."""
    return make_image_file


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _offline_ip_geolocation():
    """Keep IP lookups off the network; tests that need one patch it again."""
    with patch('core.geocoding.requests.get', side_effect=requests.ConnectionError('offline')):
        yield
