"""
Accounts Models - Identities and Profiles

- CustomUser: the signed-in identity. Email is the login identifier; the
  linked credential providers ("password", "google.com") are recorded so the
  dashboard knows whether a password change is possible.
- UserProfile: one row per identity, keyed by the identity's id. Holds the
  display data and the two moderation flags (admin, banned) plus the
  tri-state email verification marker.
"""

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

DEFAULT_AVATAR_URL = getattr(settings, 'KIVVLY_DEFAULT_AVATAR_URL', '/static/img/default-avatar.svg')
DISPLAY_NAME_MAX_LENGTH = 30

PASSWORD_PROVIDER = 'password'
GOOGLE_PROVIDER = 'google.com'

JOB_OCCUPATION_SUGGESTIONS = [
    'Software Engineer',
    'Designer',
    'Product Manager',
    'Writer',
    'Marketer',
    'Consultant',
    'Student',
    'Entrepreneur',
    'Other',
]


class CustomUserManager(BaseUserManager):
    """Manager for email-identified users."""

    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('The email address must be set')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('email_verified', True)
        extra_fields.setdefault('auth_providers', [PASSWORD_PROVIDER])
        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superuser must have is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True.')
        return self._create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    username = None
    email = models.EmailField(_('email address'), unique=True)
    display_name = models.CharField(max_length=150, blank=True)
    photo_url = models.CharField(max_length=500, blank=True)
    email_verified = models.BooleanField(default=False)
    auth_providers = models.JSONField(default=list, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        verbose_name = _('User')
        verbose_name_plural = _('Users')

    def __str__(self):
        return self.email

    @property
    def has_password_provider(self):
        return PASSWORD_PROVIDER in (self.auth_providers or [])

    def link_provider(self, provider):
        providers = list(self.auth_providers or [])
        if provider not in providers:
            providers.append(provider)
            self.auth_providers = providers
        return providers


class UserProfile(models.Model):
    """
    Profile document of a signed-in identity.

    The primary key is the owning user's id, so a point read by identity
    never needs a join.
    """

    class Verification(models.TextChoices):
        UNSET = '', _('Unset')
        NO = 'no', _('No')
        YES = 'yes', _('Yes')

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='profile',
    )
    display_name = models.CharField(max_length=DISPLAY_NAME_MAX_LENGTH)
    email = models.EmailField(blank=True)
    avatar_url = models.CharField(max_length=500, blank=True, default=DEFAULT_AVATAR_URL)
    job_occupation = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Free text; the dashboard suggests common occupations"),
    )
    is_admin = models.BooleanField(default=False)
    is_banned = models.BooleanField(default=False)
    is_verified = models.CharField(
        max_length=3,
        choices=Verification.choices,
        default=Verification.UNSET,
        blank=True,
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('User Profile')
        verbose_name_plural = _('User Profiles')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_admin'], name='accounts_us_is_admi_6f1a2b_idx'),
            models.Index(fields=['is_banned'], name='accounts_us_is_bann_8c3d4e_idx'),
        ]

    def __str__(self):
        return f'{self.display_name} <{self.email}>'
