"""
Accounts Services - Identity and profile operations.

- register_user: password registration, profile creation, verification mail
- check_sign_in_allowed / sign_in: password sign-in with profile checks
- create_federated_profile: first Google sign-in
- request_password_reset: reset link by email
- change_password: reauthenticate with the current password, then update
- update_own_profile: display name, occupation and avatar edits
- verify_email: consume a verification link
"""

import logging
import re

from django.contrib.auth import authenticate, get_user_model, login
from django.db import DatabaseError, transaction
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode

from accounts.models import (
    DEFAULT_AVATAR_URL,
    DISPLAY_NAME_MAX_LENGTH,
    PASSWORD_PROVIDER,
    UserProfile,
)
from accounts.records import ProfileRecord
from accounts.repository import ProfileRepository
from accounts.tasks import send_password_reset_email, send_verification_email
from accounts.tokens import email_verification_token
from core.exceptions import (
    AuthenticationRequired,
    AuthorizationError,
    BackendOperationError,
    ImageUploadError,
    SubmissionValidationError,
)
from core.images import compress_image
from core.storage import upload_blob

logger = logging.getLogger(__name__)
security_logger = logging.getLogger('security.auth')

PASSWORD_PATTERN = re.compile(r'^(?=.*[A-Za-z])(?=.*\d).{8,}$')
DISPLAY_NAME_MIN_LENGTH = 3
FEDERATED_NAME_LENGTH = 10
FEDERATED_DEFAULT_NAME = 'No Name'

PASSWORD_RULE_MESSAGE = 'Password must be at least 8 characters and contain at least one letter and one number.'
DUPLICATE_EMAIL_MESSAGE = 'This email is already registered. Use another one or reset your password.'
INVALID_CREDENTIALS_MESSAGE = 'Invalid email or password.'
BANNED_MESSAGE = 'Your account has been banned.'
UNVERIFIED_MESSAGE = 'Please verify your email before logging in.'
NO_PROFILE_MESSAGE = 'No user document found. Please contact support.'
RESET_EMAIL_REQUIRED_MESSAGE = 'Please enter your email in the Email field first.'
RESET_SENT_MESSAGE = 'Password reset link sent to your email!'
PASSWORD_FIELDS_REQUIRED_MESSAGE = 'Please fill in both current and new password.'
WRONG_PASSWORD_MESSAGE = 'Current password is incorrect.'
NO_PASSWORD_PROVIDER_MESSAGE = 'Password changes are only available for email and password accounts.'
INVALID_VERIFICATION_LINK_MESSAGE = 'This verification link is invalid or has expired.'


# ==================== REGISTRATION ====================

def register_user(display_name, email, password):
    """
    Create an identity and its profile, then send the verification mail.

    The profile starts with ``is_verified="no"``; sign-in is refused until the
    link in the mail has been followed.
    """
    User = get_user_model()
    email = User.objects.normalize_email(email or '').strip()
    display_name = (display_name or '').strip()

    if len(display_name) < DISPLAY_NAME_MIN_LENGTH:
        raise SubmissionValidationError('Name must be at least 3 characters.')
    if not PASSWORD_PATTERN.match(password or ''):
        raise SubmissionValidationError(PASSWORD_RULE_MESSAGE)
    if User.objects.filter(email__iexact=email).exists():
        raise SubmissionValidationError(DUPLICATE_EMAIL_MESSAGE)

    with transaction.atomic():
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name,
            auth_providers=[PASSWORD_PROVIDER],
        )
        UserProfile.objects.create(
            user=user,
            display_name=display_name[:DISPLAY_NAME_MAX_LENGTH],
            email=email,
            avatar_url=DEFAULT_AVATAR_URL,
            is_banned=False,
            is_verified=UserProfile.Verification.NO,
        )
        transaction.on_commit(lambda: send_verification_email.delay(user.pk))

    security_logger.info(f"USER_REGISTERED: user {user.pk}")
    return user


# ==================== SIGN-IN ====================

def check_sign_in_allowed(user):
    """
    Refuse sign-in for banned, unverified or profile-less identities.

    Returns:
        ProfileRecord of the identity.

    Raises:
        AuthorizationError: with the user-facing message and a reason code.
    """
    profile = ProfileRepository.get(user.pk)
    if profile is None:
        raise AuthorizationError(NO_PROFILE_MESSAGE, reason='unauthorized')
    if profile.is_banned:
        raise AuthorizationError(BANNED_MESSAGE, reason='banned')
    if profile.is_verified == UserProfile.Verification.NO and not user.email_verified:
        raise AuthorizationError(UNVERIFIED_MESSAGE, reason='unverified')
    return profile


def sign_in(request, email, password):
    """Authenticate with email and password and start the session."""
    user = authenticate(request, username=email, password=password)
    if user is None:
        security_logger.warning(f"LOGIN_FAILED: bad credentials for {email}")
        raise AuthenticationRequired(INVALID_CREDENTIALS_MESSAGE, reason='invalid_credentials')

    try:
        check_sign_in_allowed(user)
    except AuthorizationError as e:
        security_logger.warning(f"LOGIN_REFUSED: user {user.pk} reason={e.reason}")
        raise

    login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    security_logger.info(f"LOGIN_SUCCESS: user {user.pk}")
    return user


def create_federated_profile(user, display_name=None, photo_url=None):
    """
    Profile for an identity created through Google sign-in.

    Provider-verified identities start verified; the provider's name is cut
    to 10 characters.
    """
    name = (display_name or FEDERATED_DEFAULT_NAME)[:FEDERATED_NAME_LENGTH]
    profile, created = UserProfile.objects.get_or_create(
        user=user,
        defaults={
            'display_name': name,
            'email': user.email,
            'avatar_url': photo_url or DEFAULT_AVATAR_URL,
            'is_banned': False,
            'is_verified': UserProfile.Verification.YES,
        },
    )
    if created:
        security_logger.info(f"FEDERATED_PROFILE_CREATED: user {user.pk}")
    return ProfileRecord.from_model(profile)


# ==================== PASSWORDS ====================

def request_password_reset(email):
    """
    Queue a reset link for ``email``.

    The same success message is returned whether or not the address is
    registered.
    """
    email = (email or '').strip()
    if not email:
        raise SubmissionValidationError(RESET_EMAIL_REQUIRED_MESSAGE)

    User = get_user_model()
    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is not None:
        send_password_reset_email.delay(user.pk)
        security_logger.info(f"PASSWORD_RESET_REQUESTED: user {user.pk}")
    return RESET_SENT_MESSAGE


def change_password(user, current_password, new_password):
    """Reauthenticate with ``current_password`` and set ``new_password``."""
    if not current_password or not new_password:
        raise SubmissionValidationError(PASSWORD_FIELDS_REQUIRED_MESSAGE)
    if not user.has_password_provider:
        raise AuthorizationError(NO_PASSWORD_PROVIDER_MESSAGE, reason='provider')
    if not user.check_password(current_password):
        security_logger.warning(f"REAUTHENTICATION_FAILED: user {user.pk}")
        raise AuthorizationError(WRONG_PASSWORD_MESSAGE, reason='reauthentication_failed')
    if not PASSWORD_PATTERN.match(new_password):
        raise SubmissionValidationError(PASSWORD_RULE_MESSAGE)

    user.set_password(new_password)
    user.save(update_fields=['password'])
    security_logger.info(f"PASSWORD_CHANGED: user {user.pk}")
    return user


# ==================== PROFILE ====================

def upload_avatar(user, avatar_file):
    try:
        data = compress_image(avatar_file)
    except OSError as e:
        logger.error(f"Avatar compression failed for user {user.pk}: {e}")
        raise ImageUploadError('Error uploading avatar') from e
    return upload_blob(f'avatars/{user.pk}', data)


def update_own_profile(user, display_name=None, job_occupation=None, avatar_file=None):
    """
    Merge the given fields into the caller's profile.

    A failed avatar upload aborts the whole update. The profile is created
    when it does not exist yet.
    """
    fields = {}
    if display_name is not None:
        display_name = display_name.strip()
        if not display_name:
            raise SubmissionValidationError('Display name cannot be empty.')
        if len(display_name) > DISPLAY_NAME_MAX_LENGTH:
            raise SubmissionValidationError(
                f'Display name must be at most {DISPLAY_NAME_MAX_LENGTH} characters.'
            )
        fields['display_name'] = display_name
    if job_occupation is not None:
        fields['job_occupation'] = job_occupation.strip()
    # Upload only once every field has validated.
    if avatar_file is not None:
        fields['avatar_url'] = upload_avatar(user, avatar_file)

    try:
        profile, _ = UserProfile.objects.get_or_create(
            user=user,
            defaults={
                'display_name': (user.display_name or user.email.split('@')[0])[:DISPLAY_NAME_MAX_LENGTH],
                'email': user.email,
                'is_verified': (
                    UserProfile.Verification.YES if user.email_verified else UserProfile.Verification.NO
                ),
            },
        )
        for name, value in fields.items():
            setattr(profile, name, value)
        if fields:
            profile.save(update_fields=[*fields, 'updated_at'])
        if 'display_name' in fields and user.display_name != fields['display_name']:
            user.display_name = fields['display_name']
            user.save(update_fields=['display_name'])
    except DatabaseError as e:
        logger.error(f"Updating profile of user {user.pk} failed: {e}")
        raise BackendOperationError('Could not update the profile.') from e

    return ProfileRecord.from_model(profile)


# ==================== EMAIL VERIFICATION ====================

def verify_email(uidb64, token):
    """Mark the identity behind a verification link as verified."""
    User = get_user_model()
    try:
        user = User.objects.get(pk=force_str(urlsafe_base64_decode(uidb64)))
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None

    if user is None or not email_verification_token.check_token(user, token):
        raise AuthorizationError(INVALID_VERIFICATION_LINK_MESSAGE, reason='invalid_link')

    user.email_verified = True
    user.save(update_fields=['email_verified'])
    UserProfile.objects.filter(
        pk=user.pk, is_verified=UserProfile.Verification.NO,
    ).update(is_verified=UserProfile.Verification.YES)
    security_logger.info(f"EMAIL_VERIFIED: user {user.pk}")
    return user
