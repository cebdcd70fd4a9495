"""
Celery Tasks for Accounts App

Transactional mail sent outside the request cycle:
- Email verification after registration
- Password reset links

Security Features:
- Tasks receive user ids, never addresses or tokens, and rebuild the
  links from the current database state
"""

import logging

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from accounts.tokens import build_absolute, verification_link

logger = logging.getLogger(__name__)


# ==================== EMAIL VERIFICATION ====================

@shared_task(
    bind=True,
    name='accounts.tasks.send_verification_email',
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(ConnectionError, OSError),
    retry_backoff=True,
)
def send_verification_email(self, user_id):
    """
    Send the email verification link to a newly registered user.

    Returns:
        dict: Delivery summary.
    """
    User = get_user_model()

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        logger.warning(f"Verification email skipped: user {user_id} no longer exists")
        return {'status': 'skipped', 'reason': 'missing_user'}
    if user.email_verified:
        return {'status': 'skipped', 'reason': 'already_verified'}

    context = {
        'display_name': user.display_name or user.email,
        'verification_url': verification_link(user),
    }
    send_mail(
        subject='Verify your Kivvly account',
        message=render_to_string('emails/verify_email.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )

    logger.info(f"Verification email sent to user {user_id}")
    return {'status': 'sent', 'user_id': user_id}


# ==================== PASSWORD RESET ====================

@shared_task(
    bind=True,
    name='accounts.tasks.send_password_reset_email',
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(ConnectionError, OSError),
    retry_backoff=True,
)
def send_password_reset_email(self, user_id):
    """
    Send a password reset link.

    Returns:
        dict: Delivery summary.
    """
    User = get_user_model()

    user = User.objects.filter(pk=user_id, is_active=True).first()
    if user is None:
        return {'status': 'skipped', 'reason': 'missing_user'}

    path = reverse('accounts:password_reset_confirm', kwargs={
        'uidb64': urlsafe_base64_encode(force_bytes(user.pk)),
        'token': default_token_generator.make_token(user),
    })
    context = {
        'display_name': user.display_name or user.email,
        'reset_url': build_absolute(path),
    }
    send_mail(
        subject='Reset your Kivvly password',
        message=render_to_string('emails/password_reset.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )

    logger.info(f"Password reset email sent to user {user_id}")
    return {'status': 'sent', 'user_id': user_id}
