"""
Signal handlers for accounts app.

- Profile saves and deletions notify the live users source so connected
  admin dashboards receive a fresh listing.
- Sign-in events are written to the security log.
"""

import logging

from django.contrib.auth.signals import user_logged_in, user_logged_out, user_login_failed
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from accounts.models import UserProfile
from accounts.repository import users_source
from core.geocoding import client_ip

security_logger = logging.getLogger('security.auth')


@receiver(post_save, sender=UserProfile, dispatch_uid='accounts.profile_saved')
def profile_saved(sender, instance, **kwargs):
    users_source.notify_changed()


@receiver(post_delete, sender=UserProfile, dispatch_uid='accounts.profile_deleted')
def profile_deleted(sender, instance, **kwargs):
    users_source.notify_changed()


@receiver(user_logged_in, dispatch_uid='accounts.log_login')
def log_login(sender, request, user, **kwargs):
    security_logger.info(f"SESSION_STARTED: user {user.pk} from IP {client_ip(request) if request else 'unknown'}")


@receiver(user_logged_out, dispatch_uid='accounts.log_logout')
def log_logout(sender, request, user, **kwargs):
    if user is not None:
        security_logger.info(f"SESSION_ENDED: user {user.pk}")


@receiver(user_login_failed, dispatch_uid='accounts.log_login_failed')
def log_login_failed(sender, credentials, request=None, **kwargs):
    security_logger.warning(
        f"LOGIN_FAILED: {credentials.get('username', 'unknown')} "
        f"from IP {client_ip(request) if request else 'unknown'}"
    )
