"""
Email verification links.

Tokens are built with Django's PasswordResetTokenGenerator machinery; the
hash covers the verification flag so a link stops working once used.
"""

from django.conf import settings
from django.contrib.auth.tokens import PasswordResetTokenGenerator
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode


class EmailVerificationTokenGenerator(PasswordResetTokenGenerator):
    key_salt = 'accounts.tokens.EmailVerificationTokenGenerator'

    def _make_hash_value(self, user, timestamp):
        return f'{user.pk}{user.email}{user.email_verified}{timestamp}'


email_verification_token = EmailVerificationTokenGenerator()


def build_absolute(path):
    return f"{getattr(settings, 'SITE_URL', '').rstrip('/')}{path}"


def verification_link(user):
    path = reverse('accounts:verify_email', kwargs={
        'uidb64': urlsafe_base64_encode(force_bytes(user.pk)),
        'token': email_verification_token.make_token(user),
    })
    return build_absolute(path)
