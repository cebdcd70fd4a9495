"""
Accounts Serializers
"""

from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from accounts.models import DISPLAY_NAME_MAX_LENGTH
from accounts.services import (
    DISPLAY_NAME_MIN_LENGTH,
    PASSWORD_PATTERN,
    PASSWORD_RULE_MESSAGE,
    check_sign_in_allowed,
)
from core.exceptions import AuthorizationError


class RegisterSerializer(serializers.Serializer):
    display_name = serializers.CharField(min_length=DISPLAY_NAME_MIN_LENGTH, max_length=DISPLAY_NAME_MAX_LENGTH)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate_password(self, value):
        if not PASSWORD_PATTERN.match(value):
            raise serializers.ValidationError(PASSWORD_RULE_MESSAGE)
        return value


class SignInTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT pair for password sign-in, with the profile checks of the login page."""

    def validate(self, attrs):
        data = super().validate(attrs)
        try:
            check_sign_in_allowed(self.user)
        except AuthorizationError as e:
            raise AuthenticationFailed(e.message, code=e.reason)
        return data


class ProfileSerializer(serializers.Serializer):
    """Read representation of a ProfileRecord."""

    id = serializers.IntegerField()
    display_name = serializers.CharField()
    email = serializers.EmailField()
    avatar_url = serializers.CharField()
    job_occupation = serializers.CharField(allow_blank=True)
    is_admin = serializers.BooleanField()
    is_banned = serializers.BooleanField()
    is_verified = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField(allow_null=True)


class ModeratedUserSerializer(ProfileSerializer):
    actions = serializers.SerializerMethodField()

    def get_actions(self, record):
        section = self.context.get('section')
        return list(section.actions_for(record)) if section else []


class ProfileUpdateSerializer(serializers.Serializer):
    display_name = serializers.CharField(max_length=DISPLAY_NAME_MAX_LENGTH, required=False)
    job_occupation = serializers.CharField(max_length=100, required=False, allow_blank=True)
    avatar = serializers.ImageField(required=False)


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    new_password = serializers.CharField(required=False, allow_blank=True, write_only=True)


class PasswordResetSerializer(serializers.Serializer):
    email = serializers.CharField(required=False, allow_blank=True)
