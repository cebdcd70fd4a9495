"""
Accounts API Views

Endpoints:
- POST /api/accounts/register/            create identity + profile
- POST /api/accounts/token/               JWT pair (password sign-in checks)
- POST /api/accounts/token/refresh/       refresh JWT
- GET/PATCH /api/accounts/me/             own profile
- POST /api/accounts/password/change/     reauthenticate and change password
- POST /api/accounts/password/reset/      send reset link
- /api/accounts/users/                    admin users listing and actions
"""

import logging

from django.contrib.auth import update_session_auth_hash
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from accounts.context import auth_context_for
from accounts.moderation import UsersSection
from accounts.permissions import IsProfileAdmin
from accounts.serializers import (
    ModeratedUserSerializer,
    PasswordChangeSerializer,
    PasswordResetSerializer,
    ProfileSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    SignInTokenObtainPairSerializer,
)
from accounts.services import (
    change_password,
    register_user,
    request_password_reset,
    update_own_profile,
)
from core.exceptions import RecordNotFound
from core.pagination import page_payload

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=RegisterSerializer, responses={201: None})
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = register_user(**serializer.validated_data)
        return Response(
            {
                'success': True,
                'message': 'Account created. Please check your email to verify your account.',
                'data': {'id': user.pk, 'email': user.email},
            },
            status=status.HTTP_201_CREATED,
        )


class SignInTokenView(TokenObtainPairView):
    serializer_class = SignInTokenObtainPairSerializer


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses=ProfileSerializer)
    def get(self, request):
        context = auth_context_for(request)
        if context.profile is None:
            raise RecordNotFound('No user document found. Please contact support.')
        return Response(ProfileSerializer(context.profile).data)

    @extend_schema(request=ProfileUpdateSerializer, responses=ProfileSerializer)
    def patch(self, request):
        serializer = ProfileUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        record = update_own_profile(
            request.user,
            display_name=data.get('display_name'),
            job_occupation=data.get('job_occupation'),
            avatar_file=data.get('avatar'),
        )
        return Response(ProfileSerializer(record).data)


class PasswordChangeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(request=PasswordChangeSerializer, responses={200: None})
    def post(self, request):
        serializer = PasswordChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        change_password(
            request.user,
            serializer.validated_data.get('current_password'),
            serializer.validated_data.get('new_password'),
        )
        update_session_auth_hash(request._request, request.user)
        return Response({'success': True, 'message': 'Password updated successfully!'})


class PasswordResetView(APIView):
    permission_classes = [permissions.AllowAny]

    @extend_schema(request=PasswordResetSerializer, responses={200: None})
    def post(self, request):
        serializer = PasswordResetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = request_password_reset(serializer.validated_data.get('email'))
        return Response({'success': True, 'message': message})


class UserModerationViewSet(viewsets.ViewSet):
    """
    Admin users listing.

    list:        ?q=<term>&page=<n>, newest first, 10 per page
    toggle_admin POST /users/<id>/toggle-admin/
    toggle_ban   POST /users/<id>/toggle-ban/
    destroy      DELETE /users/<id>/ (removes the profile)
    """

    permission_classes = [IsProfileAdmin]
    lookup_value_regex = r'\d+'

    def _section(self, request):
        section = UsersSection(auth_context_for(request))
        section.load()
        return section

    def _respond(self, section, notice, user_id):
        record = section.rows.get(user_id)
        payload = {
            'success': notice.level == 'success',
            'message': notice.text,
            'data': ModeratedUserSerializer(record, context={'section': section}).data if record else None,
        }
        code = status.HTTP_200_OK if notice.level == 'success' else status.HTTP_503_SERVICE_UNAVAILABLE
        return Response(payload, status=code)

    @extend_schema(responses=ModeratedUserSerializer(many=True))
    def list(self, request):
        section = self._section(request)
        section.search(request.query_params.get('q', ''))
        page = section.page_of(request.query_params.get('page'))
        return Response(page_payload(
            page,
            lambda record: ModeratedUserSerializer(record, context={'section': section}).data
        ))

    @action(detail=True, methods=['post'], url_path='toggle-admin')
    def toggle_admin(self, request, pk=None):
        section = self._section(request)
        notice = section.toggle_admin(int(pk))
        return self._respond(section, notice, int(pk))

    @action(detail=True, methods=['post'], url_path='toggle-ban')
    def toggle_ban(self, request, pk=None):
        section = self._section(request)
        notice = section.toggle_ban(int(pk))
        return self._respond(section, notice, int(pk))

    def destroy(self, request, pk=None):
        section = self._section(request)
        notice = section.delete(int(pk))
        return self._respond(section, notice, int(pk))
