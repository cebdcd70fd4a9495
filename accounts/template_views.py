"""
Accounts Frontend Template Views.

Sign-in, registration, password reset, email verification and the personal
dashboard (profile edits, password change, own submissions).
"""

import logging

from django.contrib import messages
from django.contrib.auth import logout, update_session_auth_hash
from django.shortcuts import redirect
from django.urls import reverse, reverse_lazy
from django.utils.decorators import method_decorator
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.generic import FormView, TemplateView, View

from accounts.decorators import identity_required
from accounts.forms import (
    LoginForm,
    PasswordChangeForm,
    PasswordResetRequestForm,
    ProfileForm,
    RegistrationForm,
)
from accounts.services import (
    DUPLICATE_EMAIL_MESSAGE,
    change_password,
    register_user,
    request_password_reset,
    sign_in,
    update_own_profile,
    verify_email,
)
from core.exceptions import AuthorizationError, BackendOperationError, SubmissionValidationError
from places.repository import VenueRepository

logger = logging.getLogger(__name__)

LOGIN_REASONS = {
    'unauthorized': 'Please sign in to continue.',
    'banned': 'This account has been banned.',
}


# ==================== SIGN-IN ====================

class LoginView(FormView):
    template_name = 'accounts/login.html'
    form_class = LoginForm

    def dispatch(self, request, *args, **kwargs):
        context = getattr(request, 'auth_context', None)
        if context is not None and context.is_onboarded and request.method == 'GET':
            return redirect('places:discovery')
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        reason = self.request.GET.get('reason')
        context['reason'] = reason
        context['reason_message'] = LOGIN_REASONS.get(reason)
        context['reset_form'] = PasswordResetRequestForm()
        return context

    def form_valid(self, form):
        try:
            sign_in(self.request, form.cleaned_data['email'], form.cleaned_data['password'])
        except AuthorizationError as e:
            messages.error(self.request, e.message)
            return self.form_invalid(form)

        messages.success(self.request, 'Logged in successfully!')
        return redirect(self.get_success_url())

    def get_success_url(self):
        next_url = self.request.GET.get('next') or self.request.POST.get('next')
        if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={self.request.get_host()}):
            return next_url
        return reverse('places:discovery')


class RegisterView(FormView):
    template_name = 'accounts/register.html'
    form_class = RegistrationForm
    success_url = reverse_lazy('accounts:login')

    def form_valid(self, form):
        try:
            register_user(
                form.cleaned_data['display_name'],
                form.cleaned_data['email'],
                form.cleaned_data['password'],
            )
        except SubmissionValidationError as e:
            field = 'email' if e.message == DUPLICATE_EMAIL_MESSAGE else None
            form.add_error(field, e.message)
            return self.form_invalid(form)

        messages.success(
            self.request,
            'Account created! Please check your email to verify your account before logging in.',
        )
        return super().form_valid(form)


class LogoutView(View):

    def post(self, request):
        logout(request)
        messages.info(request, 'You have been logged out.')
        return redirect('places:discovery')


# ==================== PASSWORD RESET & VERIFICATION ====================

class PasswordResetRequestView(FormView):
    template_name = 'accounts/password_reset.html'
    form_class = PasswordResetRequestForm
    success_url = reverse_lazy('accounts:login')

    def form_valid(self, form):
        try:
            message = request_password_reset(form.cleaned_data.get('email'))
        except SubmissionValidationError as e:
            messages.error(self.request, e.message)
            return self.form_invalid(form)

        messages.success(self.request, message)
        return super().form_valid(form)


class VerifyEmailView(View):

    def get(self, request, uidb64, token):
        try:
            verify_email(uidb64, token)
        except AuthorizationError as e:
            messages.error(request, e.message)
        else:
            messages.success(request, 'Your email has been verified. You can now log in.')
        return redirect('accounts:login')


# ==================== PERSONAL DASHBOARD ====================

@method_decorator(identity_required, name='dispatch')
class DashboardView(TemplateView):
    """
    Personal dashboard.

    POST with ``action=profile`` merges display name, occupation and avatar
    into the profile; ``action=password`` changes the password after
    reauthentication.
    """

    template_name = 'accounts/dashboard.html'

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        auth = self.request.auth_context
        profile = auth.profile
        user = auth.identity

        context.setdefault('profile_form', ProfileForm(initial={
            'display_name': profile.display_name if profile else user.display_name,
            'job_occupation': profile.job_occupation if profile else '',
        }))
        context.setdefault('password_form', PasswordChangeForm())
        context['profile'] = profile
        context['can_change_password'] = user.has_password_provider
        context['own_venues'] = VenueRepository.list_for_owner(user.pk)
        return context

    def post(self, request):
        action = request.POST.get('action')
        if action == 'profile':
            return self._update_profile(request)
        if action == 'password':
            return self._change_password(request)
        messages.error(request, 'Unknown action.')
        return redirect('dashboard')

    def _update_profile(self, request):
        form = ProfileForm(request.POST, request.FILES)
        if not form.is_valid():
            return self.render_to_response(self.get_context_data(profile_form=form))
        try:
            update_own_profile(
                request.user,
                display_name=form.cleaned_data['display_name'],
                job_occupation=form.cleaned_data.get('job_occupation', ''),
                avatar_file=form.cleaned_data.get('avatar'),
            )
        except (SubmissionValidationError, BackendOperationError) as e:
            messages.error(request, e.message)
            return self.render_to_response(self.get_context_data(profile_form=form))

        messages.success(request, 'Profile updated successfully!')
        return redirect('dashboard')

    def _change_password(self, request):
        form = PasswordChangeForm(request.POST)
        form.is_valid()
        try:
            change_password(
                request.user,
                form.cleaned_data.get('current_password'),
                form.cleaned_data.get('new_password'),
            )
        except (SubmissionValidationError, AuthorizationError) as e:
            messages.error(request, e.message)
            return redirect('dashboard')

        update_session_auth_hash(request, request.user)
        messages.success(request, 'Password updated successfully!')
        return redirect('dashboard')
