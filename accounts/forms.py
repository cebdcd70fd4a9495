"""
Accounts Forms

Form-level validation mirrors the service rules so errors show inline
before anything is written.
"""

from django import forms
from django.utils.translation import gettext_lazy as _

from accounts.models import DISPLAY_NAME_MAX_LENGTH, JOB_OCCUPATION_SUGGESTIONS
from accounts.services import DISPLAY_NAME_MIN_LENGTH, PASSWORD_PATTERN, PASSWORD_RULE_MESSAGE


class LoginForm(forms.Form):
    email = forms.EmailField(
        label=_('Email'),
        widget=forms.EmailInput(attrs={'autocomplete': 'email', 'class': 'form-control'}),
    )
    password = forms.CharField(
        label=_('Password'),
        widget=forms.PasswordInput(attrs={'autocomplete': 'current-password', 'class': 'form-control'}),
    )


class RegistrationForm(forms.Form):
    display_name = forms.CharField(
        label=_('Name'),
        max_length=DISPLAY_NAME_MAX_LENGTH,
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    email = forms.EmailField(
        label=_('Email'),
        error_messages={'invalid': _('Please enter a valid email address.')},
        widget=forms.EmailInput(attrs={'autocomplete': 'email', 'class': 'form-control'}),
    )
    password = forms.CharField(
        label=_('Password'),
        widget=forms.PasswordInput(attrs={'autocomplete': 'new-password', 'class': 'form-control'}),
    )

    def clean_display_name(self):
        name = self.cleaned_data['display_name'].strip()
        if len(name) < DISPLAY_NAME_MIN_LENGTH:
            raise forms.ValidationError(_('Name must be at least 3 characters.'))
        return name

    def clean_password(self):
        password = self.cleaned_data['password']
        if not PASSWORD_PATTERN.match(password):
            raise forms.ValidationError(PASSWORD_RULE_MESSAGE)
        return password


class PasswordResetRequestForm(forms.Form):
    # Optional here so the service can answer with its own message.
    email = forms.EmailField(label=_('Email'), required=False)


class ProfileForm(forms.Form):
    display_name = forms.CharField(
        label=_('Display name'),
        max_length=DISPLAY_NAME_MAX_LENGTH,
        widget=forms.TextInput(attrs={'class': 'form-control'}),
    )
    job_occupation = forms.CharField(
        label=_('Job occupation'),
        max_length=100,
        required=False,
        widget=forms.TextInput(attrs={'class': 'form-control', 'list': 'occupation-suggestions'}),
    )
    avatar = forms.ImageField(label=_('Avatar'), required=False)

    suggestions = JOB_OCCUPATION_SUGGESTIONS


class PasswordChangeForm(forms.Form):
    current_password = forms.CharField(
        label=_('Current password'),
        required=False,
        widget=forms.PasswordInput(attrs={'autocomplete': 'current-password', 'class': 'form-control'}),
    )
    new_password = forms.CharField(
        label=_('New password'),
        required=False,
        widget=forms.PasswordInput(attrs={'autocomplete': 'new-password', 'class': 'form-control'}),
    )
