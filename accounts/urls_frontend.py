"""
Accounts Frontend URL Configuration.
"""

from django.contrib.auth import views as auth_views
from django.urls import path, reverse_lazy

from accounts import template_views

app_name = 'accounts'

urlpatterns = [
    path('login/', template_views.LoginView.as_view(), name='login'),
    path('register/', template_views.RegisterView.as_view(), name='register'),
    path('logout/', template_views.LogoutView.as_view(), name='logout'),
    path('verify/<uidb64>/<token>/', template_views.VerifyEmailView.as_view(), name='verify_email'),

    # Password reset
    path('password-reset/', template_views.PasswordResetRequestView.as_view(), name='password_reset'),
    path(
        'password-reset/<uidb64>/<token>/',
        auth_views.PasswordResetConfirmView.as_view(
            template_name='accounts/password_reset_confirm.html',
            success_url=reverse_lazy('accounts:password_reset_complete'),
        ),
        name='password_reset_confirm',
    ),
    path(
        'password-reset/complete/',
        auth_views.PasswordResetCompleteView.as_view(
            template_name='accounts/password_reset_complete.html',
        ),
        name='password_reset_complete',
    ),
]
