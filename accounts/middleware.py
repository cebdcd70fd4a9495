"""
Auth/Profile Middleware

Creates one AuthProfileContext per request and exposes it as
``request.auth_context``. The context follows sign-in and sign-out events
raised while the request is processed and is closed when the response is
produced.

Exempt URLs:
- /static/, /media/
- /health/
"""

from accounts.context import AuthProfileContext


class AuthProfileMiddleware:

    EXEMPT_PATHS = [
        '/static/',
        '/media/',
        '/health/',
    ]

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if any(request.path.startswith(path) for path in self.EXEMPT_PATHS):
            return self.get_response(request)

        context = AuthProfileContext()
        context.subscribe(request)
        try:
            user = getattr(request, 'user', None)
            context.on_session_change(user if user is not None and user.is_authenticated else None)
            request.auth_context = context
            return self.get_response(request)
        finally:
            context.close()
