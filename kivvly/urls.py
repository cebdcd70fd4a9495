"""
URL configuration for Kivvly project.

Pages (discovery map, submission, dashboards), the JSON API, API schema
and health checks.
"""

import time

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from accounts.template_views import DashboardView


def health_check(request):
    """
    Health check endpoint for load balancers and monitoring.
    """
    health_status = {
        'status': 'healthy',
        'timestamp': time.time(),
        'version': getattr(settings, 'APP_VERSION', '1.0.0'),
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        health_status['database'] = 'connected'
    except Exception as e:
        health_status['database'] = 'error'
        health_status['status'] = 'degraded'
        health_status['database_error'] = str(e)

    try:
        cache.set('health_check', 'ok', 1)
        if cache.get('health_check') == 'ok':
            health_status['cache'] = 'connected'
        else:
            health_status['cache'] = 'error'
            health_status['status'] = 'degraded'
    except Exception:
        health_status['cache'] = 'unavailable'

    status_code = 200 if health_status['status'] == 'healthy' else 503
    return JsonResponse(health_status, status=status_code)


# ==================== URL Patterns ====================

urlpatterns = [
    path('health/', health_check, name='health_check'),

    path('django-admin/', admin.site.urls),

    # Federated sign-in (Google) through allauth
    path('oauth/', include('allauth.urls')),

    path('accounts/', include('accounts.urls_frontend', namespace='accounts')),
    path('dashboard/', DashboardView.as_view(), name='dashboard'),
    path('', include('places.urls', namespace='places')),

    # API
    path('api/accounts/', include('accounts.urls', namespace='accounts_api')),
    path('api/places/', include('places.urls_api', namespace='places_api')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

handler400 = 'kivvly.views_errors.handler400'
handler403 = 'kivvly.views_errors.handler403'
handler404 = 'kivvly.views_errors.handler404'
handler500 = 'kivvly.views_errors.handler500'
