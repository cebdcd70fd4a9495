"""
Places API URL Configuration
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from places import views_api as views

app_name = 'places_api'

router = DefaultRouter()
router.register(r'discovery', views.DiscoveryViewSet, basename='discovery')
router.register(r'submissions', views.SubmissionViewSet, basename='submission')
router.register(r'moderation', views.VenueModerationViewSet, basename='moderation')

urlpatterns = [
    path('', include(router.urls)),
]
