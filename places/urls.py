"""
Places Frontend URL Configuration
"""

from django.urls import path

from places import views_frontend as views

app_name = 'places'

urlpatterns = [
    path('', views.discovery_view, name='discovery'),
    path('add-place/', views.add_place_view, name='add_place'),
    path('admin/', views.admin_dashboard_view, name='admin_dashboard'),
    path('admin/places/<uuid:venue_id>/', views.venue_action_view, name='venue_action'),
    path('admin/users/<int:user_id>/', views.user_action_view, name='user_action'),
]
