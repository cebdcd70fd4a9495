"""Places app configuration."""

from django.apps import AppConfig


class PlacesConfig(AppConfig):
    """Venue submission, moderation and map discovery."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'places'
    verbose_name = 'Remote-Work Venues'
