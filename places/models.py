"""
Places Models

Venue: a remote-work location submitted by a user. Only venues whose status
is ``approved`` are shown on the discovery map; every submission starts as
``pending``.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

MAX_VENUE_IMAGES = 3


class Amenity(models.TextChoices):
    TOILETS = 'toilets', _('Toilets')
    WIFI = 'wifi', _('Wi-Fi')
    QUIET_ENVIRONMENT = 'quietEnvironment', _('Quiet Environment')
    POWER_SOCKET = 'powerSocket', _('Power Socket')


class VenueStatus(models.TextChoices):
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')


class Venue(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='venues',
        help_text=_("Submitting user"),
    )
    name = models.CharField(max_length=200)
    address = models.CharField(max_length=500)
    lat = models.FloatField()
    lng = models.FloatField()
    amenities = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=10,
        choices=VenueStatus.choices,
        default=VenueStatus.PENDING,
        db_index=True,
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Venue')
        verbose_name_plural = _('Venues')
        ordering = ['-created_at']

    def __str__(self):
        return f'{self.name} ({self.status})'

    def clean(self):
        unknown = set(self.amenities or []) - set(Amenity.values)
        if unknown:
            raise ValidationError({'amenities': _('Unknown amenities: %s') % ', '.join(sorted(unknown))})
        if len(self.images or []) > MAX_VENUE_IMAGES:
            raise ValidationError({'images': _('A venue has at most 3 images.')})
