"""
Venue store access.

Reads return VenueRecord instances (invalid rows are logged and skipped);
writes are targeted ``update()`` calls on the named fields.
"""

import logging

from django.db import DatabaseError
from django.utils import timezone

from core.exceptions import BackendOperationError, RecordNotFound
from core.sources import OneShotSource
from places.models import Venue, VenueStatus
from places.records import RecordError, VenueRecord

logger = logging.getLogger(__name__)


def _to_records(venues):
    records = []
    for venue in venues:
        try:
            records.append(VenueRecord.from_model(venue))
        except RecordError as e:
            logger.warning(f"Skipping invalid venue row: {e}")
    return records


class VenueRepository:

    @staticmethod
    def list_all():
        return _to_records(Venue.objects.order_by('-created_at'))

    @staticmethod
    def list_for_owner(user_id):
        try:
            return _to_records(Venue.objects.filter(user_id=user_id).order_by('-created_at'))
        except DatabaseError as e:
            logger.error(f"Listing venues of user {user_id} failed: {e}")
            return []

    @staticmethod
    def get(venue_id):
        try:
            venue = Venue.objects.filter(pk=venue_id).first()
        except DatabaseError as e:
            logger.error(f"Reading venue {venue_id} failed: {e}")
            raise BackendOperationError('Could not load the place.') from e
        return VenueRecord.from_model(venue) if venue else None

    @staticmethod
    def create(user, name, address, lat, lng, amenities, images):
        """Insert a submission; the status is always pending."""
        try:
            venue = Venue.objects.create(
                user=user,
                name=name,
                address=address,
                lat=lat,
                lng=lng,
                amenities=list(amenities),
                images=list(images),
                status=VenueStatus.PENDING,
            )
        except DatabaseError as e:
            logger.error(f"Creating venue {name!r} failed: {e}")
            raise BackendOperationError('Could not save the place.') from e
        return VenueRecord.from_model(venue)

    @staticmethod
    def update_fields(venue_id, **fields):
        try:
            updated = Venue.objects.filter(pk=venue_id).update(updated_at=timezone.now(), **fields)
        except DatabaseError as e:
            logger.error(f"Updating venue {venue_id} failed: {e}")
            raise BackendOperationError('Could not update the place.') from e
        if not updated:
            raise RecordNotFound('Place not found.')

    @staticmethod
    def delete(venue_id):
        try:
            deleted, _ = Venue.objects.filter(pk=venue_id).delete()
        except DatabaseError as e:
            logger.error(f"Deleting venue {venue_id} failed: {e}")
            raise BackendOperationError('Could not delete the place.') from e
        if not deleted:
            raise RecordNotFound('Place not found.')


venues_source = OneShotSource(VenueRepository.list_all, name='venues')
