"""
Profile store access.

Every read returns ProfileRecord instances; every write is a targeted
``update()`` of the named fields so concurrent writers only overwrite the
fields they touch (last writer wins per field).
"""

import logging

from django.db import DatabaseError

from accounts.models import UserProfile
from accounts.records import ProfileRecord, RecordError
from core.exceptions import BackendOperationError
from core.sources import SubscribedSource

logger = logging.getLogger(__name__)

USERS_LISTING_LIMIT = 100
USERS_GROUP = 'admin-users'


def _to_records(profiles):
    records = []
    for profile in profiles:
        try:
            records.append(ProfileRecord.from_model(profile))
        except RecordError as e:
            logger.warning(f"Skipping invalid profile row: {e}")
    return records


class ProfileRepository:

    @staticmethod
    def get(user_id):
        """Point read; ``None`` when the identity has no profile."""
        try:
            profile = UserProfile.objects.filter(pk=user_id).first()
        except DatabaseError as e:
            logger.error(f"Reading profile {user_id} failed: {e}")
            raise BackendOperationError('Could not load the profile.') from e
        if profile is None:
            return None
        return ProfileRecord.from_model(profile)

    @staticmethod
    def list_recent(limit=USERS_LISTING_LIMIT):
        """Newest profiles first, capped at ``limit`` rows."""
        return _to_records(UserProfile.objects.order_by('-created_at')[:limit])

    @staticmethod
    def update_fields(user_id, **fields):
        try:
            updated = UserProfile.objects.filter(pk=user_id).update(**fields)
        except DatabaseError as e:
            logger.error(f"Updating profile {user_id} failed: {e}")
            raise BackendOperationError('Could not update the profile.') from e
        if not updated:
            raise BackendOperationError('Profile not found.')
        # update() bypasses post_save; subscribers are told explicitly.
        users_source.notify_changed()

    @staticmethod
    def delete(user_id):
        try:
            deleted, _ = UserProfile.objects.filter(pk=user_id).delete()
        except DatabaseError as e:
            logger.error(f"Deleting profile {user_id} failed: {e}")
            raise BackendOperationError('Could not remove the profile.') from e
        if not deleted:
            raise BackendOperationError('Profile not found.')


# Live source behind the admin users listing.
users_source = SubscribedSource(ProfileRepository.list_recent, USERS_GROUP, name='users')
