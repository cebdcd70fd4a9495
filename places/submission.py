"""
Venue submission.

- ImageSelection caps a submission at three photos; extra selections are
  refused with a notice and the first three are kept.
- submit_venue compresses and uploads the photos one after the other, then
  writes a single pending venue. Any failed photo aborts the submission
  before the venue is written; photos already uploaded stay in storage.
"""

import logging

from core.exceptions import (
    AuthenticationRequired,
    BackendOperationError,
    ImageUploadError,
    SubmissionValidationError,
)
from core.images import compress_image
from core.notices import Notice
from core.storage import upload_blob
from places.models import MAX_VENUE_IMAGES
from places.repository import VenueRepository

logger = logging.getLogger(__name__)

UNAUTHORIZED_SUBMISSION_MESSAGE = 'Unauthorized… You must be logged in to add a place.'
TOO_MANY_IMAGES_MESSAGE = 'You can only add up to 3 images.'
NO_IMAGES_MESSAGE = 'Please upload at least one image.'
SUBMITTED_MESSAGE = 'Place added successfully! Please wait for approval'


class ImageSelection:
    """Photos picked for one submission, in selection order."""

    def __init__(self, limit=MAX_VENUE_IMAGES):
        self.limit = limit
        self.files = []

    def __len__(self):
        return len(self.files)

    def __iter__(self):
        return iter(self.files)

    def add(self, file):
        """Append ``file``; returns a notice when the selection is full."""
        if len(self.files) >= self.limit:
            return Notice.error(TOO_MANY_IMAGES_MESSAGE)
        self.files.append(file)
        return None

    def add_many(self, files):
        """Append files until full; at most one notice is returned."""
        refused = [self.add(file) for file in files]
        return next((notice for notice in refused if notice is not None), None)

    def remove(self, index):
        del self.files[index]

    def clear(self):
        self.files = []


def submit_venue(identity, cleaned_data, images, compressor=compress_image, uploader=upload_blob):
    """
    Upload the photos and create a pending venue.

    Args:
        identity: signed-in user, or None
        cleaned_data: name, address, lat, lng, amenities; any status is ignored
        images: file-like objects in selection order
        compressor: bytes-producing image compressor
        uploader: ``uploader(prefix, data) -> url``

    Returns:
        VenueRecord of the new venue.
    """
    if identity is None or not getattr(identity, 'is_authenticated', False):
        raise AuthenticationRequired(UNAUTHORIZED_SUBMISSION_MESSAGE)

    images = list(images)
    if not images:
        raise SubmissionValidationError(NO_IMAGES_MESSAGE)
    if len(images) > MAX_VENUE_IMAGES:
        raise SubmissionValidationError(TOO_MANY_IMAGES_MESSAGE)

    urls = []
    for position, image in enumerate(images, start=1):
        try:
            data = compressor(image)
            urls.append(uploader(f'places/{identity.pk}', data))
        except (OSError, BackendOperationError) as e:
            logger.error(
                f"Image {position}/{len(images)} of a submission by user {identity.pk} failed: {e}"
            )
            raise ImageUploadError() from e

    record = VenueRepository.create(
        user=identity,
        name=cleaned_data['name'],
        address=cleaned_data['address'],
        lat=cleaned_data['lat'],
        lng=cleaned_data['lng'],
        amenities=cleaned_data.get('amenities') or [],
        images=urls,
    )
    logger.info(f"Venue {record.id} submitted by user {identity.pk} with {len(urls)} images")
    return record
