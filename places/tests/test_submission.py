"""
Venue Submission Tests

Tests for:
- image selection cap
- sequential compression and upload
- the pending status of every submission
- aborting on the first failed image
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from core.exceptions import AuthenticationRequired, ImageUploadError, StorageUploadError, SubmissionValidationError
from places.models import Venue, VenueStatus
from places.submission import (
    NO_IMAGES_MESSAGE,
    TOO_MANY_IMAGES_MESSAGE,
    UNAUTHORIZED_SUBMISSION_MESSAGE,
    ImageSelection,
    submit_venue,
)

CLEANED = {
    'name': 'Quiet Loft',
    'address': '5 Elm St',
    'lat': 40.7,
    'lng': -73.9,
    'amenities': ['wifi', 'quietEnvironment'],
    'status': 'approved',
}


class TestImageSelection:

    def test_caps_at_three(self):
        selection = ImageSelection()
        notice = selection.add_many(['a', 'b', 'c', 'd', 'e'])

        assert list(selection) == ['a', 'b', 'c']
        assert notice.text == TOO_MANY_IMAGES_MESSAGE

    def test_remove_then_add(self):
        selection = ImageSelection()
        selection.add_many(['a', 'b', 'c'])
        selection.remove(1)
        assert selection.add('d') is None
        assert list(selection) == ['a', 'c', 'd']

    def test_clear(self):
        selection = ImageSelection()
        selection.add('a')
        selection.clear()
        assert len(selection) == 0


@pytest.mark.django_db
class TestSubmitVenue:

    def test_creates_pending_venue_whatever_the_input(self, user_factory):
        user = user_factory()
        uploader = MagicMock(side_effect=['u1', 'u2'])

        record = submit_venue(user, CLEANED, ['img1', 'img2'], compressor=lambda f: b'jpeg', uploader=uploader)

        assert record.status == VenueStatus.PENDING
        assert record.images == ('u1', 'u2')
        assert record.user_id == user.pk
        uploader.assert_any_call(f'places/{user.pk}', b'jpeg')
        assert Venue.objects.get(pk=record.id).amenities == ['wifi', 'quietEnvironment']

    def test_images_upload_in_selection_order(self, user_factory):
        order = []

        def compressor(image):
            order.append(image)
            return image.encode()

        record = submit_venue(
            user_factory(), CLEANED, ['first', 'second', 'third'],
            compressor=compressor, uploader=lambda prefix, data: data.decode(),
        )
        assert order == ['first', 'second', 'third']
        assert record.images == ('first', 'second', 'third')

    def test_requires_identity(self):
        with pytest.raises(AuthenticationRequired) as exc:
            submit_venue(None, CLEANED, ['img'])
        assert exc.value.message == UNAUTHORIZED_SUBMISSION_MESSAGE

    def test_anonymous_user_is_refused(self):
        with pytest.raises(AuthenticationRequired):
            submit_venue(SimpleNamespace(is_authenticated=False), CLEANED, ['img'])

    def test_requires_an_image(self, user_factory):
        with pytest.raises(SubmissionValidationError) as exc:
            submit_venue(user_factory(), CLEANED, [])
        assert exc.value.message == NO_IMAGES_MESSAGE

    def test_more_than_three_images(self, user_factory):
        with pytest.raises(SubmissionValidationError):
            submit_venue(user_factory(), CLEANED, ['1', '2', '3', '4'])

    def test_failed_upload_aborts_without_venue(self, user_factory):
        uploader = MagicMock(side_effect=['u1', StorageUploadError()])

        with pytest.raises(ImageUploadError) as exc:
            submit_venue(user_factory(), CLEANED, ['a', 'b', 'c'], compressor=lambda f: b'x', uploader=uploader)

        assert exc.value.message == 'Error uploading images'
        assert uploader.call_count == 2
        assert not Venue.objects.exists()

    def test_unreadable_image_aborts(self, user_factory):
        def compressor(image):
            raise OSError('cannot identify image file')

        with pytest.raises(ImageUploadError):
            submit_venue(user_factory(), CLEANED, ['bad'], compressor=compressor)
        assert not Venue.objects.exists()

    def test_real_compression_and_storage(self, user_factory, image_file):
        record = submit_venue(user_factory(), CLEANED, [image_file(), image_file(color=(0, 0, 255))])
        assert len(record.images) == 2
        assert all(url.endswith('.jpg') for url in record.images)
