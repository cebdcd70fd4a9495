"""
Places Table Tests

Tests for:
- amenity text parsing for inline edits
- search over name, address and amenities with pagination
- approve / reject / edit / delete and their local patches
- per-status action sets, including the Django admin bulk actions
"""

from unittest.mock import patch

import pytest
from django.contrib.admin.sites import site

from conftest import ApprovedVenueFactory, RejectedVenueFactory, VenueFactory
from core.exceptions import BackendOperationError, RecordNotFound, SubmissionValidationError
from core.sources import OneShotSource
from places.admin import VenueAdmin
from places.models import Venue, VenueStatus
from places.moderation import PlacesTable, parse_amenities


def _table():
    table = PlacesTable()
    table.load()
    return table


class TestParseAmenities:

    def test_tags_and_labels(self):
        assert parse_amenities('wifi, Quiet Environment, POWERSOCKET, Wi-Fi') == [
            'wifi', 'quietEnvironment', 'powerSocket',
        ]

    def test_empty(self):
        assert parse_amenities('  ') == []
        assert parse_amenities(None) == []

    def test_unknown(self):
        with pytest.raises(SubmissionValidationError) as exc:
            parse_amenities('wifi, sauna')
        assert 'sauna' in exc.value.message


@pytest.mark.django_db
class TestPlacesListing:

    def test_search_and_pages_partition_results(self):
        for n in range(8):
            VenueFactory(name=f'Library {n}')
        VenueFactory(name='Bakery')
        table = _table()

        table.search('library')
        pages = [table.page_of(n).object_list for n in (1, 2)]

        assert [len(items) for items in pages] == [6, 2]
        names = [record.name for items in pages for record in items]
        assert sorted(names) == sorted(f'Library {n}' for n in range(8))

    def test_search_matches_address_and_amenity(self):
        VenueFactory(name='A', address='10 Harbour Road', amenities=['toilets'])
        VenueFactory(name='B', address='3 Hill St', amenities=['powerSocket'])
        table = _table()

        table.search('harbour')
        assert [r.name for r in table.filtered()] == ['A']
        table.search('socket')
        assert [r.name for r in table.filtered()] == ['B']

    def test_search_resets_page(self):
        VenueFactory.create_batch(7)
        table = _table()
        table.page_of(2)
        table.search('cafe')
        assert table.page == 1

    def test_actions_by_status(self):
        pending = VenueFactory()
        approved = ApprovedVenueFactory()
        table = _table()

        assert table.actions_for(table.rows.get(str(pending.pk))) == ('approve', 'reject', 'edit', 'delete')
        assert table.actions_for(table.rows.get(str(approved.pk))) == ('edit', 'delete')

    def test_custom_source(self):
        table = PlacesTable(source=OneShotSource(lambda: [], name='empty'))
        assert table.load() == []


@pytest.mark.django_db
@pytest.mark.workflow
class TestPlacesActions:

    def test_approve(self):
        venue = VenueFactory()
        table = _table()

        notice = table.approve(venue.pk)

        assert notice.text == 'Place approved successfully!'
        assert Venue.objects.get(pk=venue.pk).status == VenueStatus.APPROVED
        assert table.rows.get(str(venue.pk)).status == VenueStatus.APPROVED
        assert table.actions_for(table.rows.get(str(venue.pk))) == ('edit', 'delete')

    def test_reject(self):
        venue = VenueFactory()
        notice = _table().reject(venue.pk)
        assert notice.text == 'Place rejected successfully!'
        assert Venue.objects.get(pk=venue.pk).status == VenueStatus.REJECTED

    @pytest.mark.parametrize('factory', [ApprovedVenueFactory, RejectedVenueFactory])
    def test_settled_venue_cannot_change_status(self, factory):
        venue = factory()
        table = _table()

        for action in (table.approve, table.reject):
            with pytest.raises(SubmissionValidationError):
                action(venue.pk)
        assert Venue.objects.get(pk=venue.pk).status == venue.status
        assert table.rows.get(str(venue.pk)).status == venue.status

    def test_edit(self):
        venue = VenueFactory(amenities=['wifi'])
        table = _table()

        notice = table.edit(venue.pk, ' Renamed ', 'New address', 'toilets, Wi-Fi')

        assert notice.text == 'Place updated successfully!'
        venue.refresh_from_db()
        assert (venue.name, venue.address, venue.amenities) == ('Renamed', 'New address', ['toilets', 'wifi'])
        assert table.rows.get(str(venue.pk)).amenities == ('toilets', 'wifi')

    def test_edit_requires_name_and_address(self):
        venue = VenueFactory()
        with pytest.raises(SubmissionValidationError):
            _table().edit(venue.pk, '', 'somewhere', '')

    def test_delete(self):
        venue = VenueFactory()
        table = _table()

        assert table.delete(venue.pk).text == 'Place deleted successfully!'
        assert not Venue.objects.filter(pk=venue.pk).exists()
        assert table.rows.get(str(venue.pk)) is None

    def test_unknown_venue(self):
        with pytest.raises(RecordNotFound):
            _table().approve('00000000-0000-0000-0000-000000000000')

    def test_failed_write_keeps_local_state(self):
        venue = VenueFactory()
        table = _table()

        with patch('places.moderation.VenueRepository.update_fields', side_effect=BackendOperationError()):
            notice = table.approve(venue.pk)

        assert notice.level == 'error'
        assert notice.text == 'Error approving place. Please try again.'
        assert table.rows.get(str(venue.pk)).status == VenueStatus.PENDING


@pytest.mark.django_db
class TestVenueAdminActions:

    def test_bulk_approve_skips_settled_venues(self):
        pending = VenueFactory()
        rejected = RejectedVenueFactory()
        venue_admin = VenueAdmin(Venue, site)

        with patch.object(venue_admin, 'message_user') as message_user:
            venue_admin.approve_selected(None, Venue.objects.all())

        message_user.assert_called_once_with(None, '1 place(s) approved.')
        assert Venue.objects.get(pk=pending.pk).status == VenueStatus.APPROVED
        assert Venue.objects.get(pk=rejected.pk).status == VenueStatus.REJECTED
