"""
Places API Tests

Tests for:
- discovery GeoJSON, marker cards, session viewport and place search
- multipart submissions
- admin moderation endpoints and their permissions
"""

from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework import status

from conftest import AdminProfileFactory, ApprovedVenueFactory, RejectedVenueFactory, VenueFactory
from core.geocoding import FALLBACK_CENTER, Place
from places.models import Venue, VenueStatus


@pytest.mark.django_db
class TestDiscoveryAPI:

    def test_geojson_of_approved(self, api_client):
        venue = ApprovedVenueFactory(lat=10.5, lng=20.25, amenities=['wifi'])
        VenueFactory()

        response = api_client.get(reverse('places_api:discovery-list'))

        assert response.status_code == status.HTTP_200_OK
        features = response.data['features']
        assert len(features) == 1
        assert features[0]['properties']['id'] == str(venue.pk)
        assert features[0]['geometry']['coordinates'] == [20.25, 10.5]
        assert response.data['filters']['mode'] == 'checkboxes'

    def test_filters(self, api_client):
        ApprovedVenueFactory(amenities=['wifi'])
        quiet = ApprovedVenueFactory(amenities=['wifi', 'quietEnvironment'])

        response = api_client.get(reverse('places_api:discovery-list'), {'quietEnvironment': 'true'})

        assert [f['properties']['id'] for f in response.data['features']] == [str(quiet.pk)]

    def test_card(self, api_client):
        venue = ApprovedVenueFactory(images=['a.jpg', 'b.jpg', 'c.jpg'])

        response = api_client.get(
            reverse('places_api:discovery-card', kwargs={'pk': str(venue.pk)}), {'photo': -1},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['photo'] == 'c.jpg'
        assert response.data['has_carousel_controls'] is True

    def test_card_of_pending_venue_is_hidden(self, api_client):
        venue = VenueFactory()

        response = api_client.get(reverse('places_api:discovery-card', kwargs={'pk': str(venue.pk)}))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error_code'] == 'NOT_FOUND'

    def test_viewport_defaults_and_locate(self, api_client):
        url = reverse('places_api:discovery-viewport')

        initial = api_client.get(url).data
        assert (initial['center']['lat'], initial['center']['lng']) == FALLBACK_CENTER

        located = api_client.post(url, {'action': 'locate', 'lat': 48.85, 'lng': 2.35}).data
        again = api_client.post(url, {'action': 'locate', 'lat': 48.86, 'lng': 2.36}).data

        assert located['zoom'] == initial['zoom'] + 3
        assert again['zoom'] == located['zoom']
        assert again['user_location'] == {'lat': 48.86, 'lng': 2.36}

    def test_viewport_locate_needs_coordinates(self, api_client):
        response = api_client.post(reverse('places_api:discovery-viewport'), {'action': 'locate'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_search(self, api_client):
        place = Place(formatted_address='Paris, France', lat=48.85, lng=2.35)
        with patch('places.views_api.PlaceAutocomplete.lookup', return_value=place) as lookup:
            response = api_client.get(reverse('places_api:discovery-search'), {'q': 'paris'})

        lookup.assert_called_once_with('paris')
        assert response.data['results'] == [place.as_dict()]

    def test_search_no_match(self, api_client):
        with patch('places.views_api.PlaceAutocomplete.lookup', return_value=None):
            response = api_client.get(reverse('places_api:discovery-search'), {'q': 'nowhere'})
        assert response.data['results'] == []


@pytest.mark.django_db
class TestSubmissionAPI:

    def test_requires_sign_in(self, api_client):
        response = api_client.post(reverse('places_api:submission-list'), {}, format='multipart')
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_submit(self, member_api_client, profile, image_file):
        response = member_api_client.post(reverse('places_api:submission-list'), {
            'name': 'Reading Room',
            'address': '5 Quiet Lane',
            'lat': '51.5',
            'lng': '-0.12',
            'amenities': ['wifi'],
            'images': [image_file('a.jpg')],
        }, format='multipart')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['status'] == 'pending'
        venue = Venue.objects.get(name='Reading Room')
        assert venue.user_id == profile.user.pk
        assert venue.amenities == ['wifi']

    def test_unknown_amenity(self, member_api_client, image_file):
        response = member_api_client.post(reverse('places_api:submission-list'), {
            'name': 'Reading Room',
            'address': '5 Quiet Lane',
            'lat': '51.5',
            'lng': '-0.12',
            'amenities': ['sauna'],
            'images': [image_file('a.jpg')],
        }, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Venue.objects.exists()


@pytest.mark.django_db
@pytest.mark.security
class TestModerationAPI:

    def test_member_forbidden(self, member_api_client):
        response = member_api_client.get(reverse('places_api:moderation-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_banned_admin_forbidden(self, api_client):
        banned_admin = AdminProfileFactory(is_banned=True)
        api_client.force_authenticate(user=banned_admin.user)

        response = api_client.get(reverse('places_api:moderation-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_paginates(self, admin_api_client):
        VenueFactory.create_batch(7)

        response = admin_api_client.get(reverse('places_api:moderation-list'), {'page': 2})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data['results']) == 1

    def test_approve_then_visible_on_map(self, admin_api_client, api_client):
        venue = VenueFactory()

        response = admin_api_client.post(reverse('places_api:moderation-approve', kwargs={'pk': str(venue.pk)}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Place approved successfully!'
        assert response.data['data']['actions'] == ['edit', 'delete']
        geojson = api_client.get(reverse('places_api:discovery-list')).data
        assert [f['properties']['id'] for f in geojson['features']] == [str(venue.pk)]

    def test_reject(self, admin_api_client):
        venue = VenueFactory()
        admin_api_client.post(reverse('places_api:moderation-reject', kwargs={'pk': str(venue.pk)}))
        venue.refresh_from_db()
        assert venue.status == VenueStatus.REJECTED

    def test_rejected_venue_cannot_be_approved(self, admin_api_client):
        venue = RejectedVenueFactory()

        response = admin_api_client.post(reverse('places_api:moderation-approve', kwargs={'pk': str(venue.pk)}))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == 'Only pending places can be approved or rejected.'
        venue.refresh_from_db()
        assert venue.status == VenueStatus.REJECTED

    def test_approved_venue_cannot_be_rejected(self, admin_api_client):
        venue = ApprovedVenueFactory()

        response = admin_api_client.post(reverse('places_api:moderation-reject', kwargs={'pk': str(venue.pk)}))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        venue.refresh_from_db()
        assert venue.status == VenueStatus.APPROVED

    def test_partial_update(self, admin_api_client):
        venue = VenueFactory()

        response = admin_api_client.patch(
            reverse('places_api:moderation-detail', kwargs={'pk': str(venue.pk)}),
            {'name': 'New name', 'address': 'New address', 'amenities': 'Toilets'},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['amenities'] == ['toilets']

    def test_destroy(self, admin_api_client):
        venue = VenueFactory()

        response = admin_api_client.delete(reverse('places_api:moderation-detail', kwargs={'pk': str(venue.pk)}))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data'] is None
        assert not Venue.objects.filter(pk=venue.pk).exists()

    def test_unknown_venue(self, admin_api_client):
        response = admin_api_client.post(reverse(
            'places_api:moderation-approve', kwargs={'pk': '00000000-0000-0000-0000-000000000000'},
        ))
        assert response.status_code == status.HTTP_404_NOT_FOUND
