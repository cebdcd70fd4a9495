"""
Discovery Tests

Tests for:
- the approved-only working set and conjunctive amenity filters
- filter controls by viewport width
- photo carousel and marker card
- viewport zoom and the one-time locate zoom
- GeoJSON output
"""

import pytest
from django.test import RequestFactory

from conftest import ApprovedVenueFactory, RejectedVenueFactory, VenueFactory
from core.geocoding import FALLBACK_CENTER
from core.sources import OneShotSource
from places.discovery import (
    DEFAULT_ZOOM,
    PLACEHOLDER_IMAGE_URL,
    VIEWPORT_SESSION_KEY,
    AmenityFilters,
    MapViewport,
    PhotoCarousel,
    build_geojson,
    directions_url,
    filter_controls,
    filter_controls_for,
    filter_venues,
    load_working_set,
    venue_card,
    viewport_for,
)
from places.records import VenueRecord


def _record(id='v1', amenities=(), images=(), status='approved', **kwargs):
    values = dict(
        id=id, user_id=1, name='Cafe', address='1 Main St', lat=40.0, lng=-74.0,
        amenities=tuple(amenities), images=tuple(images), status=status,
    )
    values.update(kwargs)
    return VenueRecord(**values)


@pytest.mark.django_db
class TestWorkingSet:

    def test_only_approved(self):
        approved = ApprovedVenueFactory()
        VenueFactory()
        RejectedVenueFactory()

        assert [r.id for r in load_working_set()] == [str(approved.pk)]

    def test_custom_source(self):
        source = OneShotSource(lambda: [_record('a'), _record('b', status='pending')])
        assert [r.id for r in load_working_set(source)] == ['a']


class TestAmenityFilters:

    def test_from_query(self):
        filters = AmenityFilters.from_query({'wifi': '1', 'toilets': 'on', 'powerSocket': '0'})
        assert filters.enabled_tags() == {'wifi', 'toilets'}

    def test_toggle_returns_new_value(self):
        filters = AmenityFilters()
        toggled = filters.toggle('quietEnvironment')

        assert filters.enabled_tags() == set()
        assert toggled.enabled_tags() == {'quietEnvironment'}
        assert toggled.toggle('quietEnvironment') == filters

    def test_toggle_unknown(self):
        with pytest.raises(ValueError):
            AmenityFilters().toggle('sauna')

    def test_no_filters_keep_everything(self):
        venues = [_record('a'), _record('b', amenities=['wifi'])]
        assert filter_venues(venues, AmenityFilters()) == venues

    def test_filters_are_conjunctive(self):
        both = _record('both', amenities=['wifi', 'powerSocket', 'toilets'])
        wifi_only = _record('wifi', amenities=['wifi'])
        filters = AmenityFilters(wifi=True, power_socket=True)

        assert filter_venues([both, wifi_only], filters) == [both]

    def test_query_round_trip_of_enabled_tags(self):
        filters = AmenityFilters(wifi=True, toilets=True)
        assert AmenityFilters.from_query(filters.as_query()) == filters


class TestFilterControls:

    @pytest.mark.parametrize('width,mode', [(375, 'icons'), (1024, 'icons'), (1025, 'checkboxes'), (None, 'checkboxes')])
    def test_mode_by_width(self, width, mode):
        assert filter_controls_for(width) == mode

    def test_items_order_and_labels(self):
        controls = filter_controls(AmenityFilters(wifi=True))
        assert [item['label'] for item in controls['items']] == ['Power Outlets', 'Quiet Environment', 'Wi-Fi', 'Toilets']
        wifi = controls['items'][2]
        assert wifi['enabled'] is True
        assert wifi['toggle_query'] == {}


class TestMarkerCard:

    def test_carousel_wraps(self):
        carousel = PhotoCarousel(['a', 'b', 'c'])
        assert carousel.prev() == 'c'
        assert carousel.next() == 'a'
        assert carousel.next() == 'b'
        assert carousel.has_controls is True

    def test_single_photo_has_no_controls(self):
        assert PhotoCarousel(['a']).has_controls is False

    def test_no_photos_uses_placeholder(self):
        carousel = PhotoCarousel([])
        assert carousel.current == PLACEHOLDER_IMAGE_URL
        assert carousel.next() == PLACEHOLDER_IMAGE_URL

    def test_card(self):
        card = venue_card(_record(amenities=['wifi', 'toilets'], images=['1', '2']), photo_index=3)

        assert card['photo'] == '2'
        assert card['next_photo'] == 0
        assert card['amenities'] == ['Wi-Fi', 'Toilets']
        assert card['directions_url'] == 'https://www.google.com/maps/dir/?api=1&destination=40.0,-74.0'

    def test_directions_url(self):
        assert directions_url(1.5, -2.25).endswith('destination=1.5,-2.25')


class TestMapViewport:

    def test_locate_zooms_once(self):
        viewport = MapViewport(center_lat=0, center_lng=0)

        viewport.locate(10, 20)
        assert viewport.zoom == DEFAULT_ZOOM + 3
        assert viewport.has_crosshair_zoomed is True

        viewport.zoom_out()
        viewport.locate(11, 21)
        assert viewport.zoom == DEFAULT_ZOOM + 2
        assert viewport.center == (11.0, 21.0)

    def test_zoom_bounds(self):
        viewport = MapViewport(center_lat=0, center_lng=0, zoom=21)
        viewport.zoom_in()
        assert viewport.zoom == 21
        viewport.zoom = 1
        viewport.zoom_out()
        assert viewport.zoom == 1

    def test_session_round_trip(self):
        session = {}
        viewport = MapViewport(center_lat=1, center_lng=2)
        viewport.locate(3, 4)
        viewport.save(session)

        restored = MapViewport.from_session(session, FALLBACK_CENTER)
        assert restored == viewport

    def test_first_visit_uses_fallback_center(self):
        request = RequestFactory().get('/')
        request.session = {}
        viewport = viewport_for(request)
        assert viewport.center == FALLBACK_CENTER
        assert viewport.zoom == DEFAULT_ZOOM

    def test_session_viewport_wins(self):
        request = RequestFactory().get('/')
        request.session = {}
        MapViewport(center_lat=5, center_lng=6, zoom=9).save(request.session)
        assert viewport_for(request).center == (5, 6)


class TestGeoJSON:

    def test_feature_collection(self):
        data = build_geojson([_record('0b7c1f3e-0000-4000-8000-000000000001', amenities=['wifi'], images=['x.jpg'])])

        assert data['type'] == 'FeatureCollection'
        feature = data['features'][0]
        assert feature['geometry'] == {'type': 'Point', 'coordinates': [-74.0, 40.0]}
        assert feature['properties']['thumbnail_url'] == 'x.jpg'
        assert feature['properties']['amenity_labels'] == ['Wi-Fi']
        assert feature['properties']['card_url'].endswith('/0b7c1f3e-0000-4000-8000-000000000001/card/')

    def test_placeholder_thumbnail(self):
        data = build_geojson([_record('0b7c1f3e-0000-4000-8000-000000000002')])
        assert data['features'][0]['properties']['thumbnail_url'] == PLACEHOLDER_IMAGE_URL
