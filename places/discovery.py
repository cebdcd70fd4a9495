"""
Map discovery.

Visitors see every approved venue on a map, narrowed by amenity filters:

- load_working_set: one read of all venues, keeping the approved ones
- AmenityFilters / filter_venues: conjunctive filtering by amenity tags
- venue_card / PhotoCarousel: the info overlay of a selected marker
- MapViewport: center and zoom kept in the session; the locate control
  adds a zoom step once per session
- filter_controls_for: icon buttons on narrow screens, checkboxes otherwise
- build_geojson: FeatureCollection for the map markers

Usage:
    filters = AmenityFilters.from_query(request.GET)
    venues = filter_venues(load_working_set(), filters)
    geojson = build_geojson(venues)
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.urls import reverse

from core.geocoding import IPGeolocation, client_ip
from places.models import Amenity
from places.records import VenueRecord
from places.repository import venues_source

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = '/static/img/placeholder.svg'
DIRECTIONS_URL = 'https://www.google.com/maps/dir/?api=1&destination={lat},{lng}'

DEFAULT_ZOOM = 12
MIN_ZOOM = 1
MAX_ZOOM = 21
LOCATE_ZOOM_STEP = 3
MOBILE_BREAKPOINT = 1024
VIEWPORT_SESSION_KEY = 'map_viewport'

# Filter bar order and wording
FILTER_LABELS = (
    (Amenity.POWER_SOCKET.value, 'Power Outlets'),
    (Amenity.QUIET_ENVIRONMENT.value, 'Quiet Environment'),
    (Amenity.WIFI.value, 'Wi-Fi'),
    (Amenity.TOILETS.value, 'Toilets'),
)

CARD_LABELS = {value: str(label) for value, label in Amenity.choices}

_TRUTHY = ('1', 'true', 'on', 'yes')


# ==================== WORKING SET ====================

def load_working_set(source=None) -> List[VenueRecord]:
    """All approved venues, read once."""
    records = (source or venues_source).fetch()
    logger.debug(f"Loaded {len(records)} venues for discovery")
    return [record for record in records if record.is_approved]


def resolve_initial_center(ip) -> Tuple[float, float]:
    """Best-effort map center for a client IP; never raises."""
    return IPGeolocation.center_for(ip)


# ==================== FILTERS ====================

@dataclass(frozen=True)
class AmenityFilters:
    toilets: bool = False
    wifi: bool = False
    quiet_environment: bool = False
    power_socket: bool = False

    _TAGS = {
        'toilets': Amenity.TOILETS.value,
        'wifi': Amenity.WIFI.value,
        'quiet_environment': Amenity.QUIET_ENVIRONMENT.value,
        'power_socket': Amenity.POWER_SOCKET.value,
    }

    @classmethod
    def from_query(cls, params) -> 'AmenityFilters':
        """Read ``?wifi=1&toilets=on...`` style parameters (tag names)."""
        values = {}
        for attr, tag in cls._TAGS.items():
            raw = params.get(tag)
            values[attr] = str(raw).lower() in _TRUTHY if raw is not None else False
        return cls(**values)

    def enabled_tags(self) -> set:
        return {tag for attr, tag in self._TAGS.items() if getattr(self, attr)}

    def is_enabled(self, tag) -> bool:
        return tag in self.enabled_tags()

    def toggle(self, tag) -> 'AmenityFilters':
        for attr, known in self._TAGS.items():
            if known == tag:
                return replace(self, **{attr: not getattr(self, attr)})
        raise ValueError(f'Unknown amenity {tag!r}')

    def as_query(self) -> Dict[str, str]:
        return {tag: '1' for tag in sorted(self.enabled_tags())}


def filter_venues(venues: Iterable[VenueRecord], filters: AmenityFilters) -> List[VenueRecord]:
    """Venues carrying every enabled amenity."""
    required = filters.enabled_tags()
    return [venue for venue in venues if required <= set(venue.amenities)]


def filter_controls_for(viewport_width) -> str:
    """``icons`` at or below the breakpoint, ``checkboxes`` above it."""
    try:
        width = int(viewport_width)
    except (TypeError, ValueError):
        return 'checkboxes'
    return 'icons' if width <= MOBILE_BREAKPOINT else 'checkboxes'


def filter_controls(filters: AmenityFilters, viewport_width=None) -> Dict[str, Any]:
    return {
        'mode': filter_controls_for(viewport_width),
        'items': [
            {
                'tag': tag,
                'label': label,
                'enabled': filters.is_enabled(tag),
                'toggle_query': filters.toggle(tag).as_query(),
            }
            for tag, label in FILTER_LABELS
        ],
    }


# ==================== MARKER OVERLAY ====================

def directions_url(lat, lng) -> str:
    return DIRECTIONS_URL.format(lat=lat, lng=lng)


def amenity_labels(amenities) -> List[str]:
    return [CARD_LABELS[tag] for tag in amenities if tag in CARD_LABELS]


class PhotoCarousel:
    """Circular photo browser of one venue."""

    def __init__(self, images, index=0):
        self.images = list(images)
        self.index = index % len(self.images) if self.images else 0

    @property
    def has_controls(self):
        return len(self.images) > 1

    @property
    def current(self):
        return self.images[self.index] if self.images else PLACEHOLDER_IMAGE_URL

    def next(self):
        if self.images:
            self.index = (self.index + 1) % len(self.images)
        return self.current

    def prev(self):
        if self.images:
            self.index = (self.index - 1 + len(self.images)) % len(self.images)
        return self.current

    @property
    def next_index(self):
        return (self.index + 1) % len(self.images) if self.images else 0

    @property
    def prev_index(self):
        return (self.index - 1 + len(self.images)) % len(self.images) if self.images else 0


def venue_card(venue: VenueRecord, photo_index=0) -> Dict[str, Any]:
    carousel = PhotoCarousel(venue.images, photo_index)
    return {
        'id': venue.id,
        'name': venue.name,
        'address': venue.address,
        'amenities': amenity_labels(venue.amenities),
        'photo': carousel.current,
        'photo_index': carousel.index,
        'photo_count': len(carousel.images),
        'has_carousel_controls': carousel.has_controls,
        'next_photo': carousel.next_index,
        'prev_photo': carousel.prev_index,
        'directions_url': directions_url(venue.lat, venue.lng),
    }


# ==================== VIEWPORT ====================

@dataclass
class MapViewport:
    center_lat: float
    center_lng: float
    zoom: int = DEFAULT_ZOOM
    user_location: Optional[Tuple[float, float]] = None
    has_crosshair_zoomed: bool = False

    @property
    def center(self):
        return (self.center_lat, self.center_lng)

    def recenter(self, lat, lng):
        self.center_lat, self.center_lng = float(lat), float(lng)

    def locate(self, lat, lng):
        """Center on the device position; the first call also zooms in."""
        self.recenter(lat, lng)
        self.user_location = (float(lat), float(lng))
        if not self.has_crosshair_zoomed:
            self.zoom = min(self.zoom + LOCATE_ZOOM_STEP, MAX_ZOOM)
            self.has_crosshair_zoomed = True

    def zoom_in(self):
        self.zoom = min(self.zoom + 1, MAX_ZOOM)

    def zoom_out(self):
        self.zoom = max(self.zoom - 1, MIN_ZOOM)

    def as_dict(self):
        return {
            'center': {'lat': self.center_lat, 'lng': self.center_lng},
            'zoom': self.zoom,
            'user_location': (
                {'lat': self.user_location[0], 'lng': self.user_location[1]}
                if self.user_location else None
            ),
            'has_crosshair_zoomed': self.has_crosshair_zoomed,
        }

    @classmethod
    def from_session(cls, session, default_center) -> 'MapViewport':
        data = session.get(VIEWPORT_SESSION_KEY)
        if not data:
            return cls(center_lat=default_center[0], center_lng=default_center[1])
        location = data.get('user_location')
        return cls(
            center_lat=data['center_lat'],
            center_lng=data['center_lng'],
            zoom=data.get('zoom', DEFAULT_ZOOM),
            user_location=tuple(location) if location else None,
            has_crosshair_zoomed=data.get('has_crosshair_zoomed', False),
        )

    def save(self, session):
        session[VIEWPORT_SESSION_KEY] = {
            'center_lat': self.center_lat,
            'center_lng': self.center_lng,
            'zoom': self.zoom,
            'user_location': list(self.user_location) if self.user_location else None,
            'has_crosshair_zoomed': self.has_crosshair_zoomed,
        }


def viewport_for(request) -> MapViewport:
    """Session viewport, seeded from the client IP on first visit."""
    if VIEWPORT_SESSION_KEY in request.session:
        return MapViewport.from_session(request.session, None)
    return MapViewport.from_session(request.session, resolve_initial_center(client_ip(request)))


# ==================== GEOJSON ====================

def build_geojson(venues: Iterable[VenueRecord]) -> Dict[str, Any]:
    """
    Build a GeoJSON FeatureCollection of venue markers.

    Coordinates are ``[lng, lat]``; properties carry what the marker list
    and the overlay need before the card is fetched.
    """
    features = []
    for venue in venues:
        features.append({
            'type': 'Feature',
            'geometry': {
                'type': 'Point',
                'coordinates': [venue.lng, venue.lat],
            },
            'properties': {
                'id': venue.id,
                'name': venue.name,
                'address': venue.address,
                'amenities': list(venue.amenities),
                'amenity_labels': amenity_labels(venue.amenities),
                'thumbnail_url': venue.images[0] if venue.images else PLACEHOLDER_IMAGE_URL,
                'card_url': reverse('places_api:discovery-card', kwargs={'pk': venue.id}),
            },
        })
    return {'type': 'FeatureCollection', 'features': features}
