"""
Geocoding collaborators.

- PlaceAutocomplete: free text to a structured place (address and
  coordinates) through geopy's Nominatim geocoder.
- IPGeolocation: best-effort coarse position of a client IP through the
  ipapi.co JSON API, falling back to a fixed city center.

Both cache results and never raise on remote failures.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import requests
from django.conf import settings
from django.core.cache import cache
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim

logger = logging.getLogger(__name__)

# New York City
FALLBACK_CENTER = (40.7128, -74.006)


@dataclass(frozen=True)
class Place:
    formatted_address: str
    lat: float
    lng: float

    def as_dict(self):
        return {'formatted_address': self.formatted_address, 'lat': self.lat, 'lng': self.lng}


class PlaceAutocomplete:
    """
    Resolve free-text place queries with Nominatim.

    Rate limit: 1 request per second (Nominatim usage policy); results are
    cached for 30 days.
    """

    CACHE_TTL = 86400 * 30

    @classmethod
    def _geolocator(cls):
        return Nominatim(user_agent=getattr(settings, 'GEOCODER_USER_AGENT', 'kivvly/1.0'), timeout=5)

    @classmethod
    def lookup(cls, text: str) -> Optional[Place]:
        text = (text or '').strip()
        if len(text) < 2:
            return None

        cache_key = f"geocode:{text.lower()}"
        cached = cache.get(cache_key)
        if cached:
            return Place(**cached)

        try:
            location = cls._geolocator().geocode(text)
        except (GeocoderTimedOut, GeocoderServiceError) as e:
            logger.warning(f"Geocoding failed for {text}: {e}")
            return None

        if not location:
            return None

        place = Place(
            formatted_address=location.address,
            lat=float(location.latitude),
            lng=float(location.longitude),
        )
        cache.set(cache_key, place.as_dict(), cls.CACHE_TTL)
        return place


class IPGeolocation:
    """Coarse client position from its IP address."""

    CACHE_TTL = 86400

    @classmethod
    def _url_for(cls, ip: str) -> str:
        template = getattr(settings, 'IP_GEOLOCATION_URL', 'https://ipapi.co/{ip}/json/')
        if ip:
            return template.format(ip=ip)
        return template.replace('{ip}/', '')

    @classmethod
    def locate(cls, ip: str) -> Optional[Tuple[float, float]]:
        cache_key = f"ipgeo:{ip or 'self'}"
        cached = cache.get(cache_key)
        if cached:
            return tuple(cached)

        try:
            response = requests.get(
                cls._url_for(ip),
                timeout=getattr(settings, 'IP_GEOLOCATION_TIMEOUT', 5),
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"IP geolocation failed for {ip or 'self'}: {e}")
            return None

        # ipapi reports reserved addresses and quota errors in-band
        if data.get('error'):
            logger.info(f"IP geolocation unavailable for {ip or 'self'}: {data.get('reason')}")
            return None

        try:
            position = (float(data['latitude']), float(data['longitude']))
        except (KeyError, TypeError, ValueError):
            logger.warning(f"IP geolocation returned no coordinates for {ip or 'self'}")
            return None

        cache.set(cache_key, list(position), cls.CACHE_TTL)
        return position

    @classmethod
    def center_for(cls, ip: str) -> Tuple[float, float]:
        return cls.locate(ip) or FALLBACK_CENTER


def client_ip(request) -> str:
    """Extract client IP from request."""
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')
