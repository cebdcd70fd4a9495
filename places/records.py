"""
Typed venue records.

Every venue read from the store passes through VenueRecord, which checks the
status domain, the amenity tag set and the image count.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from places.models import MAX_VENUE_IMAGES, Amenity, VenueStatus


class RecordError(ValueError):
    """A stored venue does not satisfy the record's invariants."""


@dataclass(frozen=True)
class VenueRecord:
    id: str
    user_id: Optional[int]
    name: str
    address: str
    lat: float
    lng: float
    amenities: Tuple[str, ...]
    images: Tuple[str, ...]
    status: str
    created_at: Optional[datetime] = None

    @property
    def is_pending(self):
        return self.status == VenueStatus.PENDING

    @property
    def is_approved(self):
        return self.status == VenueStatus.APPROVED

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VenueRecord':
        record_id = data.get('id')
        if not record_id:
            raise RecordError('venue record has no id')

        status = data.get('status')
        if status not in VenueStatus.values:
            raise RecordError(f'venue {record_id} has unknown status {status!r}')

        amenities = tuple(data.get('amenities') or ())
        unknown = set(amenities) - set(Amenity.values)
        if unknown:
            raise RecordError(f'venue {record_id} has unknown amenities {sorted(unknown)}')

        images = tuple(data.get('images') or ())
        if len(images) > MAX_VENUE_IMAGES:
            raise RecordError(f'venue {record_id} has {len(images)} images')

        try:
            lat = float(data['lat'])
            lng = float(data['lng'])
        except (KeyError, TypeError, ValueError):
            raise RecordError(f'venue {record_id} has no coordinates')

        return cls(
            id=str(record_id),
            user_id=data.get('user_id'),
            name=str(data.get('name') or ''),
            address=str(data.get('address') or ''),
            lat=lat,
            lng=lng,
            amenities=amenities,
            images=images,
            status=status,
            created_at=data.get('created_at'),
        )

    @classmethod
    def from_model(cls, venue) -> 'VenueRecord':
        return cls.from_dict({
            'id': venue.pk,
            'user_id': venue.user_id,
            'name': venue.name,
            'address': venue.address,
            'lat': venue.lat,
            'lng': venue.lng,
            'amenities': venue.amenities,
            'images': venue.images,
            'status': venue.status,
            'created_at': venue.created_at,
        })
