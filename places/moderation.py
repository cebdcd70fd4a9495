"""
Places table of the admin dashboard.

All venues are read once into a local collection; search and pagination run
over that copy. Each action is a targeted write followed by a local patch,
so the table never re-reads after its own changes. A failed write leaves
the local copy untouched and returns an error notice.
"""

import logging

from core.exceptions import BackendOperationError, RecordNotFound, SubmissionValidationError
from core.notices import Notice
from core.pagination import paginate
from core.sources import LocalCollection
from places.models import Amenity, VenueStatus
from places.repository import VenueRepository, venues_source

logger = logging.getLogger(__name__)

PLACES_PAGE_SIZE = 6
PENDING_ACTIONS = ('approve', 'reject', 'edit', 'delete')
SETTLED_ACTIONS = ('edit', 'delete')

_AMENITY_ALIASES = {}
for _value, _label in Amenity.choices:
    _AMENITY_ALIASES[_value.lower()] = _value
    _AMENITY_ALIASES[str(_label).lower()] = _value


def parse_amenities(text):
    """
    Comma-separated amenity text to a list of tags.

    Tags and their labels are accepted in any case ("wifi", "Wi-Fi");
    duplicates are dropped and order is kept.
    """
    tags = []
    unknown = []
    for part in (text or '').split(','):
        token = part.strip()
        if not token:
            continue
        tag = _AMENITY_ALIASES.get(token.lower())
        if tag is None:
            unknown.append(token)
        elif tag not in tags:
            tags.append(tag)
    if unknown:
        raise SubmissionValidationError(
            f"Unknown amenities: {', '.join(unknown)}. "
            f"Use: {', '.join(Amenity.values)}."
        )
    return tags


def matches(record, term):
    """Case-insensitive substring match on name, address or any amenity."""
    term = term.lower()
    return (
        term in record.name.lower()
        or term in record.address.lower()
        or any(term in amenity.lower() for amenity in record.amenities)
    )


class PlacesTable:

    page_size = PLACES_PAGE_SIZE

    def __init__(self, source=None):
        self.source = source or venues_source
        self.rows = LocalCollection()
        self.term = ''
        self.page = 1

    def load(self):
        self.rows.reconcile(self.source.fetch())
        return self.rows.items()

    def reconcile(self, records):
        self.rows.reconcile(records)

    # ==================== VIEW STATE ====================

    def search(self, term):
        self.term = str(term or '').strip()
        self.page = 1

    def filtered(self):
        if not self.term:
            return self.rows.items()
        return [record for record in self.rows if matches(record, self.term)]

    def page_of(self, page=None):
        page = paginate(self.filtered(), self.page if page is None else page, self.page_size)
        self.page = page.number
        return page

    def actions_for(self, record):
        return PENDING_ACTIONS if record.is_pending else SETTLED_ACTIONS

    # ==================== ACTIONS ====================

    def _require(self, venue_id):
        venue_id = str(venue_id)
        record = self.rows.get(venue_id) or VenueRepository.get(venue_id)
        if record is None:
            raise RecordNotFound('Place not found.')
        return record

    def _set_status(self, venue_id, status, verb, past):
        record = self._require(venue_id)
        if not record.is_pending:
            raise SubmissionValidationError('Only pending places can be approved or rejected.')
        try:
            VenueRepository.update_fields(record.id, status=status)
        except BackendOperationError as e:
            logger.error(f"Setting status {status} on venue {record.id} failed: {e}")
            return Notice.error(f'Error {verb} place. Please try again.')
        self.rows.apply_patch(record.id, status=status)
        logger.info(f"Venue {record.id} is now {status}")
        return Notice.success(f'Place {past} successfully!')

    def approve(self, venue_id):
        return self._set_status(venue_id, VenueStatus.APPROVED.value, 'approving', 'approved')

    def reject(self, venue_id):
        return self._set_status(venue_id, VenueStatus.REJECTED.value, 'rejecting', 'rejected')

    def edit(self, venue_id, name, address, amenities_text):
        record = self._require(venue_id)
        name = (name or '').strip()
        address = (address or '').strip()
        if not name or not address:
            raise SubmissionValidationError('Name and address are required.')
        amenities = parse_amenities(amenities_text)

        try:
            VenueRepository.update_fields(record.id, name=name, address=address, amenities=amenities)
        except BackendOperationError as e:
            logger.error(f"Updating venue {record.id} failed: {e}")
            return Notice.error('Error updating place. Please try again.')
        self.rows.apply_patch(record.id, name=name, address=address, amenities=tuple(amenities))
        return Notice.success('Place updated successfully!')

    def delete(self, venue_id):
        record = self._require(venue_id)
        try:
            VenueRepository.delete(record.id)
        except BackendOperationError as e:
            logger.error(f"Deleting venue {record.id} failed: {e}")
            return Notice.error('Error deleting place. Please try again.')
        self.rows.remove(record.id)
        logger.info(f"Venue {record.id} deleted")
        return Notice.success('Place deleted successfully!')
