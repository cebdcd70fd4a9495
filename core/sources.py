"""
Data Sources - One-shot reads and change-notified subscriptions.

Views pick the source that matches how fresh their data must be:

- OneShotSource: a single authoritative read when the view opens. Writes made
  by the view are patched into a LocalCollection and reconciled on the next
  read.
- SubscribedSource: same read, plus a Channels group that receives a
  ``source.changed`` event whenever the underlying records change. Consumers
  joined to the group re-fetch and push a fresh snapshot.

Usage:
    source = SubscribedSource(ProfileRepository.list_recent, 'admin-users')
    records = source.fetch()
    source.notify_changed()  # from a post_save signal
"""

import dataclasses
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import DatabaseError

from core.exceptions import BackendOperationError

logger = logging.getLogger(__name__)


class OneShotSource:
    """Read every record once through ``loader``."""

    def __init__(self, loader, name=None):
        self.loader = loader
        self.name = name or getattr(loader, '__qualname__', 'source')

    def fetch(self):
        try:
            return list(self.loader())
        except DatabaseError as e:
            logger.error(f"Fetching {self.name} failed: {e}")
            raise BackendOperationError(f"Could not load {self.name}.") from e


class SubscribedSource(OneShotSource):
    """A source whose subscribers are told when the records change."""

    event_type = 'source.changed'

    def __init__(self, loader, group_name, name=None):
        super().__init__(loader, name=name or group_name)
        self.group_name = group_name

    def notify_changed(self):
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        try:
            async_to_sync(channel_layer.group_send)(
                self.group_name,
                {'type': self.event_type, 'group': self.group_name},
            )
        except Exception as e:
            # Subscribers resync on their next fetch; the write itself stands.
            logger.error(f"Notifying {self.group_name} subscribers failed: {e}")

    async def join(self, channel_layer, channel_name):
        await channel_layer.group_add(self.group_name, channel_name)

    async def leave(self, channel_layer, channel_name):
        await channel_layer.group_discard(self.group_name, channel_name)


class LocalCollection:
    """
    Ordered, keyed copy of records held by a view.

    Records are frozen dataclasses; patches replace a record with a modified
    copy so the order of the collection is preserved.
    """

    def __init__(self, records=(), key='id'):
        self._key = key
        self._records = list(records)

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def items(self):
        return list(self._records)

    def get(self, record_id):
        for record in self._records:
            if getattr(record, self._key) == record_id:
                return record
        return None

    def apply_patch(self, record_id, **changes):
        """Replace the matching record with a copy carrying ``changes``."""
        for index, record in enumerate(self._records):
            if getattr(record, self._key) == record_id:
                patched = dataclasses.replace(record, **changes)
                self._records[index] = patched
                return patched
        return None

    def remove(self, record_id):
        before = len(self._records)
        self._records = [r for r in self._records if getattr(r, self._key) != record_id]
        return len(self._records) != before

    def reconcile(self, records):
        """Authoritative re-read replaces whatever was patched locally."""
        self._records = list(records)
