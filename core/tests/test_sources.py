"""
Data Source Tests

Tests for:
- OneShotSource reads and backend failures
- SubscribedSource change notifications
- LocalCollection patches, removal and reconciliation
"""

from dataclasses import dataclass
from unittest.mock import patch

import pytest
from django.db import DatabaseError

from core.exceptions import BackendOperationError
from core.sources import LocalCollection, OneShotSource, SubscribedSource


@dataclass(frozen=True)
class Row:
    id: int
    label: str
    flag: bool = False


class FailingLayer:

    async def group_send(self, group, message):
        raise ConnectionError('redis down')


class TestOneShotSource:

    def test_fetch_returns_list(self):
        source = OneShotSource(lambda: (Row(1, 'a'), Row(2, 'b')), name='rows')
        assert source.fetch() == [Row(1, 'a'), Row(2, 'b')]

    def test_database_error_becomes_backend_error(self):
        def broken():
            raise DatabaseError('connection lost')

        source = OneShotSource(broken, name='rows')
        with pytest.raises(BackendOperationError) as exc:
            source.fetch()
        assert 'rows' in exc.value.message


class TestSubscribedSource:

    def test_notify_sends_group_event(self):
        source = SubscribedSource(lambda: [], 'test-group')
        with patch('core.sources.get_channel_layer') as get_layer, \
                patch('core.sources.async_to_sync') as to_sync:
            source.notify_changed()

        to_sync.assert_called_once_with(get_layer.return_value.group_send)
        to_sync.return_value.assert_called_once_with(
            'test-group', {'type': 'source.changed', 'group': 'test-group'},
        )

    def test_notify_without_layer_is_noop(self):
        source = SubscribedSource(lambda: [], 'test-group')
        with patch('core.sources.get_channel_layer', return_value=None), \
                patch('core.sources.async_to_sync') as to_sync:
            source.notify_changed()
        to_sync.assert_not_called()

    def test_notify_failure_is_logged_not_raised(self, caplog):
        caplog.set_level('ERROR', logger='core.sources')
        source = SubscribedSource(lambda: [], 'test-group')
        with patch('core.sources.get_channel_layer', return_value=FailingLayer()):
            source.notify_changed()

        assert 'Notifying test-group subscribers failed: redis down' in caplog.text


class TestLocalCollection:

    def test_patch_keeps_order(self):
        rows = LocalCollection([Row(1, 'a'), Row(2, 'b'), Row(3, 'c')])
        patched = rows.apply_patch(2, flag=True)

        assert patched == Row(2, 'b', True)
        assert [r.id for r in rows] == [1, 2, 3]
        assert rows.get(2).flag is True

    def test_patch_unknown_id(self):
        rows = LocalCollection([Row(1, 'a')])
        assert rows.apply_patch(9, flag=True) is None
        assert rows.items() == [Row(1, 'a')]

    def test_remove(self):
        rows = LocalCollection([Row(1, 'a'), Row(2, 'b')])
        assert rows.remove(1) is True
        assert rows.remove(1) is False
        assert len(rows) == 1

    def test_reconcile_discards_local_patches(self):
        rows = LocalCollection([Row(1, 'a')])
        rows.apply_patch(1, label='local')
        rows.reconcile([Row(1, 'server'), Row(4, 'd')])
        assert rows.items() == [Row(1, 'server'), Row(4, 'd')]
