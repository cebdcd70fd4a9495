"""
WebSocket consumer for the live users listing.

Admins connected to ``ws/admin/users/`` receive a snapshot of the listing on
connect and again whenever a profile changes. Non-admin connections are
closed with code 4403 before the handshake completes, and an open socket is
closed with the same code once its admin is demoted or banned.
"""

import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from accounts.context import AuthProfileContext
from accounts.moderation import UsersSection
from accounts.repository import users_source
from core.pagination import page_payload

logger = logging.getLogger(__name__)

CLOSE_FORBIDDEN = 4403


class AdminUsersConsumer(AsyncJsonWebsocketConsumer):

    async def connect(self):
        user = self.scope.get('user')
        self.section = await self._resolve_section(user)

        if not self.section.allowed:
            logger.warning(f"Refused users listing socket for user {getattr(user, 'pk', None)}")
            await self.close(code=CLOSE_FORBIDDEN)
            return

        await users_source.join(self.channel_layer, self.channel_name)
        self.joined = True
        await self.accept()
        await self.send_snapshot()

    async def disconnect(self, close_code):
        if getattr(self, 'joined', False):
            await users_source.leave(self.channel_layer, self.channel_name)

    async def receive_json(self, content, **kwargs):
        message_type = content.get('type')
        if message_type == 'search':
            self.section.search(content.get('term'))
            await self.send_snapshot(page=1, refetch=False)
        elif message_type == 'page':
            await self.send_snapshot(page=content.get('page', 1), refetch=False)
        elif message_type == 'ping':
            await self.send_json({'type': 'pong'})
        else:
            await self.send_json({'type': 'error', 'message': f'Unknown message type: {message_type}'})

    async def source_changed(self, event):
        """Handler for ``source.changed`` group events."""
        if getattr(self, 'forbidden', False):
            return
        # Admin rights are re-read on every change; a demoted or banned admin is dropped.
        section = await self._resolve_section(self.scope.get('user'))
        if not section.allowed:
            logger.warning(f"Closing users listing socket for user {section.context.identity_id}: access revoked")
            self.forbidden = True
            await self.close(code=CLOSE_FORBIDDEN)
            return
        section.term, section.page = self.section.term, self.section.page
        self.section = section
        await self.send_snapshot()

    async def send_snapshot(self, page=None, refetch=True):
        if refetch:
            await database_sync_to_async(self.section.load)()
        snapshot = self.section.page_of(page)
        await self.send_json({
            'type': 'users.snapshot',
            **page_payload(snapshot, self._serialize),
        })

    def _serialize(self, record):
        return {**record.as_dict(), 'actions': list(self.section.actions_for(record))}

    @database_sync_to_async
    def _resolve_section(self, user):
        context = AuthProfileContext()
        context.on_session_change(user if user is not None and user.is_authenticated else None)
        return UsersSection(context)
