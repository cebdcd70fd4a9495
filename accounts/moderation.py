"""
Users section of the admin dashboard.

Admin-only listing of profiles (newest first, at most 100 rows) fed by the
live users source, with search, pagination and three actions per row:
toggle admin, toggle ban, delete. The acting admin's own row carries no
actions and the section refuses any action that targets it.
"""

import logging

from accounts.decorators import ACCESS_DENIED_MESSAGE
from accounts.repository import ProfileRepository, users_source
from core.exceptions import AuthorizationError, BackendOperationError, RecordNotFound
from core.notices import Notice
from core.pagination import paginate
from core.sources import LocalCollection

logger = logging.getLogger(__name__)

USERS_PAGE_SIZE = 10
USER_ACTIONS = ('toggle_admin', 'toggle_ban', 'delete')
SELF_ACTION_MESSAGE = 'You cannot change your own account.'


def _label(record):
    return record.display_name or record.email


class UsersSection:

    page_size = USERS_PAGE_SIZE

    def __init__(self, context, source=None):
        self.context = context
        self.source = source or users_source
        self.rows = LocalCollection()
        self.term = ''
        self.page = 1
        self.allowed = context.is_admin and not context.is_banned
        self.notice = None if self.allowed else Notice.error(ACCESS_DENIED_MESSAGE)

    # ==================== DATA ====================

    def load(self):
        """Fetch the listing; nothing is read for non-admins."""
        if not self.allowed:
            return []
        self.rows.reconcile(self.source.fetch())
        return self.rows.items()

    def reconcile(self, records):
        self.rows.reconcile(records)

    def search(self, term):
        self.term = str(term or '').strip()
        self.page = 1

    def filtered(self):
        term = self.term.lower()
        if not term:
            return self.rows.items()
        return [
            record for record in self.rows
            if term in record.display_name.lower()
            or term in record.email.lower()
            or term in record.job_occupation.lower()
        ]

    def page_of(self, page=None):
        page = paginate(self.filtered(), self.page if page is None else page, self.page_size)
        self.page = page.number
        return page

    def actions_for(self, record):
        if not self.allowed or record.id == self.context.identity_id:
            return ()
        return USER_ACTIONS

    # ==================== ACTIONS ====================

    def _target(self, user_id):
        if not self.allowed:
            raise AuthorizationError(ACCESS_DENIED_MESSAGE)
        if user_id == self.context.identity_id:
            logger.warning(f"Admin {user_id} attempted an action on their own account")
            raise AuthorizationError(SELF_ACTION_MESSAGE)
        record = self.rows.get(user_id) or ProfileRepository.get(user_id)
        if record is None:
            raise RecordNotFound('User not found.')
        return record

    def toggle_admin(self, user_id):
        record = self._target(user_id)
        value = not record.is_admin
        try:
            ProfileRepository.update_fields(user_id, is_admin=value)
        except BackendOperationError as e:
            logger.error(f"Toggling admin for user {user_id} failed: {e}")
            return Notice.error('Error updating admin status. Please try again.')
        self.rows.apply_patch(user_id, is_admin=value)
        logger.info(f"Admin {self.context.identity_id} set is_admin={value} on user {user_id}")
        return Notice.success(f'Admin status updated for user {_label(record)}.')

    def toggle_ban(self, user_id):
        record = self._target(user_id)
        value = not record.is_banned
        try:
            ProfileRepository.update_fields(user_id, is_banned=value)
        except BackendOperationError as e:
            logger.error(f"Toggling ban for user {user_id} failed: {e}")
            return Notice.error('Error updating ban status. Please try again.')
        self.rows.apply_patch(user_id, is_banned=value)
        logger.info(f"Admin {self.context.identity_id} set is_banned={value} on user {user_id}")
        state = 'banned' if value else 'unbanned'
        return Notice.success(f'User {_label(record)} has been {state}.')

    def delete(self, user_id):
        record = self._target(user_id)
        try:
            ProfileRepository.delete(user_id)
        except BackendOperationError as e:
            logger.error(f"Removing user {user_id} failed: {e}")
            return Notice.error('Error removing user. Please try again.')
        self.rows.remove(user_id)
        logger.info(f"Admin {self.context.identity_id} removed the profile of user {user_id}")
        return Notice.success(f'User {_label(record)} has been removed.')
