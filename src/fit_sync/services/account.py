"""Destructive account operations gated on a successful flush."""

import logging

from ..clients.base import AuthSessionProvider
from ..store.local_store import LocalStore
from ..store.sync_state import SyncStateStore
from .sync_manager import SyncManager

logger = logging.getLogger(__name__)


class AccountService:
    """Logout and account deletion.

    Local data is only wiped after pending changes are confirmed on the
    server, and no sync runs between the flush and the wipe. If the flush
    fails the error propagates and the user stays logged in with their
    data intact.
    """

    def __init__(
        self,
        store: LocalStore,
        auth: AuthSessionProvider,
        sync: SyncManager,
        sync_state: SyncStateStore,
    ):
        self.store = store
        self.auth = auth
        self.sync = sync
        self.sync_state = sync_state

    async def sign_out(self) -> None:
        """Flush, end the session, then wipe local data.

        Raises:
            FlushError: pending changes could not be pushed; nothing was wiped
        """
        async with self.sync.exclusive():
            await self.sync.flush_locked()
            await self.auth.sign_out()
            self._wipe_local()
        logger.info("sign_out_complete cloud synced, local wiped")

    async def delete_account(self) -> None:
        """Flush, delete the backend identity, then wipe local data.

        Raises:
            FlushError: pending changes could not be pushed; nothing was deleted
            AuthError: the server refused the deletion; local data is kept
        """
        async with self.sync.exclusive():
            await self.sync.flush_locked()
            await self.auth.delete_account()
            self._wipe_local()
        logger.info("delete_account_complete local wiped")

    def _wipe_local(self) -> None:
        self.store.delete_all_data()
        self.sync_state.reset()
