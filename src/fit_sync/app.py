"""Wiring of the store, sync manager and remote clients."""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from .clients.supabase import SupabaseAuthProvider, SupabaseHttp, SupabaseUserDataClient
from .config import Settings
from .services.account import AccountService
from .services.sync_manager import SyncManager
from .store import KeyValueStore, LocalStore, SyncStateStore, get_db_path

logger = logging.getLogger(__name__)


@dataclass
class FitSyncApp:
    """Everything one process needs, built from Settings.

    ``auth``, ``sync`` and ``account`` are None when no Supabase project
    is configured; the store then works purely locally.
    """

    settings: Settings
    kv: KeyValueStore
    store: LocalStore
    sync_state: SyncStateStore
    auth: SupabaseAuthProvider | None = None
    sync: SyncManager | None = None
    account: AccountService | None = None

    @property
    def is_online_capable(self) -> bool:
        return self.sync is not None


def build_app(settings: Settings) -> FitSyncApp:
    kv = KeyValueStore(get_db_path(settings.data_dir))
    store = LocalStore(settings.data_dir, kv=kv)
    sync_state = SyncStateStore(kv)
    app = FitSyncApp(settings=settings, kv=kv, store=store, sync_state=sync_state)

    if settings.supabase_url and settings.supabase_anon_key:
        http = SupabaseHttp.from_settings(settings)
        app.auth = SupabaseAuthProvider(http, kv)
        remote = SupabaseUserDataClient(http, app.auth)
        app.sync = SyncManager(
            store,
            app.auth,
            remote,
            sync_state,
            debounce_seconds=settings.debounce_seconds,
        )
        app.account = AccountService(store, app.auth, app.sync, sync_state)
    else:
        logger.info("remote_disabled no Supabase project configured")

    return app


@asynccontextmanager
async def open_app(settings: Settings | None = None) -> AsyncIterator[FitSyncApp]:
    """Load local state, restore the session and run the initial sync.

    On exit, waits for scheduled pushes so edits made during the command
    reach the server before the process ends (or stay dirty for next time).
    """
    app = build_app(settings or Settings.from_env())
    app.store.load()

    if app.sync is not None and app.auth is not None:
        app.sync.start()
        await app.auth.restore_session()

    try:
        yield app
    finally:
        if app.sync is not None:
            await app.sync.wait_idle()
            await app.sync.close()
