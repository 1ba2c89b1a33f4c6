"""Offline-first sync between the local store and the remote user_data row.

The UI always reads from the local store. Local mutations mark the sync
state dirty and schedule a debounced push. While dirty, only pushes
happen: a pull never overwrites unsynced local changes. While clean, a
session acquisition pulls the remote snapshot (or seeds the remote row
for a user who never synced).

Lifecycle::

    IDLE --mutation--> PUSH_SCHEDULED --debounce--> PUSH_IN_FLIGHT --> IDLE
    IDLE --session (dirty)--> PUSH_IN_FLIGHT --> IDLE
    IDLE --session (clean)--> PULL_IN_FLIGHT --> IDLE
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Callable, Coroutine

from ..clients.base import AuthEvent, AuthSession, AuthSessionProvider, UserDataService
from ..config import DEFAULT_DEBOUNCE_SECONDS
from ..errors import AuthError, FlushError, RemoteServiceError
from ..store.local_store import ChangeOrigin, LocalStore, StoreChange
from ..store.sync_state import SyncStateStore

logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    """What the sync manager is doing right now."""

    IDLE = "idle"
    PULL_IN_FLIGHT = "pull_in_flight"
    PUSH_SCHEDULED = "push_scheduled"
    PUSH_IN_FLIGHT = "push_in_flight"


SESSION_ACQUIRED_EVENTS = (
    AuthEvent.INITIAL_SESSION,
    AuthEvent.SIGNED_IN,
    AuthEvent.TOKEN_REFRESHED,
)


class SyncManager:
    """Decides when to pull, push or flush.

    All state transitions happen on the event loop thread. At most one
    remote call (pull or push) runs at a time; mutations that arrive
    during a push re-dirty the state and schedule another push after it.
    """

    def __init__(
        self,
        store: LocalStore,
        auth: AuthSessionProvider,
        remote: UserDataService,
        sync_state: SyncStateStore,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.store = store
        self.auth = auth
        self.remote = remote
        self.sync_state = sync_state
        self.debounce_seconds = debounce_seconds

        self._lock = asyncio.Lock()
        self._debounce_task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()
        self._in_flight: SyncPhase | None = None
        # Debounced pushes whose timer fired but which wait for the lock.
        self._queued_pushes = 0
        # Bumped on every local mutation; a push only clears the dirty flag
        # if no mutation happened while it was in flight.
        self._generation = 0
        self._unsubscribers: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def phase(self) -> SyncPhase:
        if self._in_flight is not None:
            return self._in_flight
        if self._queued_pushes:
            return SyncPhase.PUSH_SCHEDULED
        if self._debounce_task is not None and not self._debounce_task.done():
            return SyncPhase.PUSH_SCHEDULED
        return SyncPhase.IDLE

    @property
    def is_syncing(self) -> bool:
        return self._in_flight is not None

    @property
    def is_dirty(self) -> bool:
        return self.sync_state.load().is_dirty

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to local store changes and auth session transitions."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.store.subscribe(self._on_store_change),
            self.auth.subscribe(self._on_auth_event),
        ]

    async def close(self) -> None:
        """Stop observing and let running work finish.

        A push that is only scheduled is dropped; the dirty flag keeps the
        intent and the next start pushes it.
        """
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._cancel_scheduled_push()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        """Wait until no push is scheduled and no background sync runs."""
        while True:
            pending = [t for t in self._background if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def _spawn(self, coro: Coroutine, name: str) -> asyncio.Task | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet: the dirty flag is already durable, so the work is
            # picked up by the next sync_now().
            coro.close()
            logger.debug("task_deferred name=%s no running event loop", name)
            return None

        task = loop.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("sync_task_crashed name=%s", task.get_name(), exc_info=error)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_auth_event(self, event: AuthEvent, session: AuthSession | None) -> None:
        if session is None:
            # Losing the session never wipes local data.
            logger.info("session_lost event=%s no local wipe", event.value)
            self._cancel_scheduled_push()
            return
        if event in SESSION_ACQUIRED_EVENTS:
            self._spawn(self.sync_now(reason=event.value), name=f"sync:{event.value}")

    def _on_store_change(self, change: StoreChange) -> None:
        if change.origin is not ChangeOrigin.LOCAL:
            return
        if not self.auth.is_logged_in:
            logger.debug("mark_dirty_ignored kind=%s not logged in", change.kind.value)
            return

        self._generation += 1
        self.sync_state.mark_dirty()
        self._schedule_push()

    def app_did_become_active(self) -> None:
        """Re-run the session reconciliation when the app returns to the foreground."""
        self._spawn(self.sync_now(reason="app_active"), name="sync:app_active")

    # ------------------------------------------------------------------
    # Debounced push
    # ------------------------------------------------------------------

    def _schedule_push(self) -> None:
        self._cancel_scheduled_push()
        self._debounce_task = self._spawn(self._debounced_push(), name="push:debounced")

    def _cancel_scheduled_push(self) -> None:
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None

    async def _debounced_push(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        # From here on the push belongs to this task; new mutations schedule
        # a fresh one instead of cancelling it.
        if self._debounce_task is asyncio.current_task():
            self._debounce_task = None
        await self._push_if_dirty(reason="debounced")

    async def _push_if_dirty(self, reason: str) -> bool:
        self._queued_pushes += 1
        try:
            await self._lock.acquire()
        finally:
            self._queued_pushes -= 1
        try:
            if not self.sync_state.load().is_dirty:
                return True
            try:
                await self._push_locked(reason)
            except RemoteServiceError as e:
                logger.warning("push_failed reason=%s error=%s will retry later", reason, e)
                return False
            return True
        finally:
            self._lock.release()

    async def _push_locked(self, reason: str) -> None:
        """Upsert the current full local state. Caller holds the lock.

        Raises:
            RemoteServiceError: if there is no session or the upsert failed
        """
        session = self.auth.current_session()
        if session is None:
            raise AuthError("Not signed in")

        generation = self._generation
        logger.info(
            "push_start reason=%s trainings=%d bodyweight=%d",
            reason,
            len(self.store.trainings),
            len(self.store.bodyweight_entries),
        )

        self._in_flight = SyncPhase.PUSH_IN_FLIGHT
        try:
            await self.remote.upsert(
                session.user_id,
                self.store.trainings,
                self.store.bodyweight_entries,
                self.store.timer_settings,
            )
        finally:
            self._in_flight = None

        if self._generation == generation:
            self.sync_state.mark_synced()
            logger.info("push_complete reason=%s dirty=false", reason)
        else:
            logger.info("push_complete reason=%s dirty=true changed during push", reason)
            if self._debounce_task is None:
                self._schedule_push()

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def sync_now(self, reason: str = "manual") -> None:
        """Push if dirty, otherwise pull (or seed the remote row).

        Failures are logged and leave local data untouched.
        """
        async with self._lock:
            # Read the session under the lock; a sign-out may have finished
            # while this call waited.
            session = self.auth.current_session()
            if session is None:
                logger.info("sync_aborted reason=%s no session", reason)
                return

            state = self.sync_state.load()
            logger.info("sync_start reason=%s dirty=%s", reason, state.is_dirty)

            if state.is_dirty:
                # Local changes take precedence: push only.
                try:
                    await self._push_locked(f"sync_now:{reason}")
                except RemoteServiceError as e:
                    logger.warning("push_failed reason=%s error=%s will retry later", reason, e)
                return

            await self._pull_locked(session.user_id, reason)

    def _session_matches(self, user_id: str) -> bool:
        session = self.auth.current_session()
        return session is not None and session.user_id == user_id

    async def _pull_locked(self, user_id: str, reason: str) -> None:
        generation = self._generation
        self._in_flight = SyncPhase.PULL_IN_FLIGHT
        try:
            try:
                row = await self.remote.fetch(user_id)
            except RemoteServiceError as e:
                logger.warning("pull_failed reason=%s error=%s", reason, e)
                return

            if not self._session_matches(user_id):
                # Signed out or switched accounts while fetching; the row
                # belongs to someone who no longer owns the local store.
                logger.info("pull_discarded reason=%s session changed", reason)
                return

            if self._generation != generation:
                # A local edit landed while fetching; it wins and is already
                # scheduled for push.
                logger.info("pull_discarded reason=%s local changes arrived", reason)
                return

            if row is None:
                logger.info("pull_complete reason=%s row=absent seeding", reason)
                try:
                    await self.remote.upsert(
                        user_id,
                        self.store.trainings,
                        self.store.bodyweight_entries,
                        self.store.timer_settings,
                    )
                except RemoteServiceError as e:
                    logger.warning("seed_failed reason=%s error=%s", reason, e)
                    return
                self.sync_state.record_sync()
                return

            self.store.apply_remote_snapshot(row.trainings, row.bodyweight, row.timer_settings)
            self.sync_state.record_sync()
            logger.info(
                "pull_complete reason=%s trainings=%d bodyweight=%d",
                reason,
                len(row.trainings),
                len(row.bodyweight),
            )
        finally:
            self._in_flight = None

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold the sync lock so no pull or push runs inside the block.

        Destructive operations flush, sign out and wipe inside one
        exclusive block so a pull that is already running cannot write
        remote data back into a wiped store.
        """
        self._cancel_scheduled_push()
        async with self._lock:
            yield

    async def flush_or_throw(self) -> None:
        """Push pending changes now, or raise.

        Waits for any running pull or push to finish first.

        Raises:
            FlushError: if dirty data could not be confirmed on the server
        """
        async with self.exclusive():
            await self.flush_locked()

    async def flush_locked(self) -> None:
        """Flush while the caller holds :meth:`exclusive`.

        Must succeed before anything wipes local data (logout, account
        deletion). A clean state returns immediately.

        Raises:
            FlushError: if dirty data could not be confirmed on the server
        """
        if not self.sync_state.load().is_dirty:
            logger.info("flush_skipped clean")
            return

        logger.info("flush_start")
        try:
            await self._push_locked("flush")
        except RemoteServiceError as e:
            logger.warning("flush_failed error=%s", e)
            raise FlushError(f"Could not sync pending changes: {e}") from e

        if self.sync_state.load().is_dirty:
            raise FlushError("Local data changed while flushing")
        logger.info("flush_complete")
