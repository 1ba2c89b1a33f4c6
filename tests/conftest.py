"""Pytest configuration and fixtures."""

import asyncio

import pytest

from fit_sync.clients.base import AuthEvent, AuthSession, UserDataRow
from fit_sync.errors import AuthError, RemoteServiceError
from fit_sync.services.account import AccountService
from fit_sync.services.sync_manager import SyncManager
from fit_sync.store import KeyValueStore, LocalStore, SyncStateStore, get_db_path

TEST_DEBOUNCE = 0.05


class FakeUserDataService:
    """In-memory stand-in for the remote user_data table."""

    def __init__(self):
        self.rows: dict[str, dict] = {}
        self.fetch_calls = 0
        self.upsert_calls = 0
        self.fail = False
        self.fetch_gate: asyncio.Event | None = None
        self.upsert_gate: asyncio.Event | None = None

    async def fetch(self, user_id):
        self.fetch_calls += 1
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fail:
            raise RemoteServiceError("simulated network error")
        data = self.rows.get(user_id)
        return UserDataRow.from_dict(data) if data else None

    async def upsert(self, user_id, trainings, bodyweight, timer_settings):
        self.upsert_calls += 1
        # Serialize at call time, as the real client does before sending.
        payload = UserDataRow(
            user_id=user_id,
            trainings=trainings,
            bodyweight=bodyweight,
            timer_settings=timer_settings,
        ).to_dict()
        if self.upsert_gate is not None:
            await self.upsert_gate.wait()
        if self.fail:
            raise RemoteServiceError("simulated network error")
        self.rows[user_id] = payload


class FakeAuthProvider:
    """Auth provider whose session is set directly by tests."""

    def __init__(self):
        self._session: AuthSession | None = None
        self._listeners = []
        self.delete_fails = False
        self.deleted = False

    def current_session(self):
        return self._session

    @property
    def is_logged_in(self):
        return self._session is not None

    def subscribe(self, listener):
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self, event):
        for listener in list(self._listeners):
            listener(event, self._session)

    def restore(self, user_id: str | None):
        self._session = AuthSession(user_id=user_id, access_token="token") if user_id else None
        self._emit(AuthEvent.INITIAL_SESSION)

    def sign_in(self, user_id: str = "user-1"):
        self._session = AuthSession(user_id=user_id, access_token="token")
        self._emit(AuthEvent.SIGNED_IN)

    async def sign_out(self):
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT)

    async def delete_account(self):
        if self.delete_fails:
            raise AuthError("delete account failed (HTTP 400)", status_code=400)
        self.deleted = True
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT)


@pytest.fixture
def data_dir(tmp_path):
    """Temporary data directory."""
    return tmp_path / "data"


@pytest.fixture
def kv(data_dir):
    data_dir.mkdir(parents=True, exist_ok=True)
    return KeyValueStore(get_db_path(data_dir))


@pytest.fixture
def store(data_dir, kv):
    local = LocalStore(data_dir, kv=kv)
    local.load()
    return local


@pytest.fixture
def sync_state(kv):
    return SyncStateStore(kv)


@pytest.fixture
def remote():
    return FakeUserDataService()


@pytest.fixture
def auth():
    return FakeAuthProvider()


@pytest.fixture
def manager(store, auth, remote, sync_state):
    sync = SyncManager(store, auth, remote, sync_state, debounce_seconds=TEST_DEBOUNCE)
    sync.start()
    return sync


@pytest.fixture
def account(store, auth, manager, sync_state):
    return AccountService(store, auth, manager, sync_state)


@pytest.fixture
def push_training(store):
    """Build the "Push" training with a Bench exercise and two sets."""

    def build():
        training = store.add_training("Push")
        bench = store.add_exercise(training.id, "Bench")
        first = store.add_set(training.id, bench.id, weight_kg=60, reps=8)
        store.toggle_set_done(training.id, bench.id, first.id)
        second = store.add_set(training.id, bench.id, weight_kg=70, reps=6)
        return training, bench, first, second

    return build
