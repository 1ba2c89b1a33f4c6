"""Tests for the Supabase HTTP clients against a canned requests session."""

from datetime import timedelta

import pytest
import requests

from fit_sync.clients.base import AuthEvent, AuthSession
from fit_sync.clients.supabase import SupabaseAuthProvider, SupabaseHttp, SupabaseUserDataClient
from fit_sync.clients.supabase.auth import SESSION_KEY
from fit_sync.errors import AuthError, RemoteServiceError
from fit_sync.models.settings import TimerSettings
from fit_sync.models.timestamps import utcnow
from fit_sync.models.training import Training

BASE_URL = "https://project.supabase.co"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    """Records requests and replays queued responses or errors."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_http(*responses):
    session = FakeSession(*responses)
    return SupabaseHttp(BASE_URL, "anon-key", timeout=5, session=session), session


def token_payload(user_id="user-1", expires_in=3600):
    return {
        "access_token": "access",
        "refresh_token": "refresh",
        "expires_in": expires_in,
        "user": {"id": user_id, "email": "lifter@example.com"},
    }


class StaticAuth:
    def __init__(self, session):
        self._session = session

    def current_session(self):
        return self._session


SIGNED_IN = StaticAuth(AuthSession(user_id="user-1", access_token="access"))


class TestUserDataClient:
    """Tests for fetch and upsert."""

    @pytest.mark.asyncio
    async def test_fetch_absent_row(self):
        http, session = make_http(FakeResponse(200, []))
        client = SupabaseUserDataClient(http, SIGNED_IN)

        assert await client.fetch("user-1") is None

        sent = session.requests[0]
        assert sent["method"] == "GET"
        assert sent["url"] == f"{BASE_URL}/rest/v1/user_data"
        assert sent["params"]["user_id"] == "eq.user-1"
        assert sent["headers"]["Authorization"] == "Bearer access"
        assert sent["headers"]["apikey"] == "anon-key"

    @pytest.mark.asyncio
    async def test_fetch_decodes_row(self):
        row = {
            "user_id": "user-1",
            "trainings": [{"id": "t1", "title": "Push", "date": "2025-09-01T00:00:00Z"}],
            "bodyweight": [],
            "timer_settings": {"enabled": False, "seconds": 60},
            "updated_at": "2025-09-01T10:00:00Z",
        }
        http, _ = make_http(FakeResponse(200, [row]))
        client = SupabaseUserDataClient(http, SIGNED_IN)

        fetched = await client.fetch("user-1")

        assert fetched.trainings[0].id == "t1"
        assert fetched.timer_settings == TimerSettings(False, 60)

    @pytest.mark.asyncio
    async def test_fetch_server_error(self):
        http, _ = make_http(FakeResponse(500, text="boom"))
        client = SupabaseUserDataClient(http, SIGNED_IN)

        with pytest.raises(RemoteServiceError) as exc_info:
            await client.fetch("user-1")
        assert exc_info.value.status_code == 500
        assert not exc_info.value.is_network_error

    @pytest.mark.asyncio
    async def test_fetch_network_error(self):
        http, _ = make_http(requests.ConnectionError("offline"))
        client = SupabaseUserDataClient(http, SIGNED_IN)

        with pytest.raises(RemoteServiceError) as exc_info:
            await client.fetch("user-1")
        assert exc_info.value.is_network_error

    @pytest.mark.asyncio
    async def test_fetch_requires_session(self):
        http, session = make_http()
        client = SupabaseUserDataClient(http, StaticAuth(None))

        with pytest.raises(AuthError):
            await client.fetch("user-1")
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_upsert_sends_full_snapshot(self):
        http, session = make_http(FakeResponse(201))
        client = SupabaseUserDataClient(http, SIGNED_IN)

        await client.upsert("user-1", [Training(title="Push")], [], TimerSettings())

        sent = session.requests[0]
        assert sent["method"] == "POST"
        assert sent["params"] == {"on_conflict": "user_id"}
        assert sent["headers"]["Prefer"] == "resolution=merge-duplicates,return=minimal"
        assert sent["json"]["user_id"] == "user-1"
        assert sent["json"]["trainings"][0]["title"] == "Push"
        assert sent["json"]["timer_settings"] == {"enabled": True, "seconds": 90}

    @pytest.mark.asyncio
    async def test_unauthorized_upsert_is_auth_error(self):
        http, _ = make_http(FakeResponse(401, text="JWT expired"))
        client = SupabaseUserDataClient(http, SIGNED_IN)

        with pytest.raises(AuthError):
            await client.upsert("user-1", [], [], TimerSettings())


class TestAuthProvider:
    """Tests for session restore, sign in and sign out."""

    def cache_session(self, kv, expired):
        expires_at = utcnow() + (timedelta(hours=-1) if expired else timedelta(hours=1))
        session = AuthSession(
            user_id="user-1",
            access_token="old",
            refresh_token="refresh",
            expires_at=expires_at,
        )
        kv.set(SESSION_KEY, session.to_dict())
        return session

    def record_events(self, provider):
        events = []
        provider.subscribe(lambda event, session: events.append((event, session)))
        return events

    @pytest.mark.asyncio
    async def test_restore_offline_keeps_expired_session(self, kv):
        self.cache_session(kv, expired=True)
        http, _ = make_http(requests.ConnectionError("offline"))
        provider = SupabaseAuthProvider(http, kv)
        events = self.record_events(provider)

        session = await provider.restore_session()

        assert session.access_token == "old"
        assert provider.is_logged_in
        assert [e for e, _ in events] == [AuthEvent.INITIAL_SESSION]

    @pytest.mark.asyncio
    async def test_restore_refreshes_expired_session(self, kv):
        self.cache_session(kv, expired=True)
        http, session = make_http(FakeResponse(200, token_payload()))
        provider = SupabaseAuthProvider(http, kv)

        restored = await provider.restore_session()

        assert restored.access_token == "access"
        assert session.requests[0]["params"] == {"grant_type": "refresh_token"}
        assert kv.get(SESSION_KEY)["access_token"] == "access"

    @pytest.mark.asyncio
    async def test_restore_rejected_refresh_clears_session(self, kv):
        self.cache_session(kv, expired=True)
        http, _ = make_http(FakeResponse(400, text="invalid refresh token"))
        provider = SupabaseAuthProvider(http, kv)
        events = self.record_events(provider)

        assert await provider.restore_session() is None
        assert events == [(AuthEvent.INITIAL_SESSION, None)]
        assert kv.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_restore_valid_session_skips_network(self, kv):
        self.cache_session(kv, expired=False)
        http, session = make_http()
        provider = SupabaseAuthProvider(http, kv)

        assert (await provider.restore_session()).access_token == "old"
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_sign_in_with_password(self, kv):
        http, session = make_http(FakeResponse(200, token_payload()))
        provider = SupabaseAuthProvider(http, kv)
        events = self.record_events(provider)

        await provider.sign_in_with_password("lifter@example.com", "secret")

        assert provider.user_email == "lifter@example.com"
        assert events[0][0] is AuthEvent.SIGNED_IN
        assert session.requests[0]["json"] == {
            "email": "lifter@example.com",
            "password": "secret",
        }

    @pytest.mark.asyncio
    async def test_bad_credentials(self, kv):
        http, _ = make_http(FakeResponse(400, text="Invalid login credentials"))
        provider = SupabaseAuthProvider(http, kv)

        with pytest.raises(AuthError):
            await provider.sign_in_with_password("lifter@example.com", "wrong")
        assert not provider.is_logged_in

    @pytest.mark.asyncio
    async def test_sign_out_clears_even_when_offline(self, kv):
        http, _ = make_http(
            FakeResponse(200, token_payload()), requests.ConnectionError("offline")
        )
        provider = SupabaseAuthProvider(http, kv)
        await provider.sign_in_with_password("lifter@example.com", "secret")
        events = self.record_events(provider)

        await provider.sign_out()

        assert not provider.is_logged_in
        assert events == [(AuthEvent.SIGNED_OUT, None)]
        assert kv.get(SESSION_KEY) is None

    @pytest.mark.asyncio
    async def test_delete_account_rejected_keeps_session(self, kv):
        http, session = make_http(
            FakeResponse(200, token_payload()), FakeResponse(400, text="nope")
        )
        provider = SupabaseAuthProvider(http, kv)
        await provider.sign_in_with_password("lifter@example.com", "secret")

        with pytest.raises(AuthError):
            await provider.delete_account()

        assert provider.is_logged_in
        assert session.requests[1]["url"] == f"{BASE_URL}/functions/v1/delete-account"

    @pytest.mark.asyncio
    async def test_delete_account(self, kv):
        http, _ = make_http(FakeResponse(200, token_payload()), FakeResponse(204))
        provider = SupabaseAuthProvider(http, kv)
        await provider.sign_in_with_password("lifter@example.com", "secret")

        await provider.delete_account()

        assert not provider.is_logged_in
