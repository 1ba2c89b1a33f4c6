"""Supabase (GoTrue) auth session provider."""

import logging
from datetime import timedelta
from typing import Any, Callable

from ...errors import AuthError, RemoteServiceError
from ...models.timestamps import parse_timestamp, utcnow
from ...store.kv import KeyValueStore
from ..base import AuthEvent, AuthListener, AuthSession
from .http import SupabaseHttp, raise_for_status

logger = logging.getLogger(__name__)

SESSION_KEY = "authSession"
DELETE_ACCOUNT_FUNCTION = "functions/v1/delete-account"
REJECTED_STATUSES = (400, 401, 403)


def parse_token_response(data: dict[str, Any]) -> AuthSession:
    """Build an AuthSession from a GoTrue token response."""
    try:
        user = data["user"]
        expires_at = None
        if data.get("expires_at"):
            expires_at = parse_timestamp(data["expires_at"])
        elif data.get("expires_in"):
            expires_at = utcnow() + timedelta(seconds=int(data["expires_in"]))

        return AuthSession(
            user_id=str(user["id"]),
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            expires_at=expires_at,
            email=user.get("email") or "",
        )
    except (KeyError, TypeError, ValueError) as e:
        raise AuthError(f"Malformed token response: {e!r}") from e


class SupabaseAuthProvider:
    """Holds the current session and broadcasts session transitions.

    The session is cached in the key-value store so a restart can restore
    it without the network. Failing to reach the server never signs the
    user out; only an explicit rejection does.
    """

    def __init__(self, http: SupabaseHttp, kv: KeyValueStore):
        self.http = http
        self.kv = kv
        self._session: AuthSession | None = None
        self._listeners: list[AuthListener] = []

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def current_session(self) -> AuthSession | None:
        return self._session

    @property
    def is_logged_in(self) -> bool:
        return self._session is not None

    @property
    def user_email(self) -> str:
        return self._session.email if self._session else ""

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent) -> None:
        logger.info("auth_event event=%s logged_in=%s", event.value, self.is_logged_in)
        for listener in list(self._listeners):
            listener(event, self._session)

    def _set_session(self, session: AuthSession | None, event: AuthEvent) -> None:
        self._session = session
        if session is None:
            self.kv.delete(SESSION_KEY)
        else:
            self.kv.set(SESSION_KEY, session.to_dict())
        self._emit(event)

    def _load_cached(self) -> AuthSession | None:
        data = self.kv.get(SESSION_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return AuthSession.from_dict(data)
        except (KeyError, TypeError, ValueError):
            logger.warning("cached_session_unreadable")
            return None

    # ------------------------------------------------------------------
    # Restore / refresh
    # ------------------------------------------------------------------

    async def restore_session(self) -> AuthSession | None:
        """Restore the cached session and emit INITIAL_SESSION.

        The event fires exactly once per call, offline or not. An expired
        token is refreshed when possible; if the server cannot be reached
        the cached session is kept as is.
        """
        session = self._load_cached()

        if session is not None and session.is_expired() and session.refresh_token:
            try:
                session = await self._request_token(
                    "refresh_token", {"refresh_token": session.refresh_token}
                )
            except RemoteServiceError as e:
                if e.status_code in REJECTED_STATUSES:
                    logger.info("session_rejected status=%s", e.status_code)
                    session = None
                else:
                    # Offline or server trouble: keep the cached session.
                    logger.info("session_refresh_skipped error=%s", e)

        self._set_session(session, AuthEvent.INITIAL_SESSION)
        return session

    async def refresh_session(self) -> AuthSession:
        """Exchange the refresh token for a new access token."""
        if self._session is None or not self._session.refresh_token:
            raise AuthError("No session to refresh")
        session = await self._request_token(
            "refresh_token", {"refresh_token": self._session.refresh_token}
        )
        self._set_session(session, AuthEvent.TOKEN_REFRESHED)
        return session

    # ------------------------------------------------------------------
    # Sign in / out
    # ------------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        session = await self._request_token("password", {"email": email, "password": password})
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_in_with_id_token(
        self, provider: str, id_token: str, nonce: str | None = None
    ) -> AuthSession:
        """Sign in with an identity token from an external provider (e.g. Apple)."""
        payload = {"provider": provider, "id_token": id_token}
        if nonce:
            payload["nonce"] = nonce
        session = await self._request_token("id_token", payload)
        self._set_session(session, AuthEvent.SIGNED_IN)
        return session

    async def sign_out(self) -> None:
        """End the session.

        The remote logout is best effort; the local session is cleared
        even when the server cannot be reached.
        """
        if self._session is not None:
            try:
                response = await self.http.arequest(
                    "POST", "auth/v1/logout", token=self._session.access_token
                )
                raise_for_status(response, "logout")
            except RemoteServiceError as e:
                logger.info("remote_logout_failed error=%s", e)

        self._set_session(None, AuthEvent.SIGNED_OUT)

    async def delete_account(self) -> None:
        """Delete the backend identity, then clear the local session.

        Raises:
            AuthError: if not signed in or the server refused the deletion
        """
        if self._session is None:
            raise AuthError("Not signed in")

        response = await self.http.arequest(
            "POST", DELETE_ACCOUNT_FUNCTION, token=self._session.access_token
        )
        raise_for_status(response, "delete account", auth=True)

        logger.info("account_deleted user_id=%s", self._session.user_id)
        self._set_session(None, AuthEvent.SIGNED_OUT)

    async def _request_token(self, grant_type: str, payload: dict[str, Any]) -> AuthSession:
        response = await self.http.arequest(
            "POST",
            "auth/v1/token",
            params={"grant_type": grant_type},
            json=payload,
        )
        raise_for_status(response, f"token ({grant_type})", auth=True)
        try:
            data = response.json()
        except ValueError as e:
            raise AuthError(f"Token response was not JSON: {e}") from e
        return parse_token_response(data)
