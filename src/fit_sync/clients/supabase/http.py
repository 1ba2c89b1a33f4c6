"""Thin HTTP layer shared by the Supabase clients."""

import asyncio
import logging
from typing import Any

import requests

from ...config import Settings
from ...errors import AuthError, RemoteServiceError

logger = logging.getLogger(__name__)


class SupabaseHttp:
    """Blocking ``requests`` calls against one Supabase project, run off the event loop."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseHttp":
        settings.require_remote()
        return cls(
            base_url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            timeout=settings.http_timeout,
        )

    def _headers(self, token: str | None, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Send a request, mapping transport failures to RemoteServiceError.

        HTTP error statuses are returned to the caller unchanged.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            return self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(token, headers),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.info("http_unreachable method=%s path=%s error=%s", method, path, e)
            raise RemoteServiceError(f"{method} {path} failed: {e}") from e

    async def arequest(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Async variant of request() that runs in a worker thread."""
        return await asyncio.to_thread(self.request, method, path, **kwargs)


def raise_for_status(response: requests.Response, what: str, auth: bool = False) -> None:
    """Raise RemoteServiceError (or AuthError) for a non-2xx response."""
    if 200 <= response.status_code < 300:
        return

    body = response.text[:500] if response.text else "<no body>"
    message = f"{what} failed (HTTP {response.status_code}): {body}"
    if auth or response.status_code in (401, 403):
        raise AuthError(message, status_code=response.status_code)
    raise RemoteServiceError(message, status_code=response.status_code)
