"""Supabase ``user_data`` table client."""

import logging

from ...errors import AuthError, RemoteServiceError
from ...models.bodyweight import BodyweightEntry
from ...models.settings import TimerSettings
from ...models.training import Training
from ..base import AuthSessionProvider, UserDataRow
from .http import SupabaseHttp, raise_for_status

logger = logging.getLogger(__name__)

TABLE_PATH = "rest/v1/user_data"
SELECT_COLUMNS = "user_id,trainings,bodyweight,timer_settings,updated_at"


class SupabaseUserDataClient:
    """Fetch and upsert the full-snapshot row keyed by user id.

    Rows are only ever read whole or replaced whole; there is no partial
    update.
    """

    def __init__(self, http: SupabaseHttp, auth: AuthSessionProvider):
        self.http = http
        self.auth = auth

    def _token(self) -> str:
        session = self.auth.current_session()
        if session is None:
            raise AuthError("Not signed in")
        return session.access_token

    async def fetch(self, user_id: str) -> UserDataRow | None:
        """Pull the user's row.

        Returns:
            The row, or None when the user has never synced
        """
        response = await self.http.arequest(
            "GET",
            TABLE_PATH,
            token=self._token(),
            params={"select": SELECT_COLUMNS, "user_id": f"eq.{user_id}"},
        )
        raise_for_status(response, "fetch user_data")

        try:
            rows = response.json()
        except ValueError as e:
            raise RemoteServiceError(f"fetch user_data returned invalid JSON: {e}") from e

        if not rows:
            logger.info("fetch_complete user_id=%s row=absent", user_id)
            return None

        try:
            row = UserDataRow.from_dict(rows[0])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise RemoteServiceError(f"fetch user_data returned a malformed row: {e!r}") from e

        logger.info(
            "fetch_complete user_id=%s row=present trainings=%d bodyweight=%d",
            user_id,
            len(row.trainings),
            len(row.bodyweight),
        )
        return row

    async def upsert(
        self,
        user_id: str,
        trainings: list[Training],
        bodyweight: list[BodyweightEntry],
        timer_settings: TimerSettings,
    ) -> None:
        """Replace the user's row with the given snapshot."""
        row = UserDataRow(
            user_id=user_id,
            trainings=trainings,
            bodyweight=bodyweight,
            timer_settings=timer_settings,
        )
        response = await self.http.arequest(
            "POST",
            TABLE_PATH,
            token=self._token(),
            params={"on_conflict": "user_id"},
            json=row.to_dict(),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )
        raise_for_status(response, "upsert user_data")
        logger.info(
            "upsert_complete user_id=%s trainings=%d bodyweight=%d",
            user_id,
            len(trainings),
            len(bodyweight),
        )
