"""Base protocols for the remote backend."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Protocol, runtime_checkable

from ..models.bodyweight import BodyweightEntry
from ..models.settings import TimerSettings
from ..models.timestamps import format_timestamp, parse_timestamp, utcnow
from ..models.training import Training


@dataclass
class UserDataRow:
    """Full snapshot of one user's data as stored remotely."""

    user_id: str
    trainings: list[Training] = field(default_factory=list)
    bodyweight: list[BodyweightEntry] = field(default_factory=list)
    timer_settings: TimerSettings | None = None  # None for rows written without settings
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to the upsert payload."""
        data = {
            "user_id": self.user_id,
            "trainings": [t.to_dict() for t in self.trainings],
            "bodyweight": [b.to_dict() for b in self.bodyweight],
            "updated_at": format_timestamp(self.updated_at or utcnow()),
        }
        if self.timer_settings is not None:
            data["timer_settings"] = self.timer_settings.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "UserDataRow":
        settings = data.get("timer_settings")
        updated_at = data.get("updated_at")
        return cls(
            user_id=str(data["user_id"]),
            trainings=[Training.from_dict(t) for t in data.get("trainings") or []],
            bodyweight=[BodyweightEntry.from_dict(b) for b in data.get("bodyweight") or []],
            timer_settings=TimerSettings.from_dict(settings) if settings else None,
            updated_at=parse_timestamp(updated_at) if updated_at else None,
        )


@dataclass(frozen=True)
class AuthSession:
    """An authenticated identity issued by the identity provider."""

    user_id: str
    access_token: str
    refresh_token: str = ""
    expires_at: datetime | None = None
    email: str = ""

    def is_expired(self, leeway: timedelta = timedelta(seconds=30)) -> bool:
        if self.expires_at is None:
            return False
        return utcnow() + leeway >= self.expires_at

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": format_timestamp(self.expires_at) if self.expires_at else None,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuthSession":
        expires_at = data.get("expires_at")
        return cls(
            user_id=str(data["user_id"]),
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or "",
            expires_at=parse_timestamp(expires_at) if expires_at else None,
            email=data.get("email") or "",
        )


class AuthEvent(str, Enum):
    """Session transitions emitted by the auth provider."""

    INITIAL_SESSION = "initial_session"
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    TOKEN_REFRESHED = "token_refreshed"


AuthListener = Callable[[AuthEvent, AuthSession | None], None]


@runtime_checkable
class UserDataService(Protocol):
    """Read and write the single snapshot row for a user."""

    async def fetch(self, user_id: str) -> UserDataRow | None:
        """Return the user's row, or None if the user never synced.

        Raises:
            RemoteServiceError: on any network or server failure
        """
        ...

    async def upsert(
        self,
        user_id: str,
        trainings: list[Training],
        bodyweight: list[BodyweightEntry],
        timer_settings: TimerSettings,
    ) -> None:
        """Replace the user's row with the given snapshot. Safe to retry.

        Raises:
            RemoteServiceError: on any network or server failure
        """
        ...


@runtime_checkable
class AuthSessionProvider(Protocol):
    """Current identity plus a stream of session transitions."""

    def current_session(self) -> AuthSession | None:
        ...

    @property
    def is_logged_in(self) -> bool:
        ...

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a session listener. Returns a function that removes it."""
        ...

    async def sign_out(self) -> None:
        ...

    async def delete_account(self) -> None:
        ...
