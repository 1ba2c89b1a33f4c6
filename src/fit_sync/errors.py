"""Exception types raised by fit-sync."""


class FitSyncError(Exception):
    """Base class for fit-sync errors."""


class ConfigError(FitSyncError):
    """Required configuration is missing or invalid."""


class RemoteServiceError(FitSyncError):
    """A call to the remote backend failed.

    Recoverable: background sync keeps local state dirty and retries on
    the next trigger.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_network_error(self) -> bool:
        """True when the server was never reached."""
        return self.status_code is None


class AuthError(RemoteServiceError):
    """The identity provider rejected a request."""


class FlushError(FitSyncError):
    """Pending local changes could not be pushed before a destructive action."""
