"""Rest timer settings model."""

from dataclasses import dataclass

DEFAULT_REST_SECONDS = 90
MAX_REST_SECONDS = 60 * 30


def clamp_rest_seconds(seconds: int) -> int:
    """Clamp a rest duration to 0s ... 30min."""
    return max(0, min(int(seconds), MAX_REST_SECONDS))


@dataclass(frozen=True)
class TimerSettings:
    """Rest timer preferences synced alongside the training data."""

    rest_timer_enabled: bool = True
    rest_timer_seconds: int = DEFAULT_REST_SECONDS

    def __post_init__(self):
        object.__setattr__(
            self, "rest_timer_seconds", clamp_rest_seconds(self.rest_timer_seconds)
        )

    def to_dict(self) -> dict:
        return {
            "enabled": self.rest_timer_enabled,
            "seconds": self.rest_timer_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "TimerSettings":
        """Create from dictionary.

        A stored duration of 0 means "never set" and reads back as the
        default.
        """
        if not data:
            return cls()
        seconds = data.get("seconds") or DEFAULT_REST_SECONDS
        return cls(
            rest_timer_enabled=bool(data.get("enabled", True)),
            rest_timer_seconds=seconds,
        )
