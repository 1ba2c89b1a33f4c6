"""CLI commands for fit-sync."""

from .account import account
from .bodyweight import bodyweight, timer
from .exercises import exercises, sets
from .init import init
from .session import history, session, stats
from .sync import sync
from .trainings import trainings

__all__ = [
    "account",
    "bodyweight",
    "exercises",
    "history",
    "init",
    "session",
    "sets",
    "stats",
    "sync",
    "timer",
    "trainings",
]
