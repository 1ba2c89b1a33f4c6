"""fit-sync: offline-first workout tracking with cloud sync."""

__version__ = "0.1.0"
