"""Bodyweight log model."""

from dataclasses import dataclass, field
from datetime import datetime

from .timestamps import format_timestamp, parse_timestamp, utcnow


@dataclass(frozen=True)
class BodyweightEntry:
    """A single bodyweight measurement.

    Entries form an append-only log; date and value are all the identity
    they need.
    """

    weight_kg: float
    date: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "date": format_timestamp(self.date),
            "weightKg": self.weight_kg,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BodyweightEntry":
        return cls(
            date=parse_timestamp(data["date"]),
            weight_kg=float(data["weightKg"]),
        )
