"""Training, exercise and workout session models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from .timestamps import format_timestamp, parse_timestamp, utcnow


def new_id() -> str:
    """Generate a stable unique identifier for a new entity."""
    return str(uuid4())


@dataclass
class Repetition:
    """Number of reps performed in a set."""

    value: int = 0

    def __post_init__(self):
        self.value = max(0, int(self.value))

    @classmethod
    def from_value(cls, data: Any) -> "Repetition":
        """Decode either ``{"value": n}`` or a bare integer."""
        if isinstance(data, dict):
            return cls(data.get("value", 0) or 0)
        if data is None:
            return cls()
        return cls(data)


@dataclass
class SetEntry:
    """A single set of an exercise."""

    weight_kg: float = 0.0
    repetition: Repetition = field(default_factory=Repetition)
    is_done: bool = False
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        self.weight_kg = max(0.0, float(self.weight_kg))

    @property
    def volume(self) -> float:
        """Moved weight for this set (weight x reps)."""
        return self.weight_kg * self.repetition.value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "weightKg": self.weight_kg,
            "repetition": {"value": self.repetition.value},
            "isDone": self.is_done,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SetEntry":
        """Create from dictionary, defaulting fields older files lack."""
        return cls(
            id=data.get("id") or new_id(),
            weight_kg=data.get("weightKg", 0.0) or 0.0,
            repetition=Repetition.from_value(data.get("repetition")),
            is_done=bool(data.get("isDone", False)),
        )


@dataclass
class Exercise:
    """An exercise within a training, with its ordered sets."""

    name: str
    sets: list[SetEntry] = field(default_factory=list)
    notes: str = ""
    id: str = field(default_factory=new_id)

    def find_set(self, set_id: str) -> SetEntry | None:
        for set_entry in self.sets:
            if set_entry.id == set_id:
                return set_entry
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        return cls(
            id=data.get("id") or new_id(),
            name=data.get("name", ""),
            sets=[SetEntry.from_dict(s) for s in data.get("sets") or []],
            notes=data.get("notes") or "",
        )


@dataclass(frozen=True)
class SessionSetSnapshot:
    """Copy of a set as it was when a session ended."""

    original_set_id: str
    weight_kg: float
    repetition: Repetition
    is_done: bool
    id: str = field(default_factory=new_id)

    @classmethod
    def capture(cls, set_entry: SetEntry) -> "SessionSetSnapshot":
        return cls(
            original_set_id=set_entry.id,
            weight_kg=set_entry.weight_kg,
            repetition=Repetition(set_entry.repetition.value),
            is_done=set_entry.is_done,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "originalSetID": self.original_set_id,
            "weightKg": self.weight_kg,
            "repetition": {"value": self.repetition.value},
            "isDone": self.is_done,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionSetSnapshot":
        return cls(
            id=data.get("id") or new_id(),
            original_set_id=data.get("originalSetID") or "",
            weight_kg=max(0.0, float(data.get("weightKg", 0.0) or 0.0)),
            repetition=Repetition.from_value(data.get("repetition")),
            is_done=bool(data.get("isDone", False)),
        )


@dataclass(frozen=True)
class SessionExerciseSnapshot:
    """Copy of an exercise as it was when a session ended."""

    original_exercise_id: str
    name: str
    sets: tuple[SessionSetSnapshot, ...] = ()
    notes: str = ""
    id: str = field(default_factory=new_id)

    @classmethod
    def capture(cls, exercise: Exercise) -> "SessionExerciseSnapshot":
        return cls(
            original_exercise_id=exercise.id,
            name=exercise.name,
            sets=tuple(SessionSetSnapshot.capture(s) for s in exercise.sets),
            notes=exercise.notes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "originalExerciseID": self.original_exercise_id,
            "name": self.name,
            "sets": [s.to_dict() for s in self.sets],
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionExerciseSnapshot":
        return cls(
            id=data.get("id") or new_id(),
            original_exercise_id=data.get("originalExerciseID") or "",
            name=data.get("name", ""),
            sets=tuple(SessionSetSnapshot.from_dict(s) for s in data.get("sets") or []),
            notes=data.get("notes") or "",
        )


@dataclass(frozen=True)
class WorkoutSession:
    """Immutable record of a finished workout.

    Sessions are only created when a session ends and are the system of
    record for progress history. ``max_weight_per_exercise`` is keyed by
    the id of the live exercise the snapshot was taken from.
    """

    started_at: datetime
    ended_at: datetime
    max_weight_per_exercise: dict[str, float] = field(default_factory=dict)
    exercises: tuple[SessionExerciseSnapshot, ...] = ()
    id: str = field(default_factory=new_id)

    @property
    def duration(self) -> float:
        """Session length in seconds."""
        return max(0.0, (self.ended_at - self.started_at).total_seconds())

    def max_weight_for(self, exercise_name: str) -> float | None:
        """Look up the recorded max weight by exercise name."""
        for snapshot in self.exercises:
            if snapshot.name == exercise_name:
                return self.max_weight_per_exercise.get(snapshot.original_exercise_id)
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "startedAt": format_timestamp(self.started_at),
            "endedAt": format_timestamp(self.ended_at),
            "maxWeightPerExercise": dict(self.max_weight_per_exercise),
            "exercises": [e.to_dict() for e in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSession":
        """Create from dictionary.

        Sessions written before ``startedAt`` existed fall back to
        ``endedAt`` so their duration reads as zero.
        """
        ended_at = parse_timestamp(data["endedAt"])
        started_raw = data.get("startedAt")
        started_at = parse_timestamp(started_raw) if started_raw is not None else ended_at

        max_weights = {
            str(key): float(value)
            for key, value in (data.get("maxWeightPerExercise") or {}).items()
        }

        return cls(
            id=data.get("id") or new_id(),
            started_at=started_at,
            ended_at=ended_at,
            max_weight_per_exercise=max_weights,
            exercises=tuple(
                SessionExerciseSnapshot.from_dict(e) for e in data.get("exercises") or []
            ),
        )


@dataclass
class Training:
    """A workout plan: ordered exercises plus its session history."""

    title: str
    date: datetime = field(default_factory=utcnow)
    exercises: list[Exercise] = field(default_factory=list)
    sessions: list[WorkoutSession] = field(default_factory=list)  # newest first
    current_session_start: datetime | None = None
    id: str = field(default_factory=new_id)

    @property
    def is_session_active(self) -> bool:
        return self.current_session_start is not None

    def find_exercise(self, exercise_id: str) -> Exercise | None:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "date": format_timestamp(self.date),
            "exercises": [e.to_dict() for e in self.exercises],
            "sessions": [s.to_dict() for s in self.sessions],
            "currentSessionStart": (
                format_timestamp(self.current_session_start)
                if self.current_session_start
                else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Training":
        date_raw = data.get("date")
        start_raw = data.get("currentSessionStart")

        return cls(
            id=data.get("id") or new_id(),
            title=data.get("title", ""),
            date=parse_timestamp(date_raw) if date_raw is not None else utcnow(),
            exercises=[Exercise.from_dict(e) for e in data.get("exercises") or []],
            sessions=[WorkoutSession.from_dict(s) for s in data.get("sessions") or []],
            current_session_start=parse_timestamp(start_raw) if start_raw is not None else None,
        )
