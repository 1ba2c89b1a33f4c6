"""Local persisted store of trainings, bodyweight entries and timer settings."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, TypeVar

from ..models.bodyweight import BodyweightEntry
from ..models.settings import TimerSettings
from ..models.statistics import TrainingStatistics
from ..models.timestamps import utcnow
from ..models.training import (
    Exercise,
    Repetition,
    SessionExerciseSnapshot,
    SetEntry,
    Training,
    WorkoutSession,
)
from .engine import (
    BODYWEIGHT_FILE,
    TRAININGS_FILE,
    get_data_dir,
    get_db_path,
    read_json,
    write_json_atomic,
)
from .kv import KeyValueStore

logger = logging.getLogger(__name__)

TIMER_SETTINGS_KEY = "timerSettings"

T = TypeVar("T")


class ChangeKind(str, Enum):
    """Which part of the store changed."""

    TRAININGS = "trainings"
    BODYWEIGHT = "bodyweight"
    SETTINGS = "settings"


class ChangeOrigin(str, Enum):
    """Where a change came from."""

    LOCAL = "local"  # user action, owes the server a push
    REMOTE = "remote"  # snapshot pulled from the server
    RESET = "reset"  # local wipe after logout or account deletion


@dataclass(frozen=True)
class StoreChange:
    """Notification sent to store subscribers after a write."""

    kind: ChangeKind
    origin: ChangeOrigin


StoreListener = Callable[[StoreChange], None]


def _move(items: list[T], index: int, to_index: int) -> None:
    item = items.pop(index)
    to_index = max(0, min(to_index, len(items)))
    items.insert(to_index, item)


def _index_of(items: list, item_id: str) -> int | None:
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    return None


class LocalStore:
    """Canonical in-process copy of the user's workout data.

    Every mutation updates memory, notifies subscribers and then writes
    the full state to disk. Operations that name an unknown id do nothing.
    The store is not thread-safe; callers mutate it from one thread.
    """

    def __init__(self, data_dir: Path | None = None, kv: KeyValueStore | None = None):
        self.data_dir = get_data_dir(data_dir)
        self.trainings_path = self.data_dir / TRAININGS_FILE
        self.bodyweight_path = self.data_dir / BODYWEIGHT_FILE
        self.kv = kv or KeyValueStore(get_db_path(self.data_dir))

        self.trainings: list[Training] = []
        self.bodyweight_entries: list[BodyweightEntry] = []  # newest first
        self.timer_settings = TimerSettings()

        self._listeners: list[StoreListener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: ChangeKind, origin: ChangeOrigin) -> None:
        change = StoreChange(kind=kind, origin=origin)
        for listener in list(self._listeners):
            listener(change)

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load state from disk.

        Missing or unreadable files load as empty state. Individual records
        that cannot be decoded are skipped.
        """
        self.trainings = self._load_entities(self.trainings_path, Training.from_dict)
        self.bodyweight_entries = self._load_entities(
            self.bodyweight_path, BodyweightEntry.from_dict
        )

        settings = self.kv.get(TIMER_SETTINGS_KEY)
        self.timer_settings = TimerSettings.from_dict(
            settings if isinstance(settings, dict) else None
        )

        logger.info(
            "store_loaded trainings=%d bodyweight=%d",
            len(self.trainings),
            len(self.bodyweight_entries),
        )

    def _load_entities(self, path: Path, decode: Callable[[dict], T]) -> list[T]:
        try:
            raw = read_json(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("load_failed path=%s error=%s", path.name, e)
            return []

        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("load_failed path=%s error=expected a list", path.name)
            return []

        entities = []
        for index, item in enumerate(raw):
            try:
                entities.append(decode(item))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(
                    "record_skipped path=%s index=%d error=%r", path.name, index, e
                )
        return entities

    def _write(self, path: Path, payload: list) -> None:
        # In-memory state stays authoritative if the disk write fails; the
        # next mutation writes the full state again.
        try:
            write_json_atomic(path, payload)
        except OSError:
            logger.exception("save_failed path=%s", path.name)

    # Subscribers hear about a change before it reaches disk, so the sync
    # state is dirty before any unsynced edit can be persisted.
    def _commit_trainings(self, origin: ChangeOrigin = ChangeOrigin.LOCAL) -> None:
        self._notify(ChangeKind.TRAININGS, origin)
        self._write(self.trainings_path, [t.to_dict() for t in self.trainings])

    def _commit_bodyweight(self, origin: ChangeOrigin = ChangeOrigin.LOCAL) -> None:
        self._notify(ChangeKind.BODYWEIGHT, origin)
        self._write(self.bodyweight_path, [b.to_dict() for b in self.bodyweight_entries])

    def _commit_settings(self, origin: ChangeOrigin = ChangeOrigin.LOCAL) -> None:
        self._notify(ChangeKind.SETTINGS, origin)
        self.kv.set(TIMER_SETTINGS_KEY, self.timer_settings.to_dict())

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_training(self, training_id: str) -> Training | None:
        index = _index_of(self.trainings, training_id)
        return self.trainings[index] if index is not None else None

    def _get_exercise(self, training_id: str, exercise_id: str) -> Exercise | None:
        training = self.get_training(training_id)
        if training is None:
            return None
        return training.find_exercise(exercise_id)

    def _get_set(self, training_id: str, exercise_id: str, set_id: str) -> SetEntry | None:
        exercise = self._get_exercise(training_id, exercise_id)
        if exercise is None:
            return None
        return exercise.find_set(set_id)

    # ------------------------------------------------------------------
    # Trainings
    # ------------------------------------------------------------------

    def add_training(self, title: str) -> Training:
        """Create a training and insert it at the top of the list."""
        training = Training(title=title)
        self.trainings.insert(0, training)
        self._commit_trainings()
        return training

    def rename_training(self, training_id: str, title: str) -> None:
        training = self.get_training(training_id)
        if training is None:
            return
        training.title = title
        self._commit_trainings()

    def move_training(self, training_id: str, to_index: int) -> None:
        index = _index_of(self.trainings, training_id)
        if index is None:
            return
        _move(self.trainings, index, to_index)
        self._commit_trainings()

    def delete_training(self, training_id: str) -> None:
        index = _index_of(self.trainings, training_id)
        if index is None:
            return
        del self.trainings[index]
        self._commit_trainings()

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def add_exercise(self, training_id: str, name: str, set_count: int = 0) -> Exercise | None:
        """Append an exercise with ``set_count`` empty sets."""
        training = self.get_training(training_id)
        if training is None:
            return None
        exercise = Exercise(name=name, sets=[SetEntry() for _ in range(max(0, set_count))])
        training.exercises.append(exercise)
        self._commit_trainings()
        return exercise

    def update_exercise(
        self,
        training_id: str,
        exercise_id: str,
        name: str | None = None,
        notes: str | None = None,
    ) -> None:
        exercise = self._get_exercise(training_id, exercise_id)
        if exercise is None:
            return
        if name is not None:
            exercise.name = name
        if notes is not None:
            exercise.notes = notes
        self._commit_trainings()

    def move_exercise(self, training_id: str, exercise_id: str, to_index: int) -> None:
        training = self.get_training(training_id)
        if training is None:
            return
        index = _index_of(training.exercises, exercise_id)
        if index is None:
            return
        _move(training.exercises, index, to_index)
        self._commit_trainings()

    def delete_exercise(self, training_id: str, exercise_id: str) -> None:
        training = self.get_training(training_id)
        if training is None:
            return
        index = _index_of(training.exercises, exercise_id)
        if index is None:
            return
        del training.exercises[index]
        self._commit_trainings()

    # ------------------------------------------------------------------
    # Sets
    # ------------------------------------------------------------------

    def add_set(
        self,
        training_id: str,
        exercise_id: str,
        weight_kg: float = 0.0,
        reps: int = 0,
    ) -> SetEntry | None:
        exercise = self._get_exercise(training_id, exercise_id)
        if exercise is None:
            return None
        set_entry = SetEntry(weight_kg=weight_kg, repetition=Repetition(reps))
        exercise.sets.append(set_entry)
        self._commit_trainings()
        return set_entry

    def update_set(
        self,
        training_id: str,
        exercise_id: str,
        set_id: str,
        weight_kg: float | None = None,
        reps: int | None = None,
    ) -> None:
        set_entry = self._get_set(training_id, exercise_id, set_id)
        if set_entry is None:
            return
        if weight_kg is not None:
            set_entry.weight_kg = max(0.0, float(weight_kg))
        if reps is not None:
            set_entry.repetition = Repetition(reps)
        self._commit_trainings()

    def toggle_set_done(self, training_id: str, exercise_id: str, set_id: str) -> None:
        set_entry = self._get_set(training_id, exercise_id, set_id)
        if set_entry is None:
            return
        set_entry.is_done = not set_entry.is_done
        self._commit_trainings()

    def move_set(self, training_id: str, exercise_id: str, set_id: str, to_index: int) -> None:
        exercise = self._get_exercise(training_id, exercise_id)
        if exercise is None:
            return
        index = _index_of(exercise.sets, set_id)
        if index is None:
            return
        _move(exercise.sets, index, to_index)
        self._commit_trainings()

    def delete_set(self, training_id: str, exercise_id: str, set_id: str) -> None:
        exercise = self._get_exercise(training_id, exercise_id)
        if exercise is None:
            return
        index = _index_of(exercise.sets, set_id)
        if index is None:
            return
        del exercise.sets[index]
        self._commit_trainings()

    # ------------------------------------------------------------------
    # Workout sessions
    # ------------------------------------------------------------------

    def begin_session(self, training_id: str) -> None:
        """Start a session: clear every done flag and stamp the start time."""
        training = self.get_training(training_id)
        if training is None:
            return
        self._clear_done_flags(training)
        training.current_session_start = utcnow()
        self._commit_trainings()

    def reset_session(self, training_id: str) -> None:
        """Abandon the running session without recording it."""
        training = self.get_training(training_id)
        if training is None:
            return
        self._clear_done_flags(training)
        training.current_session_start = None
        self._commit_trainings()

    def end_session(self, training_id: str) -> WorkoutSession | None:
        """Finish the running session and record it in the history.

        The max weight per exercise is taken over all sets of the exercise,
        done or not; an exercise without sets records 0.
        """
        training = self.get_training(training_id)
        if training is None:
            return None

        max_weights = {
            exercise.id: max((s.weight_kg for s in exercise.sets), default=0.0)
            for exercise in training.exercises
        }

        ended_at = utcnow()
        session = WorkoutSession(
            started_at=training.current_session_start or ended_at,
            ended_at=ended_at,
            max_weight_per_exercise=max_weights,
            exercises=tuple(SessionExerciseSnapshot.capture(e) for e in training.exercises),
        )

        training.sessions.insert(0, session)
        training.current_session_start = None
        self._commit_trainings()
        return session

    def _clear_done_flags(self, training: Training) -> None:
        for exercise in training.exercises:
            for set_entry in exercise.sets:
                set_entry.is_done = False

    # ------------------------------------------------------------------
    # Bodyweight
    # ------------------------------------------------------------------

    def add_bodyweight_entry(self, weight_kg: float, date: datetime | None = None) -> BodyweightEntry:
        entry = BodyweightEntry(weight_kg=weight_kg, date=date or utcnow())
        self.bodyweight_entries.insert(0, entry)
        self.bodyweight_entries.sort(key=lambda e: e.date, reverse=True)
        self._commit_bodyweight()
        return entry

    def reset_bodyweight_entries(self) -> None:
        self.bodyweight_entries = []
        self._commit_bodyweight()

    # ------------------------------------------------------------------
    # Timer settings
    # ------------------------------------------------------------------

    def update_timer_settings(
        self, enabled: bool | None = None, seconds: int | None = None
    ) -> TimerSettings:
        current = self.timer_settings
        self.timer_settings = TimerSettings(
            rest_timer_enabled=current.rest_timer_enabled if enabled is None else enabled,
            rest_timer_seconds=current.rest_timer_seconds if seconds is None else seconds,
        )
        if self.timer_settings != current:
            self._commit_settings()
        return self.timer_settings

    # ------------------------------------------------------------------
    # Whole-state operations
    # ------------------------------------------------------------------

    def apply_remote_snapshot(
        self,
        trainings: list[Training],
        bodyweight_entries: list[BodyweightEntry],
        timer_settings: TimerSettings | None = None,
    ) -> None:
        """Replace local data with a snapshot pulled from the server.

        Subscribers see ``ChangeOrigin.REMOTE``. Rows written by clients
        that did not sync timer settings keep the local settings.
        """
        self.trainings = list(trainings)
        self.bodyweight_entries = sorted(bodyweight_entries, key=lambda e: e.date, reverse=True)
        self._commit_trainings(ChangeOrigin.REMOTE)
        self._commit_bodyweight(ChangeOrigin.REMOTE)
        if timer_settings is not None and timer_settings != self.timer_settings:
            self.timer_settings = timer_settings
            self._commit_settings(ChangeOrigin.REMOTE)

    def delete_all_data(self) -> None:
        """Wipe every local record and restore default settings."""
        self.trainings = []
        self.bodyweight_entries = []
        self.timer_settings = TimerSettings()
        self._commit_trainings(ChangeOrigin.RESET)
        self._commit_bodyweight(ChangeOrigin.RESET)
        self._commit_settings(ChangeOrigin.RESET)
        logger.info("store_wiped")

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------

    def statistics(self) -> TrainingStatistics:
        return TrainingStatistics.from_trainings(self.trainings)

    def session_history(self) -> list[tuple[Training, WorkoutSession]]:
        """All recorded sessions across trainings, newest first."""
        history = [
            (training, session)
            for training in self.trainings
            for session in training.sessions
        ]
        history.sort(key=lambda pair: pair[1].ended_at, reverse=True)
        return history
