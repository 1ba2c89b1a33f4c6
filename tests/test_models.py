"""Tests for data models."""

from datetime import datetime, timezone

import pytest

from fit_sync.clients.base import AuthSession, UserDataRow
from fit_sync.models.bodyweight import BodyweightEntry
from fit_sync.models.settings import TimerSettings
from fit_sync.models.statistics import TrainingStatistics
from fit_sync.models.sync_state import SyncState
from fit_sync.models.timestamps import parse_timestamp
from fit_sync.models.training import (
    Exercise,
    Repetition,
    SetEntry,
    Training,
    WorkoutSession,
)


class TestTimestamps:
    """Tests for timestamp parsing."""

    def test_iso_with_z_suffix(self):
        parsed = parse_timestamp("2025-08-28T10:00:00Z")
        assert parsed == datetime(2025, 8, 28, 10, 0, tzinfo=timezone.utc)

    def test_naive_iso_assumed_utc(self):
        parsed = parse_timestamp("2025-08-28T10:00:00")
        assert parsed.tzinfo == timezone.utc

    def test_unix_milliseconds(self):
        assert parse_timestamp(1_700_000_000_000) == parse_timestamp(1_700_000_000)

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


class TestSetEntry:
    """Tests for SetEntry decoding."""

    def test_missing_is_done_defaults_false(self):
        entry = SetEntry.from_dict({"id": "s1", "weightKg": 50, "repetition": {"value": 5}})
        assert entry.is_done is False
        assert entry.id == "s1"

    def test_missing_id_generates_one(self):
        first = SetEntry.from_dict({"weightKg": 50})
        second = SetEntry.from_dict({"weightKg": 50})
        assert first.id
        assert first.id != second.id

    def test_negative_values_clamped(self):
        entry = SetEntry(weight_kg=-5, repetition=Repetition(-3))
        assert entry.weight_kg == 0
        assert entry.repetition.value == 0

    def test_bare_integer_repetition(self):
        entry = SetEntry.from_dict({"weightKg": 20, "repetition": 12})
        assert entry.repetition.value == 12


class TestWorkoutSession:
    """Tests for WorkoutSession decoding."""

    def test_missing_started_at_defaults_to_ended_at(self):
        session = WorkoutSession.from_dict({"endedAt": "2025-09-01T18:00:00+00:00"})
        assert session.started_at == session.ended_at
        assert session.duration == 0
        assert session.max_weight_per_exercise == {}

    def test_to_dict_keys(self):
        session = WorkoutSession(
            started_at=datetime(2025, 9, 1, 17, tzinfo=timezone.utc),
            ended_at=datetime(2025, 9, 1, 18, tzinfo=timezone.utc),
            max_weight_per_exercise={"ex-1": 80.0},
        )
        data = session.to_dict()
        assert data["maxWeightPerExercise"] == {"ex-1": 80.0}
        assert data["startedAt"].startswith("2025-09-01T17:00:00")
        assert session.duration == 3600


class TestTraining:
    """Tests for Training decoding."""

    def test_old_schema_without_sessions(self):
        training = Training.from_dict(
            {
                "id": "t1",
                "title": "Legs",
                "date": "2025-08-28T08:00:00Z",
                "exercises": [{"id": "e1", "name": "Squat", "sets": [{"weightKg": 100}]}],
            }
        )
        assert training.sessions == []
        assert training.current_session_start is None
        assert training.exercises[0].notes == ""
        assert training.exercises[0].sets[0].is_done is False

    def test_find_exercise(self):
        bench = Exercise(name="Bench")
        training = Training(title="Push", exercises=[bench])
        assert training.find_exercise(bench.id) is bench
        assert training.find_exercise("missing") is None


class TestTimerSettings:
    """Tests for TimerSettings."""

    def test_seconds_clamped(self):
        assert TimerSettings(rest_timer_seconds=5000).rest_timer_seconds == 1800
        assert TimerSettings(rest_timer_seconds=-1).rest_timer_seconds == 0

    def test_zero_reads_back_as_default(self):
        settings = TimerSettings.from_dict({"enabled": False, "seconds": 0})
        assert settings.rest_timer_enabled is False
        assert settings.rest_timer_seconds == 90

    def test_missing_dict_is_default(self):
        assert TimerSettings.from_dict(None) == TimerSettings()


class TestSyncState:
    """Tests for SyncState."""

    def test_defaults(self):
        state = SyncState.from_dict({})
        assert state.is_dirty is False
        assert state.last_successful_sync_at is None


class TestUserDataRow:
    """Tests for the remote row model."""

    def test_row_without_timer_settings(self):
        row = UserDataRow.from_dict(
            {
                "user_id": "u1",
                "trainings": [{"title": "Push"}],
                "bodyweight": [{"date": "2025-09-01T00:00:00Z", "weightKg": 80.5}],
                "updated_at": None,
            }
        )
        assert row.timer_settings is None
        assert row.trainings[0].title == "Push"
        assert row.bodyweight[0] == BodyweightEntry(
            weight_kg=80.5, date=datetime(2025, 9, 1, tzinfo=timezone.utc)
        )

    def test_upsert_payload_includes_settings(self):
        row = UserDataRow(user_id="u1", timer_settings=TimerSettings(True, 120))
        data = row.to_dict()
        assert data["timer_settings"] == {"enabled": True, "seconds": 120}
        assert data["updated_at"]


class TestAuthSession:
    """Tests for AuthSession."""

    def test_expiry(self):
        expired = AuthSession(
            user_id="u1",
            access_token="a",
            expires_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
        )
        assert expired.is_expired()
        assert not AuthSession(user_id="u1", access_token="a").is_expired()


class TestTrainingStatistics:
    """Tests for all-time statistics."""

    def test_only_done_sets_count(self):
        training = Training(title="Push")
        bench = Exercise(
            name="Bench",
            sets=[
                SetEntry(weight_kg=60, repetition=Repetition(8), is_done=True),
                SetEntry(weight_kg=70, repetition=Repetition(6), is_done=False),
            ],
        )
        training.exercises.append(bench)
        training.sessions.append(
            WorkoutSession.from_dict(
                {
                    "startedAt": "2025-09-01T17:00:00Z",
                    "endedAt": "2025-09-01T17:30:00Z",
                    "exercises": [bench.to_dict()],
                }
            )
        )

        stats = TrainingStatistics.from_trainings([training])

        assert stats.total_completed_workouts == 1
        assert stats.total_training_minutes == 30
        assert stats.total_moved_weight_kg == 480
        assert stats.total_repetitions == 8
