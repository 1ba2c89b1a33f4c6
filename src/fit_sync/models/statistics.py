"""All-time training statistics."""

from dataclasses import dataclass

from .training import Training


@dataclass
class TrainingStatistics:
    """Aggregates over every recorded workout session."""

    total_completed_workouts: int = 0
    total_training_minutes: float = 0.0
    total_moved_weight_kg: float = 0.0
    total_repetitions: int = 0

    @classmethod
    def from_trainings(cls, trainings: list[Training]) -> "TrainingStatistics":
        """Compute statistics from session history.

        Only sets marked done count towards moved weight and repetitions.
        """
        stats = cls()
        total_seconds = 0.0

        for training in trainings:
            for session in training.sessions:
                stats.total_completed_workouts += 1
                total_seconds += session.duration
                for exercise in session.exercises:
                    for set_snapshot in exercise.sets:
                        if not set_snapshot.is_done:
                            continue
                        reps = set_snapshot.repetition.value
                        stats.total_moved_weight_kg += set_snapshot.weight_kg * reps
                        stats.total_repetitions += reps

        stats.total_training_minutes = total_seconds / 60.0
        return stats

    def to_dict(self) -> dict:
        return {
            "total_completed_workouts": self.total_completed_workouts,
            "total_training_minutes": round(self.total_training_minutes, 1),
            "total_moved_weight_kg": round(self.total_moved_weight_kg, 1),
            "total_repetitions": self.total_repetitions,
        }
