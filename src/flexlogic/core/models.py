"""
Data models for flexlogic.

All core dataclasses representing the exercise catalog, sessions, templates
and the schedule.  Models are frozen: engine operations build new values with
dataclasses.replace() instead of editing entries in place.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Exercise:
    """
    One catalog entry.

    Owned by the catalog; the engine only reads muscle_group (fatigue
    grouping) and equipment (increment, floor and start weight).
    """

    id: str
    name: str
    muscle_group: str
    equipment: str
    is_compound: bool = False
    default_alternatives: tuple[str, ...] = ()


@dataclass(frozen=True)
class SetLog:
    """
    A single planned or performed set.

    Once completed is True, weight and reps_completed are historical fact.
    """

    reps_completed: int = 0
    weight: float = 0.0
    completed: bool = False


@dataclass(frozen=True)
class ExerciseSessionLog:
    """
    One exercise's slot within a session.

    order is the slot identity: unique within a session, it fixes both the
    display sequence and the muscle-group fatigue sequence.  base_weight is
    the fresh (un-fatigued) capacity estimate, independent of position.
    """

    exercise_id: str
    order: int
    target_sets: int
    target_reps: int
    base_weight: float = 0.0
    sets: tuple[SetLog, ...] = ()

    @property
    def completed_sets(self) -> int:
        """Number of sets marked completed."""
        return sum(1 for s in self.sets if s.completed)


@dataclass(frozen=True)
class WorkoutSession:
    """
    A live, retroactively logged, or finished workout.

    date is an ISO-8601 instant.  is_historical marks sessions logged for a
    past date; their duration is entered rather than timed.
    """

    id: str
    name: str
    date: str
    completed: bool = False
    duration: int = 0  # seconds
    exercises: tuple[ExerciseSessionLog, ...] = ()
    is_historical: bool = False
    template_id: str | None = None

    def log_at(self, order: int) -> ExerciseSessionLog | None:
        """Return the slot with the given order, or None."""
        for log in self.exercises:
            if log.order == order:
                return log
        return None


@dataclass(frozen=True)
class SessionTemplate:
    """A reusable routine used to seed new sessions."""

    id: str
    name: str
    exercise_ids: tuple[str, ...] = ()
    default_sets: int = 4
    default_reps: int = 12


@dataclass(frozen=True)
class LastLog:
    """
    Summary of the most recent completed log for one exercise.

    weight is the last set's actual weight; base_weight the stored fresh
    capacity (None for records that never stored one); succeeded is True
    when every set met the target rep count.
    """

    weight: float
    succeeded: bool
    base_weight: float | None = None


@dataclass(frozen=True)
class ScheduledSession:
    """A template planned for a calendar day (one per date)."""

    date: str  # ISO format: YYYY-MM-DD
    template_id: str


@dataclass(frozen=True)
class ProgressPoint:
    """One session's best effort on a single exercise."""

    date: str
    weight: float
    reps: int
    sets: int


@dataclass
class SessionSummary:
    """Aggregate numbers shown next to a finished session."""

    session_id: str
    name: str
    date: str
    duration: int
    exercise_count: int
    completed_sets: int = 0
    total_volume: float = 0.0
    overload_ready: list[str] = field(default_factory=list)
