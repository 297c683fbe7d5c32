"""
History Adapter: the most recent completed log for an exercise.

The engine only needs one question answered about the past, "what happened
the last time this exercise was done?".  Anything with a last_log_for()
method can answer it; SessionHistory answers it from a list of sessions
(as loaded by io/session_store.py).
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol

from .models import ExerciseSessionLog, LastLog, WorkoutSession


class ExerciseHistory(Protocol):
    """Read-only history query consumed by the Base Weight Resolver."""

    def last_log_for(self, exercise_id: str) -> LastLog | None: ...


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 instant (``Z`` suffix allowed) to an aware datetime.

    Naive values are taken as UTC.  Unparseable values sort first.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def log_succeeded(log: ExerciseSessionLog) -> bool:
    """
    Whether every set of a finished log reached its target reps.

    An empty log never counts as a success.
    """
    if not log.sets:
        return False
    return all(s.reps_completed >= log.target_reps for s in log.sets)


def summarize_log(log: ExerciseSessionLog) -> LastLog:
    """
    Reduce a finished exercise log to what the next session needs.

    weight is the last set's weight (the final working weight); base_weight
    falls back to it for logs that never stored a base weight.
    """
    last_weight = log.sets[-1].weight if log.sets else 0.0
    return LastLog(
        weight=last_weight,
        base_weight=log.base_weight or last_weight,
        succeeded=log_succeeded(log),
    )


class SessionHistory:
    """
    History Adapter over an in-memory list of sessions.

    Only completed sessions count; unfinished drafts never feed progression.
    """

    def __init__(self, sessions: Iterable[WorkoutSession] = ()):
        finished = [s for s in sessions if s.completed]
        # Newest first
        self._sessions = sorted(finished, key=lambda s: parse_instant(s.date), reverse=True)

    def __len__(self) -> int:
        return len(self._sessions)

    def last_log_for(self, exercise_id: str) -> LastLog | None:
        """
        Return the summary of the newest completed log for *exercise_id*.

        Args:
            exercise_id: Catalog id

        Returns:
            LastLog, or None if the exercise was never done
        """
        for session in self._sessions:
            for log in session.exercises:
                if log.exercise_id == exercise_id:
                    return summarize_log(log)
        return None
