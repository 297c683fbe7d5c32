"""
Progress analytics over finished sessions.

Read-only views used by the history/progress screens: per-exercise weight
trend, the recent-activity strip and per-session summaries.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from .config import RECENT_ACTIVITY_DAYS
from .history import parse_instant
from .models import ProgressPoint, SessionSummary, WorkoutSession
from .progression import is_overload_ready


def _completed_newest_first(sessions: Iterable[WorkoutSession]) -> list[WorkoutSession]:
    return sorted(
        (s for s in sessions if s.completed),
        key=lambda s: parse_instant(s.date),
        reverse=True,
    )


def exercise_progress(sessions: Iterable[WorkoutSession], exercise_id: str) -> list[ProgressPoint]:
    """
    Weight trend for one exercise, oldest to newest.

    Each point holds the heaviest completed set of the session, the reps of
    the first set and the number of completed sets.  Sessions where nothing
    was lifted (max completed weight 0) are skipped.
    """
    points: list[ProgressPoint] = []
    for session in _completed_newest_first(sessions):
        log = next((e for e in session.exercises if e.exercise_id == exercise_id), None)
        if log is None:
            continue
        max_weight = max((s.weight for s in log.sets if s.completed), default=0.0)
        if max_weight <= 0:
            continue
        points.append(
            ProgressPoint(
                date=session.date,
                weight=max_weight,
                reps=log.sets[0].reps_completed if log.sets else 0,
                sets=log.completed_sets,
            )
        )
    points.reverse()
    return points


def trained_exercise_ids(sessions: Iterable[WorkoutSession]) -> list[str]:
    """Distinct exercise ids across finished sessions, newest session first."""
    seen: dict[str, None] = {}
    for session in _completed_newest_first(sessions):
        for log in session.exercises:
            seen.setdefault(log.exercise_id, None)
    return list(seen)


def recent_activity(
    sessions: Iterable[WorkoutSession],
    today: date,
    days: int = RECENT_ACTIVITY_DAYS,
) -> list[tuple[date, bool]]:
    """
    One (day, trained) pair per day, ending with *today*.

    A day counts as trained if any session (finished or not) is dated on it.
    """
    trained_days = {parse_instant(s.date).date() for s in sessions}
    first = today - timedelta(days=days - 1)
    return [
        (first + timedelta(days=i), (first + timedelta(days=i)) in trained_days)
        for i in range(days)
    ]


def summarize_session(session: WorkoutSession) -> SessionSummary:
    """Completed sets, lifted volume (kg × reps) and overload-ready exercises."""
    completed = [s for log in session.exercises for s in log.sets if s.completed]
    return SessionSummary(
        session_id=session.id,
        name=session.name,
        date=session.date,
        duration=session.duration,
        exercise_count=len(session.exercises),
        completed_sets=len(completed),
        total_volume=sum(s.weight * s.reps_completed for s in completed),
        overload_ready=[log.exercise_id for log in session.exercises if is_overload_ready(log)],
    )


def format_duration(seconds: int) -> str:
    """
    Format a duration as H:MM:SS, or MM:SS under an hour.

    Args:
        seconds: Duration in seconds (negative treated as 0)

    Returns:
        e.g. "45:07" or "1:02:03"
    """
    seconds = max(0, int(seconds))
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m:02d}:{s:02d}"
