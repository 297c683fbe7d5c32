"""
Set completion state machine and in-session weight nudges.

A set cycles through

    PENDING ─► FULL ─► PARTIAL(target-1) ─► … ─► PARTIAL(1) ─► PENDING

one step per tap, so target_reps + 1 taps bring any pending set back to
where it started.  Weight nudges only touch the active set and the sets after
it; sets before it are history.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Literal

from .models import ExerciseSessionLog, SetLog

SetState = Literal["pending", "full", "partial"]


def set_state(set_log: SetLog, target_reps: int) -> SetState:
    """Classify a set for display."""
    if not set_log.completed:
        return "pending"
    if set_log.reps_completed >= target_reps:
        return "full"
    return "partial"


def next_set(set_log: SetLog, target_reps: int) -> SetLog:
    """
    Advance one set by one tap.

    Completed sets recorded above target (e.g. an extra rep logged by hand)
    step down from the target like a full-credit set.
    """
    target = max(1, target_reps)
    if not set_log.completed:
        return replace(set_log, completed=True, reps_completed=target)

    reps = min(set_log.reps_completed, target) - 1
    if reps >= 1:
        return replace(set_log, reps_completed=reps)
    return replace(set_log, completed=False, reps_completed=0)


def toggle_set(log: ExerciseSessionLog, set_index: int) -> ExerciseSessionLog:
    """
    Tap a set: advance it one step through the completion cycle.

    Args:
        log: Exercise log
        set_index: 0-based index into log.sets

    Returns:
        New log; the input unchanged when set_index is out of range
    """
    if not 0 <= set_index < len(log.sets):
        return log
    sets = list(log.sets)
    sets[set_index] = next_set(sets[set_index], log.target_reps)
    return replace(log, sets=tuple(sets))


def active_set_index(log: ExerciseSessionLog) -> int | None:
    """
    Index of the set the user is working on.

    The first set not completed yet, or the last set when all are done.
    None for a log without sets.
    """
    if not log.sets:
        return None
    for i, s in enumerate(log.sets):
        if not s.completed:
            return i
    return len(log.sets) - 1


def adjust_weight(log: ExerciseSessionLog, delta: float) -> ExerciseSessionLog:
    """
    Nudge the weight of the active set and every set after it.

    Weights clamp at 0.  Sets before the active one are left untouched.
    """
    start = active_set_index(log)
    if start is None:
        return log
    sets = tuple(
        replace(s, weight=max(0.0, s.weight + delta)) if i >= start else s
        for i, s in enumerate(log.sets)
    )
    return replace(log, sets=sets)


def append_set(log: ExerciseSessionLog) -> ExerciseSessionLog:
    """Add one pending set at the weight of the current last set."""
    weight = log.sets[-1].weight if log.sets else log.base_weight
    return replace(log, sets=log.sets + (SetLog(reps_completed=0, weight=weight, completed=False),))
