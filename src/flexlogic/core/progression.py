"""
Progressive overload: the base weight an exercise enters a session with.

The base weight is the exercise's fresh (un-fatigued) capacity estimate.  It
is derived from the last completed log for the exercise:

  no history        → equipment start weight
  history           → last base weight (or last set weight when none stored)
  all targets met   → + one equipment increment
  always            → at least the equipment minimum weight
"""

from __future__ import annotations

import logging

from .equipment import TuningTable
from .history import ExerciseHistory, log_succeeded
from .models import ExerciseSessionLog, SetLog

__all__ = ["is_overload_ready", "log_succeeded", "resolve_base_weight", "set_met_target"]

logger = logging.getLogger(__name__)


def resolve_base_weight(
    exercise_id: str,
    equipment: str | None,
    history: ExerciseHistory,
    tuning: TuningTable,
) -> float:
    """
    Compute the fresh starting weight for an exercise entering a session.

    Args:
        exercise_id: Catalog id used for the history lookup
        equipment: Equipment tag of the exercise (None if unknown)
        history: History adapter providing last_log_for()
        tuning: Equipment tuning table

    Returns:
        Base weight in kg, never below tuning.min_weight(equipment)
    """
    floor = max(0.0, tuning.min_weight(equipment))
    last = history.last_log_for(exercise_id)

    if last is None:
        weight = tuning.start_weight(equipment)
    else:
        weight = last.base_weight if last.base_weight else last.weight
        weight = weight or 0.0
        if last.succeeded:
            weight += tuning.weight_increment(equipment)

    resolved = max(floor, weight)
    logger.debug(
        "Base weight for %s (%s): last=%s → %.2f",
        exercise_id,
        equipment,
        last,
        resolved,
    )
    return resolved


def set_met_target(set_log: SetLog, target_reps: int) -> bool:
    """True if the set was completed with at least *target_reps* reps."""
    return set_log.completed and set_log.reps_completed >= target_reps


def is_overload_ready(log: ExerciseSessionLog) -> bool:
    """
    Read-only flag for the UI: the next session will add an increment.

    True once every set is completed at (or above) the target rep count.
    """
    if not log.sets:
        return False
    return all(set_met_target(s, log.target_reps) for s in log.sets)
