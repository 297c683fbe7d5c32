"""
Within-session fatigue: planned weight per slot from fresh capacity.

Each repeated exposure of a muscle group in one session lowers the planned
weight by FATIGUE_FACTOR of the exercise's base weight, floored at 50%:

    n           = same-group exercises earlier in the session (0 for the first)
    multiplier  = max(0.5, 1 - n * FATIGUE_FACTOR)
    adjusted    = floor(base_weight * multiplier / increment) * increment

Rounding is always down to the equipment increment, so a fatigued muscle is
never overloaded.  The result is written to pending sets only; completed sets
keep the weight they were lifted with.

Example (increment 2.5, factor 0.05), session order A(Chest) B(Chest) C(Legs),
all base 20:
    A: n=0 → 20.0
    B: n=1 → floor(19.0 / 2.5) * 2.5 = 17.5
    C: n=0 → 20.0
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import replace

from .catalog import Catalog
from .config import ROUNDING_EPSILON, fatigue_multiplier
from .equipment import TuningTable
from .models import ExerciseSessionLog

logger = logging.getLogger(__name__)


def round_down_to_increment(weight: float, increment: float) -> float:
    """
    Round *weight* down to a multiple of *increment*.

    Negative weights clamp to 0.  A non-positive increment disables rounding.
    """
    weight = max(0.0, weight)
    if increment <= 0:
        return weight
    steps = math.floor(weight / increment + ROUNDING_EPSILON)
    return round(steps * increment, 6)


def fatigued_weight(
    base_weight: float,
    occurrence: int,
    increment: float,
    fatigue_factor: float,
) -> float:
    """Planned weight for the *occurrence*-th repeat (0-based) of a muscle group."""
    return round_down_to_increment(
        (base_weight or 0.0) * fatigue_multiplier(occurrence, fatigue_factor),
        increment,
    )


def apply_fatigue(
    logs: Iterable[ExerciseSessionLog],
    catalog: Catalog,
    tuning: TuningTable,
    fatigue_factor: float | None = None,
) -> list[ExerciseSessionLog]:
    """
    Re-derive the planned weight of every pending set in a session.

    Muscle-group counting is scoped to this call; nothing carries over
    between invocations.

    Args:
        logs: Exercise logs of one session, in any order
        catalog: Exercise lookup (muscle group, equipment)
        tuning: Equipment tuning (increment per equipment)
        fatigue_factor: Override for tuning.fatigue_factor

    Returns:
        New list of logs sorted by order.  Logs whose exercise is not in the
        catalog are returned unchanged and do not count towards any group.
    """
    factor = tuning.fatigue_factor if fatigue_factor is None else fatigue_factor
    # sorted() is stable: equal orders keep their input sequence
    ordered = sorted(logs, key=lambda log: log.order)
    muscle_counts: dict[str, int] = {}
    result: list[ExerciseSessionLog] = []

    for log in ordered:
        exercise = catalog.exercise_of(log.exercise_id)
        if exercise is None:
            logger.debug("Unknown exercise %r at order %d; weights left as-is", log.exercise_id, log.order)
            result.append(log)
            continue

        count = muscle_counts.get(exercise.muscle_group, 0)
        muscle_counts[exercise.muscle_group] = count + 1

        adjusted = fatigued_weight(
            log.base_weight,
            count,
            tuning.weight_increment(exercise.equipment),
            factor,
        )
        new_sets = tuple(
            s if s.completed else replace(s, weight=adjusted)
            for s in log.sets
        )
        result.append(replace(log, sets=new_sets))

    return result
