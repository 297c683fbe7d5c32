"""
Configuration constants for the session weight-planning engine.

All adjustable parameters are centralized here for easy tuning.
Equipment-specific values below are the fallbacks used when the bundled
tuning.yaml is missing an entry; see core/equipment.py.
"""

from typing import Final

# =============================================================================
# WITHIN-SESSION FATIGUE
# =============================================================================

FATIGUE_FACTOR: Final[float] = 0.05  # Weight reduction per repeated muscle-group exposure
MIN_FATIGUE_MULTIPLIER: Final[float] = 0.5  # Never plan below 50% of fresh capacity

# Float slack when rounding down to a weight increment, so that
# 19.999999 / 2.5 is not floored one step too low.
ROUNDING_EPSILON: Final[float] = 1e-9

# =============================================================================
# SESSION DEFAULTS
# =============================================================================

DEFAULT_SETS: Final[int] = 3  # Scheme for exercises added mid-session
DEFAULT_REPS: Final[int] = 12
TEMPLATE_DEFAULT_SETS: Final[int] = 4  # Scheme for newly saved routines
TEMPLATE_DEFAULT_REPS: Final[int] = 12

# =============================================================================
# EQUIPMENT FALLBACKS
# =============================================================================

DEFAULT_WEIGHT_INCREMENT: Final[float] = 2.5
DEFAULT_MIN_WEIGHT: Final[float] = 0.0
DEFAULT_START_WEIGHT: Final[float] = 20.0

# Equipment tag used for exercises that are missing from the catalog
UNKNOWN_EQUIPMENT: Final[str] = "Unknown"

# =============================================================================
# PROGRESS VIEWS
# =============================================================================

RECENT_ACTIVITY_DAYS: Final[int] = 7
SCHEDULE_HORIZON_DAYS: Final[int] = 14


def fatigue_multiplier(occurrence: int, fatigue_factor: float = FATIGUE_FACTOR) -> float:
    """
    Fraction of fresh capacity planned for the n-th repeat of a muscle group.

        multiplier = max(0.5, 1 - n * fatigue_factor)

    Args:
        occurrence: Same-group exercises already done this session (0 = first)
        fatigue_factor: Reduction per repeated exposure

    Returns:
        Multiplier in [MIN_FATIGUE_MULTIPLIER, 1.0]
    """
    n = max(0, occurrence)
    return max(MIN_FATIGUE_MULTIPLIER, 1.0 - n * fatigue_factor)
