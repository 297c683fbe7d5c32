"""
Equipment-aware weight tuning.

Each equipment tag maps to three numbers used by the planning engine:

  increment     smallest available weight step; fatigue-adjusted weights are
                rounded down to a multiple of it and progressive overload adds
                exactly one increment
  min_weight    floor for any resolved base weight (e.g. the lightest dumbbell)
  start_weight  base weight the first time an exercise is done

Values come from the bundled tuning.yaml (merged with ~/.flexlogic/tuning.yaml).
Tags missing from the table use the "default" entry, so an exercise with
unfamiliar or unknown equipment still gets a usable plan.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import (
    DEFAULT_MIN_WEIGHT,
    DEFAULT_START_WEIGHT,
    DEFAULT_WEIGHT_INCREMENT,
    FATIGUE_FACTOR,
)
from .engine.config_loader import load_model_config


@dataclass(frozen=True)
class EquipmentTuning:
    """Tuning for one equipment tag."""

    increment: float = DEFAULT_WEIGHT_INCREMENT
    min_weight: float = DEFAULT_MIN_WEIGHT
    start_weight: float = DEFAULT_START_WEIGHT

    def __post_init__(self) -> None:
        """Validate tuning values."""
        if self.increment <= 0:
            raise ValueError("increment must be positive")
        if self.min_weight < 0:
            raise ValueError("min_weight must be non-negative")
        if self.start_weight < 0:
            raise ValueError("start_weight must be non-negative")


@dataclass(frozen=True)
class TuningTable:
    """
    Equipment tag → EquipmentTuning, plus the session fatigue factor.

    Injected next to the catalog so the engine never branches on equipment
    names itself.
    """

    equipment: dict[str, EquipmentTuning] = field(default_factory=dict)
    default: EquipmentTuning = field(default_factory=EquipmentTuning)
    fatigue_factor: float = FATIGUE_FACTOR

    def for_equipment(self, equipment: str | None) -> EquipmentTuning:
        """Return the tuning for *equipment*, or the default entry."""
        if equipment is None:
            return self.default
        return self.equipment.get(equipment, self.default)

    def weight_increment(self, equipment: str | None) -> float:
        return self.for_equipment(equipment).increment

    def min_weight(self, equipment: str | None) -> float:
        return self.for_equipment(equipment).min_weight

    def start_weight(self, equipment: str | None) -> float:
        return self.for_equipment(equipment).start_weight


def tuning_from_dict(d: dict, base: EquipmentTuning | None = None) -> EquipmentTuning:
    """Convert a raw dict (from YAML) to EquipmentTuning, filling gaps from *base*."""
    base = base or EquipmentTuning()
    return EquipmentTuning(
        increment=float(d.get("increment", base.increment)),
        min_weight=float(d.get("min_weight", base.min_weight)),
        start_weight=float(d.get("start_weight", base.start_weight)),
    )


def tuning_table_from_dict(cfg: dict) -> TuningTable:
    """
    Build a TuningTable from a parsed tuning.yaml mapping.

    Raises:
        ValueError: If any entry has a non-positive increment or negative weight
    """
    default = tuning_from_dict(cfg.get("default") or {})
    equipment = {
        str(tag): tuning_from_dict(raw or {}, default)
        for tag, raw in (cfg.get("equipment") or {}).items()
    }
    factor = float((cfg.get("fatigue") or {}).get("FATIGUE_FACTOR", FATIGUE_FACTOR))
    if not 0 <= factor < 1:
        raise ValueError(f"FATIGUE_FACTOR must be in [0, 1), got {factor}")
    return TuningTable(equipment=equipment, default=default, fatigue_factor=factor)


def load_tuning(user_override: bool = True) -> TuningTable:
    """Load the equipment tuning table from bundled and user YAML."""
    return tuning_table_from_dict(load_model_config("tuning.yaml", user_override))
