"""flexlogic: workout tracker with fatigue-aware session weight planning."""

__version__ = "0.3.0"
