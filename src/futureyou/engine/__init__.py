"""Stat model and domain objects."""

from .models import (
    Achievement,
    Choice,
    LifeScenario,
    Outcome,
    SimulationInsights,
    TimelineEvent,
    UserProfile,
)
from .stats import INITIAL_STATS, LifeStats, StatChange, apply_changes, compute_happiness

__all__ = [
    "Achievement",
    "Choice",
    "LifeScenario",
    "Outcome",
    "SimulationInsights",
    "TimelineEvent",
    "UserProfile",
    "INITIAL_STATS",
    "LifeStats",
    "StatChange",
    "apply_changes",
    "compute_happiness",
]
