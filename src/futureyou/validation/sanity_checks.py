"""Sanity checks over simulation state.

The state machine enforces these invariants as it goes; the checker
re-verifies a snapshot after the fact, e.g. one restored from disk.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from ..config.schema import Config
from ..engine.stats import BASE_STATS, STAT_MAX, STAT_MIN, compute_happiness

if TYPE_CHECKING:
    from ..simulation.state_machine import SimulationState


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "bounds", "derived", "ordering"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on simulation state."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize with configuration."""
        self.config = config or Config()

    def check_state(self, state: 'SimulationState') -> List[ValidationWarning]:
        """
        Check a simulation snapshot for invariant violations.

        Args:
            state: Snapshot to check

        Returns:
            List of validation warnings
        """
        warnings = []
        stats = state.stats

        for name in BASE_STATS:
            value = getattr(stats, name)
            if not STAT_MIN <= value <= STAT_MAX:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="bounds",
                    message=f"Stat {name} out of bounds",
                    details=f"Value: {value}"
                ))

        expected = compute_happiness(stats.money, stats.health, stats.career, stats.relationships)
        if stats.happiness != expected:
            warnings.append(ValidationWarning(
                severity="error",
                category="derived",
                message="Happiness drifted from its weighted average",
                details=f"Stored {stats.happiness}, expected {expected}"
            ))

        maximum = self.config.meters.maximum
        for name, value in (("regret", state.regret_meter), ("reward", state.reward_meter)):
            if not 0 <= value <= maximum:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="bounds",
                    message=f"{name.capitalize()} meter out of bounds",
                    details=f"Value: {value}, allowed 0-{maximum}"
                ))

        if state.current_age < state.start_age:
            warnings.append(ValidationWarning(
                severity="error",
                category="ordering",
                message="Current age is below the starting age",
                details=f"Current {state.current_age}, start {state.start_age}"
            ))

        previous_age = state.start_age
        for index, event in enumerate(state.timeline):
            if event.age < previous_age:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="ordering",
                    message=f"Timeline event {index} happens before the one preceding it",
                    details=f"Age {event.age} after age {previous_age}"
                ))
            previous_age = event.age
        if state.timeline and state.timeline[-1].age > state.current_age:
            warnings.append(ValidationWarning(
                severity="error",
                category="ordering",
                message="Latest timeline event is later than the current age",
                details=f"Event age {state.timeline[-1].age}, current {state.current_age}"
            ))

        if state.simulation_complete and not state.target_reached:
            warnings.append(ValidationWarning(
                severity="error",
                category="completion",
                message="Simulation marked complete before reaching the target age",
                details=f"Current {state.current_age}, target {state.target_age}"
            ))
        if state.simulation_complete and state.is_simulating:
            warnings.append(ValidationWarning(
                severity="warning",
                category="completion",
                message="Completed simulation is still flagged as running"
            ))

        if stats.health < 20:
            warnings.append(ValidationWarning(
                severity="warning",
                category="wellbeing",
                message="Health is critically low",
                details=f"Health: {stats.health}/100"
            ))

        return warnings


def validate_simulation_state(
    state: 'SimulationState',
    config: Optional[Config] = None,
) -> List[ValidationWarning]:
    """
    Validate a complete simulation snapshot.

    Args:
        state: Snapshot to check
        config: Simulator configuration (meter bounds)

    Returns:
        List of all validation warnings
    """
    return SanityChecker(config).check_state(state)
