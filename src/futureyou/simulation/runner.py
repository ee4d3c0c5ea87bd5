"""Assemble a ready-to-play simulation from configuration."""

from typing import Optional

import numpy as np

from ..config.schema import Config
from ..engine.stats import LifeStats
from ..generation.client import TextGenerator
from ..generation.service import GenerationService
from .orchestrator import OrchestrationFlow
from .state_machine import MeterSettings, SimulationStateMachine


def create_state_machine(config: Config, random_seed: Optional[int] = None) -> SimulationStateMachine:
    """
    Build a state machine with configured initial stats and meters.

    Args:
        config: Simulator configuration
        random_seed: Overrides config.simulation.random_seed

    Returns:
        An IDLE state machine
    """
    seed = random_seed if random_seed is not None else config.simulation.random_seed
    initial = config.initial_stats
    return SimulationStateMachine(
        rng=np.random.default_rng(seed),
        initial_stats=LifeStats(
            money=initial.money,
            health=initial.health,
            career=initial.career,
            relationships=initial.relationships,
        ),
        meters=MeterSettings(
            increment_base=config.meters.increment_base,
            increment_span=config.meters.increment_span,
            maximum=config.meters.maximum,
        ),
    )


def create_flow(
    config: Config,
    generator: Optional[TextGenerator] = None,
    random_seed: Optional[int] = None,
) -> OrchestrationFlow:
    """Build an orchestration flow; without a generator every call uses the fallback table."""
    service = GenerationService(generator) if generator is not None else None
    return OrchestrationFlow(create_state_machine(config, random_seed), service)


def validate_ages(config: Config, start_age: int, target_age: int):
    """
    Check setup ages against the configured ranges.

    Raises:
        ValueError: If either age is out of range
    """
    sim = config.simulation
    if not sim.min_start_age <= start_age <= sim.max_start_age:
        raise ValueError(f"Starting age must be between {sim.min_start_age} and {sim.max_start_age}")
    if not sim.min_target_age <= target_age <= sim.max_target_age:
        raise ValueError(f"Target age must be between {sim.min_target_age} and {sim.max_target_age}")
