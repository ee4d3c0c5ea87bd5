"""Simulation state machine, orchestration, fallbacks and persistence."""

from .fallbacks import FALLBACKS, CallType, FallbackContext, fallback_for
from .orchestrator import OrchestrationFlow
from .persistence import JsonFileStore, MemoryStateStore, StateStore, attach_store
from .runner import create_flow, create_state_machine, validate_ages
from .state_machine import MeterSettings, SimulationPhase, SimulationState, SimulationStateMachine

__all__ = [
    "FALLBACKS",
    "CallType",
    "FallbackContext",
    "fallback_for",
    "OrchestrationFlow",
    "JsonFileStore",
    "MemoryStateStore",
    "StateStore",
    "attach_store",
    "create_flow",
    "create_state_machine",
    "validate_ages",
    "MeterSettings",
    "SimulationPhase",
    "SimulationState",
    "SimulationStateMachine",
]
