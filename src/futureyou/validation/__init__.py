"""Validation of generator output and simulation state."""

from .response_validator import (
    extract_json_object,
    normalize_insights,
    normalize_outcome,
    normalize_scenario,
    parse_insights,
    parse_outcome,
    parse_scenario,
)
from .sanity_checks import SanityChecker, ValidationWarning, validate_simulation_state

__all__ = [
    "extract_json_object",
    "normalize_insights",
    "normalize_outcome",
    "normalize_scenario",
    "parse_insights",
    "parse_outcome",
    "parse_scenario",
    "SanityChecker",
    "ValidationWarning",
    "validate_simulation_state"
]
