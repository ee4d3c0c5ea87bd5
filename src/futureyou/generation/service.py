"""The generation collaborator: prompt, generate, validate.

``GenerationService`` exposes the three call shapes of the contract with
plain camelCase dictionaries in and out, so it can sit behind HTTP or be
called in-process by the orchestrator. It does not recover from failures:
``TransportError`` and ``ParseError`` propagate to the caller, which owns
the fallback decision.
"""

import logging
from typing import Any, Dict, Mapping, Sequence

from ..validation.response_validator import parse_insights, parse_outcome, parse_scenario
from .client import TextGenerator
from .prompts import build_insights_prompt, build_outcome_prompt, build_scenario_prompt

logger = logging.getLogger(__name__)


class GenerationService:
    """Three validated generation calls over one ``TextGenerator``."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    def generate_scenario(
        self,
        current_age: int,
        stats: Mapping[str, int],
        previous_choices: Sequence[str],
        timeline_context: str,
    ) -> Dict[str, Any]:
        """Normalized ``{title, description, context, choices}``."""
        prompt = build_scenario_prompt(current_age, stats, previous_choices, timeline_context)
        return parse_scenario(self.generator.generate_content(prompt))

    def process_choice(
        self,
        choice: Mapping[str, Any],
        current_age: int,
        stats: Mapping[str, int],
        timeline_context: str,
    ) -> Dict[str, Any]:
        """Normalized ``{title, description, statChanges, impact, yearsToAdvance}``."""
        prompt = build_outcome_prompt(choice, current_age, stats, timeline_context)
        text = self.generator.generate_content(prompt)
        return parse_outcome(text, str(choice.get("category", "life")))

    def generate_insights(
        self,
        timeline: Sequence[Mapping[str, Any]],
        final_stats: Mapping[str, int],
        choices: Sequence[str],
    ) -> Dict[str, Any]:
        """Normalized ``{insights, lifeScore, achievements}``."""
        prompt = build_insights_prompt(timeline, final_stats, choices)
        return parse_insights(self.generator.generate_content(prompt))
