"""Generation collaborator: prompts, text generators and the validated service."""

from .client import OpenAITextGenerator, TextGenerator, get_default_model
from .prompts import build_insights_prompt, build_outcome_prompt, build_scenario_prompt
from .service import GenerationService

__all__ = [
    "GenerationService",
    "OpenAITextGenerator",
    "TextGenerator",
    "build_insights_prompt",
    "build_outcome_prompt",
    "build_scenario_prompt",
    "get_default_model",
]
