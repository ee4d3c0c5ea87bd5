"""Prompt builders for the three generation calls.

Each prompt restates the simulated person's situation and ends with the
exact JSON shape the response validator expects back.
"""

import json
from typing import Any, Dict, List, Mapping, Sequence

from ..engine.stats import describe_stat

STAT_LABELS = {
    "money": "Financial stability",
    "health": "Health",
    "career": "Career progress",
    "relationships": "Relationships",
}

SCENARIO_SHAPE: Dict[str, Any] = {
    "title": "Scenario title (max 50 chars)",
    "description": "Detailed scenario description (2-3 sentences)",
    "context": "Background context that led to this situation (1-2 sentences)",
    "choices": [
        {
            "text": "Choice label (max 30 chars)",
            "description": "What this choice means (1 sentence)",
            "riskLevel": "low|medium|high",
            "potentialOutcomes": ["Possible outcome 1", "Possible outcome 2"],
            "category": "money|health|career|relationships|life",
        }
    ],
}

OUTCOME_SHAPE: Dict[str, Any] = {
    "title": "Outcome title (max 50 chars)",
    "description": "What happened as a result (2-3 sentences, narrative style)",
    "statChanges": [
        {"stat": "money|health|career|relationships", "change": "-20 to +20", "reason": "Brief reason"}
    ],
    "impact": "positive|negative|neutral",
    "yearsToAdvance": "1-5",
}

INSIGHTS_SHAPE: Dict[str, Any] = {
    "insights": ["Insight 1", "Insight 2", "Insight 3"],
    "lifeScore": 75,
    "achievements": [
        {"title": "Achievement name", "description": "What they did to earn it", "rarity": "common|rare|epic|legendary"}
    ],
}


def _format_stats(stats: Mapping[str, int], describe: bool) -> List[str]:
    lines = []
    for stat, label in STAT_LABELS.items():
        value = int(stats.get(stat, 0))
        if describe:
            lines.append(f"- {label}: {value}/100 ({describe_stat(value, stat)})")
        else:
            lines.append(f"- {label}: {value}/100")
    return lines


def _numbered(items: Sequence[str]) -> List[str]:
    return [f"{i}. {item}" for i, item in enumerate(items, start=1)]


def _json_instruction(shape: Dict[str, Any]) -> List[str]:
    return [
        "Respond ONLY with valid JSON in this exact format:",
        json.dumps(shape, indent=2),
    ]


def build_scenario_prompt(
    current_age: int,
    stats: Mapping[str, int],
    previous_choices: Sequence[str],
    timeline_context: str,
) -> str:
    """Prompt for the next life scenario."""
    history = _numbered(previous_choices) or ["None yet - this is the start of their journey"]
    return "\n".join(
        [
            "You are a life simulation AI. Generate a realistic life scenario for someone.",
            "",
            "Current situation:",
            f"- Age: {current_age} years old",
            *_format_stats(stats, describe=True),
            "",
            "Previous life choices:",
            *history,
            "",
            "Timeline context:",
            timeline_context or "Starting fresh",
            "",
            "Generate a life scenario with EXACTLY 3 meaningful choices. The scenario should be:",
            "- Age-appropriate and realistic",
            "- Affected by their current stats",
            "- Have potential for both positive and negative outcomes",
            "",
            *_json_instruction(SCENARIO_SHAPE),
        ]
    )


def build_outcome_prompt(
    choice: Mapping[str, Any],
    current_age: int,
    stats: Mapping[str, int],
    timeline_context: str,
) -> str:
    """Prompt resolving the outcome of one choice."""
    return "\n".join(
        [
            "You are a life simulation AI determining the outcome of a life choice.",
            "",
            f"The person chose: \"{choice.get('text', '')}\"",
            f"Choice details: {choice.get('description', '')}",
            f"Risk level: {choice.get('riskLevel', 'medium')}",
            f"Category: {choice.get('category', 'life')}",
            "",
            "Current situation:",
            f"- Age: {current_age}",
            *_format_stats(stats, describe=False),
            "",
            f"Context: {timeline_context}",
            "",
            "Higher risk choices should have more variable outcomes and larger stat changes.",
            "Include 1-4 stat changes between -20 and +20.",
            "yearsToAdvance should be 1-5 years based on the significance.",
            "",
            *_json_instruction(OUTCOME_SHAPE),
        ]
    )


def build_insights_prompt(
    timeline: Sequence[Mapping[str, Any]],
    final_stats: Mapping[str, int],
    choices: Sequence[str],
) -> str:
    """Prompt summarizing a completed life."""
    events = [
        f"- Year {e.get('year')}: {e.get('title')} ({e.get('impact')})"
        for e in timeline
    ]
    return "\n".join(
        [
            "You are a wise life advisor analyzing someone's life simulation results.",
            "",
            "Life timeline:",
            *events,
            "",
            "Final life stats at end of simulation:",
            *_format_stats(final_stats, describe=False),
            "",
            "Key choices made:",
            *_numbered(choices),
            "",
            "Generate 3-5 life insights, a life score (0-100) and 2-4 achievements.",
            "",
            *_json_instruction(INSIGHTS_SHAPE),
        ]
    )
