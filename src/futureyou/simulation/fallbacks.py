"""Local stand-ins used whenever a generation call fails.

One table, keyed by call type, so there is a single definition of what a
failed scenario, outcome or insights request turns into. Every entry returns
a payload in the same normalized shape the response validator produces.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

import numpy as np

from ..engine.models import Choice
from ..engine.stats import BASE_STATS, LifeStats


class CallType(Enum):
    """The three generation call shapes."""
    SCENARIO = "scenario"
    OUTCOME = "outcome"
    INSIGHTS = "insights"


@dataclass
class FallbackContext:
    """What a fallback may depend on: current stats, the choice, a random source."""
    stats: LifeStats
    rng: np.random.Generator
    choice: Optional[Choice] = None


def _fallback_scenario(ctx: FallbackContext) -> Dict[str, Any]:
    return {
        "title": "A Crossroads Moment",
        "description": "Life presents you with an important decision.",
        "context": "Your choices will shape your future.",
        "choices": [
            {
                "text": "Take the safe path",
                "description": "A conservative choice with predictable outcomes.",
                "riskLevel": "low",
                "potentialOutcomes": ["Stability", "Steady progress"],
                "category": "life",
            },
            {
                "text": "Take a calculated risk",
                "description": "A balanced approach with moderate uncertainty.",
                "riskLevel": "medium",
                "potentialOutcomes": ["Potential growth", "Some challenges"],
                "category": "career",
            },
            {
                "text": "Go all in",
                "description": "A bold move that could change everything.",
                "riskLevel": "high",
                "potentialOutcomes": ["Major success", "Significant setback"],
                "category": "money",
            },
        ],
    }


def _fallback_outcome(ctx: FallbackContext) -> Dict[str, Any]:
    # High-risk choices swing +/-10 on a coin flip; anything else gains 5.
    category = ctx.choice.category if ctx.choice else "life"
    risk = ctx.choice.risk_level if ctx.choice else "low"
    if risk == "high":
        change = 10 if ctx.rng.random() > 0.5 else -10
    else:
        change = 5
    return {
        "title": "Life Goes On",
        "description": "Your choice has been made. Time moves forward.",
        "statChanges": [
            {
                "stat": category if category in BASE_STATS else "relationships",
                "change": change,
                "reason": "The result of your decision",
            }
        ],
        "impact": "neutral",
        "yearsToAdvance": 2,
    }


def _fallback_insights(ctx: FallbackContext) -> Dict[str, Any]:
    return {
        "insights": [
            "Every choice shapes your destiny.",
            "Balance is key to a fulfilling life.",
            "The journey matters more than the destination.",
        ],
        "lifeScore": ctx.stats.average(),
        "achievements": [
            {
                "title": "Life Explorer",
                "description": "Completed your life simulation",
                "rarity": "common",
            }
        ],
    }


FALLBACKS: Dict[CallType, Callable[[FallbackContext], Dict[str, Any]]] = {
    CallType.SCENARIO: _fallback_scenario,
    CallType.OUTCOME: _fallback_outcome,
    CallType.INSIGHTS: _fallback_insights,
}


def fallback_for(call_type: CallType, ctx: FallbackContext) -> Dict[str, Any]:
    """Build the fallback payload for ``call_type``."""
    return FALLBACKS[call_type](ctx)
