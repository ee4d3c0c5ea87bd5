"""Normalize untrusted generator output into the three response shapes.

The generator is asked for JSON but may wrap it in prose or code fences,
omit fields, or return values of the wrong type. The rules here are
lenient: only text with no JSON object at all is rejected (``ParseError``);
every individual field has a default and every list and number has bounds.

Normalized payloads keep the camelCase keys of the generation contract so
they can be returned over HTTP unchanged.
"""

import json
import math
from typing import Any, Dict, List, Mapping, Optional

from ..engine.models import CATEGORIES, IMPACTS, RARITIES, RISK_LEVELS
from ..engine.stats import BASE_STATS, clamp, round_half_up
from ..errors import ParseError

MAX_TITLE_LENGTH = 50
MAX_CHOICE_TEXT_LENGTH = 30
MAX_CHOICES = 3
MIN_CHOICES = 2
MAX_POTENTIAL_OUTCOMES = 3
MAX_STAT_DELTA = 20
MIN_YEARS_TO_ADVANCE = 1
MAX_YEARS_TO_ADVANCE = 5
DEFAULT_YEARS_TO_ADVANCE = 2
MAX_INSIGHTS = 5
MAX_ACHIEVEMENTS = 4
DEFAULT_LIFE_SCORE = 50
SYNTHESIZED_STAT_DELTA = 5
NON_LIST_INSIGHT = "Your journey was unique."
EMPTY_INSIGHTS_INSIGHT = "Every choice matters in the grand scheme of life."

STAY_THE_COURSE: Dict[str, Any] = {
    "text": "Stay the course",
    "description": "Continue with your current path.",
    "riskLevel": "low",
    "potentialOutcomes": ["Maintain stability"],
    "category": "life",
}

DEFAULT_ACHIEVEMENT: Dict[str, str] = {
    "title": "Life Explorer",
    "description": "Completed the life simulation",
    "rarity": "common",
}


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Find the first balanced JSON object in free text.

    Scans for ``{`` and walks forward tracking brace depth, skipping braces
    inside string literals. A balanced candidate that fails to parse (for
    example prose such as ``{see below}``) is skipped and the scan resumes
    at the next opening brace.

    Args:
        text: Raw generator output

    Returns:
        The parsed object

    Raises:
        ParseError: If no parseable object exists in the text
    """
    if not isinstance(text, str):
        raise ParseError(f"Expected text, got {type(text).__name__}")

    start = text.find("{")
    while start != -1:
        end = _match_closing_brace(text, start)
        if end is not None:
            try:
                parsed = json.loads(text[start:end + 1])
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                return parsed
        start = text.find("{", start + 1)

    raise ParseError("Failed to parse AI response: no JSON object found")


def _match_closing_brace(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at ``start``, or None if unbalanced."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _text(value: Any, default: str, max_length: Optional[int] = None) -> str:
    """Non-empty string (optionally truncated) or the default."""
    if not isinstance(value, str):
        return default
    if max_length is not None:
        value = value[:max_length]
    return value if value else default


def _enum(value: Any, allowed, default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _number(value: Any, default: float) -> float:
    """Coerce to a finite number; booleans, NaN and junk fall back to the default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def _bounded_int(value: Any, default: float, lower: int, upper: int, zero_is_missing: bool = False) -> int:
    """Coerce, clamp and round; with ``zero_is_missing`` a coerced 0 also takes the default."""
    number = _number(value, default)
    if zero_is_missing and number == 0:
        number = default
    return round_half_up(clamp(number, lower, upper))


def _string_items(values: List[Any]) -> List[str]:
    return [str(v) for v in values if isinstance(v, (str, int, float)) and not isinstance(v, bool)]


def normalize_choice(raw: Any, index: int) -> Dict[str, Any]:
    """Normalize one choice; ``index`` is zero-based and only used for the default label."""
    data = _as_mapping(raw)
    outcomes = data.get("potentialOutcomes")
    return {
        "text": _text(data.get("text"), f"Option {index + 1}", MAX_CHOICE_TEXT_LENGTH),
        "description": _text(data.get("description"), "An interesting path forward."),
        "riskLevel": _enum(data.get("riskLevel"), RISK_LEVELS, "medium"),
        "potentialOutcomes": (
            _string_items(outcomes)[:MAX_POTENTIAL_OUTCOMES]
            if isinstance(outcomes, list)
            else ["Unknown outcome"]
        ),
        "category": _enum(data.get("category"), CATEGORIES, "life"),
    }


def normalize_scenario(raw: Any) -> Dict[str, Any]:
    """
    Normalize a scenario payload.

    Keeps at most three choices and pads with "Stay the course" until
    there are at least two.
    """
    data = _as_mapping(raw)
    choices = [
        normalize_choice(choice, index)
        for index, choice in enumerate(_as_list(data.get("choices"))[:MAX_CHOICES])
    ]
    while len(choices) < MIN_CHOICES:
        choices.append(dict(STAY_THE_COURSE, potentialOutcomes=list(STAY_THE_COURSE["potentialOutcomes"])))

    return {
        "title": _text(data.get("title"), "Life Crossroads", MAX_TITLE_LENGTH),
        "description": _text(data.get("description"), "You face an important decision."),
        "context": _text(data.get("context"), "Life has brought you to this moment."),
        "choices": choices,
    }


def normalize_outcome(raw: Any, choice_category: str = "life") -> Dict[str, Any]:
    """
    Normalize an outcome payload for a choice in ``choice_category``.

    Stat changes on unknown stats are dropped. If none survive, one change is
    synthesized on the choice's own category (relationships for "life"),
    +5 for a positive impact, -5 for negative and 0 for neutral.
    """
    data = _as_mapping(raw)
    impact = _enum(data.get("impact"), IMPACTS, "neutral")

    stat_changes = []
    for entry in _as_list(data.get("statChanges")):
        entry = _as_mapping(entry)
        if entry.get("stat") not in BASE_STATS:
            continue
        stat_changes.append({
            "stat": entry["stat"],
            "change": _bounded_int(entry.get("change"), 0, -MAX_STAT_DELTA, MAX_STAT_DELTA),
            "reason": _text(entry.get("reason"), "Life happened"),
        })

    if not stat_changes:
        target = choice_category if choice_category in BASE_STATS else "relationships"
        delta = {"positive": SYNTHESIZED_STAT_DELTA, "negative": -SYNTHESIZED_STAT_DELTA}.get(impact, 0)
        stat_changes.append({
            "stat": target,
            "change": delta,
            "reason": "The result of your choice",
        })

    return {
        "title": _text(data.get("title"), "The Outcome", MAX_TITLE_LENGTH),
        "description": _text(data.get("description"), "Your choice has shaped your path."),
        "statChanges": stat_changes,
        "impact": impact,
        "yearsToAdvance": _bounded_int(
            data.get("yearsToAdvance"),
            DEFAULT_YEARS_TO_ADVANCE,
            MIN_YEARS_TO_ADVANCE,
            MAX_YEARS_TO_ADVANCE,
            zero_is_missing=True,
        ),
    }


def normalize_insights(raw: Any) -> Dict[str, Any]:
    """Normalize an insights payload; guarantees one insight and one achievement."""
    data = _as_mapping(raw)

    raw_insights = data.get("insights")
    if isinstance(raw_insights, list):
        insights = [s for s in _string_items(raw_insights[:MAX_INSIGHTS]) if s]
    else:
        insights = [NON_LIST_INSIGHT]
    if not insights:
        insights = [EMPTY_INSIGHTS_INSIGHT]

    achievements = []
    for entry in _as_list(data.get("achievements"))[:MAX_ACHIEVEMENTS]:
        entry = _as_mapping(entry)
        achievements.append({
            "title": _text(entry.get("title"), "Life Experience"),
            "description": _text(entry.get("description"), "You lived and learned."),
            "rarity": _enum(entry.get("rarity"), RARITIES, "common"),
        })
    if not achievements:
        achievements.append(dict(DEFAULT_ACHIEVEMENT))

    return {
        "insights": insights,
        "lifeScore": _bounded_int(data.get("lifeScore"), DEFAULT_LIFE_SCORE, 0, 100, zero_is_missing=True),
        "achievements": achievements,
    }


def parse_scenario(text: str) -> Dict[str, Any]:
    """Extract and normalize a scenario from raw generator text."""
    return normalize_scenario(extract_json_object(text))


def parse_outcome(text: str, choice_category: str = "life") -> Dict[str, Any]:
    """Extract and normalize an outcome from raw generator text."""
    return normalize_outcome(extract_json_object(text), choice_category)


def parse_insights(text: str) -> Dict[str, Any]:
    """Extract and normalize insights from raw generator text."""
    return normalize_insights(extract_json_object(text))
