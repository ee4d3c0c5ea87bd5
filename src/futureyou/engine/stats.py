"""Life stats - bounded dimensions, derived happiness and pure update rules.

Stats are value objects: every update returns a new ``LifeStats`` so the
state machine can treat transitions as whole-value replacements.

Happiness is a weighted average that is recomputed from the four base
dimensions on every construction; it cannot be set independently:

    happiness = round(0.2*money + 0.3*health + 0.2*career + 0.3*relationships)
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, Literal, Mapping, Tuple

StatName = Literal["money", "health", "career", "relationships"]

BASE_STATS: Tuple[str, ...] = ("money", "health", "career", "relationships")
STAT_MIN = 0
STAT_MAX = 100

# Weights in tenths so happiness can be computed exactly with integers.
HAPPINESS_WEIGHTS: Dict[str, int] = {
    "money": 2,
    "health": 3,
    "career": 2,
    "relationships": 3,
}

_STAT_DESCRIPTIONS: Dict[str, Dict[str, str]] = {
    "money": {
        "high": "financially secure",
        "medium": "getting by",
        "low": "struggling financially",
    },
    "health": {
        "high": "excellent health",
        "medium": "decent health",
        "low": "health concerns",
    },
    "career": {
        "high": "thriving career",
        "medium": "steady job",
        "low": "career challenges",
    },
    "relationships": {
        "high": "strong connections",
        "medium": "some close friends",
        "low": "feeling isolated",
    },
}


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return min(max(value, lower), upper)


def round_half_up(value: float) -> int:
    """Round halves upward: 2.5 -> 3, -2.5 -> -2."""
    return int(math.floor(value + 0.5))


def compute_happiness(money: int, health: int, career: int, relationships: int) -> int:
    """Weighted happiness, rounded half-up using exact integer arithmetic."""
    weighted_tenths = (
        HAPPINESS_WEIGHTS["money"] * money +
        HAPPINESS_WEIGHTS["health"] * health +
        HAPPINESS_WEIGHTS["career"] * career +
        HAPPINESS_WEIGHTS["relationships"] * relationships
    )
    return (weighted_tenths + 5) // 10


@dataclass(frozen=True)
class StatChange:
    """A single delta applied to one base stat."""
    stat: StatName
    change: int
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return {"stat": self.stat, "change": self.change, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> 'StatChange':
        return cls(
            stat=str(data["stat"]),  # type: ignore[arg-type]
            change=int(data["change"]),  # type: ignore[arg-type]
            reason=str(data.get("reason", "")),
        )


@dataclass(frozen=True)
class LifeStats:
    """Four bounded stats plus derived happiness."""
    money: int
    health: int
    career: int
    relationships: int
    happiness: int = field(init=False)

    def __post_init__(self):
        for name in BASE_STATS:
            value = int(clamp(int(getattr(self, name)), STAT_MIN, STAT_MAX))
            object.__setattr__(self, name, value)
        object.__setattr__(
            self,
            "happiness",
            compute_happiness(self.money, self.health, self.career, self.relationships),
        )

    def base_values(self) -> Dict[str, int]:
        """The four directly mutable stats (request payload shape)."""
        return {name: getattr(self, name) for name in BASE_STATS}

    def average(self) -> int:
        """Average of the four base stats, rounded half-up."""
        return round_half_up(sum(self.base_values().values()) / len(BASE_STATS))

    def to_dict(self) -> Dict[str, int]:
        data = self.base_values()
        data["happiness"] = self.happiness
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> 'LifeStats':
        """Build from a mapping; any stored happiness is ignored and recomputed."""
        return cls(**{name: int(data[name]) for name in BASE_STATS})  # type: ignore[arg-type]


INITIAL_STATS = LifeStats(money=50, health=80, career=40, relationships=60)


def apply_changes(stats: LifeStats, changes: Iterable[StatChange]) -> LifeStats:
    """
    Apply stat deltas and return a new LifeStats.

    Each delta is added to the current value and the sum clamped to
    [0, 100]. Changes that target happiness or any unknown key are
    skipped. The input is never modified.

    Args:
        stats: Current stats
        changes: Deltas to apply, in order

    Returns:
        New stats with happiness recomputed
    """
    values = stats.base_values()
    for change in changes:
        if change.stat not in values:
            continue
        values[change.stat] = int(clamp(values[change.stat] + change.change, STAT_MIN, STAT_MAX))
    return LifeStats(**values)


def clamp_meter(value: float, maximum: int = 100) -> int:
    """Clamp a regret/reward meter into [0, maximum]."""
    return int(clamp(value, 0, maximum))


def describe_stat(value: int, stat: str) -> str:
    """Human phrase for a stat level: high at 70+, medium at 40+, otherwise low."""
    level = "high" if value >= 70 else "medium" if value >= 40 else "low"
    return _STAT_DESCRIPTIONS.get(stat, {}).get(level, "unknown")
