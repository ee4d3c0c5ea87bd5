"""Domain objects for a simulated life.

All objects are frozen dataclasses. Wire and persistence shapes use the
camelCase keys of the generation contract (``riskLevel``, ``statChanges``,
``choiceMade`` ...), produced by ``to_dict`` and read back by ``from_dict``.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Tuple

from .stats import LifeStats, StatChange

Gender = Literal["male", "female", "other"]
RiskLevel = Literal["low", "medium", "high"]
Category = Literal["money", "health", "career", "relationships", "life"]
Impact = Literal["positive", "negative", "neutral"]
Rarity = Literal["common", "rare", "epic", "legendary"]

GENDERS: Tuple[str, ...] = ("male", "female", "other")
RISK_LEVELS: Tuple[str, ...] = ("low", "medium", "high")
CATEGORIES: Tuple[str, ...] = ("money", "health", "career", "relationships", "life")
IMPACTS: Tuple[str, ...] = ("positive", "negative", "neutral")
RARITIES: Tuple[str, ...] = ("common", "rare", "epic", "legendary")

ACHIEVEMENT_ICON = "🏆"

IdFactory = Callable[[], str]


def generate_id() -> str:
    """Random opaque identifier."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class UserProfile:
    """The person being simulated."""
    id: str
    name: str
    age: int
    gender: Gender
    avatar_seed: str
    created_at: datetime

    @classmethod
    def create(
        cls,
        name: str,
        age: int,
        gender: str = "other",
        id_factory: IdFactory = generate_id,
    ) -> 'UserProfile':
        """New profile with fresh id, avatar seed and timestamp."""
        return cls(
            id=id_factory(),
            name=name.strip() or "Anonymous",
            age=age,
            gender=gender if gender in GENDERS else "other",  # type: ignore[arg-type]
            avatar_seed=id_factory(),
            created_at=datetime.now(timezone.utc),
        )

    def with_age(self, age: int) -> 'UserProfile':
        return replace(self, age=age)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "avatarSeed": self.avatar_seed,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'UserProfile':
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            age=int(data["age"]),
            gender=data.get("gender", "other"),
            avatar_seed=str(data["avatarSeed"]),
            created_at=datetime.fromisoformat(str(data["createdAt"])),
        )


@dataclass(frozen=True)
class Choice:
    """One selectable option within a scenario."""
    id: str
    text: str
    description: str
    risk_level: RiskLevel
    potential_outcomes: Tuple[str, ...]
    category: Category

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "riskLevel": self.risk_level,
            "potentialOutcomes": list(self.potential_outcomes),
            "category": self.category,
        }

    def to_request(self) -> Dict[str, Any]:
        """The subset sent when asking for an outcome."""
        return {
            "id": self.id,
            "text": self.text,
            "description": self.description,
            "riskLevel": self.risk_level,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], id_factory: IdFactory = generate_id) -> 'Choice':
        return cls(
            id=str(data.get("id") or id_factory()),
            text=str(data["text"]),
            description=str(data["description"]),
            risk_level=data["riskLevel"],
            potential_outcomes=tuple(str(o) for o in data.get("potentialOutcomes", ())),
            category=data["category"],
        )


@dataclass(frozen=True)
class LifeScenario:
    """A life decision presented at a given age."""
    id: str
    title: str
    description: str
    context: str
    choices: Tuple[Choice, ...]
    current_age: int
    current_stats: LifeStats

    def find_choice(self, choice_id: str) -> Optional[Choice]:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None

    @classmethod
    def from_generated(
        cls,
        payload: Mapping[str, Any],
        current_age: int,
        current_stats: LifeStats,
        id_factory: IdFactory = generate_id,
    ) -> 'LifeScenario':
        """Bind a normalized scenario payload to ids and the moment it was generated."""
        return cls(
            id=id_factory(),
            title=payload["title"],
            description=payload["description"],
            context=payload["context"],
            choices=tuple(Choice.from_dict(c, id_factory) for c in payload["choices"]),
            current_age=current_age,
            current_stats=current_stats,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "context": self.context,
            "choices": [c.to_dict() for c in self.choices],
            "currentAge": self.current_age,
            "currentStats": self.current_stats.to_dict(),
        }


@dataclass(frozen=True)
class Outcome:
    """Resolved effect of a choice."""
    title: str
    description: str
    stat_changes: Tuple[StatChange, ...]
    impact: Impact
    years_to_advance: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Outcome':
        return cls(
            title=str(data["title"]),
            description=str(data["description"]),
            stat_changes=tuple(StatChange.from_dict(sc) for sc in data["statChanges"]),
            impact=data["impact"],
            years_to_advance=int(data["yearsToAdvance"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "statChanges": [sc.to_dict() for sc in self.stat_changes],
            "impact": self.impact,
            "yearsToAdvance": self.years_to_advance,
        }


@dataclass(frozen=True)
class TimelineEvent:
    """An entry in the append-only life history."""
    id: str
    year: int
    age: int
    title: str
    description: str
    category: Category
    impact: Impact
    stat_changes: Tuple[StatChange, ...]
    choice_made: Optional[Choice] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "year": self.year,
            "age": self.age,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "impact": self.impact,
            "statChanges": [sc.to_dict() for sc in self.stat_changes],
        }
        if self.choice_made is not None:
            data["choiceMade"] = self.choice_made.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TimelineEvent':
        choice = data.get("choiceMade")
        return cls(
            id=str(data["id"]),
            year=int(data["year"]),
            age=int(data["age"]),
            title=str(data["title"]),
            description=str(data["description"]),
            category=data["category"],
            impact=data["impact"],
            stat_changes=tuple(StatChange.from_dict(sc) for sc in data.get("statChanges", ())),
            choice_made=Choice.from_dict(choice) if choice else None,
        )


@dataclass(frozen=True)
class Achievement:
    """Awarded at simulation completion."""
    id: str
    title: str
    description: str
    icon: str
    unlocked_at: int
    rarity: Rarity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "unlockedAt": self.unlocked_at,
            "rarity": self.rarity,
        }


@dataclass(frozen=True)
class SimulationInsights:
    """Final narrative, score and achievements."""
    insights: Tuple[str, ...]
    life_score: int
    achievements: Tuple[Achievement, ...] = field(default_factory=tuple)

    @classmethod
    def from_generated(
        cls,
        payload: Mapping[str, Any],
        unlocked_at: int,
        id_factory: IdFactory = generate_id,
    ) -> 'SimulationInsights':
        """Bind a normalized insights payload to ids and the completion age."""
        achievements = tuple(
            Achievement(
                id=id_factory(),
                title=a["title"],
                description=a["description"],
                icon=ACHIEVEMENT_ICON,
                unlocked_at=unlocked_at,
                rarity=a["rarity"],
            )
            for a in payload["achievements"]
        )
        return cls(
            insights=tuple(payload["insights"]),
            life_score=int(payload["lifeScore"]),
            achievements=achievements,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "insights": list(self.insights),
            "lifeScore": self.life_score,
            "achievements": [a.to_dict() for a in self.achievements],
        }


def stats_payload(stats: LifeStats) -> Dict[str, int]:
    """Request payload shape for stats (happiness excluded)."""
    return stats.base_values()


def choice_texts(timeline: List[TimelineEvent]) -> List[str]:
    """Text of every choice made so far, oldest first."""
    return [e.choice_made.text for e in timeline if e.choice_made is not None]
