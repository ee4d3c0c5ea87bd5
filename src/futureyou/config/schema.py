"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator


class SimulationSettings(BaseModel):
    """Age range and reproducibility settings."""
    default_start_age: int = Field(default=25, description="Starting age offered in setup")
    default_target_age: int = Field(default=65, description="Target age offered in setup")
    min_start_age: int = Field(default=18, ge=0, description="Youngest allowed starting age")
    max_start_age: int = Field(default=40, gt=0, description="Oldest allowed starting age")
    min_target_age: int = Field(default=50, gt=0, description="Youngest allowed target age")
    max_target_age: int = Field(default=90, gt=0, description="Oldest allowed target age")
    random_seed: int = Field(default=42, description="Seed for the meter random source")

    @model_validator(mode='after')
    def validate_age_ranges(self):
        """Ensure the start range sits below the target range."""
        if self.min_start_age > self.max_start_age:
            raise ValueError("min_start_age must not exceed max_start_age")
        if self.min_target_age > self.max_target_age:
            raise ValueError("min_target_age must not exceed max_target_age")
        if self.max_start_age >= self.min_target_age:
            raise ValueError(
                f"Start ages (≤{self.max_start_age}) must be below target ages "
                f"(≥{self.min_target_age})"
            )
        if not self.min_start_age <= self.default_start_age <= self.max_start_age:
            raise ValueError("default_start_age is outside the start age range")
        if not self.min_target_age <= self.default_target_age <= self.max_target_age:
            raise ValueError("default_target_age is outside the target age range")
        return self


class InitialStats(BaseModel):
    """Stats every simulation starts from (happiness is derived)."""
    money: int = Field(default=50, ge=0, le=100)
    health: int = Field(default=80, ge=0, le=100)
    career: int = Field(default=40, ge=0, le=100)
    relationships: int = Field(default=60, ge=0, le=100)


class Meters(BaseModel):
    """Regret/reward meter increments."""
    increment_base: int = Field(default=10, ge=0, description="Minimum added per impactful outcome")
    increment_span: int = Field(default=10, gt=0, description="Width of the random increment range")
    maximum: int = Field(default=100, gt=0, description="Upper bound for both meters")


class Generation(BaseModel):
    """Text generation settings."""
    model: str = Field(default="gpt-4.1-mini", description="Model used when no env override is set")
    temperature: float = Field(default=0.9, ge=0, le=2)
    max_output_tokens: int = Field(default=2048, gt=0)

    @field_validator("max_output_tokens", mode="before")
    @classmethod
    def coerce_max_output_tokens(cls, v):
        """YAML may hand us floats such as 2048.0."""
        if v is None:
            return v
        return int(v)


class Persistence(BaseModel):
    """Where simulation records are stored."""
    directory: str = Field(default=".futureyou", description="Directory holding saved records")
    record_name: str = Field(default="future-you-simulation", description="Name of the persisted record")


class Config(BaseModel):
    """Complete configuration for the life simulator."""
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    initial_stats: InitialStats = Field(default_factory=InitialStats)
    meters: Meters = Field(default_factory=Meters)
    generation: Generation = Field(default_factory=Generation)
    persistence: Persistence = Field(default_factory=Persistence)

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        return cls(**(data or {}))

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
