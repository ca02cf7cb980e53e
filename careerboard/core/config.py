"""Configuration models and YAML loader for the analytics engine."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

RankMetric = Literal["score", "clicks", "saves"]


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/careerboard.db"


class ScoringConfig(BaseModel):
    """Weights for the composite engagement score.

    Keep these fixed for a deployment so scores stay comparable over time.
    """

    click_weight: float = Field(default=3.0, ge=0.0)
    save_weight: float = Field(default=2.0, ge=0.0)
    view_weight: float = Field(default=0.1, ge=0.0)
    rate_weight: float = Field(default=2.0, ge=0.0)
    daily_weight: float = Field(default=5.0, ge=0.0)


class TierConfig(BaseModel):
    """Click-per-unique-view thresholds (percent) for engagement tiers."""

    high_threshold: float = Field(default=15.0, ge=0.0)
    medium_threshold: float = Field(default=5.0, ge=0.0)

    @model_validator(mode="after")
    def medium_not_above_high(self) -> "TierConfig":
        if self.medium_threshold > self.high_threshold:
            msg = "medium_threshold must not exceed high_threshold"
            raise ValueError(msg)
        return self


class ReportConfig(BaseModel):
    """Defaults for dashboard reports."""

    days: int = Field(default=30, ge=1, le=365)
    top_n: int = Field(default=5, ge=1)
    metric: RankMetric = "score"


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    tiers: TierConfig = Field(default_factory=TierConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
