"""
Refocus configuration models.

Every section of args/refocus.yaml maps onto a pydantic model with bounded
defaults, so a partial file only overrides what it names. load_config falls
back to the defaults when the file is missing or invalid.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from refocus import CONFIG_PATH, PROJECT_ROOT
from refocus.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Detection (args/refocus.yaml -> detection)
# =============================================================================

class PlanningLoopConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_minutes: int = Field(default=30, ge=1)
    min_occurrences: int = Field(default=3, ge=1)
    min_duration_seconds: int = Field(default=15 * 60, ge=0)


class RabbitHoleConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    max_gap_seconds: int = Field(default=5 * 60, ge=1)
    moderate_duration_seconds: int = Field(default=30 * 60, ge=0)
    deep_duration_seconds: int = Field(default=60 * 60, ge=0)
    tab_explosion_threshold: int = Field(default=10, ge=0)
    min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ContextSwitchConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_minutes: int = Field(default=60, ge=1)
    high_switch_count: int = Field(default=20, ge=1)
    low_avg_duration_seconds: int = Field(default=3 * 60, ge=0)
    many_apps: int = Field(default=8, ge=1)
    min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)


class ProductiveProcrastinationConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_minutes: int = Field(default=30, ge=1)
    min_duration_seconds: int = Field(default=15 * 60, ge=0)
    full_confidence_seconds: int = Field(default=30 * 60, ge=1)


class DetectionConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    lookback_hours: float = Field(default=2.0, gt=0)
    planning_loop: PlanningLoopConfig = Field(default_factory=PlanningLoopConfig)
    research_rabbit_hole: RabbitHoleConfig = Field(default_factory=RabbitHoleConfig)
    context_switching: ContextSwitchConfig = Field(default_factory=ContextSwitchConfig)
    productive_procrastination: ProductiveProcrastinationConfig = Field(
        default_factory=ProductiveProcrastinationConfig
    )


# =============================================================================
# Gate / presentation
# =============================================================================

class CooldownConfig(BaseModel):
    """Minutes between interventions, per cooldown key. Extra keys add new ones."""

    model_config = ConfigDict(extra="allow")
    planning_loop: float = Field(default=20, ge=0)
    research_rabbit_hole: float = Field(default=30, ge=0)
    context_switching: float = Field(default=15, ge=0)
    off_track: float = Field(default=15, ge=0)
    productive_procrastination: float = Field(default=20, ge=0)

    def minutes_for(self, key: str) -> float | None:
        if key in type(self).model_fields:
            return getattr(self, key)
        return (self.model_extra or {}).get(key)


class GateConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    cooldown_minutes: CooldownConfig = Field(default_factory=CooldownConfig)
    default_cooldown_minutes: float = Field(default=30, ge=0)
    prompt_timeout_seconds: float = Field(default=120.0, gt=0)
    unresolved_refocus_seconds: float = Field(default=300.0, ge=0)


class AlignmentConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    cache_ttl_seconds: float = Field(default=5 * 60, ge=0)
    on_track_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    partial_ratio: float = Field(default=0.2, ge=0.0, le=1.0)


# =============================================================================
# Learning
# =============================================================================

class LearningConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_history_for_adaptation: int = Field(default=10, ge=1)
    adjustment_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    min_adaptation_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    rejection_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    ready_history_size: int = Field(default=20, ge=1)


# =============================================================================
# Loop / storage
# =============================================================================

class LoopConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    poll_interval_seconds: float = Field(default=5.0, gt=0)
    maintenance_interval_hours: float = Field(default=24.0, gt=0)
    retention_days: int = Field(default=90, ge=1)
    intervention_enabled: bool = Field(default=True)


class StorageConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    activity_db: str = Field(default="data/activity.db")
    profile_path: str = Field(default="data/profile.json")
    commitments_path: str = Field(default="data/commitments.json")

    def resolve(self, relative: str) -> Path:
        path = Path(relative)
        return path if path.is_absolute() else PROJECT_ROOT / path


class RefocusConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    alignment: AlignmentConfig = Field(default_factory=AlignmentConfig)
    learning: LearningConfig = Field(default_factory=LearningConfig)
    loop: LoopConfig = Field(default_factory=LoopConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


def load_config(path: Path | None = None) -> RefocusConfig:
    """Load and validate args/refocus.yaml, falling back to defaults."""
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return RefocusConfig.model_validate(raw.get("refocus", raw))
    except Exception as e:
        logger.warning("config_invalid_using_defaults", path=str(yaml_path), error=str(e))
        return RefocusConfig()


__all__ = [
    "AlignmentConfig",
    "ContextSwitchConfig",
    "DetectionConfig",
    "GateConfig",
    "LearningConfig",
    "LoopConfig",
    "PlanningLoopConfig",
    "ProductiveProcrastinationConfig",
    "RabbitHoleConfig",
    "RefocusConfig",
    "StorageConfig",
    "load_config",
]
