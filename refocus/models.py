"""
Refocus Data Models

Canonical data structures shared by detection, intervention and learning.

Usage:
    from refocus.models import ActivityRecord, InterventionRecord, UserProfile

Closed value sets are StrEnums so they serialize as plain strings in JSON and
SQLite while still being checked at construction time.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping


class ActivityCategory(StrEnum):
    CODING = "coding"
    PLANNING = "planning"
    RESEARCH = "research"
    COMMUNICATION = "communication"
    OTHER = "other"


class Alignment(StrEnum):
    ON_TRACK = "on_track"
    OFF_TRACK = "off_track"
    PRODUCTIVE_PROCRASTINATION = "productive_procrastination"


class PatternType(StrEnum):
    PLANNING_LOOP = "planning_loop"
    RESEARCH_RABBIT_HOLE = "research_rabbit_hole"
    CONTEXT_SWITCHING = "context_switching"
    NONE = "none"


class PatternOrigin(StrEnum):
    """Which detector produced a PatternDetectionResult."""

    ACTIVITY_PATTERN = "activity_pattern"
    PRODUCTIVE_PROCRASTINATION = "productive_procrastination"


class Trigger(StrEnum):
    SHINY_OBJECT = "shiny_object"
    PLANNING_PROCRASTINATION = "planning_procrastination"
    CONTEXT_SWITCH = "context_switch"
    RESEARCH_RABBIT_HOLE = "research_rabbit_hole"


class StrategyType(StrEnum):
    HARD_BLOCK = "hard_block"
    ACCOUNTABILITY = "accountability"
    MICRO_TASK = "micro_task"
    TIME_BOXED = "time_boxed"


class InterventionAction(StrEnum):
    BLOCK = "block"
    PROMPT = "prompt"
    SUGGEST = "suggest"
    TIMEBOX = "timebox"


class UserResponseType(StrEnum):
    COMPLIED = "complied"
    OVERRODE = "overrode"
    IGNORED = "ignored"


class Trend(StrEnum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class Tone(StrEnum):
    DIRECT = "direct"
    GENTLE = "gentle"
    TEACHING = "teaching"
    CURIOUS = "curious"


class Formality(StrEnum):
    COACH = "coach"
    FRIEND = "friend"
    THERAPIST = "therapist"


class Visibility(StrEnum):
    INVISIBLE = "invisible"
    OPTIONAL = "optional"
    EXPLICIT = "explicit"


def _parse_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


# ─────────────────────────────────────────────────────────────────────────────
# Activity
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ActivitySnapshot:
    """Raw observation of the foreground app, as produced by an ActivitySource."""

    timestamp: datetime
    app: str
    window_title: str
    url: str | None = None

    def describe(self) -> str:
        """Short human-readable label used in intervention messages."""
        return f"{self.app} - {self.window_title}" if self.window_title else self.app

    def same_activity(self, other: ActivitySnapshot | None) -> bool:
        if other is None:
            return False
        return (
            self.app == other.app
            and self.window_title == other.window_title
            and self.url == other.url
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "app": self.app,
            "window_title": self.window_title,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivitySnapshot:
        return cls(
            timestamp=_parse_dt(data["timestamp"]),
            app=data["app"],
            window_title=data.get("window_title", ""),
            url=data.get("url"),
        )


@dataclass
class ActivityRecord:
    """
    One span of observed activity.

    Attributes:
        timestamp: When the span started
        app: Foreground application name
        window_title: Window title at the start of the span
        url: Browser URL if known
        duration: Seconds spent (back-filled when the next activity starts)
        category: What kind of work this looks like
        alignment: Relation to the day's commitment
        commitment: The commitment text at the time of observation
        id: Store row id, once persisted
    """

    timestamp: datetime
    app: str
    window_title: str
    duration: float = 0.0
    category: ActivityCategory = ActivityCategory.OTHER
    alignment: Alignment = Alignment.ON_TRACK
    commitment: str = ""
    url: str | None = None
    id: int | None = None

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"duration must be >= 0, got {self.duration}")
        self.category = ActivityCategory(self.category)
        self.alignment = Alignment(self.alignment)

    def to_snapshot(self) -> ActivitySnapshot:
        return ActivitySnapshot(
            timestamp=self.timestamp,
            app=self.app,
            window_title=self.window_title,
            url=self.url,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "app": self.app,
            "window_title": self.window_title,
            "url": self.url,
            "duration": self.duration,
            "category": self.category.value,
            "alignment": self.alignment.value,
            "commitment": self.commitment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivityRecord:
        return cls(
            id=data.get("id"),
            timestamp=_parse_dt(data["timestamp"]),
            app=data["app"],
            window_title=data.get("window_title") or "",
            url=data.get("url"),
            duration=float(data.get("duration") or 0),
            category=ActivityCategory(data.get("category", "other")),
            alignment=Alignment(data.get("alignment", "on_track")),
            commitment=data.get("commitment") or "",
        )


# ─────────────────────────────────────────────────────────────────────────────
# Detection
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class PatternEvidence:
    duration: float | None = None
    frequency: int | None = None
    recent_activities: list[ActivitySnapshot] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration": self.duration,
            "frequency": self.frequency,
            "recent_activities": [a.to_dict() for a in self.recent_activities],
        }


@dataclass
class PatternDetectionResult:
    pattern_type: PatternType
    confidence: float = 0.0
    evidence: PatternEvidence = field(default_factory=PatternEvidence)
    recommendation: str | None = None
    origin: PatternOrigin = PatternOrigin.ACTIVITY_PATTERN

    @classmethod
    def none(cls, origin: PatternOrigin = PatternOrigin.ACTIVITY_PATTERN) -> PatternDetectionResult:
        return cls(pattern_type=PatternType.NONE, confidence=0.0, origin=origin)

    @property
    def detected(self) -> bool:
        return self.pattern_type != PatternType.NONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "pattern_type": self.pattern_type.value,
            "confidence": self.confidence,
            "evidence": self.evidence.to_dict(),
            "recommendation": self.recommendation,
            "origin": self.origin.value,
        }


@dataclass
class AlignmentResult:
    """Verdict of an AlignmentClassifier for one activity."""

    aligned: bool
    alignment: Alignment
    confidence: float
    reasoning: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "aligned": self.aligned,
            "alignment": self.alignment.value,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Intervention
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ProfileView:
    """Read-only slice of the profile a strategy is allowed to see."""

    strategy: StrategyType
    tone: Tone
    formality: Formality
    patterns: Mapping[str, bool] = field(default_factory=lambda: MappingProxyType({}))

    def has_pattern(self, name: str) -> bool:
        return bool(self.patterns.get(name, False))


@dataclass(frozen=True)
class InterventionContext:
    trigger: Trigger
    current_activity: str
    commitment: str
    time_of_day: str  # "HH:MM"
    user_profile: ProfileView

    @property
    def hour(self) -> int:
        return int(self.time_of_day.split(":")[0])


@dataclass
class InterventionResult:
    type: StrategyType
    message: str
    action: InterventionAction
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def time_limit(self) -> float | None:
        return self.metadata.get("time_limit")

    @property
    def micro_tasks(self) -> list[str]:
        return self.metadata.get("micro_tasks", [])

    @property
    def accountability(self) -> str | None:
        return self.metadata.get("accountability")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "action": self.action.value,
            "metadata": dict(self.metadata),
        }


@dataclass
class UserResponse:
    """What the user did with a presented intervention."""

    type: UserResponseType
    time_to_refocus: float | None = None
    capture_as_footnote: bool = False

    @classmethod
    def ignored(cls) -> UserResponse:
        return cls(type=UserResponseType.IGNORED)


# ─────────────────────────────────────────────────────────────────────────────
# Learning
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class InterventionRecord:
    """One outcome in the behavior-tracking ledger. Never mutated once logged."""

    timestamp: datetime
    trigger: Trigger
    style_used: StrategyType
    user_response: UserResponseType
    time_to_refocus: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "trigger": self.trigger.value,
            "style_used": self.style_used.value,
            "user_response": self.user_response.value,
            "time_to_refocus": self.time_to_refocus,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InterventionRecord:
        return cls(
            timestamp=_parse_dt(data["timestamp"]),
            trigger=Trigger(data["trigger"]),
            style_used=StrategyType(data["style_used"]),
            user_response=UserResponseType(data["user_response"]),
            time_to_refocus=float(data.get("time_to_refocus") or 0),
        )


@dataclass
class EffectivenessMetrics:
    compliance_rate: float = 0.0
    average_refocus_time: float = 0.0
    override_rate: float = 0.0
    ignore_rate: float = 0.0
    recent_trend: Trend = Trend.STABLE

    def to_dict(self) -> dict[str, Any]:
        return {
            "compliance_rate": self.compliance_rate,
            "average_refocus_time": self.average_refocus_time,
            "override_rate": self.override_rate,
            "ignore_rate": self.ignore_rate,
            "recent_trend": self.recent_trend.value,
        }


@dataclass(frozen=True)
class AdaptationEvent:
    timestamp: datetime
    from_strategy: StrategyType
    to_strategy: StrategyType
    reason: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "from_strategy": self.from_strategy.value,
            "to_strategy": self.to_strategy.value,
            "reason": self.reason,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AdaptationEvent:
        return cls(
            timestamp=_parse_dt(data["timestamp"]),
            from_strategy=StrategyType(data["from_strategy"]),
            to_strategy=StrategyType(data["to_strategy"]),
            reason=data.get("reason", ""),
            confidence=float(data.get("confidence", 0)),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class ProcrastinationPatterns:
    planning_instead_of_doing: bool = False
    research_rabbit_holes: bool = False
    tool_setup_dopamine: bool = False
    meeting_avoidance: bool = False

    def to_dict(self) -> dict[str, bool]:
        return {
            "planning_instead_of_doing": self.planning_instead_of_doing,
            "research_rabbit_holes": self.research_rabbit_holes,
            "tool_setup_dopamine": self.tool_setup_dopamine,
            "meeting_avoidance": self.meeting_avoidance,
        }


@dataclass
class InterventionStyle:
    primary: StrategyType = StrategyType.ACCOUNTABILITY
    fallback: StrategyType = StrategyType.MICRO_TASK


@dataclass
class CommunicationPrefs:
    tone: Tone = Tone.GENTLE
    formality: Formality = Formality.FRIEND


@dataclass
class LearningPrefs:
    visibility: Visibility = Visibility.OPTIONAL
    adaptation_enabled: bool = True


@dataclass
class BehaviorTracking:
    current_strategy: StrategyType
    last_adapted: datetime
    intervention_history: list[InterventionRecord] = field(default_factory=list)
    effectiveness_scores: dict[StrategyType, float] = field(
        default_factory=lambda: {s: 0.0 for s in StrategyType}
    )
    adaptations: list[AdaptationEvent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "intervention_history": [r.to_dict() for r in self.intervention_history],
            "effectiveness_scores": {s.value: v for s, v in self.effectiveness_scores.items()},
            "current_strategy": self.current_strategy.value,
            "last_adapted": self.last_adapted.isoformat(),
            "adaptations": [a.to_dict() for a in self.adaptations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BehaviorTracking:
        scores = {s: 0.0 for s in StrategyType}
        for key, value in (data.get("effectiveness_scores") or {}).items():
            scores[StrategyType(key)] = float(value)
        return cls(
            current_strategy=StrategyType(data["current_strategy"]),
            last_adapted=_parse_dt(data["last_adapted"]),
            intervention_history=[
                InterventionRecord.from_dict(r) for r in data.get("intervention_history", [])
            ],
            effectiveness_scores=scores,
            adaptations=[AdaptationEvent.from_dict(a) for a in data.get("adaptations", [])],
        )


@dataclass
class UserProfile:
    """
    Onboarding answers plus the adaptive-learning state.

    The ProfileStore owns the only mutable copy. Everything else works on
    snapshots (see `snapshot()`) and hands back ProfileUpdate requests.
    """

    name: str
    role: str = "developer"
    procrastination_patterns: ProcrastinationPatterns = field(
        default_factory=ProcrastinationPatterns
    )
    intervention_style: InterventionStyle = field(default_factory=InterventionStyle)
    communication: CommunicationPrefs = field(default_factory=CommunicationPrefs)
    learning: LearningPrefs = field(default_factory=LearningPrefs)
    behavior_tracking: BehaviorTracking | None = None

    def __post_init__(self):
        if self.behavior_tracking is None:
            self.behavior_tracking = BehaviorTracking(
                current_strategy=self.intervention_style.primary,
                last_adapted=datetime.now(),
            )

    @classmethod
    def create_default(cls, name: str = "me", role: str = "developer") -> UserProfile:
        return cls(name=name, role=role)

    def snapshot(self) -> UserProfile:
        return copy.deepcopy(self)

    def view(self) -> ProfileView:
        return ProfileView(
            strategy=self.behavior_tracking.current_strategy,
            tone=self.communication.tone,
            formality=self.communication.formality,
            patterns=MappingProxyType(self.procrastination_patterns.to_dict()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "role": self.role,
            "procrastination_patterns": self.procrastination_patterns.to_dict(),
            "intervention_style": {
                "primary": self.intervention_style.primary.value,
                "fallback": self.intervention_style.fallback.value,
            },
            "communication": {
                "tone": self.communication.tone.value,
                "formality": self.communication.formality.value,
            },
            "learning": {
                "visibility": self.learning.visibility.value,
                "adaptation_enabled": self.learning.adaptation_enabled,
            },
            "behavior_tracking": self.behavior_tracking.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserProfile:
        style = data.get("intervention_style", {})
        comm = data.get("communication", {})
        learning = data.get("learning", {})
        tracking = data.get("behavior_tracking")
        return cls(
            name=data.get("name", "me"),
            role=data.get("role", "developer"),
            procrastination_patterns=ProcrastinationPatterns(
                **data.get("procrastination_patterns", {})
            ),
            intervention_style=InterventionStyle(
                primary=StrategyType(style.get("primary", "accountability")),
                fallback=StrategyType(style.get("fallback", "micro_task")),
            ),
            communication=CommunicationPrefs(
                tone=Tone(comm.get("tone", "gentle")),
                formality=Formality(comm.get("formality", "friend")),
            ),
            learning=LearningPrefs(
                visibility=Visibility(learning.get("visibility", "optional")),
                adaptation_enabled=learning.get("adaptation_enabled", True),
            ),
            behavior_tracking=BehaviorTracking.from_dict(tracking) if tracking else None,
        )


@dataclass
class DailyCommitment:
    date: str  # YYYY-MM-DD
    main_thought: str
    footnotes: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "main_thought": self.main_thought,
            "footnotes": list(self.footnotes),
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DailyCommitment:
        completed = data.get("completed_at")
        return cls(
            date=data["date"],
            main_thought=data["main_thought"],
            footnotes=list(data.get("footnotes", [])),
            created_at=_parse_dt(data.get("created_at") or datetime.now()),
            completed_at=_parse_dt(completed) if completed else None,
        )
