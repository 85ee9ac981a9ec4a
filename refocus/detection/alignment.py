"""
Commitment Alignment

Decides whether an activity serves the day's commitment.

Components:
    categorize_activity(): app/window/url -> activity category (rule table)
    AlignmentClassifier: pluggable verdict provider (may fail)
    KeywordAlignmentClassifier: deterministic keyword-overlap classifier
    CommitmentMatcher: TTL-cached front door that fails open to keywords

Usage:
    from refocus.detection.alignment import CommitmentMatcher, categorize_activity

    matcher = CommitmentMatcher(classifier=my_classifier)
    verdict = await matcher.check_alignment(snapshot, "Ship the billing export")
"""

import re
from abc import ABC, abstractmethod

from refocus.config import AlignmentConfig
from refocus.logging_config import get_logger
from refocus.models import ActivityCategory, ActivitySnapshot, Alignment, AlignmentResult
from refocus.state.keyed_store import KeyedTTLStore

logger = get_logger(__name__)

STOP_WORDS = frozenset(
    {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
)

CODING_APPS = ("code", "vim", "sublime", "intellij", "xcode")
CODING_EXTENSIONS = (".ts", ".js", ".py", ".java", ".go")
PLANNING_APPS = ("notion", "obsidian", "roam")
BROWSERS = ("chrome", "safari", "firefox")
RESEARCH_URL_MARKERS = ("stackoverflow", "github.com", "docs.")
COMMUNICATION_APPS = ("slack", "mail", "zoom", "teams")
DESCRIPTION_LABELS = re.compile(r"^(App|Window|URL): ", re.MULTILINE)


def categorize_activity(snapshot: ActivitySnapshot) -> ActivityCategory:
    """First matching rule wins: coding, planning, research, communication."""
    app = snapshot.app.lower()
    window = snapshot.window_title.lower()
    url = (snapshot.url or "").lower()

    if any(a in app for a in CODING_APPS) or any(ext in window for ext in CODING_EXTENSIONS):
        return ActivityCategory.CODING

    if any(a in app for a in PLANNING_APPS) or (
        "notes" in app and ("plan" in window or "todo" in window)
    ):
        return ActivityCategory.PLANNING

    if any(b in app for b in BROWSERS) and (
        any(m in url for m in RESEARCH_URL_MARKERS) or "documentation" in window
    ):
        return ActivityCategory.RESEARCH

    if any(a in app for a in COMMUNICATION_APPS):
        return ActivityCategory.COMMUNICATION

    return ActivityCategory.OTHER


def describe_activity(snapshot: ActivitySnapshot) -> str:
    """Multi-line description handed to classifiers."""
    description = f"App: {snapshot.app}"
    if snapshot.window_title:
        description += f"\nWindow: {snapshot.window_title}"
    if snapshot.url:
        description += f"\nURL: {snapshot.url}"
    return description


def extract_keywords(text: str) -> list[str]:
    return [w for w in re.split(r"\s+", text.lower()) if len(w) > 2 and w not in STOP_WORDS]


def keyword_alignment(
    activity_text: str,
    commitment: str,
    on_track_ratio: float = 0.5,
    partial_ratio: float = 0.2,
) -> AlignmentResult:
    """Share of commitment keywords present in the activity text decides the verdict."""
    keywords = extract_keywords(commitment)
    haystack = activity_text.lower()
    matches = [kw for kw in keywords if kw in haystack]
    ratio = len(matches) / max(len(keywords), 1)

    if ratio > on_track_ratio:
        return AlignmentResult(
            aligned=True,
            alignment=Alignment.ON_TRACK,
            confidence=ratio,
            reasoning=f"Matched keywords: {', '.join(matches)}",
        )
    if ratio > partial_ratio:
        return AlignmentResult(
            aligned=False,
            alignment=Alignment.PRODUCTIVE_PROCRASTINATION,
            confidence=0.5,
            reasoning=f"Partial keyword matches: {', '.join(matches)}",
        )
    return AlignmentResult(
        aligned=False,
        alignment=Alignment.OFF_TRACK,
        confidence=1 - ratio,
        reasoning="No significant keyword matches found",
    )


# ─────────────────────────────────────────────────────────────────────────────
# Classifiers
# ─────────────────────────────────────────────────────────────────────────────


class AlignmentClassifier(ABC):
    """Produces an alignment verdict for an activity description."""

    @abstractmethod
    async def analyze(self, description: str, commitment: str) -> AlignmentResult:
        """
        Classify one activity against the commitment.

        Raises:
            ClassifierError: (or any exception) when no verdict can be produced.
        """


class KeywordAlignmentClassifier(AlignmentClassifier):
    def __init__(self, config: AlignmentConfig | None = None):
        self.config = config or AlignmentConfig()

    async def analyze(self, description: str, commitment: str) -> AlignmentResult:
        # match on the values only, not the "App:"/"Window:"/"URL:" labels
        text = DESCRIPTION_LABELS.sub("", description)
        return keyword_alignment(
            text,
            commitment,
            self.config.on_track_ratio,
            self.config.partial_ratio,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Matcher
# ─────────────────────────────────────────────────────────────────────────────


class CommitmentMatcher:
    """Classifier front door with a TTL cache and a keyword fallback.

    Args:
        classifier: Primary classifier; defaults to the keyword classifier.
        config: Cache TTL and keyword ratios.
        cache: Store for cached verdicts (injected in tests).
    """

    def __init__(
        self,
        classifier: AlignmentClassifier | None = None,
        config: AlignmentConfig | None = None,
        cache: KeyedTTLStore | None = None,
    ):
        self.config = config or AlignmentConfig()
        self.classifier = classifier or KeywordAlignmentClassifier(self.config)
        self.cache = cache if cache is not None else KeyedTTLStore()

    @staticmethod
    def cache_key(snapshot: ActivitySnapshot, commitment: str) -> str:
        return f"{snapshot.app}|{snapshot.window_title}|{commitment}"

    def categorize(self, snapshot: ActivitySnapshot) -> ActivityCategory:
        return categorize_activity(snapshot)

    async def check_alignment(self, snapshot: ActivitySnapshot, commitment: str) -> AlignmentResult:
        """Verdict for one snapshot. Never raises."""
        if not commitment.strip():
            return AlignmentResult(
                aligned=True,
                alignment=Alignment.ON_TRACK,
                confidence=0.0,
                reasoning="No commitment declared",
            )

        key = self.cache_key(snapshot, commitment)
        cached = self.cache.get(key, now=snapshot.timestamp)
        if cached is not None:
            return cached

        try:
            result = await self.classifier.analyze(describe_activity(snapshot), commitment)
        except Exception as e:
            logger.warning(
                "alignment_classifier_failed",
                classifier=type(self.classifier).__name__,
                error=str(e),
            )
            return self.keyword_fallback(snapshot, commitment)

        self.cache.set(key, result, self.config.cache_ttl_seconds, now=snapshot.timestamp)
        return result

    def keyword_fallback(self, snapshot: ActivitySnapshot, commitment: str) -> AlignmentResult:
        activity_text = f"{snapshot.app} {snapshot.window_title} {snapshot.url or ''}"
        return keyword_alignment(
            activity_text,
            commitment,
            self.config.on_track_ratio,
            self.config.partial_ratio,
        )

    def clear_expired_cache(self) -> int:
        return self.cache.evict_expired()
