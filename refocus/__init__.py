"""
Refocus - Closed-loop adaptive intervention engine

Philosophy:
    One commitment per day. When attention drifts, nudge back gently,
    notice which nudges actually work, and quietly lean on those.

Components:
    detection/: Distraction pattern detection over activity windows
        - Planning loops, research rabbit holes, context switching
        - Productive procrastination (feels useful, avoids the real task)
        - Commitment alignment with keyword fallback

    intervention/: Deciding when and how to intervene
        - gate.py: cooldowns + thresholds
        - engine.py: strategy registry and selection
        - notifier.py: non-reentrant, timeout-bounded presentation

    learning/: Closing the loop
        - behavior_tracker.py: append-only outcome log
        - effectiveness.py: pure scoring and trend functions
        - adaptive_learner.py: confidence-gated strategy switching
        - strategy_selector.py: per-trigger and time-of-day suggestions
        - insights.py: weekly summary

    state/: Persistence seams (profile, commitment, activity log)

    daemon/: Tick-driven loop wiring everything together

Configuration: args/refocus.yaml
Data: data/activity.db, data/profile.json, data/commitments.json
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_ROOT = Path(__file__).parent
ARGS_DIR = PROJECT_ROOT / "args"
DATA_DIR = PROJECT_ROOT / "data"
CONFIG_PATH = ARGS_DIR / "refocus.yaml"

__version__ = "0.3.0"

__all__ = [
    "PROJECT_ROOT",
    "PACKAGE_ROOT",
    "ARGS_DIR",
    "DATA_DIR",
    "CONFIG_PATH",
    "__version__",
]
