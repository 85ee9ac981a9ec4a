"""Intervention - deciding when and how to interrupt

Philosophy:
    An interruption costs focus too. Interrupt rarely, kindly, and in
    the voice the user asked for.

Components:
    gate.py: Cooldowns + thresholds, then one intervention end to end
    engine.py: Fixed strategy registry with total selection order
    notifier.py: Delivery seam plus a non-reentrant, timeout-bounded presenter
    strategies/: hard_block, accountability, micro_task, time_boxed

Configuration: args/refocus.yaml (gate)
"""

from refocus.intervention.engine import StrategyEngine
from refocus.intervention.gate import InterventionGate, cooldown_key, pattern_to_trigger
from refocus.intervention.notifier import (
    InterventionPresenter,
    LogNotifier,
    Notifier,
    PresentedOutcome,
)

__all__ = [
    "InterventionGate",
    "InterventionPresenter",
    "LogNotifier",
    "Notifier",
    "PresentedOutcome",
    "StrategyEngine",
    "cooldown_key",
    "pattern_to_trigger",
]
