"""Intervention strategies - four interchangeable ways to nudge back to focus.

    hard_block.py: stop and require an explicit decision
    accountability.py: reflective prompt (handles every context)
    micro_task.py: three tiny next steps
    time_boxed.py: bounded exploration with a time limit
"""

from refocus.intervention.strategies.accountability import AccountabilityStrategy
from refocus.intervention.strategies.base import InterventionStrategy, focus_phrase
from refocus.intervention.strategies.hard_block import HardBlockStrategy
from refocus.intervention.strategies.micro_task import MicroTaskStrategy
from refocus.intervention.strategies.time_boxed import TimeBoxedStrategy, time_limit_minutes

__all__ = [
    "AccountabilityStrategy",
    "HardBlockStrategy",
    "InterventionStrategy",
    "MicroTaskStrategy",
    "TimeBoxedStrategy",
    "focus_phrase",
    "time_limit_minutes",
]
