"""Daemon - the tick-driven focus loop

Components:
    runner.py: FocusLoop (tick, run, run_maintenance) and the CLI entry point
    sources.py: ActivitySource seam plus a JSONL replay source

Configuration: args/refocus.yaml (loop, storage)
"""

from refocus.daemon.runner import FocusLoop, TickResult
from refocus.daemon.sources import ActivitySource, ReplayActivitySource

__all__ = [
    "ActivitySource",
    "FocusLoop",
    "ReplayActivitySource",
    "TickResult",
]
