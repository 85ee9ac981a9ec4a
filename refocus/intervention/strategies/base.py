"""
Intervention strategy interface.

Each strategy decides whether it suits a context (`can_handle`) and turns the
context into a concrete InterventionResult (`execute`). Strategies are
stateless and registered once in the StrategyEngine.
"""

from abc import ABC, abstractmethod

from refocus.models import InterventionContext, InterventionResult, StrategyType

GENERIC_FOCUS = "your main focus"


def focus_phrase(context: InterventionContext) -> str:
    """Quoted commitment, or a generic phrase when none was declared."""
    commitment = context.commitment.strip()
    return f'"{commitment}"' if commitment else GENERIC_FOCUS


def activity_phrase(context: InterventionContext) -> str:
    activity = context.current_activity.strip()
    return f'"{activity}"' if activity else "this"


class InterventionStrategy(ABC):
    """Base class for the four intervention behaviors."""

    strategy_type: StrategyType

    @abstractmethod
    def can_handle(self, context: InterventionContext) -> bool:
        ...

    @abstractmethod
    def execute(self, context: InterventionContext) -> InterventionResult:
        ...

    def _fill(self, template: str, context: InterventionContext, **extra) -> str:
        return template.format(
            focus=focus_phrase(context),
            activity=activity_phrase(context),
            **extra,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
