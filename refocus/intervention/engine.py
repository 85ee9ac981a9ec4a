"""
Tool: Strategy Engine
Purpose: Pick and run the intervention strategy for a trigger, personalized to the profile

Selection order is fixed and total:
    1. profile's current strategy, if it can handle the context
    2. profile's fallback strategy, if it can handle the context
    3. Accountability, which handles anything

Usage:
    python -m refocus.intervention.engine --trigger shiny_object --activity "YouTube" \\
        --commitment "Ship the billing export"
    python -m refocus.intervention.engine --trigger context_switch --strategy micro_task --hour 16

Dependencies:
    - refocus.intervention.strategies

Output:
    JSON result with success status and the rendered intervention
"""

import argparse
import json
import sys
from datetime import datetime

from refocus.intervention.strategies import (
    AccountabilityStrategy,
    HardBlockStrategy,
    InterventionStrategy,
    MicroTaskStrategy,
    TimeBoxedStrategy,
)
from refocus.logging_config import get_logger
from refocus.models import (
    InterventionContext,
    InterventionResult,
    StrategyType,
    Trigger,
    UserProfile,
)

logger = get_logger(__name__)


class StrategyEngine:
    """Fixed registry of the four strategies."""

    def __init__(self):
        self._strategies: dict[StrategyType, InterventionStrategy] = {
            StrategyType.HARD_BLOCK: HardBlockStrategy(),
            StrategyType.ACCOUNTABILITY: AccountabilityStrategy(),
            StrategyType.MICRO_TASK: MicroTaskStrategy(),
            StrategyType.TIME_BOXED: TimeBoxedStrategy(),
        }

    def get_strategy(self, strategy: StrategyType) -> InterventionStrategy:
        return self._strategies[StrategyType(strategy)]

    @staticmethod
    def build_context(
        profile: UserProfile,
        trigger: Trigger,
        current_activity: str,
        commitment: str,
        now: datetime | None = None,
    ) -> InterventionContext:
        now = now or datetime.now()
        return InterventionContext(
            trigger=Trigger(trigger),
            current_activity=current_activity,
            commitment=commitment,
            time_of_day=now.strftime("%H:%M"),
            user_profile=profile.view(),
        )

    def select(
        self,
        profile: UserProfile,
        trigger: Trigger,
        current_activity: str,
        commitment: str,
        now: datetime | None = None,
    ) -> InterventionResult:
        """Run the first strategy in selection order that can handle the context."""
        context = self.build_context(profile, trigger, current_activity, commitment, now)

        candidates = (
            profile.behavior_tracking.current_strategy,
            profile.intervention_style.fallback,
        )
        for strategy_type in candidates:
            strategy = self._strategies[strategy_type]
            if strategy.can_handle(context):
                return strategy.execute(context)

        logger.debug(
            "strategy_terminal_fallback",
            trigger=context.trigger.value,
            current=profile.behavior_tracking.current_strategy.value,
        )
        return self._strategies[StrategyType.ACCOUNTABILITY].execute(context)

    def applicable_strategies(
        self,
        profile: UserProfile,
        trigger: Trigger,
        current_activity: str,
        commitment: str,
        now: datetime | None = None,
    ) -> list[StrategyType]:
        context = self.build_context(profile, trigger, current_activity, commitment, now)
        return [name for name, s in self._strategies.items() if s.can_handle(context)]

    def preview_strategy(
        self,
        strategy: StrategyType,
        profile: UserProfile,
        trigger: Trigger,
        current_activity: str,
        commitment: str,
        now: datetime | None = None,
    ) -> InterventionResult | None:
        """Render one specific strategy, or None if it cannot handle the context."""
        context = self.build_context(profile, trigger, current_activity, commitment, now)
        chosen = self._strategies[StrategyType(strategy)]
        if not chosen.can_handle(context):
            return None
        return chosen.execute(context)


def main():
    from refocus.config import load_config
    from refocus.state.profile_store import JsonProfileStore, default_profile

    parser = argparse.ArgumentParser(description="Preview interventions")
    parser.add_argument("--trigger", required=True, choices=[t.value for t in Trigger])
    parser.add_argument("--activity", default="")
    parser.add_argument("--commitment", default="")
    parser.add_argument("--strategy", choices=[s.value for s in StrategyType])
    parser.add_argument("--hour", type=int, help="Pretend it is this hour (0-23)")
    args = parser.parse_args()

    config = load_config()
    profile = JsonProfileStore(config.storage.resolve(config.storage.profile_path)).get()
    profile = profile or default_profile()

    now = datetime.now()
    if args.hour is not None:
        now = now.replace(hour=args.hour, minute=0)

    engine = StrategyEngine()
    if args.strategy:
        result = engine.preview_strategy(
            StrategyType(args.strategy), profile, Trigger(args.trigger), args.activity, args.commitment, now
        )
        if result is None:
            print(json.dumps({"success": False, "error": f"{args.strategy} cannot handle {args.trigger}"}))
            sys.exit(1)
    else:
        result = engine.select(profile, Trigger(args.trigger), args.activity, args.commitment, now)

    applicable = engine.applicable_strategies(
        profile, Trigger(args.trigger), args.activity, args.commitment, now
    )
    print(
        json.dumps(
            {
                "success": True,
                "intervention": result.to_dict(),
                "applicable": [s.value for s in applicable],
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
