"""Time-boxed exploration: allow the detour, but only for a fixed number of minutes."""

from refocus.intervention.strategies.base import InterventionStrategy
from refocus.models import (
    Formality,
    InterventionAction,
    InterventionContext,
    InterventionResult,
    StrategyType,
    Tone,
    Trigger,
)

BASE_MINUTES: dict[Trigger, float] = {
    Trigger.RESEARCH_RABBIT_HOLE: 10,
    Trigger.SHINY_OBJECT: 5,
    Trigger.PLANNING_PROCRASTINATION: 10,
    Trigger.CONTEXT_SWITCH: 5,
}

# Later in the day the box shrinks.
FATIGUE_HOUR = 15
FATIGUE_MULTIPLIER = 0.5

MESSAGES: dict[Tone, dict[Formality, str]] = {
    Tone.DIRECT: {
        Formality.COACH: (
            "You have {minutes:g} minutes for {activity}. Timer starts now. Then back to {focus}."
        ),
        Formality.FRIEND: "Fine. {minutes:g} minutes for this, then you're back on {focus}. Deal?",
        Formality.THERAPIST: (
            "Let's make a deal: {minutes:g} minutes for {activity}, then we return to {focus}."
        ),
    },
    Tone.GENTLE: {
        Formality.COACH: (
            "How about {minutes:g} minutes for {activity}? Then we can refocus on {focus}."
        ),
        Formality.FRIEND: (
            "I know this is interesting. Take {minutes:g} minutes, then let's get back to {focus}."
        ),
        Formality.THERAPIST: (
            "I understand the pull. Would {minutes:g} minutes satisfy your curiosity, "
            "then back to {focus}?"
        ),
    },
    Tone.TEACHING: {
        Formality.COACH: (
            "Time-boxing allows exploration without derailment. "
            "{minutes:g} minutes for {activity}, then {focus}."
        ),
        Formality.FRIEND: (
            "Pro move: {minutes:g} minutes to scratch this itch, "
            "then back to focused work on {focus}."
        ),
        Formality.THERAPIST: (
            "Curiosity is valuable when bounded. Let's honor it: "
            "{minutes:g} minutes, then return to {focus}."
        ),
    },
    Tone.CURIOUS: {
        Formality.COACH: (
            "What could you discover about {activity} in {minutes:g} minutes? Then back to {focus}."
        ),
        Formality.FRIEND: (
            "If you had {minutes:g} minutes to explore this, what would you look for? "
            "Then back to {focus}."
        ),
        Formality.THERAPIST: (
            "How would it feel to give yourself {minutes:g} minutes here, "
            "knowing you'll return to {focus}?"
        ),
    },
}


def time_limit_minutes(trigger: Trigger, hour: int) -> float:
    """Base minutes for the trigger, halved from 15:00 onward. Not rounded."""
    multiplier = FATIGUE_MULTIPLIER if hour >= FATIGUE_HOUR else 1
    return BASE_MINUTES[trigger] * multiplier


class TimeBoxedStrategy(InterventionStrategy):
    strategy_type = StrategyType.TIME_BOXED

    def can_handle(self, context: InterventionContext) -> bool:
        profile = context.user_profile
        return (
            context.trigger in (Trigger.RESEARCH_RABBIT_HOLE, Trigger.SHINY_OBJECT)
            or profile.has_pattern("research_rabbit_holes")
            or profile.has_pattern("tool_setup_dopamine")
        )

    def execute(self, context: InterventionContext) -> InterventionResult:
        profile = context.user_profile
        minutes = time_limit_minutes(context.trigger, context.hour)
        return InterventionResult(
            type=self.strategy_type,
            message=self._fill(MESSAGES[profile.tone][profile.formality], context, minutes=minutes),
            action=InterventionAction.TIMEBOX,
            metadata={"time_limit": minutes},
        )
