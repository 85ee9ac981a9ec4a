"""Hard block: stop the detour and require an explicit decision to continue."""

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

MESSAGES: dict[Tone, dict[Trigger, str]] = {
    Tone.DIRECT: {
        Trigger.SHINY_OBJECT: "Stop. You committed to {focus}. This isn't it.",
        Trigger.RESEARCH_RABBIT_HOLE: (
            "This is a research rabbit hole. You know what you're supposed to be doing."
        ),
        Trigger.PLANNING_PROCRASTINATION: "You're planning instead of doing. Back to {focus}.",
        Trigger.CONTEXT_SWITCH: "Context switching detected. Return to {focus}.",
    },
    Tone.GENTLE: {
        Trigger.SHINY_OBJECT: (
            "Hey, I noticed you're exploring something new. Remember your commitment: {focus}"
        ),
        Trigger.RESEARCH_RABBIT_HOLE: (
            "This looks like it might be research. Your main focus today is {focus}"
        ),
        Trigger.PLANNING_PROCRASTINATION: (
            "I see you planning. How about we work on {focus} instead?"
        ),
        Trigger.CONTEXT_SWITCH: "You're switching contexts. Would you like to get back to {focus}?",
    },
    Tone.TEACHING: {
        Trigger.SHINY_OBJECT: (
            "I see you're curious about {activity}. Let's think: does this serve {focus}?"
        ),
        Trigger.RESEARCH_RABBIT_HOLE: (
            "Research can be valuable, but is this helping {focus} right now?"
        ),
        Trigger.PLANNING_PROCRASTINATION: (
            "Planning feels productive, but execution matters more. Back to {focus}?"
        ),
        Trigger.CONTEXT_SWITCH: "Context switching has cognitive costs. Your priority: {focus}",
    },
    Tone.CURIOUS: {
        Trigger.SHINY_OBJECT: (
            "What drew you to {activity}? Remember you chose {focus} today."
        ),
        Trigger.RESEARCH_RABBIT_HOLE: "What are you hoping to find? Will it help with {focus}?",
        Trigger.PLANNING_PROCRASTINATION: "What's making you plan instead of work on {focus}?",
        Trigger.CONTEXT_SWITCH: "What's pulling you away from {focus}?",
    },
}

ACCOUNTABILITY_PROMPTS: dict[Formality, str] = {
    Formality.COACH: (
        "If you continue, you're choosing to break your commitment. "
        "Is that the decision you want to make?"
    ),
    Formality.FRIEND: "Hey, you said this was important. Still feel that way?",
    Formality.THERAPIST: (
        "What's making this difficult right now? What do you need to get back on track?"
    ),
}


class HardBlockStrategy(InterventionStrategy):
    strategy_type = StrategyType.HARD_BLOCK

    def can_handle(self, context: InterventionContext) -> bool:
        return context.trigger in (
            Trigger.SHINY_OBJECT,
            Trigger.RESEARCH_RABBIT_HOLE,
        ) or context.user_profile.has_pattern("research_rabbit_holes")

    def execute(self, context: InterventionContext) -> InterventionResult:
        profile = context.user_profile
        return InterventionResult(
            type=self.strategy_type,
            message=self._fill(MESSAGES[profile.tone][context.trigger], context),
            action=InterventionAction.BLOCK,
            metadata={"accountability": ACCOUNTABILITY_PROMPTS[profile.formality]},
        )
