"""Micro-task: shrink the commitment to a step small enough to start right now."""

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

MESSAGES: dict[Tone, dict[Formality, str]] = {
    Tone.DIRECT: {
        Formality.COACH: (
            "Stop overthinking. Pick the tiniest possible step toward {focus} and do it now."
        ),
        Formality.FRIEND: "Dude, just start. Here's the smallest thing you can do:",
        Formality.THERAPIST: (
            "You're stuck in analysis. Let's make it simple. One tiny action toward {focus}:"
        ),
    },
    Tone.GENTLE: {
        Formality.COACH: "Let's break {focus} into something small and doable right now:",
        Formality.FRIEND: "No pressure - just pick one tiny thing to get started on {focus}:",
        Formality.THERAPIST: (
            "Big tasks can feel overwhelming. What's one small step toward {focus}?"
        ),
    },
    Tone.TEACHING: {
        Formality.COACH: (
            "Momentum comes from action, not planning. Here's a micro-task for {focus}:"
        ),
        Formality.FRIEND: "Pro tip: Start with something so small it feels silly. Like this:",
        Formality.THERAPIST: (
            "The paradox of action: Starting small makes hard things feel manageable. Try this:"
        ),
    },
    Tone.CURIOUS: {
        Formality.COACH: "What's the smallest possible action that moves {focus} forward?",
        Formality.FRIEND: "If you had to make progress in 2 minutes, what would you do?",
        Formality.THERAPIST: "What would it feel like to take just one tiny step right now?",
    },
}

MICRO_TASKS: dict[Trigger, list[str]] = {
    Trigger.PLANNING_PROCRASTINATION: [
        "Open the file/tool needed for {focus}",
        "Write one sentence about {focus}",
        "Set a 5-minute timer and start anything related to {focus}",
    ],
    Trigger.CONTEXT_SWITCH: [
        "Close the current tab/window and open what you need for {focus}",
        "Write down your next immediate action for {focus}",
        "Spend 2 minutes on the easiest part of {focus}",
    ],
    Trigger.SHINY_OBJECT: [
        "Bookmark this for later and return to {focus}",
        "Note this idea in 10 words or less, then back to {focus}",
        "Quick: What's the next obvious step for {focus}?",
    ],
    Trigger.RESEARCH_RABBIT_HOLE: [
        "Save this resource and get back to implementing {focus}",
        "Time-box this research: 5 more minutes, then back to {focus}",
        "What's one thing you can do with what you already know about {focus}?",
    ],
}


class MicroTaskStrategy(InterventionStrategy):
    strategy_type = StrategyType.MICRO_TASK

    def can_handle(self, context: InterventionContext) -> bool:
        return context.trigger in (
            Trigger.PLANNING_PROCRASTINATION,
            Trigger.CONTEXT_SWITCH,
        ) or context.user_profile.has_pattern("planning_instead_of_doing")

    def execute(self, context: InterventionContext) -> InterventionResult:
        profile = context.user_profile
        return InterventionResult(
            type=self.strategy_type,
            message=self._fill(MESSAGES[profile.tone][profile.formality], context),
            action=InterventionAction.SUGGEST,
            metadata={
                "micro_tasks": [self._fill(t, context) for t in MICRO_TASKS[context.trigger]],
            },
        )
