"""Accountability: name the gap between commitment and activity, ask for a decision.

Handles every context, which makes it the engine's terminal fallback.
"""

from refocus.intervention.strategies.base import InterventionStrategy
from refocus.models import (
    Formality,
    InterventionAction,
    InterventionContext,
    InterventionResult,
    StrategyType,
    Tone,
)

MESSAGES: dict[Tone, dict[Formality, str]] = {
    Tone.DIRECT: {
        Formality.COACH: (
            "You're off track. Committed to: {focus}. Currently: {activity}. What's your call?"
        ),
        Formality.FRIEND: (
            "Yo - you said {focus} was the focus. This doesn't look like it. Intentional?"
        ),
        Formality.THERAPIST: (
            "I notice you've moved to {activity}. Your commitment was {focus}. "
            "How do you feel about that?"
        ),
    },
    Tone.GENTLE: {
        Formality.COACH: (
            "Hey there. Remember you wanted to focus on {focus}. Is {activity} part of that?"
        ),
        Formality.FRIEND: "Just checking in - you were working on {focus}. Is this related?",
        Formality.THERAPIST: (
            "I see you're exploring {activity}. How does this connect to {focus}?"
        ),
    },
    Tone.TEACHING: {
        Formality.COACH: (
            "Context: You committed to {focus}. Current activity: {activity}. "
            "Does this serve your goal?"
        ),
        Formality.FRIEND: "Quick check: Does {activity} help with {focus}, or is this a detour?",
        Formality.THERAPIST: (
            "Let's reflect. You chose {focus} as your priority. How does {activity} fit in?"
        ),
    },
    Tone.CURIOUS: {
        Formality.COACH: "What brought you to {activity}? How does this relate to {focus}?",
        Formality.FRIEND: (
            "Interesting - you're doing {activity}. How does that fit with {focus}?"
        ),
        Formality.THERAPIST: (
            "I'm curious what drew you here. How does {activity} connect to {focus}?"
        ),
    },
}

REFLECTION_PROMPTS: dict[Formality, str] = {
    Formality.COACH: "Is this aligned with your commitment? (Continue / Refocus)",
    Formality.FRIEND: "What do you want to do? (Keep going / Get back on track)",
    Formality.THERAPIST: (
        "What feels right in this moment? (Continue exploring / Return to commitment)"
    ),
}


class AccountabilityStrategy(InterventionStrategy):
    strategy_type = StrategyType.ACCOUNTABILITY

    def can_handle(self, context: InterventionContext) -> bool:
        return True

    def execute(self, context: InterventionContext) -> InterventionResult:
        profile = context.user_profile
        return InterventionResult(
            type=self.strategy_type,
            message=self._fill(MESSAGES[profile.tone][profile.formality], context),
            action=InterventionAction.PROMPT,
            metadata={"accountability": REFLECTION_PROMPTS[profile.formality]},
        )
