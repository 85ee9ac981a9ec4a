"""
Intervention presentation.

Notifier is the delivery seam (desktop popup, chat message, terminal prompt).
InterventionPresenter wraps any Notifier so that:
    - at most one prompt is outstanding (overlapping prompts are suppressed)
    - a prompt that runs past its timeout resolves to `ignored`
    - a notifier failure resolves to `ignored`, never an exception
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from refocus.logging_config import get_logger
from refocus.models import InterventionResult, UserResponse, UserResponseType

logger = get_logger(__name__)


class Notifier(ABC):
    @abstractmethod
    async def show_intervention(self, result: InterventionResult, commitment: str) -> UserResponse:
        """Show the intervention and wait for the user's decision."""


class LogNotifier(Notifier):
    """Logs the intervention and reports it as ignored. Headless default."""

    async def show_intervention(self, result: InterventionResult, commitment: str) -> UserResponse:
        logger.info(
            "intervention_shown",
            strategy=result.type.value,
            action=result.action.value,
            message=result.message,
            commitment=commitment,
            **{k: v for k, v in result.metadata.items() if v is not None},
        )
        return UserResponse.ignored()


@dataclass
class PresentedOutcome:
    response: UserResponse
    time_to_refocus: float
    shown_at: datetime


class InterventionPresenter:
    """Non-reentrant, timeout-bounded wrapper around a Notifier.

    Args:
        notifier: Delivery backend.
        timeout_seconds: How long to wait for a decision before treating it as ignored.
        unresolved_refocus_seconds: time_to_refocus recorded for overrode/ignored
            outcomes when the notifier does not report one.
        clock: Current time source.
    """

    def __init__(
        self,
        notifier: Notifier,
        timeout_seconds: float = 120.0,
        unresolved_refocus_seconds: float = 300.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.notifier = notifier
        self.timeout_seconds = timeout_seconds
        self.unresolved_refocus_seconds = unresolved_refocus_seconds
        self._clock = clock
        self._showing = False

    @property
    def is_showing(self) -> bool:
        return self._showing

    async def present(self, result: InterventionResult, commitment: str) -> PresentedOutcome | None:
        """Show one intervention. Returns None if another prompt is already open."""
        if self._showing:
            logger.info("intervention_suppressed_overlap", strategy=result.type.value)
            return None

        self._showing = True
        shown_at = self._clock()
        try:
            response = await asyncio.wait_for(
                self.notifier.show_intervention(result, commitment),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.info("intervention_timed_out", timeout_seconds=self.timeout_seconds)
            response = UserResponse.ignored()
        except Exception as e:
            logger.warning("intervention_delivery_failed", error=str(e))
            response = UserResponse.ignored()
        finally:
            self._showing = False

        return PresentedOutcome(
            response=response,
            time_to_refocus=self._time_to_refocus(response, shown_at),
            shown_at=shown_at,
        )

    def _time_to_refocus(self, response: UserResponse, shown_at: datetime) -> float:
        if response.time_to_refocus is not None:
            return max(0.0, response.time_to_refocus)
        if response.type == UserResponseType.COMPLIED:
            return max(0.0, (self._clock() - shown_at).total_seconds())
        return self.unresolved_refocus_seconds
