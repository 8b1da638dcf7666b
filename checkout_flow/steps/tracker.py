"""
Checkout analytics tracking.

The step navigator reports three signals to a StepTracker:
- checkout started (once per navigator)
- step viewed
- step completed

Step names are the lowercase canonical StepType values ("customer",
"shipping", "billing", "payment"). NoopStepTracker is used for sessions
that are not tracked.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class StepTracker(ABC):
    """Receives checkout analytics signals. All methods are fire-and-forget."""

    @abstractmethod
    def track_checkout_started(self) -> None:
        pass

    @abstractmethod
    def track_step_viewed(self, step: str) -> None:
        pass

    @abstractmethod
    def track_step_completed(self, step: str) -> None:
        pass


class NoopStepTracker(StepTracker):
    """Tracker for sessions without analytics."""

    def track_checkout_started(self) -> None:
        pass

    def track_step_viewed(self, step: str) -> None:
        pass

    def track_step_completed(self, step: str) -> None:
        pass


class LoggingStepTracker(StepTracker):
    """Tracker that records signals in the application log."""

    def __init__(self, checkout_id: str):
        self.checkout_id = checkout_id

    def track_checkout_started(self) -> None:
        logger.info("Checkout %s started", self.checkout_id)

    def track_step_viewed(self, step: str) -> None:
        logger.info("Checkout %s: step viewed: %s", self.checkout_id, step)

    def track_step_completed(self, step: str) -> None:
        logger.info("Checkout %s: step completed: %s", self.checkout_id, step)


def create_step_tracker(checkout_id: str, enabled: bool = True) -> StepTracker:
    """Get the tracker for a checkout session."""
    if not enabled:
        return NoopStepTracker()
    return LoggingStepTracker(checkout_id)
