"""
Deferred callbacks for the checkout orchestrator.

The step navigator delays its step-viewed analytics until the UI has settled.
It schedules that work through a Scheduler so hosts can supply their own timer
facility and tests can run timers deterministically.

Usage:
    from checkout_flow.scheduler import TimerScheduler

    scheduler = TimerScheduler()
    handle = scheduler.call_later(0.2, callback)
    handle.cancel()
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class ScheduledCall(ABC):
    """Handle to a callback scheduled for later."""

    @abstractmethod
    def cancel(self) -> None:
        """Cancel the callback. Cancelling a call that already ran is a no-op."""
        pass


class Scheduler(ABC):
    """Timer facility used for delayed effects."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """
        Run `callback` once after `delay` seconds.

        Args:
            delay: Seconds to wait
            callback: Zero-argument callable

        Returns:
            A handle that can cancel the call
        """
        pass


class _TimerCall(ScheduledCall):
    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler(Scheduler):
    """Scheduler backed by threading.Timer daemon threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        logger.debug("Scheduled %s in %.3fs", getattr(callback, "__name__", callback), delay)
        return _TimerCall(timer)
