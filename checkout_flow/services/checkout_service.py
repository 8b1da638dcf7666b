"""
Checkout Data Service
=====================

The orchestrator never fetches checkout data itself. It reads snapshots from a
CheckoutService, the data-loading collaborator that owns the checkout data
(caching and retry policy live there, not in the orchestrator).

Contract:
---------
- load_checkout(checkout_id, options): fetch checkout, cart, customer and
  config once at startup. Raises DataLoadError when the data can't be fetched.
- get_state(): the latest snapshot.
- subscribe(subscriber): call `subscriber(snapshot)` whenever the data changes
  (for example after a step component updates an address). Returns a
  callable that removes the subscription.

InMemoryCheckoutService keeps the snapshot in memory and is used by the HTTP
host, where the page pushes new snapshots, and by tests.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from ..errors import DataLoadError
from ..steps.models import CheckoutSnapshot

logger = logging.getLogger(__name__)

Subscriber = Callable[[CheckoutSnapshot], None]


class CheckoutService(ABC):
    """Read access to checkout data owned by the loading collaborator."""

    @abstractmethod
    def load_checkout(self, checkout_id: str, options: Optional[Dict[str, Any]] = None) -> CheckoutSnapshot:
        pass

    @abstractmethod
    def get_state(self) -> CheckoutSnapshot:
        pass

    @abstractmethod
    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        pass


class InMemoryCheckoutService(CheckoutService):
    """Checkout service backed by a snapshot held in memory."""

    def __init__(self, snapshot: Optional[CheckoutSnapshot] = None):
        self._state = snapshot
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()
        self.load_requests: List[tuple] = []

    def load_checkout(self, checkout_id: str, options: Optional[Dict[str, Any]] = None) -> CheckoutSnapshot:
        self.load_requests.append((checkout_id, options))
        if self._state is None:
            raise DataLoadError(f"Checkout {checkout_id} is not available")
        logger.debug("Loaded checkout %s", checkout_id)
        return self._state

    def get_state(self) -> CheckoutSnapshot:
        return self._state if self._state is not None else CheckoutSnapshot()

    def set_state(self, snapshot: CheckoutSnapshot) -> None:
        """Replace the snapshot and notify subscribers."""
        with self._lock:
            self._state = snapshot
            subscribers = list(self._subscribers)
        for subscriber in subscribers:
            subscriber(snapshot)

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe
