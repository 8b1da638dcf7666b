"""
Checkout Session Service
========================

This module keeps one CheckoutController per checkout session for the HTTP
host. Sessions live in an in-memory cache; nothing is persisted, the checkout
data itself belongs to the data-loading collaborator.

Session Contents:
-----------------
- controller: the CheckoutController for the session
- checkout_service: in-memory snapshot store the page pushes data into
- page_navigator: records redirects for the page to perform
- outbox: messages waiting to be delivered to the embedding parent frame

Cache Eviction Strategy:
------------------------
1. **TTL-based**: Sessions not accessed within SESSION_TTL_SECONDS are removed.
   Checked probabilistically (~1% of requests) to avoid overhead.

2. **LRU-based**: When the cache reaches SESSION_MAX_CACHE_SIZE, the oldest 10%
   of sessions (by last access time) are removed to make room.

Removed sessions are torn down so their pending analytics never fire.

Thread Safety:
--------------
The cache is protected by a threading.Lock. Each session also carries its own
lock; routes hold it while driving the controller so intents for one session
are processed strictly one at a time, in arrival order.

Usage:
------
    from checkout_flow.services.session import create_session, get_session

    session = create_session(checkout_id="abc", snapshot=snapshot)
    with session.lock:
        session.controller.on_sign_in()
"""

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import SESSION_MAX_CACHE_SIZE, SESSION_TTL_SECONDS
from ..embedded import EmbeddedCheckoutMessenger, IframeEmbeddedMessenger, create_embedded_messenger
from ..errors import ErrorLoggerFactory
from ..page_navigation import RecordingPageNavigator
from ..scheduler import Scheduler, TimerScheduler
from ..steps.checkout import CheckoutController
from ..steps.models import CheckoutSnapshot
from ..steps.tracker import create_step_tracker
from .checkout_service import InMemoryCheckoutService

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """State held for one checkout session."""
    session_id: str
    controller: CheckoutController
    checkout_service: InMemoryCheckoutService
    page_navigator: RecordingPageNavigator
    outbox: List[Dict[str, Any]] = field(default_factory=list)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def post_message(self, message: dict, target_origin: str) -> None:
        """Transport for the parent-frame messenger: queue for the page."""
        self.outbox.append({"target_origin": target_origin, "message": message})

    def drain_messages(self) -> List[Dict[str, Any]]:
        messages = list(self.outbox)
        self.outbox.clear()
        return messages

    @property
    def embedded_messenger(self) -> Optional[IframeEmbeddedMessenger]:
        messenger = self.controller.messenger
        if isinstance(messenger, IframeEmbeddedMessenger):
            return messenger
        return None


# =============================================================================
# Session Cache
# =============================================================================
# {session_id: {"session": CheckoutSession, "last_access": timestamp}}

SESSION_CACHE: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()

_scheduler: Scheduler = TimerScheduler()


def _teardown(sessions: List[CheckoutSession]) -> None:
    for session in sessions:
        with session.lock:
            session.controller.teardown()


def _cleanup_expired_sessions() -> int:
    """
    Remove sessions not accessed within SESSION_TTL_SECONDS.

    Returns:
        int: Number of sessions removed from cache
    """
    now = time.time()
    removed = []

    with _cache_lock:
        expired = [
            sid for sid, entry in SESSION_CACHE.items()
            if now - entry["last_access"] > SESSION_TTL_SECONDS
        ]
        for sid in expired:
            removed.append(SESSION_CACHE.pop(sid)["session"])

    _teardown(removed)
    if removed:
        logger.debug("Cleaned up %d expired checkout sessions", len(removed))
    return len(removed)


def _evict_oldest_sessions(count: int) -> List[CheckoutSession]:
    """
    Remove the least recently used sessions. Caller must hold _cache_lock.

    Returns:
        The removed sessions, to be torn down outside the lock
    """
    sorted_sessions = sorted(
        SESSION_CACHE.items(),
        key=lambda item: item[1]["last_access"],
    )
    removed = []
    for sid, entry in sorted_sessions[:count]:
        del SESSION_CACHE[sid]
        removed.append(entry["session"])
    logger.debug("Evicted %d oldest checkout sessions", len(removed))
    return removed


# =============================================================================
# Public Session Management Functions
# =============================================================================

def create_session(
    checkout_id: str,
    snapshot: Optional[CheckoutSnapshot] = None,
    container_id: str = "app",
    checkout_url: str = "",
    parent_origin: Optional[str] = None,
    track_analytics: bool = True,
    scheduler: Optional[Scheduler] = None,
) -> CheckoutSession:
    """
    Create a checkout session and load its checkout data.

    Args:
        checkout_id: Checkout being completed
        snapshot: Initial checkout data. None means the data is unavailable
                  and the load fails (reported to the error logger).
        container_id: Element id reported to the parent frame
        checkout_url: URL of the checkout page
        parent_origin: Origin of the embedding page; None when not embedded
        track_analytics: Whether to report checkout analytics
        scheduler: Timer facility (defaults to the shared timer scheduler)

    Returns:
        The new session, already loaded
    """
    if random.randint(1, 100) == 1:
        _cleanup_expired_sessions()

    checkout_service = InMemoryCheckoutService(snapshot)
    page_navigator = RecordingPageNavigator()
    holder: Dict[str, CheckoutSession] = {}

    def build_messenger(origin: Optional[str]) -> EmbeddedCheckoutMessenger:
        return create_embedded_messenger(origin, transport=holder["session"].post_message)

    controller = CheckoutController(
        checkout_id=checkout_id,
        checkout_service=checkout_service,
        page_navigator=page_navigator,
        container_id=container_id,
        checkout_url=checkout_url,
        error_logger=ErrorLoggerFactory().get_logger(),
        step_tracker=create_step_tracker(checkout_id, enabled=track_analytics),
        create_embedded_messenger=build_messenger if parent_origin else None,
        parent_origin=parent_origin,
        scheduler=scheduler or _scheduler,
    )
    session = CheckoutSession(
        session_id=str(uuid.uuid4()),
        controller=controller,
        checkout_service=checkout_service,
        page_navigator=page_navigator,
    )
    holder["session"] = session

    with session.lock:
        controller.load()

    evicted: List[CheckoutSession] = []
    with _cache_lock:
        if len(SESSION_CACHE) >= SESSION_MAX_CACHE_SIZE:
            evicted = _evict_oldest_sessions(max(1, SESSION_MAX_CACHE_SIZE // 10))
        SESSION_CACHE[session.session_id] = {
            "session": session,
            "last_access": time.time(),
        }
    _teardown(evicted)

    logger.info("Created checkout session for checkout %s", checkout_id)
    return session


def get_session(session_id: str) -> Optional[CheckoutSession]:
    """Get a session from the cache, or None if it doesn't exist."""
    with _cache_lock:
        entry = SESSION_CACHE.get(session_id)
        if entry is None:
            return None
        entry["last_access"] = time.time()
        return entry["session"]


def delete_session(session_id: str) -> bool:
    """
    Remove a session and tear down its controller.

    Returns:
        True if the session existed
    """
    with _cache_lock:
        entry = SESSION_CACHE.pop(session_id, None)
    if entry is None:
        return False
    _teardown([entry["session"]])
    return True


def clear_sessions() -> None:
    """Remove every session."""
    with _cache_lock:
        sessions = [entry["session"] for entry in SESSION_CACHE.values()]
        SESSION_CACHE.clear()
    _teardown(sessions)
