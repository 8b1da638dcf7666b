"""
Outbound page navigation.

Redirects leave the checkout (order confirmation, login page). The
orchestrator issues them through a PageNavigator so it never touches a
global browsing context.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Redirect:
    """A navigation request."""
    url: str
    top_level: bool = False  # Navigate the top-level context, not the frame
    replace: bool = False  # Replace the current history entry


class PageNavigator(ABC):
    """Capability to navigate the hosting page."""

    @abstractmethod
    def navigate_to(self, url: str, top_level: bool = False, replace: bool = False) -> None:
        pass


class RecordingPageNavigator(PageNavigator):
    """
    Navigator that records redirects for the host to perform.

    The HTTP host returns the last redirect to the page, which carries it out.
    """

    def __init__(self):
        self.redirects: List[Redirect] = []

    def navigate_to(self, url: str, top_level: bool = False, replace: bool = False) -> None:
        logger.info("Redirecting to %s", url)
        self.redirects.append(Redirect(url=url, top_level=top_level, replace=replace))

    @property
    def last_redirect(self) -> Optional[Redirect]:
        return self.redirects[-1] if self.redirects else None

    def pop_redirect(self) -> Optional[Redirect]:
        """Return and clear the pending redirect."""
        redirect = self.last_redirect
        self.redirects.clear()
        return redirect
