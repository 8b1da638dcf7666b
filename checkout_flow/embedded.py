"""
Embedded checkout support.

When the checkout runs inside an iframe on another page, it talks to the
hosting parent frame through a restricted message channel:

Outbound (checkout -> parent):
- EMBEDDED_CHECKOUT:FRAME_LOADED  {contentId}   once, after checkout data loads
- EMBEDDED_CHECKOUT:COMPLETE                    once, when the order is placed
- EMBEDDED_CHECKOUT:ERROR         {error}       each submission/payment error

Inbound (parent -> checkout):
- EMBEDDED_CONTENT:STYLE_CONFIGURED {styles}    style overrides for the checkout

The orchestrator always talks to an EmbeddedCheckoutMessenger. When the
checkout is not embedded it gets a NoopEmbeddedMessenger, so call sites never
check for embedding themselves.

Usage:
    from checkout_flow.embedded import create_embedded_messenger

    messenger = create_embedded_messenger(parent_origin, transport=post_message)
    messenger.post_frame_loaded("app")
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

StyleOverrides = Dict[str, Dict[str, Any]]
StylesHandler = Callable[[StyleOverrides], None]
MessageTransport = Callable[[dict, str], None]


class EmbeddedCheckoutEventType(str, Enum):
    """Message types sent to the parent frame."""
    FRAME_LOADED = "EMBEDDED_CHECKOUT:FRAME_LOADED"
    COMPLETE = "EMBEDDED_CHECKOUT:COMPLETE"
    ERROR = "EMBEDDED_CHECKOUT:ERROR"


class EmbeddedContentEventType(str, Enum):
    """Message types received from the parent frame."""
    STYLE_CONFIGURED = "EMBEDDED_CONTENT:STYLE_CONFIGURED"


# =============================================================================
# Message Models
# =============================================================================

class EmbeddedError(BaseModel):
    """Serializable description of an error for the parent frame."""
    message: str
    type: str = "Error"

    @classmethod
    def from_error(cls, error: Any) -> "EmbeddedError":
        if isinstance(error, BaseException):
            return cls(message=str(error), type=type(error).__name__)
        return cls(message=str(error))


class EmbeddedCheckoutMessage(BaseModel):
    """Message posted to the parent frame."""
    type: EmbeddedCheckoutEventType
    payload: Optional[Dict[str, Any]] = None


class StyleConfiguredMessage(BaseModel):
    """Style overrides pushed by the parent frame."""
    type: EmbeddedContentEventType = EmbeddedContentEventType.STYLE_CONFIGURED
    payload: StyleOverrides = Field(default_factory=dict)


# =============================================================================
# Messengers
# =============================================================================

class EmbeddedCheckoutMessenger(ABC):
    """Messaging channel to the page hosting the checkout."""

    @abstractmethod
    def post_frame_loaded(self, content_id: str) -> None:
        pass

    @abstractmethod
    def post_complete(self) -> None:
        pass

    @abstractmethod
    def post_error(self, error: Any) -> None:
        pass

    @abstractmethod
    def receive_styles(self, handler: StylesHandler) -> None:
        """Register a handler for style overrides pushed by the parent."""
        pass


class NoopEmbeddedMessenger(EmbeddedCheckoutMessenger):
    """Messenger for checkouts that are not embedded."""

    def post_frame_loaded(self, content_id: str) -> None:
        pass

    def post_complete(self) -> None:
        pass

    def post_error(self, error: Any) -> None:
        pass

    def receive_styles(self, handler: StylesHandler) -> None:
        pass


class IframeEmbeddedMessenger(EmbeddedCheckoutMessenger):
    """
    Messenger for a checkout embedded in a parent frame.

    Outbound messages go through `transport(message, target_origin)`.
    Inbound messages are fed to handle_message() by the host; messages from
    any origin other than the parent origin are dropped.
    """

    def __init__(self, parent_origin: str, transport: MessageTransport):
        self.parent_origin = parent_origin
        self._transport = transport
        self._styles_handlers: List[StylesHandler] = []
        self._frame_loaded_sent = False
        self._complete_sent = False

    def post_frame_loaded(self, content_id: str) -> None:
        if self._frame_loaded_sent:
            return
        self._frame_loaded_sent = True
        self._post(EmbeddedCheckoutMessage(
            type=EmbeddedCheckoutEventType.FRAME_LOADED,
            payload={"contentId": content_id},
        ))

    def post_complete(self) -> None:
        if self._complete_sent:
            return
        self._complete_sent = True
        self._post(EmbeddedCheckoutMessage(type=EmbeddedCheckoutEventType.COMPLETE))

    def post_error(self, error: Any) -> None:
        self._post(EmbeddedCheckoutMessage(
            type=EmbeddedCheckoutEventType.ERROR,
            payload={"error": EmbeddedError.from_error(error).model_dump()},
        ))

    def receive_styles(self, handler: StylesHandler) -> None:
        self._styles_handlers.append(handler)

    def handle_message(self, data: dict, origin: str) -> bool:
        """
        Process a message received from the parent frame.

        Args:
            data: Raw message data
            origin: Origin the message came from

        Returns:
            True if the message was accepted and dispatched
        """
        if origin != self.parent_origin:
            logger.warning("Ignoring embedded message from unexpected origin %s", origin)
            return False

        if data.get("type") != EmbeddedContentEventType.STYLE_CONFIGURED.value:
            logger.debug("Ignoring embedded message of type %s", data.get("type"))
            return False

        try:
            message = StyleConfiguredMessage.model_validate(data)
        except ValidationError as e:
            logger.warning("Dropping malformed style message from %s: %s", origin, e.error_count())
            return False

        for handler in self._styles_handlers:
            handler(message.payload)
        return True

    def _post(self, message: EmbeddedCheckoutMessage) -> None:
        logger.debug("Posting %s to %s", message.type.value, self.parent_origin)
        self._transport(message.model_dump(mode="json", exclude_none=True), self.parent_origin)


def create_embedded_messenger(
    parent_origin: Optional[str],
    transport: Optional[MessageTransport] = None,
) -> EmbeddedCheckoutMessenger:
    """
    Get the messenger for a checkout.

    Args:
        parent_origin: Origin of the hosting page (the store site link)
        transport: Callable delivering messages to the parent frame. None
                   when the checkout is not embedded.

    Returns:
        An IframeEmbeddedMessenger when embedded, otherwise a no-op messenger
    """
    if not parent_origin or transport is None:
        return NoopEmbeddedMessenger()
    return IframeEmbeddedMessenger(parent_origin, transport)


# =============================================================================
# Stylesheet
# =============================================================================

class EmbeddedCheckoutStylesheet:
    """Collects style overrides from the parent frame and renders them as CSS."""

    # Style target names mapped to the selectors they restyle
    SELECTORS: Dict[str, str] = {
        "body": "body",
        "text": ".checkout-step, .optimizedCheckout-contentPrimary",
        "secondaryText": ".optimizedCheckout-contentSecondary",
        "heading": ".optimizedCheckout-headingPrimary",
        "secondaryHeading": ".optimizedCheckout-headingSecondary",
        "link": "a, .optimizedCheckout-link",
        "button": ".optimizedCheckout-buttonPrimary",
        "secondaryButton": ".optimizedCheckout-buttonSecondary",
        "input": ".optimizedCheckout-form-input",
        "label": ".optimizedCheckout-form-label",
        "step": ".optimizedCheckout-checkoutStep",
        "orderSummary": ".optimizedCheckout-orderSummary",
    }

    def __init__(self):
        self._styles: StyleOverrides = {}

    def append(self, styles: StyleOverrides) -> None:
        """Merge a style-override payload into the stylesheet."""
        for target, declarations in styles.items():
            self._styles.setdefault(target, {}).update(declarations)
        logger.debug("Appended embedded styles for %s", sorted(styles))

    @property
    def styles(self) -> StyleOverrides:
        return {target: dict(declarations) for target, declarations in self._styles.items()}

    def to_css(self) -> str:
        """Render the collected overrides. Unknown targets are skipped."""
        rules = []
        for target, declarations in self._styles.items():
            selector = self.SELECTORS.get(target)
            if selector is None or not declarations:
                continue
            body = "; ".join(
                f"{_css_property(name)}: {value}" for name, value in declarations.items()
            )
            rules.append(f"{selector} {{ {body} }}")
        return "\n".join(rules)


def _css_property(name: str) -> str:
    """Convert camelCase style names to CSS property names."""
    return "".join(f"-{char.lower()}" if char.isupper() else char for char in name)
