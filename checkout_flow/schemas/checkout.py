"""
Checkout Session Schemas
========================

Pydantic models for the checkout session endpoints. The page hosting the
checkout drives a session through these:

- POST /checkout/sessions: create a session from an initial snapshot
- GET /checkout/sessions/{id}: current view
- PUT /checkout/sessions/{id}/snapshot: new checkout data
- POST /checkout/sessions/{id}/intents: a NavigationIntent
- POST /checkout/sessions/{id}/events: a step component callback
- GET /checkout/sessions/{id}/messages: drain parent-frame messages
- POST /checkout/sessions/{id}/parent-messages: message from the parent frame
- DELETE /checkout/sessions/{id}: tear the session down

Responses carry the CheckoutView, plus a redirect when the page must leave
the checkout (order confirmation, login page).
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from ..steps.models import CheckoutSnapshot
from ..steps.schemas import (
    AdvanceOptions,
    CheckoutView,
    CustomerViewType,
    IntentType,
    NavigationIntent,
    SignOutContext,
    StepType,
)


class CreateSessionRequest(BaseModel):
    """Start a checkout session."""
    checkout_id: str = Field(..., min_length=1)
    container_id: str = "app"
    checkout_url: str = ""
    parent_origin: Optional[str] = Field(
        None, description="Origin of the embedding page; omit when not embedded"
    )
    track_analytics: bool = True
    snapshot: Optional[CheckoutSnapshot] = None


class IntentRequest(BaseModel):
    """A navigation intent for the session's step navigator."""
    type: IntentType
    step: Optional[StepType] = None
    skip_steps: List[StepType] = Field(default_factory=list)
    is_cart_empty: bool = False
    view: Optional[CustomerViewType] = None

    @model_validator(mode="after")
    def check_step(self) -> "IntentRequest":
        if self.type != IntentType.SIGN_OUT and self.step is None:
            raise ValueError(f"{self.type.value} intent requires a step")
        return self

    def to_intent(self) -> NavigationIntent:
        if self.type == IntentType.EDIT:
            return NavigationIntent.edit(self.step)
        if self.type == IntentType.COMPLETE_AND_ADVANCE:
            return NavigationIntent.complete_and_advance(
                self.step,
                AdvanceOptions(skip_steps=frozenset(self.skip_steps)),
            )
        if self.type == IntentType.SIGN_OUT:
            return NavigationIntent.sign_out(SignOutContext(is_cart_empty=self.is_cart_empty))
        return NavigationIntent.skip_to_step(self.step, self.view)


class StepEventType(str, Enum):
    """Callbacks a step component can report."""
    SIGN_IN = "sign_in"
    CONTINUE_AS_GUEST = "continue_as_guest"
    SIGN_IN_ERROR = "sign_in_error"
    CONTINUE_AS_GUEST_ERROR = "continue_as_guest_error"
    SIGN_OUT = "sign_out"
    SUBSCRIBE_TO_NEWSLETTER = "subscribe_to_newsletter"
    SHIPPING_SIGN_IN = "shipping_sign_in"
    NAVIGATE_NEXT_STEP = "navigate_next_step"
    BILLING_COMPLETE = "billing_complete"
    SUBMIT = "submit"
    FINALIZE = "finalize"
    SUBMIT_ERROR = "submit_error"
    STORE_CREDIT_CHANGE = "store_credit_change"
    UNHANDLED_ERROR = "unhandled_error"


class StepEventRequest(BaseModel):
    """A step component callback."""
    event: StepEventType
    step: Optional[StepType] = None  # Step reporting an unhandled error
    error: Optional[str] = None  # Error message for *_error events
    billing_same_as_shipping: bool = False
    is_cart_empty: bool = False
    applied: bool = False  # Store credit toggle
    data: Dict[str, Any] = Field(default_factory=dict)  # Newsletter signup data

    @model_validator(mode="after")
    def check_unhandled_step(self) -> "StepEventRequest":
        if self.event == StepEventType.UNHANDLED_ERROR and self.step is None:
            raise ValueError("unhandled_error event requires a step")
        return self


class RedirectOut(BaseModel):
    """Navigation the page must perform."""
    url: str
    top_level: bool = False
    replace: bool = False


class CheckoutSessionResponse(BaseModel):
    """Session state returned by every session endpoint."""
    session_id: str
    view: CheckoutView
    redirect: Optional[RedirectOut] = None


class EmbeddedMessageOut(BaseModel):
    """A message for the embedding parent frame."""
    target_origin: str
    message: Dict[str, Any]


class EmbeddedMessagesResponse(BaseModel):
    messages: List[EmbeddedMessageOut] = Field(default_factory=list)


class ParentMessageRequest(BaseModel):
    """A message received from the embedding parent frame."""
    origin: str
    data: Dict[str, Any]


class ParentMessageResponse(BaseModel):
    accepted: bool
    css: str = ""
