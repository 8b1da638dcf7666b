"""
API Schemas for Checkout Flow
=============================

Pydantic models for the HTTP host. Domain models (snapshots, step statuses,
the checkout view) live in checkout_flow.steps.
"""

from .checkout import (
    CreateSessionRequest,
    IntentRequest,
    StepEventType,
    StepEventRequest,
    RedirectOut,
    CheckoutSessionResponse,
    EmbeddedMessageOut,
    EmbeddedMessagesResponse,
    ParentMessageRequest,
    ParentMessageResponse,
)

__all__ = [
    "CreateSessionRequest",
    "IntentRequest",
    "StepEventType",
    "StepEventRequest",
    "RedirectOut",
    "CheckoutSessionResponse",
    "EmbeddedMessageOut",
    "EmbeddedMessagesResponse",
    "ParentMessageRequest",
    "ParentMessageResponse",
]
