"""
Checkout Routes for Checkout Flow
=================================

Endpoints the checkout page uses to drive one checkout session. The page
renders from the returned view and performs any returned redirect.

Endpoints:
----------
- POST /checkout/sessions: Create a session and load its checkout
- GET /checkout/sessions/{session_id}: Current view
- PUT /checkout/sessions/{session_id}/snapshot: Push new checkout data
- POST /checkout/sessions/{session_id}/intents: Dispatch a navigation intent
- POST /checkout/sessions/{session_id}/events: Report a step component callback
- GET /checkout/sessions/{session_id}/messages: Drain parent-frame messages
- POST /checkout/sessions/{session_id}/parent-messages: Deliver a parent-frame message
- DELETE /checkout/sessions/{session_id}: Tear the session down

Flow:
-----
1. The page creates a session with the checkout data it has loaded
2. Step components report callbacks via /events (or raw intents via /intents)
3. When checkout data changes the page pushes a new snapshot
4. Embedded pages poll /messages and relay them to the parent frame
"""

import logging

from fastapi import APIRouter, HTTPException

from ..errors import OrderSubmissionError, StepOperationError, UnhandledStepError
from ..schemas.checkout import (
    CheckoutSessionResponse,
    CreateSessionRequest,
    EmbeddedMessagesResponse,
    IntentRequest,
    ParentMessageRequest,
    ParentMessageResponse,
    RedirectOut,
    StepEventRequest,
    StepEventType,
)
from ..services.session import (
    CheckoutSession,
    create_session,
    delete_session,
    get_session,
)
from ..steps.models import CheckoutSnapshot

logger = logging.getLogger(__name__)

checkout_router = APIRouter(prefix="/checkout", tags=["Checkout"])


# =============================================================================
# Helper Functions
# =============================================================================

def _require_session(session_id: str) -> CheckoutSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Checkout session not found")
    return session


def _build_response(session: CheckoutSession) -> CheckoutSessionResponse:
    redirect = session.page_navigator.pop_redirect()
    return CheckoutSessionResponse(
        session_id=session.session_id,
        view=session.controller.get_view(),
        redirect=RedirectOut(
            url=redirect.url,
            top_level=redirect.top_level,
            replace=redirect.replace,
        ) if redirect else None,
    )


def _apply_event(session: CheckoutSession, req: StepEventRequest) -> None:
    controller = session.controller
    error_message = req.error or "Unknown error"

    if req.event == StepEventType.SIGN_IN:
        controller.on_sign_in()
    elif req.event == StepEventType.CONTINUE_AS_GUEST:
        controller.on_continue_as_guest()
    elif req.event == StepEventType.SIGN_IN_ERROR:
        controller.on_sign_in_error(StepOperationError(error_message))
    elif req.event == StepEventType.CONTINUE_AS_GUEST_ERROR:
        controller.on_continue_as_guest_error(StepOperationError(error_message))
    elif req.event == StepEventType.SIGN_OUT:
        controller.on_sign_out(is_cart_empty=req.is_cart_empty)
    elif req.event == StepEventType.SUBSCRIBE_TO_NEWSLETTER:
        controller.subscribe_to_newsletter(req.data)
    elif req.event == StepEventType.SHIPPING_SIGN_IN:
        controller.on_shipping_sign_in()
    elif req.event == StepEventType.NAVIGATE_NEXT_STEP:
        controller.navigate_next_step(req.billing_same_as_shipping)
    elif req.event == StepEventType.BILLING_COMPLETE:
        controller.on_billing_complete()
    elif req.event == StepEventType.SUBMIT:
        controller.on_submit()
    elif req.event == StepEventType.FINALIZE:
        controller.on_finalize()
    elif req.event == StepEventType.SUBMIT_ERROR:
        controller.on_submit_error(OrderSubmissionError(error_message))
    elif req.event == StepEventType.STORE_CREDIT_CHANGE:
        controller.on_store_credit_change(req.applied)
    elif req.event == StepEventType.UNHANDLED_ERROR:
        controller.on_unhandled_error(req.step, UnhandledStepError(error_message))


# =============================================================================
# Session Endpoints
# =============================================================================

@checkout_router.post("/sessions", response_model=CheckoutSessionResponse)
def create_checkout_session(req: CreateSessionRequest) -> CheckoutSessionResponse:
    """Create a checkout session and load its checkout data."""
    session = create_session(
        checkout_id=req.checkout_id,
        snapshot=req.snapshot,
        container_id=req.container_id,
        checkout_url=req.checkout_url,
        parent_origin=req.parent_origin,
        track_analytics=req.track_analytics,
    )
    with session.lock:
        return _build_response(session)


@checkout_router.get("/sessions/{session_id}", response_model=CheckoutSessionResponse)
def get_checkout_session(session_id: str) -> CheckoutSessionResponse:
    session = _require_session(session_id)
    with session.lock:
        return _build_response(session)


@checkout_router.put("/sessions/{session_id}/snapshot", response_model=CheckoutSessionResponse)
def update_checkout_snapshot(session_id: str, snapshot: CheckoutSnapshot) -> CheckoutSessionResponse:
    """Replace the session's checkout data."""
    session = _require_session(session_id)
    with session.lock:
        if not session.controller.is_loaded:
            # Data that failed to load the first time is loaded now
            session.checkout_service.set_state(snapshot)
            session.controller.load()
        else:
            session.checkout_service.set_state(snapshot)
        return _build_response(session)


@checkout_router.post("/sessions/{session_id}/intents", response_model=CheckoutSessionResponse)
def dispatch_intent(session_id: str, req: IntentRequest) -> CheckoutSessionResponse:
    session = _require_session(session_id)
    with session.lock:
        session.controller.dispatch(req.to_intent())
        return _build_response(session)


@checkout_router.post("/sessions/{session_id}/events", response_model=CheckoutSessionResponse)
def report_step_event(session_id: str, req: StepEventRequest) -> CheckoutSessionResponse:
    session = _require_session(session_id)
    with session.lock:
        logger.debug("Session %s: step event %s", session_id, req.event.value)
        _apply_event(session, req)
        return _build_response(session)


@checkout_router.get("/sessions/{session_id}/messages", response_model=EmbeddedMessagesResponse)
def drain_embedded_messages(session_id: str) -> EmbeddedMessagesResponse:
    """Return and clear messages queued for the embedding parent frame."""
    session = _require_session(session_id)
    with session.lock:
        return EmbeddedMessagesResponse(messages=session.drain_messages())


@checkout_router.post("/sessions/{session_id}/parent-messages", response_model=ParentMessageResponse)
def receive_parent_message(session_id: str, req: ParentMessageRequest) -> ParentMessageResponse:
    """Deliver a message sent by the embedding parent frame."""
    session = _require_session(session_id)
    with session.lock:
        messenger = session.embedded_messenger
        if messenger is None:
            return ParentMessageResponse(accepted=False)
        accepted = messenger.handle_message(req.data, req.origin)
        return ParentMessageResponse(
            accepted=accepted,
            css=session.controller.embedded_stylesheet.to_css(),
        )


@checkout_router.delete("/sessions/{session_id}")
def delete_checkout_session(session_id: str) -> dict:
    if not delete_session(session_id):
        raise HTTPException(status_code=404, detail="Checkout session not found")
    return {"deleted": True}
