"""
Tests for the CheckoutController lifecycle wiring.

These cover loading, the parent-frame messenger, redirects and error
reporting. Step navigation itself is covered in test_step_navigator.py.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from checkout_flow.embedded import EmbeddedCheckoutMessenger, EmbeddedCheckoutStylesheet
from checkout_flow.errors import ErrorKind, OrderSubmissionError, StepOperationError
from checkout_flow.services.checkout_service import InMemoryCheckoutService
from checkout_flow.steps.checkout import CheckoutController
from checkout_flow.steps.schemas import CustomerViewType, StepType

from conftest import make_snapshot


@pytest.fixture
def messenger():
    return MagicMock(spec=EmbeddedCheckoutMessenger)


@pytest.fixture
def messenger_factory(messenger):
    return MagicMock(return_value=messenger)


@pytest.fixture
def make_controller(checkout_service, page_navigator, error_logger, tracker, scheduler, messenger_factory):
    def _make(**kwargs):
        options = dict(
            checkout_id="checkout-1",
            checkout_service=checkout_service,
            page_navigator=page_navigator,
            container_id="checkout-app",
            checkout_url="https://store.example.com/checkout",
            error_logger=error_logger,
            step_tracker=tracker,
            create_embedded_messenger=messenger_factory,
            scheduler=scheduler,
        )
        options.update(kwargs)
        return CheckoutController(**options)
    return _make


@pytest.fixture
def controller(make_controller):
    return make_controller()


class TestLoad:
    """Tests for loading checkout data."""

    def test_load_requests_category_names(self, controller, checkout_service):
        controller.load()

        assert checkout_service.load_requests == [(
            "checkout-1",
            {"params": {"include": [
                "cart.lineItems.physicalItems.categoryNames",
                "cart.lineItems.digitalItems.categoryNames",
            ]}},
        )]

    def test_load_activates_default_step(self, controller, tracker):
        result = controller.load()

        assert result.active_step == StepType.CUSTOMER
        assert controller.is_loaded is True
        tracker.track_checkout_started.assert_called_once_with()

    def test_load_failure_goes_to_error_logger(self, make_controller, error_logger, messenger_factory):
        controller = make_controller(checkout_service=InMemoryCheckoutService())

        result = controller.load()

        assert result is None
        assert controller.is_loaded is False
        assert controller.get_view().active_step is None
        error_logger.log.assert_called_once()
        assert error_logger.log.call_args.args[1] == ErrorKind.DATA_LOAD
        messenger_factory.assert_not_called()

    def test_load_is_not_retried(self, make_controller):
        service = InMemoryCheckoutService()
        controller = make_controller(checkout_service=service)

        controller.load()

        assert len(service.load_requests) == 1

    def test_load_async(self, controller):
        result = asyncio.run(controller.load_async())

        assert result.active_step == StepType.CUSTOMER

    def test_load_async_failure(self, make_controller, error_logger):
        controller = make_controller(checkout_service=InMemoryCheckoutService())

        assert asyncio.run(controller.load_async()) is None
        assert error_logger.log.call_args.args[1] == ErrorKind.DATA_LOAD

    def test_data_changes_reach_navigator(self, controller, checkout_service):
        controller.load()
        checkout_service.set_state(make_snapshot(signed_in=True))

        assert controller.get_view().active_step == StepType.SHIPPING

    def test_teardown_unsubscribes(self, controller, checkout_service):
        controller.load()
        controller.teardown()
        checkout_service.set_state(make_snapshot(signed_in=True))

        assert controller.get_view().active_step == StepType.CUSTOMER


class TestEmbeddedMessaging:
    """Tests for messages to the embedding parent frame."""

    def test_frame_loaded_posted_once(self, controller, messenger, checkout_service):
        controller.load()
        checkout_service.set_state(make_snapshot(signed_in=True))
        controller.load()

        messenger.post_frame_loaded.assert_called_once_with("checkout-app")

    def test_messenger_uses_site_link_as_parent_origin(self, controller, messenger_factory):
        controller.load()

        messenger_factory.assert_called_once_with("https://store.example.com")

    def test_explicit_parent_origin_wins(self, make_controller, messenger_factory):
        controller = make_controller(parent_origin="https://parent.example.com")
        controller.load()

        messenger_factory.assert_called_once_with("https://parent.example.com")

    def test_styles_forwarded_to_stylesheet(self, make_controller, messenger):
        stylesheet = EmbeddedCheckoutStylesheet()
        controller = make_controller(embedded_stylesheet=stylesheet)
        controller.load()

        handler = messenger.receive_styles.call_args.args[0]
        handler({"button": {"backgroundColor": "#000"}})

        assert stylesheet.styles == {"button": {"backgroundColor": "#000"}}

    def test_submit_posts_complete_and_redirects(self, controller, messenger, page_navigator):
        controller.load()
        controller.on_submit()

        messenger.post_complete.assert_called_once_with()
        assert page_navigator.last_redirect.url == "https://store.example.com/checkout/order-confirmation"
        assert page_navigator.last_redirect.replace is True

    def test_finalize_redirects_without_complete(self, controller, messenger, page_navigator):
        controller.load()
        controller.on_finalize()

        messenger.post_complete.assert_not_called()
        assert page_navigator.last_redirect.url == "https://store.example.com/checkout/order-confirmation"

    def test_submit_error_reported_once(self, controller, messenger, error_logger):
        """A submission failure reaches the sink and the parent frame exactly once."""
        controller.load()
        error = OrderSubmissionError("Card declined")

        controller.on_submit_error(error)

        error_logger.log.assert_called_once_with(error, ErrorKind.ORDER_SUBMISSION)
        messenger.post_error.assert_called_once_with(error)

    def test_unhandled_payment_error_posted(self, controller, messenger, error_logger):
        controller.load()
        error = RuntimeError("payment widget crashed")

        controller.on_unhandled_error(StepType.PAYMENT, error)

        error_logger.log.assert_called_once_with(error, ErrorKind.UNHANDLED_STEP)
        messenger.post_error.assert_called_once_with(error)

    def test_unhandled_shipping_error_not_posted(self, controller, messenger, error_logger):
        controller.load()
        error = RuntimeError("address lookup failed")

        controller.on_unhandled_error(StepType.SHIPPING, error)

        error_logger.log.assert_called_once_with(error, ErrorKind.UNHANDLED_STEP)
        messenger.post_error.assert_not_called()

    def test_not_embedded_uses_noop_messenger(self, make_controller, page_navigator):
        controller = make_controller(create_embedded_messenger=None)
        controller.load()

        # No messenger calls can fail; the redirect still happens
        controller.on_submit()
        controller.on_submit_error(OrderSubmissionError("declined"))
        assert page_navigator.last_redirect is not None


class TestStepCallbacks:
    """Tests for callbacks reported by step components."""

    def test_sign_in_advances(self, controller, checkout_service, tracker):
        controller.load()
        checkout_service.set_state(make_snapshot(signed_in=True))

        result = controller.on_sign_in()

        assert result.active_step == StepType.SHIPPING
        tracker.track_step_completed.assert_called_once_with("customer")

    def test_continue_as_guest_advances(self, controller, checkout_service):
        controller.load()
        checkout_service.set_state(make_snapshot(guest_email="guest@example.com"))

        assert controller.on_continue_as_guest().active_step == StepType.SHIPPING

    def test_sign_in_error_keeps_step(self, controller, error_logger):
        controller.load()
        error = StepOperationError("bad password")

        controller.on_sign_in_error(error)

        error_logger.log.assert_called_once_with(error, ErrorKind.STEP_OPERATION)
        assert controller.get_view().active_step == StepType.CUSTOMER

    def test_guest_error_keeps_step(self, controller, error_logger):
        controller.load()
        error = StepOperationError("invalid email")

        controller.on_continue_as_guest_error(error)

        error_logger.log.assert_called_once_with(error, ErrorKind.STEP_OPERATION)

    def test_sign_out_with_empty_cart_redirects_top_level(self, controller, page_navigator):
        controller.load()
        before = controller.get_view().active_step

        result = controller.on_sign_out(is_cart_empty=True)

        assert page_navigator.last_redirect.url == "/login.php"
        assert page_navigator.last_redirect.top_level is True
        assert result.active_step == before

    def test_sign_out_with_store_login_link(self, checkout_service, make_controller, page_navigator):
        checkout_service.set_state(make_snapshot(login_link="https://store.example.com/login.php"))
        controller = make_controller()
        controller.load()

        controller.on_sign_out(is_cart_empty=True)

        assert page_navigator.last_redirect.url == "https://store.example.com/login.php"

    def test_sign_out_shows_guest_customer(self, controller, checkout_service, page_navigator):
        checkout_service.set_state(make_snapshot(signed_in=True))
        controller.load()

        controller.on_sign_out()

        view = controller.get_view()
        assert view.active_step == StepType.CUSTOMER
        assert view.customer_view_type == CustomerViewType.GUEST
        assert page_navigator.last_redirect is None

    def test_shipping_sign_in_shows_login(self, controller):
        controller.load()
        controller.edit_step(StepType.SHIPPING)

        controller.on_shipping_sign_in()

        view = controller.get_view()
        assert view.active_step == StepType.CUSTOMER
        assert view.customer_view_type == CustomerViewType.LOGIN

    def test_next_step_skips_billing_when_reused(self, controller, checkout_service):
        checkout_service.set_state(make_snapshot(signed_in=True, shipped=True))
        controller.load()

        assert controller.navigate_next_step(billing_same_as_shipping=True).active_step == StepType.PAYMENT

    def test_next_step_goes_to_billing(self, controller, checkout_service):
        checkout_service.set_state(make_snapshot(signed_in=True, shipped=True))
        controller.load()

        assert controller.navigate_next_step(billing_same_as_shipping=False).active_step == StepType.BILLING

    def test_billing_complete_goes_to_payment(self, controller, checkout_service):
        checkout_service.set_state(make_snapshot(signed_in=True, shipped=True, billed=True))
        controller.load()
        controller.edit_step(StepType.BILLING)

        assert controller.on_billing_complete().active_step == StepType.PAYMENT

    def test_newsletter_passed_through(self, make_controller):
        subscribe = MagicMock(return_value="subscribed")
        controller = make_controller(subscribe_to_newsletter=subscribe)

        assert controller.subscribe_to_newsletter({"email": "a@example.com"}) == "subscribed"
        subscribe.assert_called_once_with({"email": "a@example.com"})

    def test_newsletter_without_subscriber(self, controller):
        assert controller.subscribe_to_newsletter({"email": "a@example.com"}) is None


class TestView:
    """Tests for the rendered checkout view."""

    def test_view_before_load(self, controller):
        view = controller.get_view()

        assert view.is_loaded is False
        assert view.active_step is None

    def test_view_after_load(self, checkout_service, make_controller):
        checkout_service.set_state(make_snapshot(promotions=["SUMMER"]))
        controller = make_controller()
        controller.load()

        view = controller.get_view()

        assert view.is_loaded is True
        assert view.checkout_id == "checkout-1"
        assert [p.id for p in view.promotions] == ["SUMMER"]
        assert len([step for step in view.steps if step.is_required]) == 4

    def test_store_credit_toggle(self, checkout_service, make_controller):
        checkout_service.set_state(make_snapshot(signed_in=True, store_credit=25.0))
        controller = make_controller()
        controller.load()

        controller.on_store_credit_change(True)
        assert controller.get_view().store_credit_amount == 25.0

        controller.on_store_credit_change(False)
        assert controller.get_view().store_credit_amount == 0.0

    def test_consignments_in_view(self, checkout_service, make_controller):
        checkout_service.set_state(make_snapshot(signed_in=True, shipped=True))
        controller = make_controller()
        controller.load()

        assert [c.id for c in controller.get_view().consignments] == ["c1"]
