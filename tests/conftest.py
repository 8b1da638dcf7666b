import logging

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from checkout_flow.errors import ErrorLogger
from checkout_flow.page_navigation import RecordingPageNavigator
from checkout_flow.scheduler import ScheduledCall, Scheduler
from checkout_flow.services.checkout_service import InMemoryCheckoutService
from checkout_flow.services.session import clear_sessions
from checkout_flow.steps.models import (
    Address,
    BillingAddress,
    Cart,
    Checkout,
    CheckoutSnapshot,
    Consignment,
    Customer,
    LineItem,
    LineItems,
    Order,
    Promotion,
    ShippingOption,
    StoreConfig,
    StoreLinks,
)
from checkout_flow.steps.tracker import StepTracker


# =============================================================================
# Deterministic timers
# =============================================================================

class FakeScheduledCall(ScheduledCall):
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.ran = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler(Scheduler):
    """Scheduler whose calls run only when the test says so."""

    def __init__(self):
        self.calls = []

    def call_later(self, delay, callback):
        call = FakeScheduledCall(delay, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self):
        return [call for call in self.calls if not call.cancelled and not call.ran]

    def run_all(self):
        for call in self.pending:
            call.ran = True
            call.callback()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def tracker():
    return MagicMock(spec=StepTracker)


@pytest.fixture
def error_logger():
    return MagicMock(spec=ErrorLogger)


@pytest.fixture
def page_navigator():
    return RecordingPageNavigator()


# =============================================================================
# Snapshot builders
# =============================================================================

ADDRESS = Address(
    first_name="Test",
    last_name="Shopper",
    address1="12 Main St",
    city="Austin",
    state_or_province="TX",
    postal_code="78701",
    country_code="US",
)


def make_cart(physical=1, digital=0):
    return Cart(
        id="cart-1",
        line_items=LineItems(
            physical_items=[
                LineItem(id=f"p{i}", name="Mug", quantity=1, sale_price=12.0)
                for i in range(physical)
            ],
            digital_items=[
                LineItem(id=f"d{i}", name="E-book", quantity=1, sale_price=5.0)
                for i in range(digital)
            ],
        ),
    )


def make_snapshot(
    physical=1,
    digital=0,
    signed_in=False,
    guest_email=None,
    shipped=False,
    billed=False,
    ordered=False,
    loaded=True,
    store_credit=0.0,
    login_link="",
    site_link="https://store.example.com",
    promotions=None,
    has_cart=True,
):
    """Build a snapshot with the given progress through the steps."""
    customer = None
    if signed_in:
        customer = Customer(
            id=7,
            email="shopper@example.com",
            is_guest=False,
            store_credit=store_credit,
        )
    elif store_credit:
        customer = Customer(store_credit=store_credit)

    billing_address = None
    if billed:
        billing_address = BillingAddress(**ADDRESS.model_dump(), email=guest_email)
    elif guest_email:
        billing_address = BillingAddress(email=guest_email)

    consignments = None
    if shipped:
        consignments = [Consignment(
            id="c1",
            line_item_ids=["p0"],
            shipping_address=ADDRESS,
            selected_shipping_option=ShippingOption(id="ground", description="Ground"),
        )]

    return CheckoutSnapshot(
        cart=make_cart(physical, digital) if has_cart else None,
        checkout=Checkout(
            id="checkout-1",
            promotions=[Promotion(id=p, banners=[f"{p} banner"]) for p in (promotions or [])],
        ),
        customer=customer,
        consignments=consignments,
        billing_address=billing_address,
        config=StoreConfig(
            store_name="Test Store",
            links=StoreLinks(site_link=site_link, login_link=login_link),
        ) if loaded else None,
        order=Order(order_id=100) if ordered else None,
    )


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def checkout_service(snapshot):
    return InMemoryCheckoutService(snapshot)


# =============================================================================
# API client
# =============================================================================

@pytest.fixture
def client():
    """Shared FastAPI TestClient with an empty session cache."""
    from checkout_flow.app_factory import create_app

    clear_sessions()
    with TestClient(create_app()) as c:
        yield c
    clear_sessions()


@pytest.fixture(autouse=True)
def reset_package_log_level():
    """setup_logging() changes the package logger level; restore it per test."""
    logger = logging.getLogger("checkout_flow")
    original = logger.level
    yield
    logger.setLevel(original)
