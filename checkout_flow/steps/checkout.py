"""
Checkout Controller - lifecycle wiring for one checkout session.

The controller is the single entry point for everything that happens to a
checkout:
1. Loads checkout data once and subscribes to later changes
2. Feeds every snapshot to the StepNavigator
3. Translates step component callbacks into NavigationIntents
4. Reports errors to the ErrorLogger (and the parent frame where relevant)
5. Performs outbound navigation through the PageNavigator

It owns no step state itself; the navigator does.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..config import (
    DEFAULT_LOGIN_URL,
    STEP_VIEW_DELAY_SECONDS,
    get_checkout_load_options,
    get_order_confirmation_url,
)
from ..embedded import (
    EmbeddedCheckoutMessenger,
    EmbeddedCheckoutStylesheet,
    NoopEmbeddedMessenger,
)
from ..errors import ErrorKind, ErrorLogger, ErrorLoggerFactory
from ..page_navigation import PageNavigator
from ..scheduler import Scheduler
from .models import CheckoutSnapshot
from .navigator import StepNavigator
from .schemas import (
    AdvanceOptions,
    CheckoutView,
    CustomerViewType,
    NavigationIntent,
    NavigationResult,
    SignOutContext,
    StepType,
)
from .tracker import NoopStepTracker, StepTracker

if TYPE_CHECKING:
    from ..services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

MessengerFactory = Callable[[Optional[str]], EmbeddedCheckoutMessenger]


def _create_noop_messenger(parent_origin: Optional[str]) -> EmbeddedCheckoutMessenger:
    return NoopEmbeddedMessenger()


class CheckoutController:
    """
    Orchestrates one checkout session.

    Step components call the on_* methods; the host calls load(), reads
    get_view() to render and calls teardown() when the page goes away.
    """

    def __init__(
        self,
        checkout_id: str,
        checkout_service: "CheckoutService",
        page_navigator: PageNavigator,
        container_id: str = "app",
        checkout_url: str = "",
        error_logger: ErrorLogger | None = None,
        step_tracker: StepTracker | None = None,
        create_embedded_messenger: MessengerFactory | None = None,
        parent_origin: str | None = None,
        embedded_stylesheet: EmbeddedCheckoutStylesheet | None = None,
        subscribe_to_newsletter: Callable[[dict], Any] | None = None,
        scheduler: Scheduler | None = None,
        step_view_delay: float = STEP_VIEW_DELAY_SECONDS,
        default_login_url: str = DEFAULT_LOGIN_URL,
    ):
        """
        Initialize the CheckoutController.

        Args:
            checkout_id: Checkout to load
            checkout_service: Data-loading collaborator
            page_navigator: Performs redirects away from the checkout
            container_id: Element id reported to the parent frame on load
            checkout_url: URL of the checkout page (order confirmation is relative to it)
            error_logger: Error sink (defaults to the console logger)
            step_tracker: Analytics tracker (defaults to a no-op tracker)
            create_embedded_messenger: Builds the parent-frame messenger from the
                                       parent origin. Defaults to a no-op messenger.
            parent_origin: Origin of the hosting page. Defaults to the store
                           site link from the loaded config.
            embedded_stylesheet: Receives style overrides from the parent frame
            subscribe_to_newsletter: Newsletter signup passed to the customer step
            scheduler: Timer facility for delayed analytics
            step_view_delay: Delay before step-viewed analytics fire
            default_login_url: Login page when the store config has none
        """
        self.checkout_id = checkout_id
        self.container_id = container_id
        self.checkout_url = checkout_url
        self.checkout_service = checkout_service
        self.page_navigator = page_navigator
        self.error_logger = error_logger or ErrorLoggerFactory().get_logger()
        self.embedded_stylesheet = embedded_stylesheet or EmbeddedCheckoutStylesheet()
        self.messenger: EmbeddedCheckoutMessenger = NoopEmbeddedMessenger()
        self.navigator = StepNavigator(
            tracker=step_tracker or NoopStepTracker(),
            scheduler=scheduler,
            step_view_delay=step_view_delay,
            default_login_url=default_login_url,
        )

        self._create_messenger = create_embedded_messenger or _create_noop_messenger
        self._parent_origin = parent_origin
        self._subscribe_to_newsletter = subscribe_to_newsletter
        self._store_credit_amount = 0.0
        self._is_loaded = False
        self._unsubscribe: Callable[[], None] | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def load(self) -> NavigationResult | None:
        """
        Load checkout data and start the step flow.

        Returns:
            The navigation result for the loaded data, or None if loading failed
            (the failure goes to the error logger and no step becomes active).
        """
        try:
            snapshot = self.checkout_service.load_checkout(
                self.checkout_id,
                get_checkout_load_options(),
            )
        except Exception as error:
            logger.warning("Failed to load checkout %s", self.checkout_id)
            self.error_logger.log(error, ErrorKind.DATA_LOAD)
            return None
        return self._handle_loaded(snapshot)

    async def load_async(self) -> NavigationResult | None:
        """Async version of load() that fetches off the event loop."""
        try:
            snapshot = await asyncio.to_thread(
                self.checkout_service.load_checkout,
                self.checkout_id,
                get_checkout_load_options(),
            )
        except Exception as error:
            logger.warning("Failed to load checkout %s", self.checkout_id)
            self.error_logger.log(error, ErrorKind.DATA_LOAD)
            return None
        return self._handle_loaded(snapshot)

    def _handle_loaded(self, snapshot: CheckoutSnapshot) -> NavigationResult:
        if not self._is_loaded:
            self._is_loaded = True
            parent_origin = self._parent_origin
            if parent_origin is None and snapshot.config is not None:
                parent_origin = snapshot.config.links.site_link or None

            self.messenger = self._create_messenger(parent_origin)
            self.messenger.receive_styles(self.embedded_stylesheet.append)
            self.messenger.post_frame_loaded(self.container_id)
            self._unsubscribe = self.checkout_service.subscribe(self.handle_state_change)
            logger.info("Checkout %s loaded", self.checkout_id)

        return self.handle_state_change(snapshot)

    def handle_state_change(self, snapshot: CheckoutSnapshot) -> NavigationResult:
        """Apply new checkout data (from the data collaborator's subscription)."""
        return self.navigator.update(snapshot)

    def teardown(self) -> None:
        """Stop reacting to data and drop pending analytics."""
        self.navigator.teardown()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    @property
    def is_loaded(self) -> bool:
        return self._is_loaded

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def dispatch(self, intent: NavigationIntent) -> NavigationResult:
        """Dispatch an intent against the latest checkout data."""
        result = self.navigator.dispatch(intent, self.checkout_service.get_state())
        if result.redirect_url:
            self.page_navigator.navigate_to(result.redirect_url, top_level=True)
        return result

    def edit_step(self, step: StepType) -> NavigationResult:
        return self.dispatch(NavigationIntent.edit(step))

    # Customer step

    def on_sign_in(self) -> NavigationResult:
        return self.dispatch(NavigationIntent.complete_and_advance(StepType.CUSTOMER))

    def on_continue_as_guest(self) -> NavigationResult:
        return self.dispatch(NavigationIntent.complete_and_advance(StepType.CUSTOMER))

    def on_sign_in_error(self, error: Any) -> None:
        self.error_logger.log(error, ErrorKind.STEP_OPERATION)

    def on_continue_as_guest_error(self, error: Any) -> None:
        self.error_logger.log(error, ErrorKind.STEP_OPERATION)

    def on_sign_out(self, is_cart_empty: bool = False) -> NavigationResult:
        return self.dispatch(NavigationIntent.sign_out(SignOutContext(is_cart_empty=is_cart_empty)))

    def subscribe_to_newsletter(self, data: dict) -> Any:
        if self._subscribe_to_newsletter is None:
            logger.debug("Newsletter subscription is not configured")
            return None
        return self._subscribe_to_newsletter(data)

    # Shipping step

    def on_shipping_sign_in(self) -> NavigationResult:
        """The shipping step needs a signed-in shopper (multi-address shipping)."""
        return self.dispatch(NavigationIntent.skip_to_step(StepType.CUSTOMER, CustomerViewType.LOGIN))

    def navigate_next_step(self, billing_same_as_shipping: bool) -> NavigationResult:
        skip_steps = frozenset({StepType.BILLING}) if billing_same_as_shipping else frozenset()
        return self.dispatch(NavigationIntent.complete_and_advance(
            StepType.SHIPPING,
            AdvanceOptions(skip_steps=skip_steps),
        ))

    # Billing step

    def on_billing_complete(self) -> NavigationResult:
        return self.dispatch(NavigationIntent.complete_and_advance(StepType.BILLING))

    # Payment step

    def on_submit(self) -> None:
        """The order was placed."""
        self.messenger.post_complete()
        self._navigate_to_order_confirmation()

    def on_finalize(self) -> None:
        """A previously placed order was finalized."""
        self._navigate_to_order_confirmation()

    def on_submit_error(self, error: Any) -> None:
        self.error_logger.log(error, ErrorKind.ORDER_SUBMISSION)
        self.messenger.post_error(error)

    def on_store_credit_change(self, applied: bool) -> None:
        snapshot = self.checkout_service.get_state()
        self._store_credit_amount = snapshot.get_store_credit() if applied else 0.0

    # Any step

    def on_unhandled_error(self, step: StepType, error: Any) -> None:
        self.error_logger.log(error, ErrorKind.UNHANDLED_STEP)
        if step == StepType.PAYMENT:
            self.messenger.post_error(error)

    def _navigate_to_order_confirmation(self) -> None:
        self.page_navigator.navigate_to(
            get_order_confirmation_url(self.checkout_url),
            replace=True,
        )

    # -------------------------------------------------------------------------
    # View
    # -------------------------------------------------------------------------

    def get_view(self) -> CheckoutView:
        """Build the read model used to render the checkout."""
        snapshot = self.checkout_service.get_state()
        return CheckoutView(
            checkout_id=self.checkout_id,
            is_loaded=self.navigator.has_started,
            active_step=self.navigator.active_step,
            steps=self.navigator.statuses,
            customer_view_type=self.navigator.customer_view_type,
            promotions=snapshot.get_promotions(),
            store_credit_amount=self._store_credit_amount,
            consignments=list(snapshot.consignments or []),
        )
