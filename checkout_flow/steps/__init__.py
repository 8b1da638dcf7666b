"""
Checkout Step Orchestration.

This package decides which checkout steps are required, which one is active
and how completing one step moves the shopper to the next:
- Snapshot read model of cart, customer, consignments and config
- Pure step status calculation
- StepNavigator state machine driven by NavigationIntents
- Analytics tracking of checkout and step events
- CheckoutController wiring the lifecycle of one checkout session
"""

from .models import (
    LineItem,
    LineItems,
    Cart,
    Promotion,
    Checkout,
    Customer,
    Address,
    BillingAddress,
    ShippingOption,
    Consignment,
    StoreLinks,
    StoreConfig,
    Order,
    CheckoutSnapshot,
)

from .schemas import (
    StepType,
    STEP_ORDER,
    CustomerViewType,
    IntentType,
    AdvanceOptions,
    SignOutContext,
    NavigationIntent,
    StepStatus,
    NavigationResult,
    CheckoutView,
)

from .step_status import (
    StepDefinition,
    STEP_DEFINITIONS,
    compute_step_statuses,
    find_default_active_step,
)

from .tracker import (
    StepTracker,
    NoopStepTracker,
    LoggingStepTracker,
    create_step_tracker,
)

from .navigator import StepNavigator
from .checkout import CheckoutController

__all__ = [
    # Models
    "LineItem",
    "LineItems",
    "Cart",
    "Promotion",
    "Checkout",
    "Customer",
    "Address",
    "BillingAddress",
    "ShippingOption",
    "Consignment",
    "StoreLinks",
    "StoreConfig",
    "Order",
    "CheckoutSnapshot",
    # Schemas
    "StepType",
    "STEP_ORDER",
    "CustomerViewType",
    "IntentType",
    "AdvanceOptions",
    "SignOutContext",
    "NavigationIntent",
    "StepStatus",
    "NavigationResult",
    "CheckoutView",
    # Status calculation
    "StepDefinition",
    "STEP_DEFINITIONS",
    "compute_step_statuses",
    "find_default_active_step",
    # Tracking
    "StepTracker",
    "NoopStepTracker",
    "LoggingStepTracker",
    "create_step_tracker",
    # Navigation
    "StepNavigator",
    "CheckoutController",
]
