"""
Step Navigation Schemas.

This package contains the step vocabulary, the navigation intents consumed by
the navigator and the status/result records it produces.
"""

from .step_types import StepType, STEP_ORDER, CustomerViewType
from .intents import IntentType, AdvanceOptions, SignOutContext, NavigationIntent
from .result import StepStatus, NavigationResult
from .view import CheckoutView

__all__ = [
    # Steps
    "StepType",
    "STEP_ORDER",
    "CustomerViewType",
    # Intents
    "IntentType",
    "AdvanceOptions",
    "SignOutContext",
    "NavigationIntent",
    # Results
    "StepStatus",
    "NavigationResult",
    # View
    "CheckoutView",
]
