"""
Checkout Step Definitions.

This module defines the StepType enum representing the steps of the
checkout flow, in canonical order, and the views the customer step can show.
"""

from enum import Enum


class StepType(str, Enum):
    """Checkout steps, declared in canonical order."""
    CUSTOMER = "customer"
    SHIPPING = "shipping"
    BILLING = "billing"
    PAYMENT = "payment"

    @property
    def position(self) -> int:
        return STEP_ORDER.index(self)


STEP_ORDER: list[StepType] = list(StepType)


class CustomerViewType(str, Enum):
    """Which form the customer step presents."""
    LOGIN = "login"
    GUEST = "guest"
