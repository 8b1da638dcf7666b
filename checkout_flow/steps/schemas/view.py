"""
Checkout View.

Read model handed to the rendering layer: everything the page needs to draw
the checkout steps and the cart summary.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models import Consignment, Promotion
from .result import StepStatus
from .step_types import CustomerViewType, StepType


class CheckoutView(BaseModel):
    """Rendered state of one checkout session."""
    checkout_id: str
    is_loaded: bool = False
    active_step: Optional[StepType] = None
    steps: List[StepStatus] = Field(default_factory=list)
    customer_view_type: CustomerViewType = CustomerViewType.GUEST
    promotions: List[Promotion] = Field(default_factory=list)
    store_credit_amount: float = 0.0
    consignments: List[Consignment] = Field(default_factory=list)  # Shipping summary
