"""
Checkout step status calculation.

This module derives, from a CheckoutSnapshot, which checkout steps are
required, which are complete and which one is active by default. Step rules
are declared in STEP_DEFINITIONS in canonical order, the same way the rest of
the flow reads them.

The calculation is a pure function of its inputs.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Iterable

from .models import CheckoutSnapshot
from .schemas import StepStatus, StepType


@dataclass(frozen=True)
class StepDefinition:
    """Rules for one checkout step."""
    type: StepType
    is_complete: Callable[[CheckoutSnapshot], bool]
    condition: Callable[[CheckoutSnapshot], bool] | None = None  # When this step is required
    depends_on: frozenset[StepType] = field(default_factory=frozenset)

    def is_required(self, snapshot: CheckoutSnapshot) -> bool:
        """Check if this step is required given current cart contents."""
        if snapshot.cart is None:
            return False
        if self.condition is None:
            return True
        return self.condition(snapshot)


def _is_customer_complete(snapshot: CheckoutSnapshot) -> bool:
    if snapshot.customer is not None and snapshot.customer.is_signed_in():
        return True
    # Continuing as guest records the email on the billing address
    return bool(snapshot.billing_address and snapshot.billing_address.email)


def _is_shipping_complete(snapshot: CheckoutSnapshot) -> bool:
    if not snapshot.consignments:
        return False
    return all(consignment.is_complete() for consignment in snapshot.consignments)


def _is_billing_complete(snapshot: CheckoutSnapshot) -> bool:
    return snapshot.billing_address is not None and snapshot.billing_address.is_filled()


def _is_payment_complete(snapshot: CheckoutSnapshot) -> bool:
    return snapshot.order is not None


STEP_DEFINITIONS: list[StepDefinition] = [
    StepDefinition(
        type=StepType.CUSTOMER,
        is_complete=_is_customer_complete,
    ),
    StepDefinition(
        type=StepType.SHIPPING,
        is_complete=_is_shipping_complete,
        condition=lambda snapshot: snapshot.cart.has_physical_items(),
    ),
    StepDefinition(
        type=StepType.BILLING,
        is_complete=_is_billing_complete,
        # Billing is prefilled from the signed-in customer
        depends_on=frozenset({StepType.CUSTOMER}),
    ),
    StepDefinition(
        type=StepType.PAYMENT,
        is_complete=_is_payment_complete,
    ),
]


def get_step_definition(step: StepType) -> StepDefinition:
    for definition in STEP_DEFINITIONS:
        if definition.type == step:
            return definition
    raise KeyError(step)


def get_dependent_steps(step: StepType) -> set[StepType]:
    """
    Get the steps whose completeness is invalidated when `step` is reset.

    Follows depends_on transitively, so a chain of dependencies cascades.
    """
    dependents: set[StepType] = set()
    frontier = {step}
    while frontier:
        current = frontier.pop()
        for definition in STEP_DEFINITIONS:
            if current in definition.depends_on and definition.type not in dependents:
                dependents.add(definition.type)
                frontier.add(definition.type)
    return dependents


def find_default_active_step(statuses: Iterable[StepStatus]) -> StepType | None:
    """
    Get the first required, incomplete step in canonical order.

    Returns None when every required step is complete.
    """
    for status in statuses:
        if status.is_required and not status.is_complete:
            return status.type
    return None


def compute_step_statuses(
    snapshot: CheckoutSnapshot,
    invalidated: Iterable[StepType] = (),
) -> list[StepStatus]:
    """
    Compute the ordered list of step statuses for a snapshot.

    Args:
        snapshot: The checkout data to read
        invalidated: Steps forced incomplete regardless of the data (e.g. the
                     customer step right after sign-out)

    Returns:
        One StepStatus per step in canonical order. The default-active step is
        marked active only once the store config has loaded.
    """
    forced_incomplete = set(invalidated)
    statuses = []
    for definition in STEP_DEFINITIONS:
        is_complete = (
            definition.type not in forced_incomplete
            and definition.is_complete(snapshot)
        )
        statuses.append(StepStatus(
            type=definition.type,
            is_required=definition.is_required(snapshot),
            is_complete=is_complete,
        ))

    if not snapshot.is_loaded:
        # Activity is not determined until the config arrives
        return statuses

    return with_active_step(statuses, find_default_active_step(statuses))


def with_active_step(
    statuses: Iterable[StepStatus],
    active_step: StepType | None,
) -> list[StepStatus]:
    """Return a copy of statuses with only `active_step` marked active."""
    result = []
    for status in statuses:
        is_active = status.type == active_step and status.is_required
        if status.is_active != is_active:
            status = replace(status, is_active=is_active)
        result.append(status)
    return result


def get_required_steps(statuses: Iterable[StepStatus]) -> list[StepStatus]:
    return [status for status in statuses if status.is_required]
