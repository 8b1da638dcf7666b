"""
Navigation Intents.

Intents are the only way step components influence the navigator. Each
intent is consumed once by StepNavigator.dispatch().
"""

from dataclasses import dataclass, field
from enum import Enum

from .step_types import CustomerViewType, StepType


class IntentType(str, Enum):
    """Commands understood by the step navigator."""
    EDIT = "edit"
    COMPLETE_AND_ADVANCE = "complete_and_advance"
    SIGN_OUT = "sign_out"
    SKIP_TO_STEP = "skip_to_step"


@dataclass(frozen=True)
class AdvanceOptions:
    """Options for CompleteAndAdvance.

    skip_steps lists steps the shopper opted out of (e.g. billing when the
    shipping address is reused), excluded when choosing the next step.
    """
    skip_steps: frozenset[StepType] = frozenset()


@dataclass(frozen=True)
class SignOutContext:
    is_cart_empty: bool = False


@dataclass(frozen=True)
class NavigationIntent:
    """A single navigation command."""
    type: IntentType
    step: StepType | None = None
    options: AdvanceOptions = field(default_factory=AdvanceOptions)
    context: SignOutContext = field(default_factory=SignOutContext)
    view: CustomerViewType | None = None

    @classmethod
    def edit(cls, step: StepType) -> "NavigationIntent":
        return cls(type=IntentType.EDIT, step=step)

    @classmethod
    def complete_and_advance(
        cls,
        from_step: StepType,
        options: AdvanceOptions | None = None,
    ) -> "NavigationIntent":
        return cls(
            type=IntentType.COMPLETE_AND_ADVANCE,
            step=from_step,
            options=options or AdvanceOptions(),
        )

    @classmethod
    def sign_out(cls, context: SignOutContext | None = None) -> "NavigationIntent":
        return cls(type=IntentType.SIGN_OUT, context=context or SignOutContext())

    @classmethod
    def skip_to_step(
        cls,
        step: StepType,
        view: CustomerViewType | None = None,
    ) -> "NavigationIntent":
        return cls(type=IntentType.SKIP_TO_STEP, step=step, view=view)
