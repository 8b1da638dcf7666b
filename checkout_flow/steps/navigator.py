"""
Step Navigator - state machine for the active checkout step.

The navigator owns two pieces of state:
1. The derived step status list (recomputed from every snapshot)
2. The active-step pointer (None until checkout data has loaded)

It changes them only in response to:
- update(snapshot): new checkout data from the data-loading collaborator
- dispatch(intent): a NavigationIntent issued by a step component or shopper

Analytics are reported to a StepTracker at fixed points:
- checkout started: the first time store config is present (once)
- step completed: CompleteAndAdvance, the first time a step is reported
  complete (again after it has been invalidated by sign-out)
- step viewed: Edit, after a short settle delay. A newer edit replaces a
  pending one, and teardown() cancels it.

All processing is synchronous and runs to completion; intents are handled
strictly in the order they are dispatched.
"""

from functools import partial
import logging

from ..config import DEFAULT_LOGIN_URL, STEP_VIEW_DELAY_SECONDS
from ..scheduler import ScheduledCall, Scheduler, TimerScheduler
from .models import CheckoutSnapshot
from .schemas import (
    AdvanceOptions,
    CustomerViewType,
    IntentType,
    NavigationIntent,
    NavigationResult,
    SignOutContext,
    StepStatus,
    StepType,
)
from .step_status import (
    compute_step_statuses,
    find_default_active_step,
    get_dependent_steps,
    with_active_step,
)
from .tracker import NoopStepTracker, StepTracker

logger = logging.getLogger(__name__)


class StepNavigator:
    """
    Holds the active checkout step and reacts to data and intents.

    It provides a simple interface: update(snapshot) and dispatch(intent),
    both returning a NavigationResult.
    """

    def __init__(
        self,
        tracker: StepTracker | None = None,
        scheduler: Scheduler | None = None,
        step_view_delay: float = STEP_VIEW_DELAY_SECONDS,
        default_login_url: str = DEFAULT_LOGIN_URL,
    ):
        """
        Initialize the StepNavigator.

        Args:
            tracker: Analytics tracker (defaults to a no-op tracker)
            scheduler: Timer facility for the step-viewed delay
            step_view_delay: Seconds to wait before reporting a viewed step
            default_login_url: Login page used when the store config has none
        """
        self.tracker = tracker or NoopStepTracker()
        self.scheduler = scheduler or TimerScheduler()
        self.step_view_delay = step_view_delay
        self.default_login_url = default_login_url

        self.active_step: StepType | None = None
        self.customer_view_type = CustomerViewType.GUEST

        self._snapshot: CheckoutSnapshot | None = None
        self._statuses: list[StepStatus] = []
        self._is_explicit = False
        self._invalidated: set[StepType] = set()
        self._reported_complete: set[StepType] = set()
        self._has_started = False
        self._pending_view: ScheduledCall | None = None
        self._view_generation = 0
        self._is_torn_down = False

    # -------------------------------------------------------------------------
    # State accessors
    # -------------------------------------------------------------------------

    @property
    def statuses(self) -> list[StepStatus]:
        """Step statuses with the active flag following the active pointer."""
        return with_active_step(self._statuses, self.active_step)

    @property
    def has_started(self) -> bool:
        return self._has_started

    def get_status(self, step: StepType) -> StepStatus | None:
        for status in self._statuses:
            if status.type == step:
                return status
        return None

    # -------------------------------------------------------------------------
    # Data updates
    # -------------------------------------------------------------------------

    def update(self, snapshot: CheckoutSnapshot) -> NavigationResult:
        """
        Recompute step statuses for new checkout data and reconcile the
        active step against them.
        """
        previous_step = self.active_step
        self._snapshot = snapshot
        self._recompute()

        if not snapshot.is_loaded:
            logger.debug("Checkout config not loaded yet, active step undetermined")
            return self._result(previous_step)

        if not self._has_started:
            self._has_started = True
            self._reconcile()
            logger.info("Checkout data loaded, active step: %s", self._step_name(self.active_step))
            self.tracker.track_checkout_started()
            return self._result(previous_step)

        self._reconcile()
        return self._result(previous_step)

    def _recompute(self) -> None:
        if self._snapshot is None:
            self._statuses = []
            return
        self._statuses = compute_step_statuses(self._snapshot, self._invalidated)

    def _reconcile(self) -> None:
        """Keep an explicitly chosen step while it stays required, else use the default."""
        if self._is_explicit and self._is_required(self.active_step):
            return
        self._set_active(find_default_active_step(self._statuses), explicit=False)

    # -------------------------------------------------------------------------
    # Intents
    # -------------------------------------------------------------------------

    def dispatch(
        self,
        intent: NavigationIntent,
        snapshot: CheckoutSnapshot | None = None,
    ) -> NavigationResult:
        """
        Process one navigation intent.

        Args:
            intent: The command to apply
            snapshot: Latest checkout data, if it changed since the last update

        Returns:
            NavigationResult with the new active step. redirect_url is set
            when the intent must leave the checkout instead of navigating.
        """
        previous_step = self.active_step
        if snapshot is not None:
            self.update(snapshot)

        logger.debug("Dispatching %s (step=%s)", intent.type.value, self._step_name(intent.step))

        if not self._has_started:
            logger.warning("Ignoring %s intent: checkout data not loaded", intent.type.value)
            return self._result(previous_step)

        if intent.type == IntentType.EDIT:
            self._edit(intent.step)
        elif intent.type == IntentType.COMPLETE_AND_ADVANCE:
            self._complete_and_advance(intent.step, intent.options)
        elif intent.type == IntentType.SIGN_OUT:
            redirect_url = self._sign_out(intent.context)
            if redirect_url:
                return self._result(previous_step, redirect_url=redirect_url)
        elif intent.type == IntentType.SKIP_TO_STEP:
            self._skip_to_step(intent.step, intent.view)
        else:
            raise ValueError(f"Unknown intent type: {intent.type}")

        return self._result(previous_step)

    def _edit(self, step: StepType | None) -> None:
        if not self._can_activate(step):
            logger.warning("Ignoring edit of step %s: not required", self._step_name(step))
            return
        self._set_active(step, explicit=True)
        self._schedule_step_viewed(step)

    def _complete_and_advance(self, from_step: StepType | None, options: AdvanceOptions) -> None:
        if from_step is None:
            raise ValueError("CompleteAndAdvance requires a step")

        # Completing a step, or skipping one in its favour, satisfies it again
        cleared = {from_step} | set(options.skip_steps)
        if self._invalidated & cleared:
            self._invalidated -= cleared
            self._recompute()

        if from_step not in self._reported_complete:
            self._reported_complete.add(from_step)
            self.tracker.track_step_completed(from_step.value)

        next_step = self._find_next_step(from_step, options.skip_steps)
        self._set_active(next_step, explicit=next_step is not None)

    def _find_next_step(self, from_step: StepType, skip_steps: frozenset[StepType]) -> StepType | None:
        """
        Get the next required, incomplete step after `from_step`.

        Falls back to the earliest such step anywhere in the flow; returns
        None when every remaining step is complete.
        """
        candidates = [
            status for status in self._statuses
            if status.is_required
            and not status.is_complete
            and status.type != from_step
            and status.type not in skip_steps
        ]
        for status in candidates:
            if status.type.position > from_step.position:
                return status.type
        if candidates:
            return candidates[0].type
        return None

    def _sign_out(self, context: SignOutContext) -> str | None:
        self._invalidate(StepType.CUSTOMER)

        if context.is_cart_empty:
            login_url = self._get_login_url()
            logger.info("Signed out with an empty cart, leaving checkout")
            return login_url

        self.customer_view_type = CustomerViewType.GUEST
        self._set_active(StepType.CUSTOMER, explicit=True)
        return None

    def _skip_to_step(self, step: StepType | None, view: CustomerViewType | None) -> None:
        if not self._can_activate(step):
            logger.warning("Ignoring skip to step %s: not required", self._step_name(step))
            return
        if view is not None:
            self.customer_view_type = view
        self._set_active(step, explicit=True)

    def _invalidate(self, step: StepType) -> None:
        """Force `step` and every step depending on it back to incomplete."""
        affected = {step} | get_dependent_steps(step)
        self._invalidated |= affected
        self._reported_complete -= affected
        self._recompute()
        logger.debug("Invalidated steps: %s", sorted(s.value for s in affected))

    # -------------------------------------------------------------------------
    # Step-viewed delay
    # -------------------------------------------------------------------------

    def _schedule_step_viewed(self, step: StepType) -> None:
        self._cancel_pending_view()
        self._view_generation += 1
        self._pending_view = self.scheduler.call_later(
            self.step_view_delay,
            partial(self._flush_step_viewed, step, self._view_generation),
        )

    def _flush_step_viewed(self, step: StepType, generation: int) -> None:
        # A superseded edit whose timer fired before it could be cancelled
        if generation != self._view_generation:
            return
        self._pending_view = None
        if self._is_torn_down:
            return
        self.tracker.track_step_viewed(step.value)

    def _cancel_pending_view(self) -> None:
        if self._pending_view is not None:
            self._pending_view.cancel()
            self._pending_view = None

    def teardown(self) -> None:
        """Stop the navigator. Pending analytics are dropped."""
        self._is_torn_down = True
        self._cancel_pending_view()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _is_required(self, step: StepType | None) -> bool:
        if step is None:
            return False
        status = self.get_status(step)
        return status is not None and status.is_required

    def _can_activate(self, step: StepType | None) -> bool:
        status = self.get_status(step) if step is not None else None
        return status is not None and status.is_required and status.is_editable

    def _set_active(self, step: StepType | None, explicit: bool) -> None:
        if step != self.active_step:
            logger.debug(
                "Active step: %s -> %s",
                self._step_name(self.active_step),
                self._step_name(step),
            )
        self.active_step = step
        self._is_explicit = explicit

    def _get_login_url(self) -> str:
        config = self._snapshot.config if self._snapshot else None
        if config is not None and config.links.login_link:
            return config.links.login_link
        return self.default_login_url

    def _result(self, previous_step: StepType | None, redirect_url: str | None = None) -> NavigationResult:
        return NavigationResult(
            active_step=self.active_step,
            previous_step=previous_step,
            statuses=self.statuses,
            redirect_url=redirect_url,
        )

    @staticmethod
    def _step_name(step: StepType | None) -> str:
        return step.value if step is not None else "none"

