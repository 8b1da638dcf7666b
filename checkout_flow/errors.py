"""
Checkout error taxonomy and error logging sink.

The orchestrator is a pass-through reporter: every error raised by a step
component, the data loader or order submission is handed to the ErrorLogger
unchanged. Nothing here retries or recovers.

Error kinds:
- data_load: checkout, cart or config could not be fetched
- step_operation: sign-in, guest continuation or another step action failed
- order_submission: payment submission or finalization failed
- unhandled_step: a step component could not handle an error itself
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Where an error surfaced in the checkout flow."""
    DATA_LOAD = "data_load"
    STEP_OPERATION = "step_operation"
    ORDER_SUBMISSION = "order_submission"
    UNHANDLED_STEP = "unhandled_step"


class CheckoutError(Exception):
    """Base class for checkout errors raised by collaborators."""
    kind: ErrorKind = ErrorKind.UNHANDLED_STEP


class DataLoadError(CheckoutError):
    """Checkout data could not be loaded."""
    kind = ErrorKind.DATA_LOAD


class StepOperationError(CheckoutError):
    """A step action such as sign-in failed."""
    kind = ErrorKind.STEP_OPERATION


class OrderSubmissionError(CheckoutError):
    """Order submission or finalization failed."""
    kind = ErrorKind.ORDER_SUBMISSION


class UnhandledStepError(CheckoutError):
    """A step component gave up on an error."""
    kind = ErrorKind.UNHANDLED_STEP


class ErrorLogger(ABC):
    """Sink for errors surfaced anywhere in the checkout."""

    @abstractmethod
    def log(self, error: Any, kind: ErrorKind | None = None) -> None:
        """
        Record an error.

        Args:
            error: The error object or value, exactly as raised
            kind: Where the error surfaced, if known
        """
        pass


class ConsoleErrorLogger(ErrorLogger):
    """Writes errors to the application log."""

    def __init__(self, name: str = "checkout_flow.errors"):
        self._logger = logging.getLogger(name)

    def log(self, error: Any, kind: ErrorKind | None = None) -> None:
        if kind is None:
            kind = getattr(error, "kind", None)
        label = kind.value if kind else "unknown"
        if isinstance(error, BaseException):
            self._logger.error(
                "Checkout error (%s): %s",
                label,
                error,
                exc_info=(type(error), error, error.__traceback__),
            )
        else:
            self._logger.error("Checkout error (%s): %r", label, error)


class ErrorLoggerFactory:
    """Creates the error logger used by checkout sessions."""

    def __init__(self, name: str = "checkout_flow.errors"):
        self.name = name

    def get_logger(self) -> ErrorLogger:
        return ConsoleErrorLogger(self.name)
