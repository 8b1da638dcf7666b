"""
Tests for analytics trackers, error logging and the timer scheduler.
"""

import logging
import threading

from checkout_flow.errors import (
    ConsoleErrorLogger,
    DataLoadError,
    ErrorKind,
    ErrorLoggerFactory,
    OrderSubmissionError,
    StepOperationError,
    UnhandledStepError,
)
from checkout_flow.scheduler import TimerScheduler
from checkout_flow.steps.tracker import LoggingStepTracker, NoopStepTracker, create_step_tracker


class TestStepTrackers:
    """Tests for tracker selection and the logging tracker."""

    def test_disabled_tracking_is_noop(self):
        assert isinstance(create_step_tracker("checkout-1", enabled=False), NoopStepTracker)

    def test_enabled_tracking_logs(self):
        tracker = create_step_tracker("checkout-1")
        assert isinstance(tracker, LoggingStepTracker)
        assert tracker.checkout_id == "checkout-1"

    def test_logging_tracker_records_signals(self, caplog):
        tracker = LoggingStepTracker("checkout-1")
        with caplog.at_level(logging.INFO, logger="checkout_flow.steps.tracker"):
            tracker.track_checkout_started()
            tracker.track_step_viewed("shipping")
            tracker.track_step_completed("customer")

        messages = [record.getMessage() for record in caplog.records]
        assert "Checkout checkout-1 started" in messages
        assert "Checkout checkout-1: step viewed: shipping" in messages
        assert "Checkout checkout-1: step completed: customer" in messages


class TestErrorLogging:
    """Tests for the error taxonomy and the console error logger."""

    def test_error_kinds(self):
        assert DataLoadError.kind == ErrorKind.DATA_LOAD
        assert StepOperationError.kind == ErrorKind.STEP_OPERATION
        assert OrderSubmissionError.kind == ErrorKind.ORDER_SUBMISSION
        assert UnhandledStepError.kind == ErrorKind.UNHANDLED_STEP

    def test_factory_returns_console_logger(self):
        assert isinstance(ErrorLoggerFactory().get_logger(), ConsoleErrorLogger)

    def test_exception_logged_with_traceback(self, caplog):
        error_logger = ConsoleErrorLogger("checkout_flow.errors")
        with caplog.at_level(logging.ERROR, logger="checkout_flow.errors"):
            error_logger.log(OrderSubmissionError("Card declined"), ErrorKind.ORDER_SUBMISSION)

        record = caplog.records[-1]
        assert "order_submission" in record.getMessage()
        assert "Card declined" in record.getMessage()
        assert record.exc_info is not None

    def test_kind_taken_from_checkout_error(self, caplog):
        error_logger = ConsoleErrorLogger("checkout_flow.errors")
        with caplog.at_level(logging.ERROR, logger="checkout_flow.errors"):
            error_logger.log(OrderSubmissionError("Card declined"))

        assert "(order_submission)" in caplog.records[-1].getMessage()

    def test_explicit_kind_wins(self, caplog):
        error_logger = ConsoleErrorLogger("checkout_flow.errors")
        with caplog.at_level(logging.ERROR, logger="checkout_flow.errors"):
            error_logger.log(DataLoadError("timeout"), ErrorKind.STEP_OPERATION)

        assert "(step_operation)" in caplog.records[-1].getMessage()

    def test_plain_value_logged(self, caplog):
        error_logger = ConsoleErrorLogger("checkout_flow.errors")
        with caplog.at_level(logging.ERROR, logger="checkout_flow.errors"):
            error_logger.log({"status": 500})

        record = caplog.records[-1]
        assert "unknown" in record.getMessage()
        assert "500" in record.getMessage()


class TestTimerScheduler:
    """Tests for the threading.Timer scheduler."""

    def test_callback_runs(self):
        fired = threading.Event()
        TimerScheduler().call_later(0.01, fired.set)

        assert fired.wait(timeout=2)

    def test_cancelled_callback_does_not_run(self):
        fired = threading.Event()
        handle = TimerScheduler().call_later(0.2, fired.set)
        handle.cancel()

        assert not fired.wait(timeout=0.4)
