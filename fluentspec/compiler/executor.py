"""Execution contract for compiled test cases.

This module provides the CaseExecutor class which handles:
- Running one case's deferred ``run`` closure
- Running its teardown exactly once afterwards, whatever the outcome
- Classifying the outcome with the ExceptionMatcher
- Aggregating sequential runs into an ExecutionSummary

Scheduling, parallelism and reporting formats belong to the runner adapter;
this executor only defines what "passed", "failed" and "ignored" mean for a
single case.
"""

import time
import traceback
import uuid
from datetime import UTC, datetime
from typing import Any, Callable, Optional

import structlog

from fluentspec.compiler.errors import (
    AssertionFailure,
    ConfigurationError,
    ExpectedExceptionMismatch,
    SetupFailure,
    TeardownFailure,
)
from fluentspec.compiler.matcher import ExceptionMatcher
from fluentspec.compiler.models import Outcome, TestCase
from fluentspec.utils.logging import CaseExecutionLogger

logger = structlog.get_logger()


class CaseResult:
    """Result of executing a single test case.

    Attributes:
        case: The executed case
        status: PASSED, FAILED or IGNORED
        message: Failure text (None when passed)
        error_type: Name of the exception raised by the body, if any
        error_stack: Formatted traceback of that exception
        teardown_error: Failure text from teardown, if it raised
        failure_kind: setup, configuration, assertion, error, exception_mismatch or teardown
        duration_ms: Wall time for run plus teardown
    """

    def __init__(self, case: TestCase):
        self.id = str(uuid.uuid4())
        self.case = case
        self.status = Outcome.PASSED
        self.message: str | None = None
        self.error_type: str | None = None
        self.error_stack: str | None = None
        self.teardown_error: str | None = None
        self.started_at: datetime | None = None
        self.completed_at: datetime | None = None
        self.failure_kind: str | None = None
        self.expected_type: type[BaseException] | None = None
        self.expected_message: str | None = None
        self.duration_ms: int = 0

    @property
    def passed(self) -> bool:
        return self.status == Outcome.PASSED

    def fail(self, message: str, kind: str = "error") -> None:
        self.status = Outcome.FAILED
        self.message = message
        self.failure_kind = kind

    def raise_for_status(self) -> "CaseResult":
        """Raise the error matching this failure, so a runner can report it natively."""
        if self.status != Outcome.FAILED:
            return self
        if self.failure_kind == "teardown":
            raise TeardownFailure(self.message)
        if self.failure_kind == "exception_mismatch":
            raise ExpectedExceptionMismatch(
                self.message,
                expected_type=self.expected_type,
                expected_message=self.expected_message,
            )
        if self.failure_kind == "setup":
            raise SetupFailure(self.message)
        if self.failure_kind == "configuration":
            raise ConfigurationError(self.message)
        raise AssertionFailure(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for a reporter."""
        return {
            "id": self.id,
            "given": self.case.given,
            "when": self.case.when,
            "then": self.case.then,
            "with": self.case.with_label,
            "status": self.status.value,
            "message": self.message,
            "failure_kind": self.failure_kind,
            "error_type": self.error_type,
            "error_stack": self.error_stack,
            "teardown_error": self.teardown_error,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
        }


class ExecutionSummary:
    """Aggregated results from executing a batch of cases."""

    def __init__(self):
        self.id = str(uuid.uuid4())
        self.total: int = 0
        self.passed: int = 0
        self.failed: int = 0
        self.ignored: int = 0
        self.not_run: int = 0
        self.duration_ms: int = 0
        self.started_at: datetime | None = None
        self.completed_at: datetime | None = None
        self.results: list[CaseResult] = []

    def record(self, result: CaseResult) -> None:
        self.results.append(result)
        if result.status == Outcome.PASSED:
            self.passed += 1
        elif result.status == Outcome.IGNORED:
            self.ignored += 1
        else:
            self.failed += 1

    @property
    def success(self) -> bool:
        return self.failed == 0

    def failures(self) -> list[CaseResult]:
        return [r for r in self.results if r.status == Outcome.FAILED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "ignored": self.ignored,
            "not_run": self.not_run,
            "duration_ms": self.duration_ms,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "results": [r.to_dict() for r in self.results],
        }


class CaseExecutor:
    """Executes test cases one at a time.

    Example:
        executor = CaseExecutor()
        result = executor.execute(case)
        print(result.status, result.message)

        summary = executor.execute_all(cases)
        print(f"Passed: {summary.passed}/{summary.total}")
    """

    def __init__(
        self,
        matcher: Optional[ExceptionMatcher] = None,
        stop_on_failure: Optional[bool] = None,
        on_case_start: Callable[[TestCase], None] | None = None,
        on_case_complete: Callable[[CaseResult], None] | None = None,
    ):
        """Initialize the executor.

        Args:
            matcher: Exception matcher (default: exact matching)
            stop_on_failure: Stop execute_all() after the first failure
                (default: taken from Settings)
            on_case_start: Callback before each case runs
            on_case_complete: Callback after each case (and its teardown) finishes
        """
        if stop_on_failure is None:
            from fluentspec.config import get_settings

            stop_on_failure = get_settings().stop_on_failure
        self.matcher = matcher or ExceptionMatcher()
        self.stop_on_failure = stop_on_failure
        self.on_case_start = on_case_start
        self.on_case_complete = on_case_complete

    def execute(self, case: TestCase) -> CaseResult:
        """Run a case and its teardown, and classify the outcome."""
        result = CaseResult(case)
        case_log = CaseExecutionLogger(case.given, case.when, case.then, case.with_label)
        result.started_at = datetime.now(UTC)
        start = time.monotonic()
        case_log.case_started()

        outcome: Optional[Outcome] = None
        error: Optional[BaseException] = None
        try:
            outcome = case.run()
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            error = e
        finally:
            teardown_error = self._run_teardown(case)

        if error is not None:
            result.error_type = type(error).__name__
            result.error_stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))

        self._classify(case, result, outcome, error, case_log)

        if teardown_error is not None:
            result.teardown_error = teardown_error
            case_log.teardown_failed(teardown_error)
            if result.status == Outcome.FAILED:
                result.message = f"{result.message}\n{teardown_error}"
            else:
                result.fail(teardown_error, kind="teardown")

        result.completed_at = datetime.now(UTC)
        result.duration_ms = int((time.monotonic() - start) * 1000)
        case_log.case_completed(result.status.value, result.duration_ms)
        return result

    def execute_all(self, cases: list[TestCase]) -> ExecutionSummary:
        """Run cases sequentially and aggregate their results."""
        summary = ExecutionSummary()
        summary.total = len(cases)
        summary.started_at = datetime.now(UTC)
        start = time.monotonic()

        logger.info("Executing cases", total=len(cases), stop_on_failure=self.stop_on_failure)

        for case in cases:
            if self.on_case_start:
                self.on_case_start(case)
            result = self.execute(case)
            summary.record(result)
            if self.on_case_complete:
                self.on_case_complete(result)
            if self.stop_on_failure and result.status == Outcome.FAILED:
                logger.info("Stopping on first failure", case=case.full_name)
                break

        summary.not_run = summary.total - len(summary.results)
        summary.completed_at = datetime.now(UTC)
        summary.duration_ms = int((time.monotonic() - start) * 1000)

        logger.info(
            "Case execution complete",
            total=summary.total,
            passed=summary.passed,
            failed=summary.failed,
            ignored=summary.ignored,
            not_run=summary.not_run,
            duration_ms=summary.duration_ms,
        )
        return summary

    def _run_teardown(self, case: TestCase) -> Optional[str]:
        try:
            case.teardown()
        except Exception as e:
            return f"Error during teardown: {type(e).__name__}: {e}"
        return None

    def _classify(
        self,
        case: TestCase,
        result: CaseResult,
        outcome: Optional[Outcome],
        error: Optional[BaseException],
        case_log: CaseExecutionLogger,
    ) -> None:
        try:
            expected_type = case.expected_exception_type()
            expected_message = case.expected_exception_message() if expected_type is not None else None
        except Exception as e:
            result.fail(f"Could not determine the expected exception: {type(e).__name__}: {e}", kind="exception_mismatch")
            return

        if expected_type is None:
            if error is None:
                result.status = outcome or Outcome.PASSED
            elif isinstance(error, SetupFailure):
                result.fail(str(error), kind="setup")
            elif isinstance(error, ConfigurationError):
                result.fail(str(error), kind="configuration")
            elif isinstance(error, AssertionError):
                result.fail(f"{type(error).__name__}: {error}", kind="assertion")
            else:
                result.fail(f"{type(error).__name__}: {error}")
            return

        result.expected_type = expected_type
        result.expected_message = expected_message
        matched = error is not None and self.matcher.matches(error, expected_type, expected_message)
        case_log.expectation_checked(
            expected_type.__name__,
            type(error).__name__ if error is not None else None,
            matched,
        )
        if matched:
            result.status = Outcome.PASSED
            return

        mismatch = self.matcher.describe_mismatch(error, expected_type, expected_message)
        result.fail(mismatch or "Expected exception did not match", kind="exception_mismatch")
