"""Pydantic models for behavior specifications and compiled test cases.

This module defines the core data models:
- AssertionKind / AssertionSpec: a declared Then and the arguments it receives
- ExceptionExpectation: a fixed or per-example "should throw" declaration
- BehaviorSpec: the finalized Given/When/Then composition
- TestCase: one independently runnable case produced by expansion
- Outcome: the three-valued result of running a case
"""

from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Outcome(str, Enum):
    """Result of running a single test case."""

    PASSED = "passed"
    FAILED = "failed"
    IGNORED = "ignored"


class AssertionKind(str, Enum):
    """Which values a Then check receives."""

    SUBJECT_ONLY = "subject_only"  # check(subject)
    SUBJECT_AND_RESULT = "subject_and_result"  # check(subject, result)
    SUBJECT_AND_EXAMPLE = "subject_and_example"  # check(subject, example)
    SUBJECT_RESULT_AND_EXAMPLE = "subject_result_and_example"  # check(subject, result, example)

    @property
    def needs_example(self) -> bool:
        return self in (AssertionKind.SUBJECT_AND_EXAMPLE, AssertionKind.SUBJECT_RESULT_AND_EXAMPLE)


class AssertionSpec(BaseModel):
    """A single declared Then.

    Attributes:
        label: Human-readable description, used as the case's then label
        kind: Which values the check receives
        check: The check callable; returning False fails the case
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label: str = Field(..., min_length=1, description="Then description")
    kind: AssertionKind = Field(AssertionKind.SUBJECT_ONLY, description="Arguments passed to the check")
    check: Callable[..., Any] = Field(..., description="Assertion callable")

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        return v.strip()

    def evaluate(self, subject: Any, result: Any = None, example: Any = None) -> Any:
        """Invoke the check with the arguments its kind asks for."""
        if self.kind == AssertionKind.SUBJECT_ONLY:
            return self.check(subject)
        if self.kind == AssertionKind.SUBJECT_AND_RESULT:
            return self.check(subject, result)
        if self.kind == AssertionKind.SUBJECT_AND_EXAMPLE:
            return self.check(subject, example)
        return self.check(subject, result, example)


class ExceptionExpectation(BaseModel):
    """A "should throw" declaration.

    Exactly one of ``exception_type`` (a fixed expectation, optionally with a
    message) or ``exception_for`` (a callable mapping an example record to the
    exception instance it implies) is set.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    exception_type: Optional[type[BaseException]] = Field(None, description="Exact exception type expected")
    message: Optional[str] = Field(None, description="Exact message expected; None or empty ignores it")
    exception_for: Optional[Callable[[Any], BaseException]] = Field(
        None, description="Maps an example record to the exception it implies"
    )
    label: str = Field("should throw exception", description="Then label for per-example expectations")

    @model_validator(mode="after")
    def validate_shape(self) -> "ExceptionExpectation":
        if (self.exception_type is None) == (self.exception_for is None):
            raise ValueError("Exactly one of exception_type or exception_for must be set")
        if self.message is not None and self.exception_type is None:
            raise ValueError("A fixed message requires a fixed exception_type")
        return self

    @property
    def per_example(self) -> bool:
        return self.exception_for is not None

    @property
    def expected_message(self) -> Optional[str]:
        """The fixed message to match, or None when the message is ignored."""
        return self.message or None


class BehaviorSpec(BaseModel):
    """A finalized Given/When/Then behavior, ready for expansion.

    Attributes:
        label: The When description, already prefixed ("When ...")
        contexts: Zero-argument factories, each producing a fresh Context
        action: Callable run against the subject (and example, if it takes one)
        action_takes_example: Whether the action receives the example record
        assertions: Then checks, in declaration order
        example_provider: Optional source of example records
        exception_expectation: Optional fixed "should throw" declaration
        example_exceptions: Per-example "should throw" declarations
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label: str = Field(..., min_length=1)
    contexts: list[Callable[[], Any]] = Field(..., min_length=1)
    action: Callable[..., Any]
    action_takes_example: bool = False
    assertions: list[AssertionSpec] = Field(default_factory=list)
    example_provider: Optional[Any] = None
    exception_expectation: Optional[ExceptionExpectation] = None
    example_exceptions: list[ExceptionExpectation] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_assertions(self) -> "BehaviorSpec":
        if not self.assertions and not self.example_exceptions:
            raise ValueError("A behavior needs at least one Then or exception expectation")
        if self.exception_expectation is not None and self.exception_expectation.per_example:
            raise ValueError("Per-example expectations belong in example_exceptions")
        return self

    @property
    def uses_examples(self) -> bool:
        return self.example_provider is not None

    @property
    def expected_exception_type(self) -> Optional[type[BaseException]]:
        if self.exception_expectation is None:
            return None
        return self.exception_expectation.exception_type

    @property
    def expected_exception_message(self) -> Optional[str]:
        if self.exception_expectation is None:
            return None
        return self.exception_expectation.expected_message


def _no_teardown() -> None:
    return None


def _no_expectation() -> None:
    return None


class TestCase(BaseModel):
    """One fully independent, executable case produced by expansion.

    ``run`` is a deferred closure: it re-creates the context, subject and
    example record every time it is called. ``teardown`` cleans up the context
    created by the most recent ``run``.
    """

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    given: str
    when: str
    then: str
    with_label: str = ""
    run: Callable[[], Optional[Outcome]]
    expected_exception_type: Callable[[], Optional[type[BaseException]]] = _no_expectation
    expected_exception_message: Callable[[], Optional[str]] = _no_expectation
    teardown: Callable[[], None] = _no_teardown

    @property
    def display_name(self) -> str:
        """Compressed leaf name: the then label, or the with label when examples are used."""
        return self.with_label.strip() or self.then

    @property
    def full_name(self) -> str:
        parts = [self.given, self.when, self.then]
        if self.with_label:
            parts.append(self.with_label.strip())
        return " / ".join(parts)
