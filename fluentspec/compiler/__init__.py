"""Behavior-specification compiler.

This module provides functionality for:
- Declaring behaviors as Given (contexts) / When (action) / Then (checks)
- Driving behaviors from example data
- Expanding behaviors into fully independent test cases
- Grouping cases into a Given/When/Then/With tree for reporting
- Executing cases with exact exception matching and guaranteed teardown

Example usage:
    from fluentspec.compiler import CaseExecutor, CaseExpander, given

    spec = (
        given("a calculator with 10 and 20 pressed", make_calculator)
        .when("I press subtract", lambda calc: calc.subtract())
        .then("the result is -10", lambda calc, result: result == -10)
        .build()
    )

    cases = CaseExpander().expand(spec)
    summary = CaseExecutor().execute_all(cases)
"""

from fluentspec.compiler.assertions import check_that, ignore_me
from fluentspec.compiler.behavior import (
    BehaviorBuilder,
    given,
    given_no_subject,
    given_static_context,
)
from fluentspec.compiler.context import (
    Context,
    InlineContext,
    NoSubject,
    StaticContext,
    inline_context,
)
from fluentspec.compiler.errors import (
    AssertionFailure,
    ConfigurationError,
    ExpectedExceptionMismatch,
    FluentSpecError,
    MissingExampleHint,
    SetupFailure,
    TeardownFailure,
)
from fluentspec.compiler.examples import (
    ExampleProvider,
    ExampleRow,
    InlineExamples,
    RowExamples,
)
from fluentspec.compiler.executor import CaseExecutor, CaseResult, ExecutionSummary
from fluentspec.compiler.expander import CaseExpander, expand
from fluentspec.compiler.matcher import ExceptionMatcher, matches
from fluentspec.compiler.models import (
    AssertionKind,
    AssertionSpec,
    BehaviorSpec,
    ExceptionExpectation,
    Outcome,
    TestCase,
)
from fluentspec.compiler.specification import Specification
from fluentspec.compiler.subject import SubjectBuilder
from fluentspec.compiler.tree import CaseTree, CaseTreeBuilder

__all__ = [
    # Models
    "AssertionKind",
    "AssertionSpec",
    "BehaviorSpec",
    "ExceptionExpectation",
    "Outcome",
    "TestCase",
    # Errors
    "FluentSpecError",
    "ConfigurationError",
    "SetupFailure",
    "MissingExampleHint",
    "AssertionFailure",
    "ExpectedExceptionMismatch",
    "TeardownFailure",
    # Building
    "SubjectBuilder",
    "Context",
    "InlineContext",
    "NoSubject",
    "StaticContext",
    "inline_context",
    "ExampleProvider",
    "ExampleRow",
    "InlineExamples",
    "RowExamples",
    "BehaviorBuilder",
    "given",
    "given_no_subject",
    "given_static_context",
    "Specification",
    # Compiling
    "CaseExpander",
    "expand",
    "CaseTree",
    "CaseTreeBuilder",
    # Executing
    "ExceptionMatcher",
    "matches",
    "CaseExecutor",
    "CaseResult",
    "ExecutionSummary",
    "check_that",
    "ignore_me",
]
