"""Case expansion: BehaviorSpec -> flat list of independent TestCases.

The expander produces one TestCase per (context x example x Then) combination,
or per (context x Then) when no example provider is attached. Every ``run``
closure rebuilds its context, subject and example record from scratch when it
executes, so no two cases share mutable state and the cases can run in any
order, or concurrently.

Failures while describing cases (computing labels, fetching examples,
checking context capabilities) never abort the expansion of sibling cases:
they are replaced by synthetic failing cases carrying the error text.
"""

from typing import Any, Callable, Optional

import structlog

from fluentspec.compiler.context import Context
from fluentspec.compiler.errors import AssertionFailure, ConfigurationError, SetupFailure
from fluentspec.compiler.models import (
    AssertionSpec,
    BehaviorSpec,
    ExceptionExpectation,
    Outcome,
    TestCase,
)

logger = structlog.get_logger()


class _CaseState:
    """Per-case cell remembering the context created by the latest run."""

    __slots__ = ("context",)

    def __init__(self):
        self.context: Optional[Context] = None


def failing_run(error: BaseException) -> Callable[[], None]:
    def run() -> None:
        raise error

    return run


def _error_text(error: BaseException) -> str:
    return f"{type(error).__name__}, {error}"


class CaseExpander:
    """Expands behavior specifications into test cases.

    Example:
        expander = CaseExpander()
        cases = expander.expand(spec)
        assert len(cases) == contexts * examples * thens
    """

    def __init__(self, missing_examples_label: Optional[str] = None):
        if missing_examples_label is None:
            from fluentspec.config import get_settings

            missing_examples_label = get_settings().missing_examples_label
        self.missing_examples_label = missing_examples_label

    def expand(self, spec: BehaviorSpec) -> list[TestCase]:
        """Expand one behavior into its test cases."""
        cases: list[TestCase] = []
        for context_factory in spec.contexts:
            try:
                if spec.uses_examples:
                    cases.extend(self._expand_with_examples(spec, context_factory))
                else:
                    cases.extend(self._expand_plain(spec, context_factory))
            except ConfigurationError as e:
                logger.warning("Behavior misconfigured", behavior=spec.label, error=str(e))
                cases.append(
                    self._failing_case(
                        given=self._describe_context(context_factory, spec),
                        when=spec.label,
                        then=f"Configuration error: {e}",
                        error=e,
                    )
                )
            except Exception as e:
                logger.warning("Expansion failed", behavior=spec.label, error=str(e))
                cases.append(
                    self._failing_case(
                        given=self._describe_context(context_factory, spec),
                        when=spec.label,
                        then=f"Expansion failed: {_error_text(e)}",
                        error=e,
                    )
                )

        logger.debug("Expanded behavior", behavior=spec.label, cases=len(cases))
        return cases

    # Plain behaviors

    def _expand_plain(self, spec: BehaviorSpec, context_factory: Callable[[], Any]) -> list[TestCase]:
        given = self._describe_context(context_factory, spec)
        return [
            self._make_case(spec, context_factory, given, assertion, index=None, with_label="")
            for assertion in spec.assertions
        ]

    # Data-driven behaviors

    def _expand_with_examples(self, spec: BehaviorSpec, context_factory: Callable[[], Any]) -> list[TestCase]:
        provider = spec.example_provider
        probe = self._new_context(context_factory)
        if not probe.accepts(provider.record_type):
            wanted = getattr(provider.record_type, "__name__", "example records")
            raise ConfigurationError(
                f"Expected {type(probe).__name__} to consume {wanted}, "
                f"but it declares consumes={getattr(probe.consumes, '__name__', probe.consumes)!r}"
            )

        records = provider.data()
        if not records:
            raise ConfigurationError(
                f"Example provider {type(provider).__name__} returned no records; {self.missing_examples_label}"
            )

        cases: list[TestCase] = []
        for index, record in enumerate(records):
            given = self._describe_context(context_factory, spec, index=index)
            try:
                with_label = " with " + provider.label(record)
            except Exception as e:
                cases.append(
                    self._failing_case(
                        given=given,
                        when=spec.label,
                        then=f"Example label failed: {_error_text(e)}",
                        error=e,
                    )
                )
                continue

            for assertion in spec.assertions:
                cases.append(
                    self._make_case(spec, context_factory, given, assertion, index=index, with_label=with_label)
                )

            for expectation in spec.example_exceptions:
                cases.append(
                    self._make_example_exception_case(
                        spec, context_factory, given, expectation, index, record, with_label
                    )
                )
        return cases

    # Case construction

    def _make_case(
        self,
        spec: BehaviorSpec,
        context_factory: Callable[[], Any],
        given: str,
        assertion: AssertionSpec,
        index: Optional[int],
        with_label: str,
    ) -> TestCase:
        state = _CaseState()

        def run() -> Outcome:
            context, example = self._prepare(spec, context_factory, index, state)
            subject = self._build_subject(context)
            result = self._act(spec, subject, example)
            if result is Outcome.IGNORED:
                return Outcome.IGNORED
            outcome = assertion.evaluate(subject, result, example)
            return self._interpret(assertion.label, outcome)

        return TestCase(
            given=given,
            when=spec.label,
            then="Then " + assertion.label,
            with_label=with_label,
            run=run,
            expected_exception_type=lambda: spec.expected_exception_type,
            expected_exception_message=lambda: spec.expected_exception_message,
            teardown=self._teardown_for(state),
        )

    def _make_example_exception_case(
        self,
        spec: BehaviorSpec,
        context_factory: Callable[[], Any],
        given: str,
        expectation: ExceptionExpectation,
        index: int,
        record: Any,
        with_label: str,
    ) -> TestCase:
        try:
            described = self._describe_expected(expectation, record)
        except Exception as e:
            return self._failing_case(
                given=given,
                when=spec.label,
                then=f"Describing the expected exception failed: {_error_text(e)}",
                error=e,
            )

        state = _CaseState()

        def run() -> Outcome:
            context, example = self._prepare(spec, context_factory, index, state)
            subject = self._build_subject(context)
            self._act(spec, subject, example)
            return Outcome.PASSED

        def expected_exception() -> BaseException:
            return expectation.exception_for(spec.example_provider.fetch(index))

        def expected_type() -> type[BaseException]:
            return type(expected_exception())

        def expected_message() -> Optional[str]:
            return str(expected_exception()) or None

        return TestCase(
            given=given,
            when=spec.label,
            then="Then " + expectation.label,
            with_label=f" {described}, {with_label.strip()}",
            run=run,
            expected_exception_type=expected_type,
            expected_exception_message=expected_message,
            teardown=self._teardown_for(state),
        )

    def _failing_case(self, given: str, when: str, then: str, error: BaseException) -> TestCase:
        return TestCase(given=given, when=when, then=then, with_label="", run=failing_run(error))

    # Execution-time helpers (called inside run closures)

    def _prepare(
        self,
        spec: BehaviorSpec,
        context_factory: Callable[[], Any],
        index: Optional[int],
        state: _CaseState,
    ) -> tuple[Context, Any]:
        """Create a fresh context, injecting a freshly fetched example when needed."""
        state.context = None
        try:
            context = self._new_context(context_factory)
            example = None
            if index is not None:
                example = spec.example_provider.fetch(index)
                context.inject(example)
        except SetupFailure:
            raise
        except Exception as e:
            raise SetupFailure(f"Error during setup: {_error_text(e)}") from e
        state.context = context
        return context, example

    def _build_subject(self, context: Context) -> Any:
        try:
            return context.build_subject()
        except SetupFailure as e:
            raise type(e)(f"Error during setup: {e}", step=e.step) from e
        except Exception as e:
            raise SetupFailure(f"Error during setup: {_error_text(e)}") from e

    def _act(self, spec: BehaviorSpec, subject: Any, example: Any) -> Any:
        if spec.action_takes_example:
            return spec.action(subject, example)
        return spec.action(subject)

    def _interpret(self, label: str, outcome: Any) -> Outcome:
        if outcome is Outcome.IGNORED:
            return Outcome.IGNORED
        if outcome is False:
            raise AssertionFailure(f"Expected that {label}, but the check returned False")
        return Outcome.PASSED

    def _teardown_for(self, state: _CaseState) -> Callable[[], None]:
        def teardown() -> None:
            context = state.context
            state.context = None
            if context is not None:
                context.teardown()

        return teardown

    # Description-time helpers (called during expansion)

    def _new_context(self, context_factory: Callable[[], Any]) -> Context:
        context = context_factory()
        if not isinstance(context, Context):
            raise ConfigurationError(
                f"Context factory returned {type(context).__name__}, expected a Context"
            )
        return context

    def _describe_context(
        self,
        context_factory: Callable[[], Any],
        spec: BehaviorSpec,
        index: Optional[int] = None,
    ) -> str:
        """Compute the given label; setup errors become a sentinel label."""
        try:
            context = self._new_context(context_factory)
            if index is not None:
                context.inject(spec.example_provider.fetch(index))
            return context.label
        except Exception as e:
            logger.debug("Context description failed", behavior=spec.label, error=str(e))
            return f"Setup failed: {_error_text(e)}"

    def _describe_expected(self, expectation: ExceptionExpectation, record: Any) -> str:
        exception = expectation.exception_for(record)
        if not isinstance(exception, BaseException):
            raise ConfigurationError(
                f"Expected an exception instance for this example, got {type(exception).__name__}"
            )
        if not str(exception):
            return f"With exception of type {type(exception).__name__}, ignoring message"
        return f'With exception of type {type(exception).__name__} and message "{exception}"'


def expand(spec: BehaviorSpec) -> list[TestCase]:
    """Expand a behavior with a default CaseExpander."""
    return CaseExpander().expand(spec)
