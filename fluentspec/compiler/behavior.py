"""Fluent builder for behavior specifications.

The builder collects optional fields in any order and validates them once, in
``build()``:

    subtraction = (
        given(a_calculator_with_10_and_20)
        .when("I press subtract", lambda calc: calc.subtract())
        .then("the result is -10", lambda calc, result: result == -10)
        .then("the readout shows the result", lambda calc, result: calc.readout() == result)
        .build()
    )

Data-driven behaviors attach an example provider with ``using(...)`` and may
take the example record in their action and checks.
"""

import inspect
from typing import Any, Callable, Optional

import structlog

from fluentspec.compiler.context import NoSubject, StaticContext, inline_context
from fluentspec.compiler.errors import ConfigurationError
from fluentspec.compiler.examples import ExampleProvider
from fluentspec.compiler.models import (
    AssertionKind,
    AssertionSpec,
    BehaviorSpec,
    ExceptionExpectation,
)

logger = structlog.get_logger()

_KIND_BY_ARITY = {
    1: AssertionKind.SUBJECT_ONLY,
    2: AssertionKind.SUBJECT_AND_RESULT,
    3: AssertionKind.SUBJECT_RESULT_AND_EXAMPLE,
}


def positional_arity(fn: Callable[..., Any]) -> Optional[int]:
    """Count the positional parameters ``fn`` accepts, or None if unknown/variadic."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return None

    count = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _no_action(subject: Any) -> None:
    return None


class BehaviorBuilder:
    """Accumulates Given/When/Then parts and finalizes them into a BehaviorSpec."""

    def __init__(self, context_factory: Callable[[], Any]):
        self._contexts: list[Callable[[], Any]] = [context_factory]
        self._action: Optional[Callable[..., Any]] = None
        self._action_label: Optional[str] = None
        self._assertions: list[AssertionSpec] = []
        self._provider: Optional[ExampleProvider] = None
        self._exception_type: Optional[type[BaseException]] = None
        self._exception_message: Optional[str] = None
        self._example_exceptions: list[ExceptionExpectation] = []

    # Givens

    def also_given(
        self,
        context_factory: Any,
        create_subject: Optional[Callable[[], Any]] = None,
    ) -> "BehaviorBuilder":
        """Add an alternative starting context sharing the same action and Thens."""
        self._contexts.append(_as_context_factory(context_factory, create_subject))
        return self

    def using(self, provider: ExampleProvider) -> "BehaviorBuilder":
        """Attach an example provider; every case is repeated per example record."""
        if not isinstance(provider, ExampleProvider):
            raise ConfigurationError(
                f"using() expects an ExampleProvider, got {type(provider).__name__}"
            )
        self._provider = provider
        return self

    # When

    def when(self, label: str, action: Callable[..., Any]) -> "BehaviorBuilder":
        """Set the action. It receives (subject) or (subject, example)."""
        self._action_label = label
        self._action = action
        return self

    def verify(self) -> "BehaviorBuilder":
        """Use a no-op action, for behaviors made only of structural checks."""
        return self.when("inspecting the subject", _no_action)

    # Thens

    def then(
        self,
        label: str,
        check: Callable[..., Any],
        kind: Optional[AssertionKind] = None,
    ) -> "BehaviorBuilder":
        """Add a Then check; its kind is inferred from the check's arity unless given."""
        if kind is None:
            kind = _KIND_BY_ARITY.get(positional_arity(check))
            if kind is None:
                raise ConfigurationError(
                    f"Cannot infer the arguments for Then '{label}'; pass kind= explicitly"
                )
        self._assertions.append(AssertionSpec(label=label, kind=kind, check=check))
        return self

    def then_with_example(self, label: str, check: Callable[[Any, Any], Any]) -> "BehaviorBuilder":
        """Add a Then check receiving (subject, example)."""
        return self.then(label, check, kind=AssertionKind.SUBJECT_AND_EXAMPLE)

    def should_have_attribute(
        self,
        name: str,
        condition: Optional[Callable[[Any], bool]] = None,
    ) -> "BehaviorBuilder":
        """Add a structural Then: the subject (or its type) exposes ``name``."""

        def check(subject: Any) -> bool:
            owner = subject if hasattr(subject, name) else type(subject)
            if not hasattr(owner, name):
                raise AssertionError(f"{type(subject).__name__} has no attribute {name!r}")
            if condition is not None:
                return bool(condition(getattr(owner, name)))
            return True

        label = f'should have attribute "{name}"'
        if condition is not None:
            label += " matching a condition"
        return self.then(label, check, kind=AssertionKind.SUBJECT_ONLY)

    # Exception expectations

    def should_throw(self, exception_type: type[BaseException]) -> "BehaviorBuilder":
        """Expect every case of this behavior to raise exactly ``exception_type``."""
        if not (isinstance(exception_type, type) and issubclass(exception_type, BaseException)):
            raise ConfigurationError(f"should_throw() expects an exception class, got {exception_type!r}")
        self._exception_type = exception_type
        self._assertions.insert(
            0,
            AssertionSpec(
                label=f"should throw {exception_type.__name__}",
                kind=AssertionKind.SUBJECT_ONLY,
                check=_no_action,
            ),
        )
        return self

    def with_message(self, message: str) -> "BehaviorBuilder":
        """Require the expected exception to carry exactly ``message``."""
        if self._exception_type is None:
            raise ConfigurationError("with_message() must follow should_throw()")
        self._exception_message = message
        self._assertions.insert(
            1,
            AssertionSpec(
                label=f'should have exception message "{message}"',
                kind=AssertionKind.SUBJECT_ONLY,
                check=_no_action,
            ),
        )
        return self

    def ignore_message(self) -> "BehaviorBuilder":
        """Explicitly accept any message for the expected exception."""
        if self._exception_type is None:
            raise ConfigurationError("ignore_message() must follow should_throw()")
        self._exception_message = None
        return self

    def should_throw_example(
        self,
        exception_for: Callable[[Any], BaseException],
        label: str = "should throw exception",
    ) -> "BehaviorBuilder":
        """Expect each example to raise the exception ``exception_for(example)`` returns."""
        self._example_exceptions.append(
            ExceptionExpectation(exception_for=exception_for, label=label)
        )
        return self

    # Finalize

    def build(self) -> BehaviorSpec:
        """Validate the collected parts and return an immutable BehaviorSpec.

        Raises:
            ConfigurationError: the parts cannot form an expandable behavior
        """
        if self._action is None or not self._action_label:
            raise ConfigurationError("A behavior needs an action; call when(...) or verify()")
        if not self._assertions and not self._example_exceptions:
            raise ConfigurationError(f"Behavior 'When {self._action_label}' has no Then")

        if self._provider is None:
            needs = [a.label for a in self._assertions if a.kind.needs_example]
            if needs:
                raise ConfigurationError(
                    f"Thens {needs} use example values but no example provider was attached; call using(...)"
                )
            if self._example_exceptions:
                raise ConfigurationError(
                    "should_throw_example() needs an example provider; call using(...)"
                )

        action_takes_example = self._provider is not None and positional_arity(self._action) == 2

        exception_expectation = None
        if self._exception_type is not None:
            exception_expectation = ExceptionExpectation(
                exception_type=self._exception_type,
                message=self._exception_message,
            )

        spec = BehaviorSpec(
            label="When " + self._action_label,
            contexts=list(self._contexts),
            action=self._action,
            action_takes_example=action_takes_example,
            assertions=list(self._assertions),
            example_provider=self._provider,
            exception_expectation=exception_expectation,
            example_exceptions=list(self._example_exceptions),
        )
        logger.debug(
            "Built behavior",
            behavior=spec.label,
            contexts=len(spec.contexts),
            assertions=len(spec.assertions),
            uses_examples=spec.uses_examples,
        )
        return spec


def _as_context_factory(
    context_factory: Any,
    create_subject: Optional[Callable[[], Any]] = None,
) -> Callable[[], Any]:
    if isinstance(context_factory, str):
        if create_subject is None:
            raise ConfigurationError(
                f"given('{context_factory}') needs a subject factory as its second argument"
            )
        return inline_context(context_factory, create_subject)
    if not callable(context_factory):
        raise ConfigurationError(
            f"A context factory must be callable, got {type(context_factory).__name__}"
        )
    return context_factory


def given(context_factory: Any, create_subject: Optional[Callable[[], Any]] = None) -> BehaviorBuilder:
    """Start a behavior from a context factory, or from a label and subject factory."""
    return BehaviorBuilder(_as_context_factory(context_factory, create_subject))


def given_no_subject() -> BehaviorBuilder:
    """Start a behavior with no subject; the action typically creates one."""
    return BehaviorBuilder(NoSubject)


def given_static_context() -> BehaviorBuilder:
    """Start a subject-less behavior whose context accepts any example record."""
    return BehaviorBuilder(StaticContext)
