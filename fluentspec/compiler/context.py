"""Contexts: named recipes for producing a test subject.

A context couples a SubjectBuilder with an optional example slot and an
optional teardown hook. Subclasses override ``setup()``:

    class a_calculator_with_two_values(Context):
        consumes = CalculatorInputs

        def setup(self):
            return (
                self.given("a calculator", Calculator)
                .and_("I press the first value", lambda c: c.press(self.example.first))
                .and_("I press the second value", lambda c: c.press(self.example.second))
            )

A new Context instance is created for every test case, so instances never
carry state between cases.
"""

from typing import Any, Callable, Optional

from fluentspec.compiler.errors import ConfigurationError
from fluentspec.compiler.subject import SubjectBuilder


class Context:
    """Base class for all contexts.

    Attributes:
        consumes: Example record type this context accepts, or None if it
            takes no examples. ``object`` accepts any record.
        example: The injected example record, set before ``setup()`` runs.
    """

    consumes: Optional[type] = None

    def __init__(self):
        self.example: Any = None
        self._builder: Optional[SubjectBuilder] = None

    def setup(self) -> SubjectBuilder:
        """Declare how the subject is built. Override in subclasses."""
        raise NotImplementedError(f"{type(self).__name__} must implement setup()")

    def teardown(self) -> None:
        """Clean up after a case. Default is a no-op."""
        pass

    def given(self, label: str, create_subject: Callable[[], Any]) -> SubjectBuilder:
        """Start this context's subject recipe."""
        return SubjectBuilder(label, create_subject)

    @property
    def uses_examples(self) -> bool:
        return self.consumes is not None

    def accepts(self, record_type: Optional[type]) -> bool:
        """Whether this context can consume records of ``record_type``."""
        if self.consumes is None:
            return False
        if record_type is None or self.consumes is object:
            return True
        return issubclass(record_type, self.consumes)

    def inject(self, example: Any) -> None:
        """Place an example record into this context's slot."""
        if not self.uses_examples:
            raise ConfigurationError(
                f"Expected {type(self).__name__} to consume examples, but it declares no 'consumes' type"
            )
        self.example = example
        self._builder = None

    def subject_builder(self) -> SubjectBuilder:
        """Run ``setup()`` once and return its SubjectBuilder."""
        if self._builder is None:
            builder = self.setup()
            if not isinstance(builder, SubjectBuilder):
                raise ConfigurationError(
                    f"{type(self).__name__}.setup() must return the builder from given(...), "
                    f"got {type(builder).__name__}"
                )
            self._builder = builder
        return self._builder

    @property
    def label(self) -> str:
        return "Given " + self.subject_builder().label

    def build_subject(self) -> Any:
        return self.subject_builder().build()


class InlineContext(Context):
    """A context declared inline as a label and a subject factory."""

    def __init__(
        self,
        label: str,
        create_subject: Callable[[], Any],
        mutators: Optional[list[tuple[str, Callable[[Any], Any]]]] = None,
        teardown: Optional[Callable[[], None]] = None,
    ):
        super().__init__()
        self._label = label
        self._create_subject = create_subject
        self._mutators = list(mutators or [])
        self._teardown = teardown

    def setup(self) -> SubjectBuilder:
        builder = self.given(self._label, self._create_subject)
        for label, mutator in self._mutators:
            builder.and_(label, mutator)
        return builder

    def teardown(self) -> None:
        if self._teardown is not None:
            self._teardown()


class NoSubject(Context):
    """Context for behaviors whose action creates the interesting object itself."""

    def setup(self) -> SubjectBuilder:
        return self.given("no subject", lambda: None)


class StaticContext(Context):
    """A subject-less context that accepts any example record."""

    consumes = object

    def setup(self) -> SubjectBuilder:
        return self.given("no subject", lambda: None)


def inline_context(
    label: str,
    create_subject: Callable[[], Any],
    mutators: Optional[list[tuple[str, Callable[[Any], Any]]]] = None,
    teardown: Optional[Callable[[], None]] = None,
) -> Callable[[], InlineContext]:
    """Return a factory producing a fresh InlineContext on every call."""

    def factory() -> InlineContext:
        return InlineContext(label, create_subject, mutators=mutators, teardown=teardown)

    return factory
