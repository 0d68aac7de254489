"""Subject building: one factory plus ordered, labelled mutation steps."""

from typing import Any, Callable, Generic, TypeVar

import structlog

from fluentspec.compiler.errors import MissingExampleHint, SetupFailure

logger = structlog.get_logger()

TSubject = TypeVar("TSubject")

# Python's equivalents of a null reference: touching attributes or items of None.
_NONE_MARKERS = ("'NoneType' object",)


def _is_missing_value_error(exc: BaseException) -> bool:
    if not isinstance(exc, (AttributeError, TypeError)):
        return False
    return any(marker in str(exc) for marker in _NONE_MARKERS)


class SubjectBuilder(Generic[TSubject]):
    """Builds a subject from a factory and applies mutators in registration order.

    Mutator labels are appended to the builder's running label, so
    ``SubjectBuilder("a calculator", Calculator).and_("I enter 4", press_4)``
    is labelled ``"a calculator and I enter 4"``.

    Example:
        builder = (
            SubjectBuilder("a calculator", Calculator)
            .and_("I press 10", lambda c: c.press(10))
            .and_("I press 20", lambda c: c.press(20))
        )
        calculator = builder.build()
    """

    def __init__(self, label: str, create_subject: Callable[[], TSubject]):
        self.label = label
        self.create_subject = create_subject
        self.mutators: list[tuple[str, Callable[[TSubject], Any]]] = []

    def and_(self, label: str, mutator: Callable[[TSubject], Any]) -> "SubjectBuilder[TSubject]":
        """Register a labelled mutation step."""
        self.label += " and " + label
        self.mutators.append((label, mutator))
        return self

    def build(self) -> TSubject:
        """Create a fresh subject and apply every mutator to it.

        Raises:
            MissingExampleHint: setup touched a missing (None) value
            SetupFailure: any other failure during creation or a mutation step
        """
        step = None
        try:
            subject = self.create_subject()
            for step, mutator in self.mutators:
                mutator(subject)
            return subject
        except SetupFailure:
            raise
        except Exception as e:
            where = "during creation" if step is None else f"during step '{step}'"
            logger.debug("Subject setup failed", subject=self.label, step=step, error=str(e))
            if _is_missing_value_error(e):
                raise MissingExampleHint(
                    f"Subject setup failed {where} due to a missing value. "
                    f"Did you provide an example source? ({type(e).__name__}: {e})",
                    step=step,
                ) from e
            raise SetupFailure(
                f"Subject setup failed {where}: {type(e).__name__}: {e}",
                step=step,
            ) from e

    def __repr__(self) -> str:
        return f"<SubjectBuilder {self.label!r} with {len(self.mutators)} mutators>"
