"""Error taxonomy for behavior compilation and case execution.

Every error here is recoverable at the granularity of one test case: the
expander and executor convert them into failing cases or results instead of
letting them abort sibling cases.
"""


class FluentSpecError(Exception):
    """Base exception for all fluentspec errors."""

    pass


class ConfigurationError(FluentSpecError):
    """Raised when a behavior is assembled in a way that cannot be expanded.

    Examples: a context is asked to consume examples it does not declare,
    an assertion needs example data but no provider was attached, or a
    behavior has no action.
    """

    pass


class SetupFailure(FluentSpecError):
    """Raised when building a context or its subject fails."""

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step


class MissingExampleHint(SetupFailure):
    """Setup failed on a missing value, usually an example that was never supplied."""

    pass


class AssertionFailure(FluentSpecError, AssertionError):
    """Raised when a Then check returns False."""

    pass


class ExpectedExceptionMismatch(FluentSpecError):
    """The raised exception differs from the declared expectation."""

    def __init__(
        self,
        message: str,
        expected_type: type | None = None,
        expected_message: str | None = None,
        actual: BaseException | None = None,
    ):
        super().__init__(message)
        self.expected_type = expected_type
        self.expected_message = expected_message
        self.actual = actual


class TeardownFailure(FluentSpecError):
    """Raised when a context's teardown hook fails."""

    pass
