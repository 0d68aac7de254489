"""Exact exception matching.

Type comparison is exact: a subclass of the expected type does not match.
Message comparison is skipped when the expected message is None or empty,
and otherwise requires exact string equality with ``str(exception)``.
"""

from typing import Optional


def _type_name(exc_type: Optional[type]) -> str:
    if exc_type is None:
        return "no exception"
    return exc_type.__name__


class ExceptionMatcher:
    """Compares raised exceptions against a declared expectation."""

    def matches(
        self,
        actual: BaseException,
        expected_type: type[BaseException],
        expected_message: Optional[str] = None,
    ) -> bool:
        if type(actual) is not expected_type:
            return False
        if not expected_message:
            return True
        return str(actual) == expected_message

    def describe_mismatch(
        self,
        actual: Optional[BaseException],
        expected_type: Optional[type[BaseException]],
        expected_message: Optional[str] = None,
    ) -> Optional[str]:
        """Return failure text for a mismatch, or None if the outcome is acceptable.

        Covers all four combinations of expected/raised.
        """
        if expected_type is None:
            if actual is None:
                return None
            return f"Unexpected exception {type(actual).__name__}: {actual}"

        if actual is None:
            text = f"The behavior did not raise an exception; expected {_type_name(expected_type)}"
            if expected_message:
                text += f' with message "{expected_message}"'
            return text

        if type(actual) is not expected_type:
            return (
                f"Expected exception type of {_type_name(expected_type)} "
                f"but got {type(actual).__name__}: {actual}"
            )

        if expected_message and str(actual) != expected_message:
            return f'Expected exception message\n"{expected_message}" but got\n"{actual}"'

        return None


def matches(
    actual: BaseException,
    expected_type: type[BaseException],
    expected_message: Optional[str] = None,
) -> bool:
    """Module-level shortcut for ExceptionMatcher().matches."""
    return ExceptionMatcher().matches(actual, expected_type, expected_message)
