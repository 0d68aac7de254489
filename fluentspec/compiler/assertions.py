"""The assertion primitive used inside Then checks.

Checks may use plain ``assert`` statements, return False to fail, or return
``Outcome.IGNORED`` to mark a case as ignored. ``check_that`` raises an
AssertionFailure with a readable message; ``ignore_me`` can stand in for a
check or action that is not written yet.
"""

from typing import Any

from fluentspec.compiler.errors import AssertionFailure
from fluentspec.compiler.models import Outcome


def check_that(condition: Any, message: str = "condition did not hold", *details: Any) -> None:
    """Raise AssertionFailure unless ``condition`` is truthy."""
    if not condition:
        if details:
            message = message + ": " + ", ".join(repr(d) for d in details)
        raise AssertionFailure(message)


def ignore_me(*args: Any) -> Outcome:
    """Accept any arguments and mark the case as ignored."""
    return Outcome.IGNORED
