"""Specifications: named, explicitly registered groups of behaviors.

A Specification replaces attribute/reflection based discovery with a plain
registration list:

    addition = Specification(
        "Addition",
        "As a user of a calculator",
        "I want to be told the sum of numbers",
    )
    addition.add("can add two numbers", add_two_numbers)
    addition.add("cannot add without inputs", add_without_inputs)

    tree = addition.build_tree()

A behavior that fails to build or expand is replaced by a single failing case
so the rest of the specification is still reported.
"""

import traceback
from typing import Optional, Union

import structlog

from fluentspec.compiler.behavior import BehaviorBuilder
from fluentspec.compiler.expander import CaseExpander, failing_run
from fluentspec.compiler.models import BehaviorSpec, TestCase
from fluentspec.compiler.tree import CaseTree, CaseTreeBuilder
from fluentspec.utils.logging import log_operation

logger = structlog.get_logger()

Behavior = Union[BehaviorBuilder, BehaviorSpec]


class Specification:
    """A titled collection of behaviors with an optional narrative."""

    def __init__(self, title: str, *narrative: str):
        if not title or not title.strip():
            raise ValueError("A specification needs a title")
        self.title = title.strip()
        self.narrative = list(narrative)
        self.behaviors: list[tuple[str, Behavior]] = []

    def add(self, name: str, behavior: Behavior) -> "Specification":
        """Register a behavior (built or still a builder) under ``name``."""
        self.behaviors.append((name, behavior))
        return self

    @property
    def description(self) -> str:
        return "\n".join([self.title, *self.narrative])

    def expand(self, expander: Optional[CaseExpander] = None) -> list[TestCase]:
        """Expand every registered behavior into test cases."""
        expander = expander or CaseExpander()
        cases: list[TestCase] = []
        with log_operation("expand_specification", logger=logger, specification=self.title) as op:
            for name, behavior in self.behaviors:
                cases.extend(self._expand_one(name, behavior, expander))
            op["cases"] = len(cases)
        return cases

    def build_tree(
        self,
        expander: Optional[CaseExpander] = None,
        builder: Optional[CaseTreeBuilder] = None,
    ) -> CaseTree:
        builder = builder or CaseTreeBuilder()
        return builder.build(self.expand(expander))

    def _expand_one(self, name: str, behavior: Behavior, expander: CaseExpander) -> list[TestCase]:
        try:
            spec = behavior.build() if isinstance(behavior, BehaviorBuilder) else behavior
            return expander.expand(spec)
        except Exception as e:
            logger.warning("Behavior could not be expanded", behavior=name, error=str(e))
            details = "".join(traceback.format_exception(type(e), e, e.__traceback__))
            return [
                TestCase(
                    given="Error",
                    when=f"Behavior name = {name}",
                    then=f"{e}\n\n{details}",
                    run=failing_run(e),
                )
            ]
