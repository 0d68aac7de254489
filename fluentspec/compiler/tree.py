"""Case tree building: groups flat test cases for reporting.

Cases are keyed by given, then when. A case with no ``with`` label sits
directly under its when node; cases produced from examples get two more
levels, then and with, so each example stays addressable:

    Given a calculator and I press 10 and 20
        When I press subtract
            Then the result is -10                 <- leaf item
    Given a calculator and I press the values
        When I press subtract
            Then the result is the difference
                 with { 10, 20 }                   <- leaf item
                 with { -5, 5 }                    <- leaf item
"""

from typing import Iterator, Optional

import structlog

from fluentspec.compiler.models import TestCase

logger = structlog.get_logger()

_ERROR_GIVENS = ("Error", "Given Error")


class CaseTree:
    """A node holding test cases and lazily created, keyed child nodes."""

    def __init__(self, parent: Optional["CaseTree"] = None, key: Optional[str] = None):
        self.items: list[TestCase] = []
        self.children: dict[str, "CaseTree"] = {}
        self.parent = parent
        self.key = key

    def __getitem__(self, key: str) -> "CaseTree":
        if key not in self.children:
            self.children[key] = CaseTree(parent=self, key=key)
        return self.children[key]

    def __contains__(self, key: str) -> bool:
        return key in self.children

    def keys(self) -> list[str]:
        return list(self.children.keys())

    def add_item(self, case: TestCase) -> None:
        self.items.append(case)

    @property
    def has_items(self) -> bool:
        return len(self.items) > 0

    def path(self) -> list[str]:
        """Keys from the root down to this node."""
        keys: list[str] = []
        node: Optional[CaseTree] = self
        while node is not None and node.key is not None:
            keys.append(node.key)
            node = node.parent
        return list(reversed(keys))

    def walk(self) -> Iterator[tuple[list[str], TestCase]]:
        """Yield (path, case) for every case in this subtree, depth first."""
        here = self.path()
        for case in self.items:
            yield here, case
        for child in self.children.values():
            yield from child.walk()

    def count(self) -> int:
        return sum(1 for _ in self.walk())

    def __repr__(self) -> str:
        return f"<CaseTree key={self.key!r} items={len(self.items)} children={len(self.children)}>"


class CaseTreeBuilder:
    """Builds a CaseTree from a flat list of cases in a single pass."""

    def __init__(self, setup_error_label: Optional[str] = None):
        if setup_error_label is None:
            from fluentspec.config import get_settings

            setup_error_label = get_settings().setup_error_label
        self.setup_error_label = setup_error_label

    def build(self, cases: list[TestCase], tree: Optional[CaseTree] = None) -> CaseTree:
        tree = tree if tree is not None else CaseTree()
        for case in cases:
            self.add(tree, case)
        logger.debug("Built case tree", cases=len(cases), givens=len(tree.children))
        return tree

    def add(self, tree: CaseTree, case: TestCase) -> None:
        given = self.fix_name(case.given)
        if not case.with_label:
            tree[given][case.when].add_item(case)
        else:
            tree[given][case.when][case.then][case.with_label.strip()].add_item(case)

    def fix_name(self, given: str) -> str:
        if given in _ERROR_GIVENS:
            return self.setup_error_label
        return given
