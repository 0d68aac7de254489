"""Example providers for data-driven behaviors.

An example provider yields an ordered list of example records and a
human-readable label for each one. ``data()`` may be called many times and is
expected to build new records on every call (records frequently embed fresh
mocks), so callers re-fetch by index instead of caching records.

- ExampleProvider: abstract base every provider implements
- InlineExamples: records produced by a factory callable
- RowExamples: records built from inline dictionaries
"""

import copy
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = structlog.get_logger()


class ExampleProvider(ABC):
    """Abstract base class for example providers.

    Attributes:
        record_type: Optional type of the records; contexts that declare a
            ``consumes`` type are checked against it during expansion.
    """

    record_type: Optional[type] = None

    @abstractmethod
    def data(self) -> list[Any]:
        """Build and return the example records, in order."""
        pass

    def label(self, record: Any) -> str:
        """Return the human-readable label for one record.

        Records that define a ``label()`` method describe themselves;
        anything else falls back to ``repr``.
        """
        describe = getattr(record, "label", None)
        if callable(describe):
            return str(describe())
        return repr(record)

    def fetch(self, index: int) -> Any:
        """Build fresh records and return the one at ``index``."""
        return self.data()[index]

    def __len__(self) -> int:
        return len(self.data())


class InlineExamples(ExampleProvider):
    """Examples produced by a zero-argument factory.

    The factory is invoked on every ``data()`` call, so each test case gets
    records that no other case has touched.

    Example:
        provider = InlineExamples(
            lambda: [Pair(10, 20), Pair(-5, 5)],
            label=lambda pair: f"{{ {pair.first}, {pair.second} }}",
        )
    """

    def __init__(
        self,
        factory: Callable[[], list[Any]],
        label: Optional[Callable[[Any], str]] = None,
        record_type: Optional[type] = None,
    ):
        self.factory = factory
        self._label = label
        if record_type is not None:
            self.record_type = record_type

    def data(self) -> list[Any]:
        records = list(self.factory())
        if self.record_type is not None:
            for index, record in enumerate(records):
                if not isinstance(record, self.record_type):
                    raise TypeError(
                        f"Example {index} is {type(record).__name__}, "
                        f"expected {self.record_type.__name__}"
                    )
        return records

    def label(self, record: Any) -> str:
        if self._label is not None:
            return self._label(record)
        return super().label(record)


class ExampleRow(BaseModel):
    """A named set of example values, readable as attributes.

    Example:
        row = ExampleRow(name="negative", values={"first": -10, "second": 20})
        row.first  # -10
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Human-readable name for this row")
    values: dict[str, Any] = Field(..., description="Field name to value mapping")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator("values")
    @classmethod
    def validate_values(cls, v: dict[str, Any]) -> dict[str, Any]:
        if not v:
            raise ValueError("Example values cannot be empty")
        reserved = set(cls.model_fields) | {m for m in dir(cls) if not m.startswith("_")}
        clashes = sorted(k for k in v if k in reserved)
        if clashes:
            raise ValueError(f"Example value names {clashes} clash with ExampleRow members; rename them")
        return v

    def __getattr__(self, item: str) -> Any:
        values = self.__dict__.get("values")
        if values is not None and item in values:
            return values[item]
        return super().__getattr__(item)

    def label(self) -> str:
        rendered = ", ".join(f"{k}={v!r}" for k, v in self.values.items())
        return f"{self.name} {{ {rendered} }}"


class RowExamples(ExampleProvider):
    """Examples declared as inline dictionaries.

    Each row is either a plain mapping of values (named by position) or a
    mapping with ``name`` and ``values`` keys. Rows are deep-copied into new
    ExampleRow instances on every ``data()`` call.
    """

    record_type = ExampleRow

    def __init__(self, rows: list[dict[str, Any]]):
        if not rows:
            raise ValueError("RowExamples requires at least one row")
        self.rows = rows

    def data(self) -> list[ExampleRow]:
        records = []
        for index, row in enumerate(self.rows):
            if "values" in row and isinstance(row["values"], dict):
                name = row.get("name") or f"example_{index + 1}"
                values = row["values"]
            else:
                name = f"example_{index + 1}"
                values = row
            records.append(ExampleRow(name=name, values=copy.deepcopy(values)))
        logger.debug("Built example rows", count=len(records))
        return records
