"""Tests for example providers."""

from dataclasses import dataclass

import pytest


@dataclass
class Pair:
    first: int
    second: int

    def label(self):
        return f"{{ {self.first}, {self.second} }}"


class TestInlineExamples:
    """Tests for InlineExamples."""

    def test_data_calls_factory_every_time(self, mock_env_vars):
        """Test that each data() call builds new records."""
        from fluentspec.compiler.examples import InlineExamples

        provider = InlineExamples(lambda: [Pair(1, 2), Pair(3, 4)])

        first = provider.data()
        second = provider.data()

        assert first == second
        assert first[0] is not second[0]

    def test_fetch_by_index(self, mock_env_vars):
        """Test fetching one fresh record by index."""
        from fluentspec.compiler.examples import InlineExamples

        provider = InlineExamples(lambda: [Pair(1, 2), Pair(3, 4)])

        assert provider.fetch(1) == Pair(3, 4)
        assert len(provider) == 2

    def test_label_uses_record_label(self, mock_env_vars):
        """Test that records describing themselves are used for labels."""
        from fluentspec.compiler.examples import InlineExamples

        provider = InlineExamples(lambda: [Pair(10, 20)])

        assert provider.label(provider.fetch(0)) == "{ 10, 20 }"

    def test_custom_label(self, mock_env_vars):
        """Test a custom label callable."""
        from fluentspec.compiler.examples import InlineExamples

        provider = InlineExamples(lambda: [Pair(10, 20)], label=lambda p: f"sum {p.first + p.second}")

        assert provider.label(provider.fetch(0)) == "sum 30"

    def test_label_falls_back_to_repr(self, mock_env_vars):
        """Test records without a label method."""
        from fluentspec.compiler.examples import InlineExamples

        provider = InlineExamples(lambda: [(1, 2)])

        assert provider.label((1, 2)) == "(1, 2)"

    def test_record_type_enforced(self, mock_env_vars):
        """Test that declared record types are checked."""
        from fluentspec.compiler.examples import InlineExamples

        provider = InlineExamples(lambda: [Pair(1, 2), "oops"], record_type=Pair)

        assert provider.record_type is Pair
        with pytest.raises(TypeError, match="Example 1 is str"):
            provider.data()


class TestRowExamples:
    """Tests for RowExamples and ExampleRow."""

    def test_plain_rows(self, mock_env_vars):
        """Test rows given as plain mappings."""
        from fluentspec.compiler.examples import ExampleRow, RowExamples

        provider = RowExamples([{"first": 1, "second": 2}, {"first": 3, "second": 4}])

        records = provider.data()

        assert len(records) == 2
        assert isinstance(records[0], ExampleRow)
        assert records[0].name == "example_1"
        assert records[1].first == 3

    def test_named_rows(self, mock_env_vars):
        """Test rows with explicit names."""
        from fluentspec.compiler.examples import RowExamples

        provider = RowExamples([{"name": "negatives", "values": {"first": -1}}])

        record = provider.fetch(0)

        assert record.name == "negatives"
        assert record.first == -1
        assert provider.label(record) == "negatives { first=-1 }"

    def test_rows_are_fresh(self, mock_env_vars):
        """Test that rows are rebuilt on every call."""
        from fluentspec.compiler.examples import RowExamples

        provider = RowExamples([{"first": 1}])

        assert provider.fetch(0) is not provider.fetch(0)

    def test_missing_value_raises_attribute_error(self, mock_env_vars):
        """Test reading an unknown value."""
        from fluentspec.compiler.examples import ExampleRow

        row = ExampleRow(name="one", values={"first": 1})

        with pytest.raises(AttributeError):
            row.second

    def test_empty_rows_rejected(self, mock_env_vars):
        """Test that an empty row list is rejected."""
        from fluentspec.compiler.examples import RowExamples

        with pytest.raises(ValueError):
            RowExamples([])

    def test_empty_values_rejected(self, mock_env_vars):
        """Test that a row needs values."""
        from pydantic import ValidationError

        from fluentspec.compiler.examples import ExampleRow

        with pytest.raises(ValidationError):
            ExampleRow(name="empty", values={})

    def test_nested_values_not_shared(self, mock_env_vars):
        """Test that nested row values are copied for every record."""
        from fluentspec.compiler.examples import RowExamples

        provider = RowExamples([{"items": [1, 2], "settings": {"mode": "fast"}}])

        first = provider.fetch(0)
        first.items.append(3)
        first.settings["mode"] = "slow"
        second = provider.fetch(0)

        assert second.items == [1, 2]
        assert second.settings == {"mode": "fast"}
        assert provider.rows[0]["items"] == [1, 2]

    @pytest.mark.parametrize("key", ["name", "values", "label", "model_dump"])
    def test_member_names_rejected(self, mock_env_vars, key):
        """Test that value names shadowing row members are rejected."""
        from pydantic import ValidationError

        from fluentspec.compiler.examples import ExampleRow

        with pytest.raises(ValidationError, match="clash with ExampleRow members"):
            ExampleRow(name="row", values={key: 1})
