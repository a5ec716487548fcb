# tests/contracts/test_schema.py
"""Tests for CaptureSchema and ColumnType."""

import pytest


class TestColumnType:
    """ColumnType.parse resolves configured type names."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("int", "int"),
            ("INT", "int"),
            ("Float", "float"),
            ("bool", "bool"),
            ("string", "string"),
        ],
    )
    def test_known_names(self, name: str, expected: str) -> None:
        from pcapmetrics.contracts.schema import ColumnType

        assert ColumnType.parse(name) == expected

    @pytest.mark.parametrize("name", ["ip", "float64", "", "integer"])
    def test_unknown_names_are_string(self, name: str) -> None:
        """Anything unrecognized keeps the raw cell value."""
        from pcapmetrics.contracts.schema import ColumnType

        assert ColumnType.parse(name) is ColumnType.STRING


class TestCaptureSchema:
    """Tests for CaptureSchema construction and positional lookups."""

    def _schema(self, **overrides):
        from pcapmetrics.contracts.schema import CaptureSchema

        kwargs = {
            "measurement": "pcap",
            "columns": ["time", "src", "length"],
            "types": ["string", "string", "int"],
            "tag_columns": ["src"],
            "timestamp_column": "time",
            "timestamp_format": "unix",
        }
        kwargs.update(overrides)
        return CaptureSchema.build(**kwargs)

    def test_positional_lookups(self) -> None:
        from pcapmetrics.contracts.schema import ColumnType

        schema = self._schema()

        assert schema.column_count() == 3
        assert [schema.is_tag_at(i) for i in range(3)] == [False, True, False]
        assert schema.type_at(2) is ColumnType.INT
        assert schema.timestamp_index == 0

    def test_is_tag_by_name(self) -> None:
        schema = self._schema()

        assert schema.is_tag("src")
        assert not schema.is_tag("length")
        assert not schema.is_tag("nonexistent")

    def test_timestamp_column_not_among_columns(self) -> None:
        """A timestamp column that is not configured is simply never found."""
        schema = self._schema(timestamp_column="absent")

        assert schema.timestamp_index is None

    def test_empty_timestamp_column_means_none(self) -> None:
        schema = self._schema(timestamp_column="")

        assert schema.timestamp_column is None
        assert schema.timestamp_index is None

    def test_length_mismatch_rejected(self) -> None:
        with pytest.raises(ValueError, match="differ in length"):
            self._schema(types=["string", "int"])

    def test_duplicate_columns_rejected(self) -> None:
        with pytest.raises(ValueError, match="duplicate column names: src"):
            self._schema(columns=["src", "src", "length"])

    def test_schema_is_frozen(self) -> None:
        from dataclasses import FrozenInstanceError

        schema = self._schema()

        with pytest.raises(FrozenInstanceError):
            schema.measurement = "other"  # type: ignore[misc]
