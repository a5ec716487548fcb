# tests/parsing/test_fields.py
"""Tests for strict field converters."""

import math

import pytest


class TestParseInt:
    """parse_int accepts exactly one signed base-10 int64."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("42", 42),
            ("-7", -7),
            ("+5", 5),
            ("007", 7),
            ("9223372036854775807", 2**63 - 1),
            ("-9223372036854775808", -(2**63)),
        ],
    )
    def test_valid(self, value: str, expected: int) -> None:
        from pcapmetrics.parsing.fields import parse_int

        assert parse_int(value) == expected

    @pytest.mark.parametrize("value", ["abc", "", " 42", "42 ", "1_000", "1.0", "0x10", "--1", "٣"])
    def test_invalid_syntax(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_int

        with pytest.raises(ValueError, match="invalid syntax"):
            parse_int(value)

    @pytest.mark.parametrize("value", ["9223372036854775808", "-9223372036854775809"])
    def test_out_of_range(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_int

        with pytest.raises(ValueError, match="out of range"):
            parse_int(value)


class TestParseFloat:
    """parse_float accepts decimal, hex and special spellings."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1.5", 1.5),
            ("-0.25", -0.25),
            ("1e3", 1000.0),
            ("1E-2", 0.01),
            (".5", 0.5),
            ("5.", 5.0),
            ("42", 42.0),
            ("0x1p-2", 0.25),
        ],
    )
    def test_valid(self, value: str, expected: float) -> None:
        from pcapmetrics.parsing.fields import parse_float

        assert parse_float(value) == expected

    @pytest.mark.parametrize("value", ["inf", "+Inf", "-infinity", "INFINITY"])
    def test_infinity_spellings(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_float

        assert math.isinf(parse_float(value))

    def test_nan(self) -> None:
        from pcapmetrics.parsing.fields import parse_float

        assert math.isnan(parse_float("NaN"))

    @pytest.mark.parametrize("value", ["abc", "", " 1.0", "1.0 ", "1_0.0", "1e", "e5", "."])
    def test_invalid_syntax(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_float

        with pytest.raises(ValueError, match="invalid syntax"):
            parse_float(value)

    @pytest.mark.parametrize("value", ["0x1A", "0x1.8", "-0xff"])
    def test_hex_mantissa_requires_exponent(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_float

        with pytest.raises(ValueError, match="invalid syntax"):
            parse_float(value)

    @pytest.mark.parametrize("value", ["+nan", "-NaN"])
    def test_signed_nan_rejected(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_float

        with pytest.raises(ValueError, match="invalid syntax"):
            parse_float(value)

    @pytest.mark.parametrize("value", ["1e400", "-1e400", "0x1p2000"])
    def test_overflow_is_out_of_range(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_float

        with pytest.raises(ValueError, match="out of range"):
            parse_float(value)


class TestParseBool:
    """parse_bool accepts the canonical literals only."""

    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
    def test_true(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_bool

        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "f", "F", "FALSE", "false", "False"])
    def test_false(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_bool

        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["yes", "no", "tRue", "", "2", " true"])
    def test_invalid(self, value: str) -> None:
        from pcapmetrics.parsing.fields import parse_bool

        with pytest.raises(ValueError):
            parse_bool(value)


class TestConverters:
    """Every declared type has a converter and a diagnostic name."""

    def test_all_column_types_covered(self) -> None:
        from pcapmetrics.contracts.schema import ColumnType
        from pcapmetrics.parsing.fields import CONVERTERS

        assert set(CONVERTERS) == set(ColumnType)

    def test_type_names(self) -> None:
        from pcapmetrics.contracts.schema import ColumnType
        from pcapmetrics.parsing.fields import CONVERTERS

        assert CONVERTERS[ColumnType.FLOAT][1] == "float64"
        assert CONVERTERS[ColumnType.INT][1] == "int"

    def test_string_converter_keeps_value(self) -> None:
        from pcapmetrics.contracts.schema import ColumnType
        from pcapmetrics.parsing.fields import CONVERTERS

        convert, _ = CONVERTERS[ColumnType.STRING]
        assert convert(" raw value ") == " raw value "
