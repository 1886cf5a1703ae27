"""Tests for the region operator family."""

import math

import numpy as np
import pytest

from deckprops import (
    OPERATE_FUNCTIONS,
    ActiveRegion,
    Add,
    Assign,
    Copy,
    Equals,
    InvalidRegionError,
    MaxLimit,
    MinLimit,
    Multiply,
    Operate,
    Record,
    RecordError,
    TypeMismatchError,
    build_instruction,
)


@pytest.fixture
def region(extent):
    """Active region restricted to i in [0, 1], j in [0, 1], k = 0."""
    region = ActiveRegion(extent)
    region.apply_box_record((1, 2, 1, 2, 1, 1))
    return region


def _inside(region, extent):
    mask = np.zeros(extent.cell_count, dtype=bool)
    mask[region.flat_indices()] = True
    return mask


class TestScalarOperators:
    """Tests for EQUALS, MULTIPLY, ADD and the limits."""

    def test_equals_only_touches_region(self, properties, region, extent):
        """Cells in the region read the value, others are unchanged."""
        permx = properties["PERMX"]
        before = permx.values.copy()
        Equals(7.5).apply(region, permx)

        inside = _inside(region, extent)
        assert np.all(permx.values[inside] == 7.5)
        assert np.array_equal(permx.values[~inside], before[~inside])

    def test_equals_is_idempotent(self, properties, region):
        """Applying the same EQUALS twice equals applying it once."""
        permx = properties["PERMX"]
        Equals(3.0).apply(region, permx)
        once = permx.values.copy()
        Equals(3.0).apply(region, permx)

        assert np.array_equal(permx.values, once)

    def test_multiply(self, properties, region, extent):
        """new == old * factor inside, identity outside."""
        poro = properties["PORO"]
        poro.values[:] = np.linspace(0.1, 0.3, extent.cell_count)
        before = poro.values.copy()
        Multiply(0.25).apply(region, poro)

        inside = _inside(region, extent)
        assert np.array_equal(poro.values[inside], before[inside] * 0.25)
        assert np.array_equal(poro.values[~inside], before[~inside])

    def test_add(self, properties, region, extent):
        """ADD shifts region cells."""
        satnum = properties["SATNUM"]
        Add(3).apply(region, satnum)

        inside = _inside(region, extent)
        assert np.all(satnum.values[inside] == 4)
        assert np.all(satnum.values[~inside] == 1)

    def test_min_and_max_limits(self, properties, extent):
        """MinLimit raises to the floor, MaxLimit lowers to the ceiling."""
        region = ActiveRegion(extent)
        ntg = properties["NTG"]
        ntg.values[:] = np.arange(extent.cell_count) / 10.0

        MinLimit(0.5).apply(region, ntg)
        assert ntg.values.min() == 0.5
        MaxLimit(1.5).apply(region, ntg)
        assert ntg.values.max() == 1.5
        assert ntg.get(10) == 1.0

    def test_integer_multiply_must_stay_integral(self, properties, region):
        """Scaling region numbers to fractions is a type mismatch."""
        satnum = properties["SATNUM"]

        with pytest.raises(TypeMismatchError):
            Multiply(0.5).apply(region, satnum)
        assert np.all(satnum.values == 1)

    def test_integer_multiply_by_integral_float(self, properties, region):
        """A float factor with an integral result is fine."""
        fipnum = properties["FIPNUM"]
        Multiply(2.0).apply(region, fipnum)

        assert fipnum.get((1, 1, 0)) == 2
        assert fipnum.get((2, 1, 0)) == 1


class TestCopy:
    """Tests for copying between properties."""

    def test_copy_region(self, properties, region, extent):
        """COPY writes source cells into the target inside the region only."""
        permx, permy = properties["PERMX"], properties["PERMY"]
        permx.values[:] = np.arange(extent.cell_count, dtype=float)
        Copy().apply(region, permy, permx)

        inside = _inside(region, extent)
        assert np.array_equal(permy.values[inside], permx.values[inside])
        assert np.all(permy.values[~inside] == 0.0)

    def test_copy_integer_into_float(self, properties, region):
        """Region numbers can be copied into a float property."""
        poro = properties["PORO"]
        Copy().apply(region, poro, properties["SATNUM"])

        assert poro.get((0, 0, 0)) == 1.0
        assert poro.get((3, 0, 0)) == 0.2

    def test_copy_fractional_float_into_integer(self, properties, region):
        """Fractional values cannot be copied into region numbers."""
        with pytest.raises(TypeMismatchError):
            Copy().apply(region, properties["SATNUM"], properties["PORO"])

    def test_copy_needs_source(self, properties, region):
        """COPY without a source property is a malformed record."""
        with pytest.raises(RecordError):
            Copy().apply(region, properties["PERMY"])


class TestAssign:
    """Tests for data-array assignment inside a box."""

    def test_values_follow_cell_order(self, properties, region):
        """Values are written i fastest, then j, then k."""
        permx = properties["PERMX"]
        Assign((10.0, 11.0, 12.0, 13.0)).apply(region, permx)

        assert permx.get((0, 0, 0)) == 10.0
        assert permx.get((1, 0, 0)) == 11.0
        assert permx.get((0, 1, 0)) == 12.0
        assert permx.get((1, 1, 0)) == 13.0
        assert permx.get((2, 0, 0)) == 1.0

    @pytest.mark.parametrize("count", [3, 5, 24])
    def test_value_count_must_match_region(self, properties, region, count):
        """Too few or too many values is an invalid region."""
        permx = properties["PERMX"]

        with pytest.raises(InvalidRegionError):
            Assign((2.0,) * count).apply(region, permx)
        assert np.all(permx.values == 1.0)


class TestOperate:
    """Tests for OPERATE functions."""

    @pytest.mark.parametrize(
        "function, alpha, beta, expected",
        [
            ("MULTA", 2.0, 8.0, 2 * 0.2 + 8),
            ("POLY", 4.0, 1.0, 3.0 + 4 * 0.2),
            ("SLOG", 1.0, 2.0, 10 ** (1 + 2 * 0.2)),
            ("LOG10", 0.0, 0.0, math.log10(0.2)),
            ("LOGE", 0.0, 0.0, math.log(0.2)),
            ("INV", 0.0, 0.0, 1 / 0.2),
            ("MULTX", 3.0, 0.0, 3 * 0.2),
            ("ADDX", 3.0, 0.0, 0.2 + 3),
            ("COPY", 0.0, 0.0, 0.2),
            ("MAXLIM", 0.1, 0.0, 0.1),
            ("MINLIM", 0.5, 0.0, 0.5),
            ("MAXV", 0.0, 0.0, 3.0),
            ("MINV", 0.0, 0.0, 0.2),
            ("MULTP", 2.0, 2.0, 2 * 0.2**2),
            ("ABS", 0.0, 0.0, 0.2),
            ("MULTIPLY", 0.0, 0.0, 0.2 * 3.0),
        ],
    )
    def test_functions(self, properties, region, function, alpha, beta, expected):
        """Each function combines target y=3.0 and source x=0.2 as documented."""
        ntg = properties["NTG"]
        ntg.values[:] = 3.0
        Operate(function, alpha, beta).apply(region, ntg, properties["PORO"])

        assert ntg.get((1, 1, 0)) == pytest.approx(expected)
        assert ntg.get((3, 2, 1)) == 3.0

    def test_function_table(self):
        """The function table is the documented closed set."""
        assert len(OPERATE_FUNCTIONS) == 16

    def test_unknown_function(self):
        """Unknown function names are rejected."""
        with pytest.raises(ValueError):
            Operate("SQRT")

    def test_operate_needs_source(self, properties, region):
        """OPERATE always reads a source property."""
        with pytest.raises(RecordError):
            Operate("COPY").apply(region, properties["NTG"])


class TestBuilders:
    """Tests for resolving records to operator instructions."""

    def test_scalar_record(self):
        """EQUALS records carry field, value and optional box items."""
        instruction = build_instruction(Record("EQUALS", ("poro", 0.25, 1, 2)))

        assert instruction.operator == Equals(0.25)
        assert instruction.target == "PORO"
        assert instruction.source is None
        assert instruction.bounds == (1, 2, None, None, None, None)

    def test_record_without_box_uses_active_region(self):
        """A record without box items applies to the active region."""
        instruction = build_instruction(Record("MULTIPLY", ("PERMX", 2)))

        assert instruction.operator == Multiply(2)
        assert instruction.bounds is None

    def test_copy_record(self):
        """COPY records name the source first and the target second."""
        instruction = build_instruction(Record("COPY", ("PERMX", "PERMY")))

        assert instruction.source == "PERMX"
        assert instruction.target == "PERMY"

    def test_operate_record(self):
        """OPERATE records carry their box before the function."""
        instruction = build_instruction(
            Record("OPERATE", ("NTG", 1, 1, 6, 6, 1, 1, "poly", "PORO", 4, 1))
        )

        assert instruction.operator == Operate("POLY", 4.0, 1.0)
        assert instruction.target == "NTG"
        assert instruction.source == "PORO"
        assert instruction.bounds == (1, 1, 6, 6, 1, 1)

    @pytest.mark.parametrize(
        "record",
        [
            Record("EQUALS", ("PORO",)),
            Record("EQUALS", (0.25, "PORO")),
            Record("MULTIPLY", ("PERMX", "TWO")),
            Record("COPY", ("PERMX",)),
            Record("OPERATE", ("NTG", 1, 1, 1, 1, 1, 1, "SQRT", "PORO")),
            Record("ADD", ("PERMX", 1, 1.5, 2)),
            Record("DIMENS", (1, 1, 1)),
        ],
    )
    def test_malformed_records(self, record):
        """Malformed records raise RecordError."""
        with pytest.raises(RecordError):
            build_instruction(record)
