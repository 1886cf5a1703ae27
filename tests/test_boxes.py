"""Tests for boxes and the active region state machine."""

import pytest

from deckprops import ActiveRegion, Box, InvalidRegionError


class TestBox:
    """Tests for box validation and enumeration."""

    def test_from_bounds_normalizes_to_zero_based(self, extent):
        """Deck bounds are 1-based and inclusive."""
        box = Box.from_bounds((1, 2, 1, 2, 1, 1), extent)

        assert box == Box(0, 1, 0, 1, 0, 0)
        assert box.shape == (2, 2, 1)
        assert box.cell_count == 4

    def test_zero_based_bounds(self, extent):
        """index_base=0 takes bounds as they are."""
        box = Box.from_bounds((0, 3, 0, 2, 0, 1), extent, index_base=0)

        assert box.is_full(extent)

    @pytest.mark.parametrize(
        "bounds",
        [
            (2, 1, 1, 1, 1, 1),  # inverted i
            (1, 1, 3, 2, 1, 1),  # inverted j
            (1, 1, 1, 1, 2, 1),  # inverted k
            (1, 5, 1, 1, 1, 1),  # i beyond nx
            (1, 1, 1, 4, 1, 1),  # j beyond ny
            (1, 1, 1, 1, 1, 3),  # k beyond nz
            (0, 1, 1, 1, 1, 1),  # below the first cell
        ],
    )
    def test_invalid_bounds(self, extent, bounds):
        """Inverted or out-of-grid bounds raise InvalidRegionError."""
        with pytest.raises(InvalidRegionError):
            Box.from_bounds(bounds, extent)

    def test_wrong_number_of_bounds(self, extent):
        """A box needs exactly six bounds."""
        with pytest.raises(InvalidRegionError):
            Box.from_bounds((1, 2, 1, 2), extent)

    def test_non_integer_bounds(self, extent):
        """Bounds must be integers."""
        with pytest.raises(InvalidRegionError):
            Box.from_bounds((1, 2.5, 1, 2, 1, 1), extent)

    def test_iter_cells_is_i_fastest(self, extent):
        """Cells are enumerated with i fastest, then j, then k."""
        box = Box(0, 1, 1, 2, 0, 1)

        assert list(box.iter_cells()) == [
            (0, 1, 0),
            (1, 1, 0),
            (0, 2, 0),
            (1, 2, 0),
            (0, 1, 1),
            (1, 1, 1),
            (0, 2, 1),
            (1, 2, 1),
        ]

    def test_flat_indices_match_extent_mapping(self, extent):
        """flat_indices() agrees with GridExtent.to_flat_index cell by cell."""
        box = Box(1, 3, 0, 2, 1, 1)

        expected = [extent.to_flat_index(*cell) for cell in box.iter_cells()]
        assert box.flat_indices(extent).tolist() == expected

    def test_slices_select_box(self, extent):
        """slices() selects the box from an (nx, ny, nz) array."""
        box = Box(1, 2, 0, 0, 0, 1)

        assert box.slices() == (slice(1, 3), slice(0, 1), slice(0, 2))

    def test_to_deck(self):
        """to_deck() formats bounds in deck index base."""
        assert Box(0, 1, 0, 1, 0, 0).to_deck() == "1 2 1 2 1 1"


class TestActiveRegion:
    """Tests for the BOX / ENDBOX state machine."""

    def test_starts_full(self, extent):
        """A new region covers the whole grid."""
        region = ActiveRegion(extent)

        assert region.is_full
        assert region.cell_count == extent.cell_count

    def test_box_record_restricts(self, extent):
        """A BOX record restricts the region to the box."""
        region = ActiveRegion(extent)
        region.apply_box_record((2, 3, 1, 1, 2, 2))

        assert not region.is_full
        assert region.box == Box(1, 2, 0, 0, 1, 1)
        assert list(region.iter_cells()) == [(1, 0, 1), (2, 0, 1)]

    def test_second_box_replaces_first(self, extent):
        """Boxes are replaced wholesale, never intersected."""
        region = ActiveRegion(extent)
        region.apply_box_record((1, 2, 1, 2, 1, 1))
        region.apply_box_record((3, 4, 2, 3, 2, 2))

        assert region.box == Box(2, 3, 1, 2, 1, 1)
        assert region.cell_count == 4

    def test_invalid_box_keeps_current_state(self, extent):
        """A rejected BOX record leaves the region unchanged."""
        region = ActiveRegion(extent)
        region.apply_box_record((1, 2, 1, 2, 1, 1))

        with pytest.raises(InvalidRegionError):
            region.apply_box_record((1, 2, 1, 2, 1, 9))
        assert region.box == Box(0, 1, 0, 1, 0, 0)

    def test_reset_returns_to_full(self, extent):
        """reset() goes back to the whole grid."""
        region = ActiveRegion(extent)
        region.apply_box_record((1, 1, 1, 1, 1, 1))
        region.reset()

        assert region.is_full

    def test_iter_cells_restarts(self, extent):
        """Every call enumerates the region from the start."""
        region = ActiveRegion(extent)
        region.apply_box_record((1, 2, 1, 1, 1, 1))

        assert list(region.iter_cells()) == list(region.iter_cells())

    def test_resolve_defaults_to_current_box(self, extent):
        """Defaulted record bounds fall back to the active box."""
        region = ActiveRegion(extent)
        region.apply_box_record((1, 2, 1, 2, 1, 1))

        resolved = region.resolve((None, None, None, None, None, None))
        assert resolved.box == region.box

        resolved = region.resolve((None, None, 3, 3, None, None))
        assert resolved.box == Box(0, 1, 2, 2, 0, 0)

    def test_resolve_does_not_change_region(self, extent):
        """A record box only applies to its own record."""
        region = ActiveRegion(extent)
        resolved = region.resolve((1, 1, 1, 1, 2, 2))

        assert resolved.box == Box(0, 0, 0, 0, 1, 1)
        assert region.is_full

    def test_resolve_validates(self, extent):
        """Record boxes are validated like BOX records."""
        region = ActiveRegion(extent)

        with pytest.raises(InvalidRegionError):
            region.resolve((1, 1, 1, 1, 2, 3))
        with pytest.raises(InvalidRegionError):
            region.resolve((3, 2, None, None, None, None))
