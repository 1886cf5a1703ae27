"""
Box state of a keyword pass.

The active region is the rectangular set of cells that property-editing
records apply to. It covers the whole grid until a `BOX` record restricts
it, and returns to the whole grid on `ENDBOX` or a section keyword.
"""

import logging
import typing

import attrs
import numba
import numpy as np

from deckprops.errors import InvalidRegionError
from deckprops.grids.extent import GridExtent
from deckprops.types import BoxBounds, IndexBase, ThreeDimensions

__all__ = ["Box", "ActiveRegion"]

logger = logging.getLogger(__name__)

_AXES = ("I", "J", "K")


@numba.njit(cache=True)
def _box_flat_indices(
    i1: int, i2: int, j1: int, j2: int, k1: int, k2: int, nx: int, ny: int
) -> np.ndarray:
    """
    Flat indices of every cell in an inclusive box, `i` fastest, then `j`, then `k`.

    Uses the same mapping as `GridExtent.to_flat_index`.
    """
    count = (i2 - i1 + 1) * (j2 - j1 + 1) * (k2 - k1 + 1)
    indices = np.empty(count, dtype=np.int64)
    n = 0
    for k in range(k1, k2 + 1):
        for j in range(j1, j2 + 1):
            for i in range(i1, i2 + 1):
                indices[n] = i + j * nx + k * nx * ny
                n += 1
    return indices


@attrs.frozen(slots=True)
class Box:
    """Inclusive, 0-based index box `[i1, i2] x [j1, j2] x [k1, k2]`."""

    i1: int
    i2: int
    j1: int
    j2: int
    k1: int
    k2: int

    @classmethod
    def full(cls, extent: GridExtent) -> "Box":
        """Box covering every cell of `extent`."""
        return cls(0, extent.nx - 1, 0, extent.ny - 1, 0, extent.nz - 1)

    @classmethod
    def from_bounds(
        cls,
        bounds: typing.Sequence[int],
        extent: GridExtent,
        index_base: IndexBase = 1,
    ) -> "Box":
        """
        Validate deck bounds `(i1, i2, j1, j2, k1, k2)` and build a box.

        :param bounds: Six inclusive bounds in the given index base
        :param extent: Grid extent the box must fit in
        :param index_base: 1 for deck (Fortran style) indices, 0 for Python indices
        :raises InvalidRegionError: If an axis is inverted or leaves the grid.
        """
        if len(bounds) != 6:
            raise InvalidRegionError(
                f"A box needs six bounds (i1 i2 j1 j2 k1 k2), got {len(bounds)}"
            )
        normalized = []
        for position, value in enumerate(bounds):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise InvalidRegionError(
                    f"Box bound {_AXES[position // 2]}{position % 2 + 1} "
                    f"must be an integer, got {value!r}"
                )
            normalized.append(int(value) - index_base)

        for axis, size in enumerate(extent.shape):
            low, high = normalized[2 * axis], normalized[2 * axis + 1]
            name = _AXES[axis]
            if low > high:
                raise InvalidRegionError(
                    f"Box is inverted on the {name} axis: "
                    f"{name}1={low + index_base} > {name}2={high + index_base}"
                )
            if low < 0 or high >= size:
                raise InvalidRegionError(
                    f"Box {name} range [{low + index_base}, {high + index_base}] is "
                    f"outside the grid, valid range is "
                    f"[{index_base}, {size - 1 + index_base}]"
                )
        return cls(*normalized)

    @property
    def bounds(self) -> BoxBounds:
        return (self.i1, self.i2, self.j1, self.j2, self.k1, self.k2)

    @property
    def shape(self) -> ThreeDimensions:
        return (
            self.i2 - self.i1 + 1,
            self.j2 - self.j1 + 1,
            self.k2 - self.k1 + 1,
        )

    @property
    def cell_count(self) -> int:
        ni, nj, nk = self.shape
        return ni * nj * nk

    def contains(self, i: int, j: int, k: int) -> bool:
        return (
            self.i1 <= i <= self.i2
            and self.j1 <= j <= self.j2
            and self.k1 <= k <= self.k2
        )

    def is_full(self, extent: GridExtent) -> bool:
        return self == Box.full(extent)

    def slices(self) -> typing.Tuple[slice, slice, slice]:
        """Slices selecting the box from an `(nx, ny, nz)` array."""
        return (
            slice(self.i1, self.i2 + 1),
            slice(self.j1, self.j2 + 1),
            slice(self.k1, self.k2 + 1),
        )

    def flat_indices(self, extent: GridExtent) -> np.ndarray:
        """Flat indices of the box cells on `extent`, `i` fastest."""
        return _box_flat_indices(*self.bounds, extent.nx, extent.ny)

    def iter_cells(self) -> typing.Iterator[ThreeDimensions]:
        """Yield every `(i, j, k)` in the box, `i` fastest, then `j`, then `k`."""
        for k in range(self.k1, self.k2 + 1):
            for j in range(self.j1, self.j2 + 1):
                for i in range(self.i1, self.i2 + 1):
                    yield (i, j, k)

    def to_deck(self, index_base: IndexBase = 1) -> str:
        """Format the box as deck `BOX` items."""
        return " ".join(str(bound + index_base) for bound in self.bounds)


@attrs.define(slots=True)
class ActiveRegion:
    """
    The set of cells that property-editing records currently apply to.

    Two states: full grid (initial) and restricted to a box. A `BOX` record
    replaces the current box wholesale, it is never intersected with the
    previous one. Transitions validate completely before committing.
    """

    extent: GridExtent
    """Grid extent the region lives on."""
    box: Box = attrs.field()
    """Current box, 0-based inclusive."""

    @box.default
    def _full_box(self) -> Box:
        return Box.full(self.extent)

    @property
    def is_full(self) -> bool:
        """Whether the region covers the whole grid."""
        return self.box.is_full(self.extent)

    @property
    def cell_count(self) -> int:
        return self.box.cell_count

    def apply_box_record(
        self, bounds: typing.Sequence[int], index_base: IndexBase = 1
    ) -> Box:
        """
        Restrict the region to the box given by a `BOX` record.

        :param bounds: Six inclusive bounds `(i1, i2, j1, j2, k1, k2)`
        :param index_base: Index base of `bounds`
        :return: The new box
        :raises InvalidRegionError: If the bounds are invalid. The region
            is left unchanged.
        """
        box = Box.from_bounds(bounds, self.extent, index_base=index_base)
        self.box = box
        logger.debug(f"Active region set to box {box.to_deck(index_base)}")
        return box

    def reset(self) -> None:
        """Return to the full grid."""
        if not self.is_full:
            logger.debug("Active region reset to the full grid")
        self.box = Box.full(self.extent)

    def resolve(
        self,
        bounds: typing.Sequence[typing.Optional[int]],
        index_base: IndexBase = 1,
    ) -> "ActiveRegion":
        """
        Build the region of a record that carries its own box items.

        Each bound given as None falls back to the current region's bound on
        that axis. The result is validated like a `BOX` record but does not
        change this region.

        :param bounds: Six bounds in `index_base`, None where defaulted
        :param index_base: Index base of `bounds`
        :return: A detached `ActiveRegion` for the record
        """
        if len(bounds) != 6:
            raise InvalidRegionError(
                f"A box needs six bounds (i1 i2 j1 j2 k1 k2), got {len(bounds)}"
            )
        if all(bound is None for bound in bounds):
            return ActiveRegion(self.extent, self.box)

        current = self.box.bounds
        merged = [
            current[position] + index_base if bound is None else bound
            for position, bound in enumerate(bounds)
        ]
        box = Box.from_bounds(merged, self.extent, index_base=index_base)
        return ActiveRegion(self.extent, box)

    def flat_indices(self) -> np.ndarray:
        """Flat indices of the region cells, `i` fastest."""
        return self.box.flat_indices(self.extent)

    def iter_cells(self) -> typing.Iterator[ThreeDimensions]:
        """Yield every `(i, j, k)` in the region. Each call starts over."""
        return self.box.iter_cells()

    def contains(self, i: int, j: int, k: int) -> bool:
        return self.box.contains(i, j, k)
