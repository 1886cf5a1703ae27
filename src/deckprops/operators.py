"""
Region operators: the per-cell transformations applied by property-editing keywords.

Each keyword maps to one operator variant through `OPERATOR_BUILDERS`. An
operator only ever touches the cells of the region it is applied to, and
computes every new value before writing any of them, so a record is either
applied completely or not at all.
"""

import abc
import logging
import typing

import attrs
import numpy as np

from deckprops.errors import InvalidRegionError, RecordError
from deckprops.grids.fields import PropertyField
from deckprops.records import Record
from deckprops.types import Numeric, OperateFunction

if typing.TYPE_CHECKING:
    from deckprops.boxes import ActiveRegion

__all__ = [
    "RegionOperator",
    "Equals",
    "Copy",
    "Multiply",
    "Add",
    "MinLimit",
    "MaxLimit",
    "Assign",
    "Operate",
    "Instruction",
    "OPERATE_FUNCTIONS",
    "OPERATOR_BUILDERS",
    "build_instruction",
    "build_assignment",
]

logger = logging.getLogger(__name__)


def _as_real(values: np.ndarray) -> np.ndarray:
    # integer region numbers are computed in float64, `PropertyField.coerce`
    # range-checks the result before it is stored
    if values.dtype.kind in "biu":
        return values.astype(np.float64)
    return values


class RegionOperator(abc.ABC):
    """Base class of all region operators."""

    __slots__ = ()

    requires_source: typing.ClassVar[bool] = False
    """Whether the operator reads a second (source) property."""

    def apply(
        self,
        region: "ActiveRegion",
        target: PropertyField,
        source: typing.Optional[PropertyField] = None,
    ) -> None:
        """
        Apply the operator to every cell of `region` in `target`.

        :param region: Cells to modify
        :param target: Property that is modified in place
        :param source: Property read by operators that need one
        """
        if self.requires_source and source is None:
            raise RecordError(
                f"{type(self).__name__} on {target.name} needs a source property"
            )
        indices = region.flat_indices()
        current = target.take(indices)
        source_values = source.take(indices) if source is not None else None
        target.put(indices, self.compute(current, source_values))

    @abc.abstractmethod
    def compute(
        self, current: np.ndarray, source: typing.Optional[np.ndarray]
    ) -> typing.Any:
        """
        Compute the new values of the region cells.

        :param current: Current target values of the region cells
        :param source: Source values of the region cells, if any
        :return: New values, scalar or array matching `current`
        """
        raise NotImplementedError


@attrs.frozen(slots=True)
class Equals(RegionOperator):
    """Set every cell to `value` (`EQUALS`)."""

    value: Numeric

    def compute(self, current, source):
        return self.value


@attrs.frozen(slots=True)
class Copy(RegionOperator):
    """Copy the source property into the target (`COPY`)."""

    requires_source: typing.ClassVar[bool] = True

    def compute(self, current, source):
        return source


@attrs.frozen(slots=True)
class Multiply(RegionOperator):
    """Scale every cell by `factor` (`MULTIPLY`)."""

    factor: Numeric

    def compute(self, current, source):
        return _as_real(current) * self.factor


@attrs.frozen(slots=True)
class Add(RegionOperator):
    """Add `delta` to every cell (`ADD`)."""

    delta: Numeric

    def compute(self, current, source):
        return _as_real(current) + self.delta


@attrs.frozen(slots=True)
class MinLimit(RegionOperator):
    """Raise cells below `floor` to `floor` (`MINVALUE`)."""

    floor: Numeric

    def compute(self, current, source):
        return np.maximum(_as_real(current), self.floor)


@attrs.frozen(slots=True)
class MaxLimit(RegionOperator):
    """Lower cells above `ceiling` to `ceiling` (`MAXVALUE`)."""

    ceiling: Numeric

    def compute(self, current, source):
        return np.minimum(_as_real(current), self.ceiling)


@attrs.frozen(slots=True)
class Assign(RegionOperator):
    """
    Write one value per region cell, in `i`-fastest order.

    This is what a data-array keyword such as `PERMX 8*2 /` does inside a
    box. The number of values must match the number of cells exactly.
    """

    values: typing.Tuple[Numeric, ...] = attrs.field(converter=tuple)

    def apply(self, region, target, source=None):
        if len(self.values) != region.cell_count:
            raise InvalidRegionError(
                f"{target.name}: {len(self.values)} values given for a region of "
                f"{region.cell_count} cells"
            )
        super(Assign, self).apply(region, target, source)

    def compute(self, current, source):
        return np.asarray(self.values)


OPERATE_FUNCTIONS: typing.Dict[
    str, typing.Callable[[np.ndarray, np.ndarray, float, float], np.ndarray]
] = {
    "MULTA": lambda y, x, a, b: a * x + b,
    "POLY": lambda y, x, a, b: y + a * np.power(x, b),
    "SLOG": lambda y, x, a, b: np.power(10.0, a + b * x),
    "LOG10": lambda y, x, a, b: np.log10(x),
    "LOGE": lambda y, x, a, b: np.log(x),
    "INV": lambda y, x, a, b: 1.0 / x,
    "MULTX": lambda y, x, a, b: a * x,
    "ADDX": lambda y, x, a, b: x + a,
    "COPY": lambda y, x, a, b: x,
    "MAXLIM": lambda y, x, a, b: np.minimum(a, x),
    "MINLIM": lambda y, x, a, b: np.maximum(a, x),
    "MAXV": lambda y, x, a, b: np.maximum(y, x),
    "MINV": lambda y, x, a, b: np.minimum(y, x),
    "MULTP": lambda y, x, a, b: a * np.power(x, b),
    "ABS": lambda y, x, a, b: np.abs(x),
    "MULTIPLY": lambda y, x, a, b: x * y,
}
"""`OPERATE` functions, called as `f(y, x, alpha, beta)` with `y` the target and `x` the source."""


@attrs.frozen(slots=True)
class Operate(RegionOperator):
    """Combine source and target cells with an `OPERATE` function."""

    requires_source: typing.ClassVar[bool] = True

    function: OperateFunction = attrs.field(
        converter=lambda name: str(name).upper(),
        validator=attrs.validators.in_(tuple(OPERATE_FUNCTIONS)),
    )
    alpha: float = 0.0
    beta: float = 0.0

    def compute(self, current, source):
        func = OPERATE_FUNCTIONS[self.function]
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            result = func(_as_real(current), _as_real(source), self.alpha, self.beta)
        result = np.asarray(result)
        if result.dtype.kind == "f" and not np.all(np.isfinite(result)):
            logger.warning(
                f"OPERATE {self.function} produced non-finite values in "
                f"{int(np.count_nonzero(~np.isfinite(result)))} cell(s)"
            )
        return result


@attrs.frozen(slots=True)
class Instruction:
    """A record resolved to an operator and the properties it works on."""

    operator: RegionOperator
    """Operator to apply."""
    target: str
    """Name of the property that is modified."""
    source: typing.Optional[str] = None
    """Name of the property that is read, if any."""
    bounds: typing.Optional[typing.Tuple[typing.Optional[int], ...]] = None
    """
    Box items carried by the record itself, None where defaulted.

    None means the record applies to the active region.
    """


def _box_items(
    record: Record, start: int
) -> typing.Optional[typing.Tuple[typing.Optional[int], ...]]:
    names = ("I1", "I2", "J1", "J2", "K1", "K2")
    bounds = tuple(
        record.get_int(start + offset, name, default=None)
        for offset, name in enumerate(names)
    )
    if all(bound is None for bound in bounds):
        return None
    return bounds


def _scalar_builder(
    operator_type: typing.Callable[[Numeric], RegionOperator], item: str
) -> typing.Callable[[Record], Instruction]:
    def build(record: Record) -> Instruction:
        return Instruction(
            operator=operator_type(record.get_number(1, item)),
            target=record.get_string(0, "FIELD"),
            bounds=_box_items(record, 2),
        )

    return build


def _build_copy(record: Record) -> Instruction:
    return Instruction(
        operator=Copy(),
        source=record.get_string(0, "SOURCE"),
        target=record.get_string(1, "TARGET"),
        bounds=_box_items(record, 2),
    )


def _build_operate(record: Record) -> Instruction:
    function = record.get_string(7, "FUNCTION")
    if function not in OPERATE_FUNCTIONS:
        raise RecordError(
            f"OPERATE: unknown function {function!r}, "
            f"expected one of {', '.join(OPERATE_FUNCTIONS)}"
        )
    return Instruction(
        operator=Operate(
            function=function,
            alpha=float(record.get_number(9, "ALPHA", default=0.0)),
            beta=float(record.get_number(10, "BETA", default=0.0)),
        ),
        target=record.get_string(0, "TARGET"),
        source=record.get_string(8, "SOURCE"),
        bounds=_box_items(record, 1),
    )


OPERATOR_BUILDERS: typing.Dict[str, typing.Callable[[Record], Instruction]] = {
    "EQUALS": _scalar_builder(Equals, "VALUE"),
    "MULTIPLY": _scalar_builder(Multiply, "FACTOR"),
    "ADD": _scalar_builder(Add, "SHIFT"),
    "MINVALUE": _scalar_builder(MinLimit, "LIMIT"),
    "MAXVALUE": _scalar_builder(MaxLimit, "LIMIT"),
    "COPY": _build_copy,
    "OPERATE": _build_operate,
}
"""Static table from keyword name to the builder of its operator."""


def build_instruction(record: Record) -> Instruction:
    """
    Resolve a property-editing record to an `Instruction`.

    :param record: Record of one of the `OPERATOR_BUILDERS` keywords
    :raises RecordError: If the keyword is not an editing keyword or the
        record is malformed.
    """
    builder = OPERATOR_BUILDERS.get(record.keyword)
    if builder is None:
        raise RecordError(f"{record.keyword} is not a property editing keyword")
    return builder(record)


def build_assignment(record: Record) -> Instruction:
    """
    Resolve a data-array record (`PERMX 1000*1 /`) to an `Assign` instruction.

    :param record: Record whose keyword is the property name
    """
    return Instruction(operator=Assign(record.numbers()), target=record.keyword)
