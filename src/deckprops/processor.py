"""Single pass of keyword records over a set of grid properties."""

import logging
import typing

import attrs

from deckprops.boxes import ActiveRegion
from deckprops.config import Config
from deckprops.errors import ErrorKind, KeywordError, RecordError, ValidationError
from deckprops.grids.properties import GridProperties
from deckprops.keywords import (
    BOX_KEYWORD,
    ENDBOX_KEYWORD,
    SECTION_KEYWORDS,
    is_property_keyword,
)
from deckprops.operators import (
    OPERATOR_BUILDERS,
    Instruction,
    build_assignment,
    build_instruction,
)
from deckprops.records import Record

__all__ = ["KeywordProcessor", "ProcessResult"]

logger = logging.getLogger(__name__)

_BOX_ITEMS = ("I1", "I2", "J1", "J2", "K1", "K2")


@attrs.frozen(slots=True)
class ProcessResult:
    """Outcome of a keyword pass."""

    applied: int
    """Number of records processed before the pass ended."""
    error: typing.Optional[KeywordError] = None
    """The failure that stopped the pass, if any."""

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise the failure that stopped the pass, if any."""
        if self.error is not None:
            raise self.error


class KeywordProcessor:
    """
    Applies keyword records, in order, to grid properties.

    The processor owns the active region (box state) of the pass. `BOX`
    restricts it, `ENDBOX` and section keywords reset it, and every
    property-editing record is applied to the active region unless it
    carries its own box items.

    Properties are borrowed from `properties` one record at a time. The
    first record that cannot be applied stops the pass; records applied
    before it stay applied.

    Example:
    ```python
    properties = GridProperties.from_keywords(GridExtent(10, 10, 3), ["PERMX"])
    processor = KeywordProcessor(properties)
    processor.process(
        [
            Record("BOX", (1, 2, 1, 2, 1, 1)),
            Record("EQUALS", ("PERMX", 100.0)),
            Record("ENDBOX"),
        ]
    )
    ```
    """

    def __init__(
        self, properties: GridProperties, config: typing.Optional[Config] = None
    ) -> None:
        self.properties = properties
        self.config = config or Config()
        self.region = ActiveRegion(properties.extent)

    def process(self, records: typing.Iterable[Record]) -> int:
        """
        Apply records in order.

        :param records: Keyword records in deck order
        :return: Number of records processed
        :raises KeywordError: On the first record that cannot be applied.
        """
        result = self.try_process(records)
        result.raise_for_error()
        return result.applied

    def try_process(self, records: typing.Iterable[Record]) -> ProcessResult:
        """
        Apply records in order, returning the outcome instead of raising.

        :param records: Keyword records in deck order
        :return: `ProcessResult` with the number of records processed and
            the failure that stopped the pass, if any.
        """
        applied = 0
        for position, record in enumerate(records):
            try:
                self.apply(record, position=position)
            except KeywordError as exc:
                logger.error(f"Keyword processing stopped: {exc}")
                return ProcessResult(applied=applied, error=exc)

            applied += 1
            if applied % self.config.log_interval == 0:
                logger.debug(f"Processed {applied} records")

        logger.info(
            f"Processed {applied} keyword records on grid {self.properties.extent}"
        )
        return ProcessResult(applied=applied)

    def apply(self, record: Record, position: typing.Optional[int] = None) -> None:
        """
        Apply a single record.

        :param record: Record to apply
        :param position: Position of the record in its stream, for error reports
        :raises KeywordError: If the record cannot be applied.
        """
        try:
            self._dispatch(record)
        except ValidationError as exc:
            raise KeywordError(
                ErrorKind.of(exc),
                f"{record}: {exc}",
                record=record,
                position=position,
            ) from exc

    def _dispatch(self, record: Record) -> None:
        keyword = record.keyword
        if keyword == BOX_KEYWORD:
            if len(record) > len(_BOX_ITEMS):
                raise RecordError(f"BOX takes six items, got {len(record)}")
            bounds = [
                record.get_int(position, name)
                for position, name in enumerate(_BOX_ITEMS)
            ]
            self.region.apply_box_record(bounds, index_base=self.config.index_base)

        elif keyword == ENDBOX_KEYWORD:
            self.region.reset()

        elif keyword in SECTION_KEYWORDS:
            logger.debug(f"Entering section {keyword}")
            if self.config.reset_box_on_section:
                self.region.reset()

        elif keyword in OPERATOR_BUILDERS:
            self._execute(build_instruction(record), record)

        elif keyword in self.properties or is_property_keyword(keyword):
            self._execute(build_assignment(record), record)

        elif self.config.ignore_unknown_keywords:
            logger.debug(f"Skipping keyword {keyword}")

        else:
            raise RecordError(f"Keyword {keyword} is not supported")

    def _execute(self, instruction: Instruction, record: Record) -> None:
        target = self.properties.get_field(instruction.target)
        source = (
            self.properties.get_field(instruction.source)
            if instruction.source is not None
            else None
        )
        if instruction.bounds is None:
            region = self.region
        else:
            region = self.region.resolve(
                instruction.bounds, index_base=self.config.index_base
            )

        instruction.operator.apply(region, target, source)
        logger.debug(
            f"{record.keyword}: {type(instruction.operator).__name__} applied to "
            f"{target.name} on {region.cell_count} cell(s)"
        )
