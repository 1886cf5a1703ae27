"""Keyword records as handed over by the deck reader."""

import typing

import attrs

from deckprops.errors import RecordError
from deckprops.types import Numeric

__all__ = ["DEFAULT", "Item", "Record"]


class _Defaulted:
    """Marker for a deck item left to its default (`1*`)."""

    _instance: typing.Optional["_Defaulted"] = None

    def __new__(cls) -> "_Defaulted":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "1*"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Defaulted, ())


DEFAULT = _Defaulted()
"""A defaulted record item."""

Item = typing.Union[int, float, str, _Defaulted]
"""A typed record item."""

_MISSING: typing.Any = object()


def _is_number(value: typing.Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@attrs.frozen(slots=True)
class Record:
    """
    One record of a keyword: the keyword name and its ordered items.

    Keywords with several records (`EQUALS`, `COPY`, ...) appear as several
    `Record`s with the same keyword. Items past the end of the record are
    treated as defaulted, as in the deck format.
    """

    keyword: str = attrs.field(converter=lambda name: str(name).upper())
    """Keyword name, upper case."""
    items: typing.Tuple[Item, ...] = attrs.field(factory=tuple, converter=tuple)
    """Items in deck order."""
    line: typing.Optional[int] = attrs.field(default=None, eq=False)
    """Line of the deck the record starts on, if known."""

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        shown = " ".join(_format_item(item) for item in self.items[:12])
        if len(self.items) > 12:
            shown += f" ... ({len(self.items)} items)"
        text = f"{self.keyword} {shown} /" if shown else self.keyword
        if self.line is not None:
            text += f" (line {self.line})"
        return text

    def item(self, position: int) -> Item:
        """Return the item at `position`, or `DEFAULT` past the end of the record."""
        if position < len(self.items):
            return self.items[position]
        return DEFAULT

    def is_defaulted(self, position: int) -> bool:
        return self.item(position) is DEFAULT

    def get_string(self, position: int, name: str) -> str:
        """
        Return a required string item, upper case.

        :param position: Item position in the record
        :param name: Item name used in error messages
        """
        value = self.item(position)
        if value is DEFAULT:
            raise RecordError(f"{self.keyword}: item {name} is required")
        if not isinstance(value, str):
            raise RecordError(
                f"{self.keyword}: item {name} must be a name, got {value!r}"
            )
        return value.upper()

    def get_number(
        self, position: int, name: str, default: typing.Any = _MISSING
    ) -> Numeric:
        """
        Return a numeric item.

        :param position: Item position in the record
        :param name: Item name used in error messages
        :param default: Value used when the item is defaulted. If not given,
            the item is required.
        """
        value = self.item(position)
        if value is DEFAULT:
            if default is _MISSING:
                raise RecordError(f"{self.keyword}: item {name} is required")
            return default
        if not _is_number(value):
            raise RecordError(
                f"{self.keyword}: item {name} must be numeric, got {value!r}"
            )
        return value  # type: ignore[return-value]

    def get_int(
        self, position: int, name: str, default: typing.Any = _MISSING
    ) -> typing.Optional[int]:
        """Return an integer item, `default` when defaulted."""
        value = self.get_number(position, name, default)
        if value is default and default is not _MISSING:
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise RecordError(
                    f"{self.keyword}: item {name} must be an integer, got {value!r}"
                )
            return int(value)
        return int(value)

    def numbers(self, start: int = 0) -> typing.List[Numeric]:
        """
        Return all items from `start` on as numbers.

        Used for data-array keywords, where defaulted items are not allowed.
        """
        values = []
        for position, value in enumerate(self.items[start:], start=start):
            if not _is_number(value):
                raise RecordError(
                    f"{self.keyword}: item {position + 1} must be numeric, got {value!r}"
                )
            values.append(value)
        return values


def _format_item(item: Item) -> str:
    if isinstance(item, str):
        return f"'{item}'"
    return repr(item)
