"""Keyword registry: supported grid properties, sections and record layouts."""

import enum
import typing

import attrs

from deckprops.types import FieldKind

__all__ = [
    "PropertyKeyword",
    "KeywordLayout",
    "PROPERTY_KEYWORDS",
    "SECTION_KEYWORDS",
    "BOX_KEYWORD",
    "ENDBOX_KEYWORD",
    "OPERATOR_KEYWORDS",
    "get_property_keyword",
    "is_property_keyword",
    "layout_of",
]


@attrs.frozen(slots=True)
class PropertyKeyword:
    """A grid property keyword and how its field is created."""

    name: str
    """Keyword name, e.g. 'PERMX'."""
    kind: FieldKind
    """Scalar kind of the property."""
    default: float
    """Value of every cell before the deck assigns anything."""
    description: typing.Optional[str] = None
    """Optional description of the property."""


class KeywordLayout(enum.Enum):
    """How the data following a keyword is laid out in a deck."""

    NONE = "none"
    """No data, the keyword stands alone (`ENDBOX`, `GRID`)."""
    RECORD = "record"
    """Exactly one record terminated by '/' (`BOX`, `PERMX`)."""
    RECORDS = "records"
    """Any number of records, closed by an empty record (`EQUALS`)."""
    TEXT = "text"
    """One line of free text (`TITLE`)."""


def _float(name: str, default: float, description: str) -> PropertyKeyword:
    return PropertyKeyword(name, FieldKind.FLOAT, default, description)


def _int(name: str, description: str) -> PropertyKeyword:
    return PropertyKeyword(name, FieldKind.INTEGER, 1, description)


PROPERTY_KEYWORDS: typing.Dict[str, PropertyKeyword] = {
    keyword.name: keyword
    for keyword in (
        _float("PERMX", 0.0, "Permeability in the x direction (mD)"),
        _float("PERMY", 0.0, "Permeability in the y direction (mD)"),
        _float("PERMZ", 0.0, "Permeability in the z direction (mD)"),
        _float("PORO", 0.0, "Porosity (fraction)"),
        _float("NTG", 1.0, "Net-to-gross ratio (fraction)"),
        _float("MULTX", 1.0, "Transmissibility multiplier, +x face"),
        _float("MULTY", 1.0, "Transmissibility multiplier, +y face"),
        _float("MULTZ", 1.0, "Transmissibility multiplier, +z face"),
        _float("MULTX-", 1.0, "Transmissibility multiplier, -x face"),
        _float("MULTY-", 1.0, "Transmissibility multiplier, -y face"),
        _float("MULTZ-", 1.0, "Transmissibility multiplier, -z face"),
        _float("MULTPV", 1.0, "Pore volume multiplier"),
        _float("SWATINIT", 0.0, "Initial water saturation used for capillary scaling"),
        _int("ACTNUM", "Active cell flag"),
        _int("SATNUM", "Saturation function region"),
        _int("IMBNUM", "Imbibition saturation function region"),
        _int("PVTNUM", "PVT region"),
        _int("EQLNUM", "Equilibration region"),
        _int("FIPNUM", "Fluid-in-place region"),
        _int("ROCKNUM", "Rock compaction region"),
        _int("MULTNUM", "Multiplier region"),
        _int("FLUXNUM", "Flux region"),
        _int("OPERNUM", "Operation region"),
        _int("MISCNUM", "Miscibility region"),
        _int("ENDNUM", "End-point scaling depth table region"),
    )
}
"""Grid properties that can be assigned and edited by keyword records."""

SECTION_KEYWORDS: typing.FrozenSet[str] = frozenset(
    (
        "RUNSPEC",
        "GRID",
        "EDIT",
        "PROPS",
        "REGIONS",
        "SOLUTION",
        "SUMMARY",
        "SCHEDULE",
    )
)
"""Keywords that open a new deck section."""

BOX_KEYWORD = "BOX"
ENDBOX_KEYWORD = "ENDBOX"

OPERATOR_KEYWORDS: typing.FrozenSet[str] = frozenset(
    ("EQUALS", "COPY", "ADD", "MULTIPLY", "MINVALUE", "MAXVALUE", "OPERATE")
)
"""Keywords whose records edit properties inside a box."""

_STANDALONE_KEYWORDS = frozenset(
    (
        ENDBOX_KEYWORD,
        "OIL",
        "GAS",
        "WATER",
        "DISGAS",
        "VAPOIL",
        "METRIC",
        "FIELD",
        "LAB",
        "ECHO",
        "NOECHO",
        "INIT",
        "NONNC",
        "END",
    )
)
_SINGLE_RECORD_KEYWORDS = frozenset((BOX_KEYWORD, "DIMENS", "START", "TABDIMS"))
_TEXT_KEYWORDS = frozenset(("TITLE",))


def get_property_keyword(name: str) -> typing.Optional[PropertyKeyword]:
    """Return the registry entry of a property keyword, if it is one."""
    return PROPERTY_KEYWORDS.get(name.upper())


def is_property_keyword(name: str) -> bool:
    return name.upper() in PROPERTY_KEYWORDS


def layout_of(name: str) -> typing.Optional[KeywordLayout]:
    """
    Return the record layout of a known keyword.

    :param name: Keyword name
    :return: The layout, or None if the keyword is not registered.
    """
    name = name.upper()
    if name in SECTION_KEYWORDS or name in _STANDALONE_KEYWORDS:
        return KeywordLayout.NONE
    if name in OPERATOR_KEYWORDS:
        return KeywordLayout.RECORDS
    if name in _SINGLE_RECORD_KEYWORDS or name in PROPERTY_KEYWORDS:
        return KeywordLayout.RECORD
    if name in _TEXT_KEYWORDS:
        return KeywordLayout.TEXT
    return None
