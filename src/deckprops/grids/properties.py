import logging
import typing

import attrs

from deckprops.errors import UnknownFieldError, ValidationError
from deckprops.grids.extent import GridExtent
from deckprops.grids.fields import PropertyField
from deckprops.keywords import get_property_keyword
from deckprops.types import FieldKind, Numeric

__all__ = ["GridProperties"]

logger = logging.getLogger(__name__)


@attrs.define(slots=True)
class GridProperties:
    """
    Named grid properties sharing one grid extent.

    Keyword processing borrows properties from this container by name; it
    never adds or removes entries itself.
    """

    extent: GridExtent
    """Grid extent shared by every property."""
    _fields: typing.Dict[str, PropertyField] = attrs.field(factory=dict)

    def __attrs_post_init__(self) -> None:
        for name, field in list(self._fields.items()):
            self._check_field(name, field)

    def _check_field(self, name: str, field: PropertyField) -> None:
        if field.extent != self.extent:
            raise ValidationError(
                f"Property {name} is laid out on grid {field.extent}, "
                f"expected {self.extent}"
            )

    @classmethod
    def from_keywords(
        cls, extent: GridExtent, names: typing.Iterable[str]
    ) -> "GridProperties":
        """
        Create registered properties with their default values.

        :param extent: Grid extent
        :param names: Property keyword names, e.g. ['PERMX', 'SATNUM']
        :return: New `GridProperties`
        """
        properties = cls(extent)
        for name in names:
            properties.add(name)
        return properties

    def add(
        self,
        name: str,
        kind: typing.Optional[FieldKind] = None,
        default: typing.Optional[Numeric] = None,
    ) -> PropertyField:
        """
        Create a property filled with a default value.

        Kind and default come from the keyword registry unless given.
        Adding a property that already exists returns the existing one.

        :param name: Property name
        :param kind: Scalar kind, required for unregistered names
        :param default: Initial cell value
        :return: The property
        """
        name = name.upper()
        if name in self._fields:
            return self._fields[name]

        keyword = get_property_keyword(name)
        if kind is None:
            if keyword is None:
                raise UnknownFieldError(
                    f"{name} is not a registered grid property, its kind must be given"
                )
            kind = keyword.kind
        if default is None:
            default = keyword.default if keyword is not None else 0

        field = PropertyField.full(name, self.extent, kind, default)
        self._fields[name] = field
        logger.debug(f"Created {kind.value} property {name} (default {default})")
        return field

    def set_field(self, field: PropertyField) -> None:
        """Insert or replace a property."""
        self._check_field(field.name, field)
        self._fields[field.name.upper()] = field

    def get_field(self, name: str) -> PropertyField:
        """
        Return a property by name.

        :raises UnknownFieldError: If no property has that name.
        """
        try:
            return self._fields[name.upper()]
        except KeyError:
            raise UnknownFieldError(f"Grid property {name.upper()} is not defined") from None

    __getitem__ = get_field

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.upper() in self._fields

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def names(self) -> typing.List[str]:
        return list(self._fields)
