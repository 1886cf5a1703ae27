import attrs

from deckprops.types import IndexBase

__all__ = ["Config"]


@attrs.frozen
class Config:
    """Keyword processing configuration."""

    index_base: IndexBase = attrs.field(
        default=1, validator=attrs.validators.in_((0, 1))
    )
    """
    Index base of box items in records.

    Decks count cells from 1 (the default). Use 0 for records built from
    Python-side (0-based) indices.
    """
    reset_box_on_section: bool = True
    """
    Whether a section keyword (`GRID`, `EDIT`, `PROPS`, `REGIONS`, ...) resets
    the active region to the full grid.

    When False, only `ENDBOX` ends a box.
    """
    ignore_unknown_keywords: bool = True
    """
    Whether keywords that neither edit properties nor change the box are skipped.

    When False, such a keyword fails the pass.
    """
    log_interval: int = attrs.field(default=100, validator=attrs.validators.ge(1))
    """Interval (in records) at which to log processing progress."""
