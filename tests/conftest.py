"""Pytest fixtures for deckprops tests."""

from pathlib import Path

import pytest

from deckprops import GridExtent, GridProperties, KeywordProcessor

DECKS = Path(__file__).parent / "decks"


@pytest.fixture
def extent():
    """A small 4x3x2 grid."""
    return GridExtent(4, 3, 2)


@pytest.fixture
def properties(extent):
    """Float and integer properties on the small grid."""
    properties = GridProperties.from_keywords(
        extent, ["PERMX", "PERMY", "PORO", "NTG", "SATNUM", "FIPNUM"]
    )
    properties.get_field("PERMX").values[:] = 1.0
    properties.get_field("PORO").values[:] = 0.2
    return properties


@pytest.fixture
def processor(properties):
    """A processor over the small grid properties."""
    return KeywordProcessor(properties)


@pytest.fixture
def deck_path():
    """Return the path of a reference deck by name."""

    def _path(name):
        return DECKS / name

    return _path
