"""
*deckprops*

Region-scoped grid property editing for reservoir simulation input decks.
"""

from ._precision import *  # noqa
from .errors import *  # noqa
from .types import *  # noqa
from .config import *  # noqa
from .grids import *  # noqa
from .keywords import *  # noqa
from .records import *  # noqa
from .boxes import *  # noqa
from .operators import *  # noqa
from .processor import *  # noqa
from .decks import *  # noqa

__version__ = "0.1.0"
