from .extent import *  # noqa
from .fields import *  # noqa
from .properties import *  # noqa
