"""
*RESEQUIL*

Hydrostatic equilibration of black-oil reservoir models: initial phase pressures
and saturations from datum and fluid contact depths.
"""

from ._precision import *  # noqa
from .constants import *  # noqa
from .errors import *  # noqa
from .types import *  # noqa
from .config import *  # noqa
from .phases import *  # noqa
from .records import *  # noqa
from .regions import *  # noqa
from .density import *  # noqa
from .miscibility import *  # noqa
from .capillary_pressures import *  # noqa
from .properties import *  # noqa
from .inversion import *  # noqa
from .pressures import *  # noqa
from .saturations import *  # noqa
from .formulations import *  # noqa
from .equilibrate import *  # noqa
from .utils import *  # noqa
