"""
sqlspine - dataclass entities persisted across five SQL backends.

Re-exports the public surface of :mod:`sqlspine.core`.
"""

__version__ = "0.1.0"

from sqlspine.core import *  # noqa: F403
from sqlspine.core import __all__  # noqa: F401
