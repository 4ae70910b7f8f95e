"""streetbuilder - a tile-world robot that gathers rocks and builds streets.

A scripted mission controller driven one tick at a time by a Gymnasium host.
"""

__version__ = "0.1.0"

from streetbuilder.config import BuilderConfig
from streetbuilder.env import StreetWorldEnv

__all__ = ["BuilderConfig", "StreetWorldEnv", "__version__"]
