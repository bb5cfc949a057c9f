from importlib.metadata import (
    version as __version,
)

__version__ = __version("py-mapo")
