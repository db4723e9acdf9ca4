"""Auto Voice Channel Status bot."""

from avcs.version import __version__

__all__ = ["__version__"]
