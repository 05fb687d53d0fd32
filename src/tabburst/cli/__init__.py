"""tabburst CLI."""

from tabburst import __version__

__all__ = ["__version__"]
