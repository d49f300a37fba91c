"""ked: a small modeless terminal text editor."""

from .constants import KED_VERSION as __version__

__all__ = ["__version__"]
