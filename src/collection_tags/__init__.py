"""
Collection Tags.

Keeps prefixed tags on library items in step with collection membership.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("collection-tags")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
