"""Feature modules and their public exports."""

from . import accounts, assets, demos, templates

__all__ = [
    "accounts",
    "assets",
    "demos",
    "templates",
]
