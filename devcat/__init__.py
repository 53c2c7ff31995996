"""devcat — a catalog browser for devfile registries."""

__version__ = "0.1.0"
