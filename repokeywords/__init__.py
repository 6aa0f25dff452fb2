"""Keyword extraction for markdown documents in git repositories, with a JSON server."""

__version__ = "0.1.0"

__all__ = ["__version__"]