"""Folio: publish a directory of Markdown posts as a static site."""

__version__ = "0.1.0"
