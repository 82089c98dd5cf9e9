"""Centralized exceptions for the Folio application."""


class FolioError(Exception):
    """Base exception for all Folio errors."""
