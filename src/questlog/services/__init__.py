"""Application services."""

from questlog.services.library import LibraryError, LibraryService

__all__ = ["LibraryError", "LibraryService"]
