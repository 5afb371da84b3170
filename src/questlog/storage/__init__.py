"""Local storage for client-side state."""

from questlog.storage.local import Storage

__all__ = ["Storage"]
