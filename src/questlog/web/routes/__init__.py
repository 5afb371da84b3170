"""Route handlers for the web API."""

from questlog.web.routes import achievements, auth, dashboard, library, profile

__all__ = ["achievements", "auth", "dashboard", "library", "profile"]
