"""FastAPI application for the Questlog web API."""

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from questlog.models import Notification
from questlog.services import LibraryError, LibraryService
from questlog.session import Session, SessionError
from questlog.store import StoreError
from questlog.web.routes import achievements, auth, dashboard, library, profile

logger = logging.getLogger(__name__)

# Load .env file - try current directory, then home directory
load_dotenv(Path.cwd() / ".env")
load_dotenv(Path.home() / ".questlog" / ".env")


def _notify(status_code: int, notification: Notification, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"notification": notification.model_dump(), **extra},
    )


def _validation_message(errors: list[dict]) -> str:
    """First validation problem as a single readable sentence."""
    if not errors:
        return "Please check the form."
    error = errors[0]
    if error.get("type") == "missing" or error.get("msg", "").endswith("is required"):
        return "Please fill in all fields"
    message = error.get("msg", "Invalid value")
    return message.removeprefix("Value error, ")


def create_app(library_service: LibraryService | None = None, session: Session | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Without a library service one is created from the environment on the
    first request that needs the store.
    """
    app = FastAPI(
        title="Questlog",
        description="Track your game library, playtime and achievements",
    )

    # Store shared objects in app state for access in routes
    app.state.library = library_service
    app.state.session = session or Session()

    @app.exception_handler(LibraryError)
    async def library_error(request: Request, exc: LibraryError):
        return _notify(exc.status_code, exc.notification)

    @app.exception_handler(SessionError)
    async def session_error(request: Request, exc: SessionError):
        return _notify(401, Notification.error(str(exc)))

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.error("Store unavailable: %s", exc)
        return _notify(503, Notification.error("The game library is not available right now."))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        return _notify(
            422,
            Notification.error(_validation_message(errors)),
            errors=errors,
        )

    # Include routers
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(library.router)
    app.include_router(achievements.router)
    app.include_router(profile.router)

    return app


app = create_app()
