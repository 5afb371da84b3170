"""Request dependencies shared by the routes."""

from fastapi import Request

from questlog.services import LibraryService
from questlog.session import Session
from questlog.store import StoreClient


def get_session(request: Request) -> Session:
    return request.app.state.session


def get_library(request: Request) -> LibraryService:
    """The app's library service, connecting to the store on first use."""
    library = request.app.state.library
    if library is None:
        library = LibraryService(StoreClient())
        request.app.state.library = library
    return library


def current_user(request: Request) -> str:
    """Id of the logged-in user; raises SessionError when logged out."""
    return get_session(request).require_user()
