"""Library routes - browse, add and edit games, log playtime."""

from fastapi import APIRouter, Depends, Query

from questlog.models import GameCard, GameForm, Notification, PlaytimeForm
from questlog.services import LibraryService
from questlog.web.deps import current_user, get_library

router = APIRouter()


@router.get("/library", response_model=list[GameCard])
def list_library(
    search: str | None = Query(None, description="Search title, platform or genre"),
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """All games in the user's library."""
    return library.load_library(user_id, search=search)


@router.post("/games", status_code=201)
def add_game(
    form: GameForm,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """Create a game and add it to the library."""
    user_game = library.add_game(user_id, form)
    return {
        "user_game": user_game,
        "notification": Notification(
            title="Game added",
            description=f"{form.title} was successfully added to your library.",
        ),
    }


@router.put("/games/{game_id}")
def update_game(
    game_id: str,
    form: GameForm,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """Edit a game's details."""
    game = library.update_game(game_id, form)
    return {
        "game": game,
        "notification": Notification(
            title="Game updated",
            description=f"{form.title} was successfully updated.",
        ),
    }


@router.post("/progress/{user_game_id}")
def log_playtime(
    user_game_id: str,
    form: PlaytimeForm,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """Set hours played for a library entry."""
    user_game = library.log_playtime(user_game_id, form)
    return {
        "user_game": user_game,
        "notification": Notification(
            title="Progress updated",
            description=f"Playtime updated to {form.hours_played:g} hours.",
        ),
    }
