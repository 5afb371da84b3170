"""Dashboard route - main overview page."""

from fastapi import APIRouter, Depends, Query

from questlog.models import Dashboard
from questlog.services import LibraryService
from questlog.web.deps import current_user, get_library

router = APIRouter()


@router.get("/", response_model=Dashboard)
def dashboard(
    recent_games: int = Query(2, ge=1, le=50, description="Number of recent games"),
    recent_achievements: int = Query(3, ge=1, le=50, description="Number of recent achievements"),
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """Recent games, recent achievements and headline stats."""
    return library.load_dashboard(
        user_id,
        recent_games=recent_games,
        recent_achievements=recent_achievements,
    )
