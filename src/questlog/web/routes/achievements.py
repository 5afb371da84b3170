"""Achievement routes - earned achievements, per-game progress and toggling."""

from fastapi import APIRouter, Depends, Query

from questlog import stats
from questlog.models import AchievementCard, AchievementForm, Notification
from questlog.services import LibraryService
from questlog.web.deps import current_user, get_library

router = APIRouter()


@router.get("/achievements", response_model=list[AchievementCard])
def achievements(
    search: str | None = Query(None, description="Search name, description or game"),
    limit: int | None = Query(None, ge=1, description="Only the N most recent"),
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """The user's earned achievements, newest first."""
    return library.load_achievements(user_id, search=search, limit=limit)


@router.get("/games/{game_id}/achievements")
def game_achievements(
    game_id: str,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """All achievements of a game with earned state."""
    progress = library.game_achievements(user_id, game_id)
    return {"achievements": progress, "summary": stats.earned_total(progress)}


@router.post("/games/{game_id}/achievements", status_code=201)
def add_achievement(
    game_id: str,
    form: AchievementForm,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    achievement = library.add_achievement(game_id, form)
    return {
        "achievement": achievement,
        "notification": Notification(
            title="Achievement added",
            description=f"{form.name} was successfully added.",
        ),
    }


@router.put("/achievements/{achievement_id}")
def update_achievement(
    achievement_id: str,
    form: AchievementForm,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    achievement = library.update_achievement(achievement_id, form)
    return {
        "achievement": achievement,
        "notification": Notification(
            title="Achievement updated",
            description=f"{form.name} was successfully updated.",
        ),
    }


@router.post("/games/{game_id}/achievements/{achievement_id}/toggle")
def toggle_achievement(
    game_id: str,
    achievement_id: str,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """Mark an achievement earned, or un-earn it if it already was."""
    progress = library.game_achievements(user_id, game_id)
    updated = library.toggle_achievement(user_id, progress, achievement_id)

    toggled = next(a for a in updated if a.id == achievement_id)
    if toggled.earned:
        notification = Notification(
            title="Achievement unlocked",
            description=f'"{toggled.name}" has been added to your achievements.',
        )
    else:
        notification = Notification(
            title="Achievement removed",
            description=f'"{toggled.name}" has been removed from your achievements.',
        )

    return {
        "achievements": updated,
        "summary": stats.earned_total(updated),
        "notification": notification,
    }
