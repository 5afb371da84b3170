"""Profile routes."""

from fastapi import APIRouter, Depends

from questlog.models import Notification, ProfileForm, ProfileSummary
from questlog.services import LibraryService
from questlog.web.deps import current_user, get_library

router = APIRouter(prefix="/profile")


@router.get("", response_model=ProfileSummary)
def profile(
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    """Profile details with library stats."""
    return library.get_profile(user_id)


@router.put("")
def update_profile(
    form: ProfileForm,
    user_id: str = Depends(current_user),
    library: LibraryService = Depends(get_library),
):
    profile = library.update_profile(user_id, form)
    return {
        "profile": profile,
        "notification": Notification(
            title="Profile updated",
            description="Your profile has been updated successfully.",
        ),
    }
