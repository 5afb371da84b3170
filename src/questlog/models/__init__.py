"""Data models for Questlog."""

from questlog.models.forms import (
    AchievementForm,
    GameForm,
    LoginForm,
    PlaytimeForm,
    ProfileForm,
    SignupForm,
)
from questlog.models.game import (
    # Stored rows
    Achievement,
    Game,
    GameStatus,
    Profile,
    UserAchievement,
    UserGame,
    # View models
    AchievementCard,
    AchievementCount,
    AchievementProgress,
    Dashboard,
    DashboardStats,
    GameCard,
    Notification,
    ProfileSummary,
    Rarity,
    SessionState,
    xp_to_rarity,
)

__all__ = [
    # Stored rows
    "Achievement",
    "Game",
    "GameStatus",
    "Profile",
    "UserAchievement",
    "UserGame",
    # View models
    "AchievementCard",
    "AchievementCount",
    "AchievementProgress",
    "Dashboard",
    "DashboardStats",
    "GameCard",
    "Notification",
    "ProfileSummary",
    "Rarity",
    "SessionState",
    "xp_to_rarity",
    # Forms
    "AchievementForm",
    "GameForm",
    "LoginForm",
    "PlaytimeForm",
    "ProfileForm",
    "SignupForm",
]
