"""Core data models for games, achievements and user progress."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def _ensure_aware_datetime(dt: datetime | None) -> datetime | None:
    """Ensure datetime carries a timezone (naive values are taken as UTC)."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class GameStatus(str, Enum):
    """Progress status of a game in a user's library."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Rarity(str, Enum):
    """Display rarity of an earned achievement, derived from its XP value.

    - COMMON: < 25 XP
    - UNCOMMON: 25-49 XP
    - RARE: 50-99 XP
    - ULTRA_RARE: 100+ XP
    """

    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    ULTRA_RARE = "Ultra Rare"


def xp_to_rarity(xp_value: int) -> Rarity:
    """Convert an achievement's XP value to a rarity tier."""
    if xp_value < 25:
        return Rarity.COMMON
    elif xp_value < 50:
        return Rarity.UNCOMMON
    elif xp_value < 100:
        return Rarity.RARE
    else:
        return Rarity.ULTRA_RARE


# =============================================================================
# Stored Rows
# =============================================================================


class Game(BaseModel):
    """A game in the shared catalogue (table `games`)."""

    id: str
    title: str
    platform: str | None = None
    genre: str | None = None
    publisher: str | None = None
    release_year: int | None = None


class UserGame(BaseModel):
    """A game in one user's library, with personal progress (table `user_games`)."""

    id: str
    user_id: str | None = None
    game_id: str | None = None
    hours_played: float = 0.0
    last_played: datetime | None = None
    status: GameStatus = GameStatus.NOT_STARTED

    # Embedded via `games:game_id(...)`
    game: Game | None = Field(default=None, alias="games")

    model_config = {"populate_by_name": True}

    @field_validator("hours_played", mode="before")
    @classmethod
    def none_as_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("last_played", mode="after")
    @classmethod
    def ensure_aware_last_played(cls, v: datetime | None) -> datetime | None:
        return _ensure_aware_datetime(v)


class Achievement(BaseModel):
    """An achievement belonging to a game (table `achievements`)."""

    id: str | None = None
    game_id: str | None = None
    name: str | None = None
    description: str | None = None
    xp_value: int = 10

    # Embedded via `games:game_id(...)`
    game: Game | None = Field(default=None, alias="games")

    model_config = {"populate_by_name": True}


class UserAchievement(BaseModel):
    """Presence of this row means the user earned the achievement (table `user_achievements`)."""

    id: str | None = None
    user_id: str | None = None
    achievement_id: str | None = None
    achieved_at: datetime | None = None

    # Embedded via `achievements:achievement_id(...)`
    achievement: Achievement | None = Field(default=None, alias="achievements")

    model_config = {"populate_by_name": True}

    @field_validator("achieved_at", mode="after")
    @classmethod
    def ensure_aware_achieved_at(cls, v: datetime | None) -> datetime | None:
        return _ensure_aware_datetime(v)


class Profile(BaseModel):
    """Public profile of a user (table `profiles`)."""

    id: str
    username: str
    created_at: datetime | None = None


# =============================================================================
# View Models
# =============================================================================


class AchievementCount(BaseModel):
    """Earned/total achievement counts for one game."""

    earned: int = 0
    total: int = 0

    @property
    def completion_percent(self) -> float:
        """Calculate completion percentage."""
        if self.total == 0:
            return 0.0
        return round(self.earned / self.total * 100, 1)

    @property
    def display_summary(self) -> str:
        """Human-readable summary for display. E.g., '32/42'"""
        return f"{self.earned}/{self.total}"


class GameCard(BaseModel):
    """A game as shown on the dashboard and in the library."""

    id: str = Field(description="Game ID")
    user_game_id: str
    title: str
    platforms: list[str] = Field(default_factory=lambda: ["Unknown"])
    genres: list[str] = Field(default_factory=lambda: ["Unknown"])
    hours_played: float = 0.0
    achievements: AchievementCount = Field(default_factory=AchievementCount)
    last_played: datetime | None = None
    status: GameStatus = GameStatus.NOT_STARTED


class AchievementCard(BaseModel):
    """An earned achievement as shown on the dashboard."""

    id: str = Field(description="UserAchievement ID")
    name: str
    description: str = "No description available"
    rarity: Rarity = Rarity.COMMON
    game: str
    game_id: str
    date: datetime | None = None


class AchievementProgress(BaseModel):
    """An achievement of one game together with the user's earned state."""

    id: str
    game_id: str
    name: str
    description: str | None = None
    xp_value: int = 10
    earned: bool = False
    achieved_at: datetime | None = None


class DashboardStats(BaseModel):
    """Headline numbers of a user's library."""

    total_games: int = 0
    total_playtime: float = 0.0
    total_achievements: int = 0
    active_streak: int = 0


class Dashboard(BaseModel):
    """Everything the dashboard shows, loaded in one go."""

    recent_games: list[GameCard] = Field(default_factory=list)
    recent_achievements: list[AchievementCard] = Field(default_factory=list)
    stats: DashboardStats = Field(default_factory=DashboardStats)


class ProfileSummary(BaseModel):
    """Profile details with the user's library stats."""

    profile: Profile
    stats: DashboardStats


class Notification(BaseModel):
    """A short user-facing message about the outcome of an action."""

    title: str
    description: str
    variant: str = "default"  # "default" or "destructive"

    @classmethod
    def error(cls, description: str) -> "Notification":
        return cls(title="Error", description=description, variant="destructive")


class SessionState(BaseModel):
    """Persisted login state."""

    logged_in: bool = False
    user_id: str | None = None
    email: str | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
