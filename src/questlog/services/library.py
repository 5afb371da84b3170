"""Library service - loads each view's rows from the store and reduces them.

Every operation either completes or raises LibraryError carrying a single
user-facing notification. Partial results are never returned, and nothing
is retried.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import BaseModel

from questlog import stats
from questlog.models import (
    Achievement,
    AchievementCard,
    AchievementForm,
    AchievementProgress,
    Dashboard,
    DashboardStats,
    Game,
    GameCard,
    GameForm,
    GameStatus,
    Notification,
    PlaytimeForm,
    Profile,
    ProfileForm,
    ProfileSummary,
    UserAchievement,
    UserGame,
)
from questlog.store import StoreClient, StoreError

logger = logging.getLogger(__name__)

RowModel = TypeVar("RowModel", bound=BaseModel)

# Select lists with embedded relations
LIBRARY_SELECT = "id, hours_played, last_played, status, games:game_id(id, title, platform, genre)"
EARNED_SELECT = "id, achievement_id, achievements:achievement_id(game_id)"
EARNED_CARD_SELECT = (
    "id, achieved_at, "
    "achievements:achievement_id(id, name, description, xp_value, games:game_id(id, title))"
)
STATS_SELECT = "id, hours_played, last_played"

DEFAULT_RECENT_GAMES = 2
DEFAULT_RECENT_ACHIEVEMENTS = 3


class LibraryError(Exception):
    """A library operation failed; `notification` says what to show the user."""

    def __init__(self, notification: Notification, status_code: int = 502):
        super().__init__(notification.description)
        self.notification = notification
        self.status_code = status_code


@contextmanager
def _aborts_with(description: str):
    """Turn any store failure inside the block into one LibraryError."""
    try:
        yield
    except StoreError as e:
        logger.exception("%s (%s)", description, e)
        raise LibraryError(Notification.error(description)) from e


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


class LibraryService:
    """Fetch-and-reduce operations for a user's game library."""

    def __init__(self, store: StoreClient):
        self.store = store

    # =========================================================================
    # Shared queries
    # =========================================================================

    def _achievement_totals(self, game_ids: list[str]) -> dict[str, int]:
        if not game_ids:
            return {}
        result = self.store.table("achievements").select("id, game_id").in_("game_id", game_ids).execute()
        rows = [Achievement.model_validate(row) for row in result.data or []]
        return stats.count_by_game(rows)

    def _earned_by_game(self, user_id: str) -> dict[str, int]:
        result = self.store.table("user_achievements").select(EARNED_SELECT).eq("user_id", user_id).execute()
        rows = [UserAchievement.model_validate(row) for row in result.data or []]
        return stats.earned_by_game(rows)

    def _library_rows(self, user_id: str, limit: int | None = None) -> list[UserGame]:
        query = (
            self.store.table("user_games")
            .select(LIBRARY_SELECT)
            .eq("user_id", user_id)
            .order("last_played", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        result = query.execute()
        return [UserGame.model_validate(row) for row in result.data or []]

    def _earned_cards(self, user_id: str, limit: int | None = None) -> list[AchievementCard]:
        query = (
            self.store.table("user_achievements")
            .select(EARNED_CARD_SELECT)
            .eq("user_id", user_id)
            .order("achieved_at", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        result = query.execute()
        rows = [UserAchievement.model_validate(row) for row in result.data or []]
        return stats.achievement_cards(rows)

    def _stats(self, user_id: str, now: datetime | None = None) -> DashboardStats:
        result = self.store.table("user_games").select(STATS_SELECT).eq("user_id", user_id).execute()
        user_games = [UserGame.model_validate(row) for row in result.data or []]

        earned = (
            self.store.table("user_achievements")
            .select("id", count="exact", head=True)
            .eq("user_id", user_id)
            .execute()
        )
        return stats.dashboard_stats(user_games, earned.count, now=now)

    def _cards(self, user_id: str, user_games: list[UserGame]) -> list[GameCard]:
        game_ids = [ug.game.id for ug in user_games if ug.game is not None]
        totals = self._achievement_totals(game_ids)
        earned = self._earned_by_game(user_id)
        return stats.game_cards(user_games, totals, earned)

    # =========================================================================
    # Views
    # =========================================================================

    def load_dashboard(
        self,
        user_id: str,
        recent_games: int = DEFAULT_RECENT_GAMES,
        recent_achievements: int = DEFAULT_RECENT_ACHIEVEMENTS,
        now: datetime | None = None,
    ) -> Dashboard:
        """Recent games, recent achievements and headline stats."""
        with _aborts_with("Failed to load dashboard data."):
            recent = self._library_rows(user_id, limit=recent_games)
            cards = self._cards(user_id, recent)
            achievements = self._earned_cards(user_id, limit=recent_achievements)
            summary = self._stats(user_id, now=now)

        return Dashboard(recent_games=cards, recent_achievements=achievements, stats=summary)

    def load_library(self, user_id: str, search: str | None = None) -> list[GameCard]:
        """All of the user's games, most recently played first."""
        with _aborts_with("Failed to load your library."):
            cards = self._cards(user_id, self._library_rows(user_id))
        return stats.filter_game_cards(cards, search)

    def load_achievements(
        self, user_id: str, search: str | None = None, limit: int | None = None
    ) -> list[AchievementCard]:
        """The user's earned achievements, newest first."""
        with _aborts_with("Failed to load achievements."):
            cards = self._earned_cards(user_id, limit=limit)
        return stats.filter_achievement_cards(cards, search)

    def game_achievements(self, user_id: str, game_id: str) -> list[AchievementProgress]:
        """All achievements of one game with the user's earned state."""
        with _aborts_with("Failed to load achievements."):
            result = self.store.table("achievements").select("*").eq("game_id", game_id).execute()
            achievements = [Achievement.model_validate(row) for row in result.data or []]

            earned: list[UserAchievement] = []
            ids = [a.id for a in achievements if a.id]
            if ids:
                result = (
                    self.store.table("user_achievements")
                    .select("achievement_id, achieved_at")
                    .eq("user_id", user_id)
                    .in_("achievement_id", ids)
                    .execute()
                )
                earned = [UserAchievement.model_validate(row) for row in result.data or []]

        return stats.mark_earned(achievements, earned)

    def get_profile(self, user_id: str, now: datetime | None = None) -> ProfileSummary:
        """Profile details with library stats."""
        with _aborts_with("Failed to load your profile."):
            result = self.store.table("profiles").select("*").eq("id", user_id).single().execute()
            profile = Profile.model_validate(result.data)
            summary = self._stats(user_id, now=now)
        return ProfileSummary(profile=profile, stats=summary)

    # =========================================================================
    # Writes
    # =========================================================================

    def add_game(self, user_id: str, form: GameForm) -> UserGame:
        """Create a game and add it to the user's library.

        Two sequential inserts; if the second fails the game row stays behind.
        """
        with _aborts_with("There was a problem saving the game."):
            result = self.store.table("games").insert(form.model_dump()).select().single().execute()
            game = Game.model_validate(result.data)

            result = (
                self.store.table("user_games")
                .insert(
                    {
                        "user_id": user_id,
                        "game_id": game.id,
                        "status": GameStatus.NOT_STARTED.value,
                        "hours_played": 0,
                    }
                )
                .select()
                .single()
                .execute()
            )
            user_game = UserGame.model_validate(result.data)

        logger.info("Added %s to library of %s", game.title, user_id)
        user_game.game = game
        return user_game

    def update_game(self, game_id: str, form: GameForm) -> Game:
        with _aborts_with("There was a problem saving the game."):
            result = self.store.table("games").update(form.model_dump()).eq("id", game_id).execute()
        return self._first(result.data, Game, "Game not found.")

    def add_achievement(self, game_id: str, form: AchievementForm) -> Achievement:
        with _aborts_with("There was a problem saving the achievement."):
            row = {"game_id": game_id, **form.model_dump()}
            result = self.store.table("achievements").insert(row).select().single().execute()
        return Achievement.model_validate(result.data)

    def update_achievement(self, achievement_id: str, form: AchievementForm) -> Achievement:
        with _aborts_with("There was a problem saving the achievement."):
            result = (
                self.store.table("achievements")
                .update(form.model_dump())
                .eq("id", achievement_id)
                .execute()
            )
        return self._first(result.data, Achievement, "Achievement not found.")

    def log_playtime(self, user_game_id: str, form: PlaytimeForm, now: datetime | None = None) -> UserGame:
        """Set hours played and stamp last_played with the current time."""
        with _aborts_with("There was a problem updating your progress."):
            result = (
                self.store.table("user_games")
                .update({"hours_played": form.hours_played, "last_played": _now(now).isoformat()})
                .eq("id", user_game_id)
                .execute()
            )
        return self._first(result.data, UserGame, "Game not found in your library.")

    def toggle_achievement(
        self,
        user_id: str,
        progress: list[AchievementProgress],
        achievement_id: str,
        now: datetime | None = None,
    ) -> list[AchievementProgress]:
        """Flip one achievement between earned and unearned.

        The returned list reflects the flip without refetching; it assumes
        the write went through.
        """
        current = next((a for a in progress if a.id == achievement_id), None)
        if current is None:
            raise LibraryError(Notification.error("Achievement not found."), status_code=404)

        with _aborts_with("There was a problem updating the achievement."):
            if current.earned:
                (
                    self.store.table("user_achievements")
                    .delete()
                    .eq("user_id", user_id)
                    .eq("achievement_id", achievement_id)
                    .execute()
                )
                achieved_at = None
            else:
                achieved_at = _now(now)
                self.store.table("user_achievements").insert(
                    {
                        "user_id": user_id,
                        "achievement_id": achievement_id,
                        "achieved_at": achieved_at.isoformat(),
                    }
                ).execute()

        logger.info(
            "%s achievement %s for %s",
            "Removed" if current.earned else "Unlocked",
            achievement_id,
            user_id,
        )
        return stats.apply_toggle(progress, achievement_id, not current.earned, achieved_at)

    def update_profile(self, user_id: str, form: ProfileForm) -> Profile:
        with _aborts_with("There was a problem updating your profile."):
            result = self.store.table("profiles").update(form.model_dump()).eq("id", user_id).execute()
        return self._first(result.data, Profile, "Profile not found.")

    @staticmethod
    def _first(rows: list[dict] | None, model: type[RowModel], missing: str) -> RowModel:
        if not rows:
            raise LibraryError(Notification.error(missing), status_code=404)
        return model.model_validate(rows[0])
