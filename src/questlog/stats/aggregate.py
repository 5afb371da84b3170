"""Dashboard and library statistics computed from fetched rows.

Every function here is pure: it only looks at the rows it is given. Missing
relations (no last_played, no achievements, a row without its embedded
parent) count as zero instead of raising.
"""

import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable

from questlog.models import (
    Achievement,
    AchievementCard,
    AchievementCount,
    AchievementProgress,
    DashboardStats,
    GameCard,
    UserAchievement,
    UserGame,
    xp_to_rarity,
)

STREAK_WINDOW_DAYS = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def total_hours(user_games: Iterable[UserGame]) -> float:
    """Sum of hours played across library entries (0 for an empty library)."""
    return sum((ug.hours_played or 0.0 for ug in user_games), 0.0)


def count_by_game(achievements: Iterable[Achievement]) -> dict[str, int]:
    """Number of achievements per game_id."""
    return dict(Counter(a.game_id for a in achievements if a.game_id))


def earned_by_game(user_achievements: Iterable[UserAchievement]) -> dict[str, int]:
    """Number of earned achievements per game_id.

    Rows must embed their achievement (at least its game_id); rows that
    don't are skipped.
    """
    counts: Counter[str] = Counter()
    for ua in user_achievements:
        if ua.achievement is not None and ua.achievement.game_id:
            counts[ua.achievement.game_id] += 1
    return dict(counts)


def achievement_progress(
    game_ids: Iterable[str],
    totals: dict[str, int],
    earned: dict[str, int],
) -> dict[str, AchievementCount]:
    """Left-join both groupings onto the game list, defaulting to 0/0."""
    return {
        game_id: AchievementCount(
            earned=earned.get(game_id, 0),
            total=totals.get(game_id, 0),
        )
        for game_id in game_ids
    }


def most_recent_play(user_games: Iterable[UserGame]) -> datetime | None:
    """Latest last_played among library entries, or None if never played."""
    played = [ug.last_played for ug in user_games if ug.last_played is not None]
    return max(played, default=None)


def active_streak(last_played: datetime | None, now: datetime | None = None) -> int:
    """1 if the last play falls within one (ceiling) day of now, else 0.

    Exactly 24 hours still counts; anything beyond rounds up to 2 days.
    """
    if last_played is None:
        return 0
    now = _as_aware(now or _utcnow())
    elapsed = abs(now - _as_aware(last_played))
    days = math.ceil(elapsed / timedelta(days=1))
    return 1 if days <= STREAK_WINDOW_DAYS else 0


def dashboard_stats(
    user_games: list[UserGame],
    earned_count: int | None,
    now: datetime | None = None,
) -> DashboardStats:
    """Headline stats for a library."""
    return DashboardStats(
        total_games=len(user_games),
        total_playtime=total_hours(user_games),
        total_achievements=earned_count or 0,
        active_streak=active_streak(most_recent_play(user_games), now=now),
    )


def game_cards(
    user_games: Iterable[UserGame],
    totals: dict[str, int],
    earned: dict[str, int],
) -> list[GameCard]:
    """Build game cards from library entries with embedded games.

    Entries whose game could not be embedded are dropped.
    """
    entries = [ug for ug in user_games if ug.game is not None]
    progress = achievement_progress((ug.game.id for ug in entries), totals, earned)

    cards = []
    for ug in entries:
        game = ug.game
        cards.append(
            GameCard(
                id=game.id,
                user_game_id=ug.id,
                title=game.title,
                platforms=[game.platform] if game.platform else ["Unknown"],
                genres=[game.genre] if game.genre else ["Unknown"],
                hours_played=ug.hours_played,
                achievements=progress[game.id],
                last_played=ug.last_played,
                status=ug.status,
            )
        )
    return cards


def achievement_cards(user_achievements: Iterable[UserAchievement]) -> list[AchievementCard]:
    """Build cards for earned achievements, keeping the given order.

    Rows need the achievement and its game embedded; others are dropped.
    """
    cards = []
    for ua in user_achievements:
        achievement = ua.achievement
        if achievement is None or achievement.game is None:
            continue
        cards.append(
            AchievementCard(
                id=ua.id or achievement.id or "",
                name=achievement.name or "",
                description=achievement.description or "No description available",
                rarity=xp_to_rarity(achievement.xp_value),
                game=achievement.game.title,
                game_id=achievement.game.id,
                date=ua.achieved_at,
            )
        )
    return cards


def mark_earned(
    achievements: Iterable[Achievement],
    user_achievements: Iterable[UserAchievement],
) -> list[AchievementProgress]:
    """Pair each achievement with whether (and when) the user earned it."""
    earned_at = {ua.achievement_id: ua.achieved_at for ua in user_achievements if ua.achievement_id}
    return [
        AchievementProgress(
            id=a.id,
            game_id=a.game_id or "",
            name=a.name or "",
            description=a.description,
            xp_value=a.xp_value,
            earned=a.id in earned_at,
            achieved_at=earned_at.get(a.id),
        )
        for a in achievements
        if a.id
    ]


def apply_toggle(
    progress: Iterable[AchievementProgress],
    achievement_id: str,
    earned: bool,
    achieved_at: datetime | None = None,
) -> list[AchievementProgress]:
    """Return a copy of the list with one achievement's earned state set."""
    updated = []
    for item in progress:
        if item.id == achievement_id:
            item = item.model_copy(
                update={"earned": earned, "achieved_at": achieved_at if earned else None}
            )
        updated.append(item)
    return updated


def earned_total(progress: Iterable[AchievementProgress]) -> AchievementCount:
    """Earned/total counts over an achievement list."""
    items = list(progress)
    return AchievementCount(earned=sum(1 for a in items if a.earned), total=len(items))


def filter_game_cards(cards: Iterable[GameCard], term: str | None) -> list[GameCard]:
    """Case-insensitive search over title, platforms and genres."""
    cards = list(cards)
    if not term:
        return cards
    needle = term.lower()
    return [
        c
        for c in cards
        if needle in c.title.lower()
        or any(needle in p.lower() for p in c.platforms)
        or any(needle in g.lower() for g in c.genres)
    ]


def filter_achievement_cards(cards: Iterable[AchievementCard], term: str | None) -> list[AchievementCard]:
    """Case-insensitive search over name, description and game title."""
    cards = list(cards)
    if not term:
        return cards
    needle = term.lower()
    return [
        c
        for c in cards
        if needle in c.name.lower()
        or needle in c.description.lower()
        or needle in c.game.lower()
    ]
