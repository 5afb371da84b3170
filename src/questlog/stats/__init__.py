"""Statistics aggregation over library rows."""

from questlog.stats.aggregate import (
    achievement_cards,
    achievement_progress,
    active_streak,
    apply_toggle,
    count_by_game,
    dashboard_stats,
    earned_by_game,
    earned_total,
    filter_achievement_cards,
    filter_game_cards,
    game_cards,
    mark_earned,
    most_recent_play,
    total_hours,
)

__all__ = [
    "achievement_cards",
    "achievement_progress",
    "active_streak",
    "apply_toggle",
    "count_by_game",
    "dashboard_stats",
    "earned_by_game",
    "earned_total",
    "filter_achievement_cards",
    "filter_game_cards",
    "game_cards",
    "mark_earned",
    "most_recent_play",
    "total_hours",
]
