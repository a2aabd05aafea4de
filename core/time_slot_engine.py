"""
CaptionGenie — Posting Time Suggestions

Fallback for when Gemini omits postingTimes. Suggestions come from:
  1. Static per-platform engagement hours (OPTIMAL_TIME_SLOTS)
  2. Day-of-week weights (weekday vs weekend audiences)

Output matches the model's own format: "Tuesday at 2:00 PM".
"""

from __future__ import annotations

from datetime import datetime, timedelta

from core.models import Platform

OPTIMAL_TIME_SLOTS = {
    Platform.INSTAGRAM: [11, 14, 17, 8],
    Platform.TWITTER:   [12, 8, 17, 21],
    Platform.LINKEDIN:  [10, 7, 12],
    Platform.FACEBOOK:  [13, 9, 16],
    Platform.TIKTOK:    [19, 21, 10, 7],
    Platform.BLOG:      [10, 14],
}
DEFAULT_SLOTS = [10, 14, 18]

# Day-of-week multipliers (Mon=0, Sun=6)
DAY_OF_WEEK_WEIGHTS = {
    Platform.TIKTOK:    {0: 0.8, 1: 0.9, 2: 1.0, 3: 1.0, 4: 0.9, 5: 1.1, 6: 1.1},
    Platform.INSTAGRAM: {0: 0.8, 1: 0.9, 2: 1.0, 3: 1.0, 4: 0.9, 5: 1.1, 6: 1.0},
    Platform.LINKEDIN:  {0: 1.0, 1: 1.1, 2: 1.1, 3: 1.0, 4: 0.8, 5: 0.4, 6: 0.3},
    Platform.TWITTER:   {0: 0.9, 1: 0.9, 2: 1.0, 3: 1.0, 4: 1.0, 5: 0.8, 6: 0.7},
    Platform.FACEBOOK:  {0: 0.9, 1: 1.0, 2: 1.1, 3: 1.0, 4: 1.0, 5: 0.8, 6: 0.8},
    Platform.BLOG:      {0: 1.1, 1: 1.1, 2: 1.0, 3: 1.0, 4: 0.8, 5: 0.6, 6: 0.7},
}

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def format_slot(weekday: int, hour: int) -> str:
    suffix = "AM" if hour < 12 else "PM"
    display = hour % 12 or 12
    return f"{DAY_NAMES[weekday]} at {display}:00 {suffix}"


def suggest_posting_times(
    platform: Platform | str,
    count: int = 3,
    now: datetime | None = None,
) -> list[str]:
    """
    Suggest `count` posting slots over the coming week, on distinct days.

    Days are ranked by the platform's day-of-week weight (ties go to the
    sooner day); each picked day gets the next hour from the platform's
    optimal hours, best hour first.
    """
    platform = Platform(platform)
    now = now or datetime.now()
    hours = OPTIMAL_TIME_SLOTS.get(platform, DEFAULT_SLOTS)
    weights = DAY_OF_WEEK_WEIGHTS.get(platform, {})

    upcoming = [(now + timedelta(days=offset)).weekday() for offset in range(1, 8)]
    ranked = sorted(
        enumerate(upcoming),
        key=lambda pair: (-weights.get(pair[1], 1.0), pair[0]),
    )

    picks = sorted(ranked[: max(0, min(count, 7))], key=lambda pair: pair[0])
    return [format_slot(day, hours[i % len(hours)]) for i, (_, day) in enumerate(picks)]
