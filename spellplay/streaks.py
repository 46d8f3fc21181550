"""Day-based practice streaks derived from the session log."""

from datetime import date, datetime, timedelta

from .models import PracticeSessionRecord


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def practice_days(records: list[PracticeSessionRecord]) -> set[date]:
    return {_as_date(r.date) for r in records}


def get_current_streak(records: list[PracticeSessionRecord], today) -> int:
    """Count consecutive calendar days with at least one session.

    The streak ends today, or yesterday if nothing has been logged today yet.
    """
    today = _as_date(today)
    days = practice_days(records)
    if not days:
        return 0

    yesterday = today - timedelta(days=1)
    if today in days:
        current = today
    elif yesterday in days:
        current = yesterday
    else:
        return 0

    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak


def calculate_new_streak(records: list[PracticeSessionRecord], today) -> int:
    """Streak value to store with a session being logged today."""
    today = _as_date(today)
    if not records:
        return 1

    last_day = max(_as_date(r.date) for r in records)
    current = get_current_streak(records, today)
    if last_day == today:
        return current
    if last_day == today - timedelta(days=1):
        return current + 1
    return 1
