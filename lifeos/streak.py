import logging
from datetime import timedelta

from .analysis import round_percent
from .dates import format_day
from .models import db, HabitLog, Journal

logger = logging.getLogger(__name__)


def _completed(entry):
    if isinstance(entry, bool):
        return entry
    if isinstance(entry, dict):
        return bool(entry.get("completed"))
    return bool(entry.completed)


def compute_stats(daily_logs):
    """Reduce an oldest-first run of daily entries to streak and completion numbers.

    Every entry is one day that has a journal; days without a journal are
    simply absent. The sequence is trusted to be sorted already.
    """
    flags = [_completed(entry) for entry in daily_logs]

    current_streak = 0
    for completed in reversed(flags):
        if not completed:
            break
        current_streak += 1

    longest_streak = 0
    run = 0
    completed_days = 0
    for completed in flags:
        if completed:
            run += 1
            completed_days += 1
            longest_streak = max(longest_streak, run)
        else:
            run = 0

    total_days = len(flags)
    return {
        "currentStreak": current_streak,
        "longestStreak": longest_streak,
        "completionRate": round_percent(completed_days, total_days),
        "totalDays": total_days,
        "completedDays": completed_days,
    }


def load_daily_logs(user, habit, today, window_days=30):
    """One ``{date, completed, notes}`` row per journal day in the trailing window, oldest first."""
    start = today - timedelta(days=window_days - 1)
    rows = (
        db.session.query(Journal, HabitLog)
        .outerjoin(
            HabitLog,
            db.and_(HabitLog.journal_id == Journal.id, HabitLog.habit_id == habit.id),
        )
        .filter(Journal.author_id == user.id, Journal.date >= start, Journal.date <= today)
        .order_by(Journal.date.asc())
        .all()
    )
    logger.debug(f"Loaded {len(rows)} journal days for habit {habit.id} since {start}")
    return [
        {
            "date": format_day(journal.date),
            "completed": log.completed if log else False,
            "notes": log.notes if log else None,
        }
        for journal, log in rows
    ]
