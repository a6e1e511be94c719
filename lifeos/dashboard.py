import logging
from collections import Counter
from datetime import timedelta

from flask import current_app, jsonify

from . import app
from .auth import token_required
from .dates import format_day, local_today, utcnow
from .journal import day_timezone
from .models import Habit, Journal, Project, Task
from .streak import compute_stats, load_daily_logs

logger = logging.getLogger(__name__)

RECENT_ENTRIES = 10
RECENT_MOODS = 7
HEATMAP_DAYS = 365
DASHBOARD_LIMIT = 5
COMPLETED_WINDOW_DAYS = 30


def habit_summaries(user, today, window_days):
    habits = Habit.query.filter_by(author_id=user.id, active=True).order_by(Habit.created_at.asc()).all()
    summaries = []
    for habit in habits:
        daily_logs = load_daily_logs(user, habit, today, window_days)
        stats = compute_stats(daily_logs)
        summaries.append({
            "id": habit.id,
            "name": habit.name,
            "icon": habit.icon,
            "color": habit.color,
            "streak": stats["currentStreak"],
            "completionRate": stats["completionRate"],
            "streakData": daily_logs,
        })
    return summaries


def journal_summary(user, today):
    recent = (
        Journal.query.filter_by(author_id=user.id)
        .order_by(Journal.date.desc())
        .limit(RECENT_ENTRIES)
        .all()
    )
    year = (
        Journal.query.filter(
            Journal.author_id == user.id,
            Journal.date >= today - timedelta(days=HEATMAP_DAYS),
            Journal.date <= today,
        )
        .order_by(Journal.date.asc())
        .all()
    )
    today_entry = next((entry for entry in recent if entry.date == today), None)
    return {
        "totalEntries": len(year),
        "hasEntryToday": today_entry is not None,
        "todayEntry": today_entry.to_dict() if today_entry else None,
        "entries": [entry.to_dict() for entry in recent],
        "moodDistribution": dict(Counter(entry.mood for entry in recent)),
        "recentMoods": [entry.mood for entry in recent[:RECENT_MOODS]],
        "heatmap": [{"date": format_day(entry.date), "mood": entry.mood, "count": 1} for entry in year],
    }


def project_summary(user):
    projects = (
        Project.query.filter_by(author_id=user.id, archived=False)
        .order_by(Project.created_at.desc())
        .limit(DASHBOARD_LIMIT)
        .all()
    )
    listed = []
    for project in projects:
        data = project.to_dict()
        data["openTasks"] = Task.query.filter(Task.project_id == project.id, Task.status != "completed").count()
        listed.append(data)
    return {"list": listed, "total": len(listed)}


def task_summary(user, now):
    upcoming = (
        Task.query.filter(Task.author_id == user.id, Task.status != "completed", Task.due_date >= now)
        .order_by(Task.due_date.asc())
        .limit(DASHBOARD_LIMIT)
        .all()
    )
    recently_completed = (
        Task.query.filter(
            Task.author_id == user.id,
            Task.status == "completed",
            Task.completed_at >= now - timedelta(days=COMPLETED_WINDOW_DAYS),
        )
        .order_by(Task.completed_at.desc())
        .limit(DASHBOARD_LIMIT)
        .all()
    )
    return {
        "upcoming": [task.to_dict(include_project=True) for task in upcoming],
        "recentlyCompleted": [task.to_dict(include_project=True) for task in recently_completed],
    }


@app.route("/api/dashboard", methods=["GET"])
@token_required
def get_dashboard(user):
    """Everything the home screen shows, in one response."""
    today = local_today(tz=day_timezone())
    window = current_app.config.get("HABIT_STATS_WINDOW_DAYS", 30)
    habits = habit_summaries(user, today, window)
    logger.debug(f"Dashboard built for user {user.id} with {len(habits)} active habits")
    return jsonify({
        "habits": habits,
        "journal": journal_summary(user, today),
        "projects": project_summary(user),
        "tasks": task_summary(user, utcnow()),
    }), 200
