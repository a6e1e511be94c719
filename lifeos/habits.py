import logging

from flask import current_app, jsonify
from sqlalchemy.exc import IntegrityError

from . import app
from .auth import token_required
from .dates import local_today
from .errors import ConstraintViolation
from .journal import day_timezone, ensure_today_journal, find_journal
from .models import db, Habit, HabitLog
from .ownership import get_owned
from .streak import compute_stats, load_daily_logs
from .validation import get_json_body, validate_habit, validate_habit_log

logger = logging.getLogger(__name__)


def find_habit_log(journal_id, habit_id):
    return HabitLog.query.filter_by(journal_id=journal_id, habit_id=habit_id).first()


def upsert_habit_log(journal_id, habit_id, completed, notes):
    """Insert or update the single log keyed by ``(journal_id, habit_id)``."""
    log = find_habit_log(journal_id, habit_id)
    if log:
        log.completed = completed
        log.notes = notes
        db.session.commit()
        return log

    log = HabitLog(journal_id=journal_id, habit_id=habit_id, completed=completed, notes=notes)
    db.session.add(log)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request inserted the row first; apply our values on top
        db.session.rollback()
        log = find_habit_log(journal_id, habit_id)
        if log is None:
            raise
        log.completed = completed
        log.notes = notes
        db.session.commit()
    return log


def log_habit_for_today(user, habit, completed, notes, now=None):
    journal = ensure_today_journal(user, now=now)
    log = upsert_habit_log(journal.id, habit.id, completed, notes)
    logger.info(f"Habit {habit.id} marked completed={completed} on journal {journal.id} by user {user.id}")
    return log


def _name_taken(user, name, exclude_id=None):
    query = Habit.query.filter(Habit.author_id == user.id, Habit.name == name)
    if exclude_id is not None:
        query = query.filter(Habit.id != exclude_id)
    return query.first() is not None


def _commit_habit():
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConstraintViolation("habit", "name")


@app.route("/api/habits", methods=["GET"])
@token_required
def list_habits(user):
    habits = Habit.query.filter_by(author_id=user.id).order_by(Habit.created_at.asc()).all()
    logger.debug(f"Fetched {len(habits)} habits for user {user.id}")
    return jsonify({"habits": [habit.to_dict() for habit in habits]}), 200


@app.route("/api/habits", methods=["POST"])
@token_required
def create_habit(user):
    data = validate_habit(get_json_body())
    if _name_taken(user, data["name"]):
        raise ConstraintViolation("habit", "name")
    habit = Habit(
        name=data["name"],
        description=data.get("description"),
        icon=data.get("icon"),
        color=data.get("color"),
        author_id=user.id,
    )
    db.session.add(habit)
    _commit_habit()
    logger.info(f"Habit created: {habit.name} for user {user.id}")
    return jsonify({"habit": habit.to_dict()}), 201


@app.route("/api/habits/<int:id>", methods=["GET"])
@token_required
def get_habit(user, id):
    habit = get_owned(Habit, id, user)
    return jsonify({"habit": habit.to_dict()}), 200


@app.route("/api/habits/<int:id>", methods=["PATCH"])
@token_required
def update_habit(user, id):
    data = validate_habit(get_json_body(), partial=True)
    habit = get_owned(Habit, id, user)
    if "name" in data and data["name"] != habit.name and _name_taken(user, data["name"], exclude_id=id):
        raise ConstraintViolation("habit", "name")
    for field in ("name", "description", "icon", "color", "active"):
        if field in data:
            setattr(habit, field, data[field])
    _commit_habit()
    logger.info(f"Habit {id} updated for user {user.id}")
    return jsonify({"habit": habit.to_dict()}), 200


@app.route("/api/habits/<int:id>", methods=["DELETE"])
@token_required
def delete_habit(user, id):
    habit = get_owned(Habit, id, user)
    logger.info(f"Deleting habit {id} for user {user.id}")
    db.session.delete(habit)
    db.session.commit()
    logger.info(f"Habit {id} deleted successfully by user {user.id}")
    return jsonify({"message": "Habit deleted"}), 200


@app.route("/api/habits/<int:id>/log", methods=["GET"])
@token_required
def get_today_log(user, id):
    habit = get_owned(Habit, id, user)
    journal = find_journal(user, local_today(tz=day_timezone()))
    log = None
    if journal:
        log = find_habit_log(journal.id, habit.id)
    return jsonify({
        "habit": habit.to_dict(),
        "todayEntry": {
            "id": journal.id,
            "hasHabitLog": log is not None,
            "completed": log.completed if log else False,
        } if journal else None,
    }), 200


@app.route("/api/habits/<int:id>/log", methods=["PATCH"])
@token_required
def update_today_log(user, id):
    data = validate_habit_log(get_json_body())
    habit = get_owned(Habit, id, user)
    log = log_habit_for_today(user, habit, data["completed"], data.get("notes"))
    return jsonify({"success": True, "habitLog": log.to_dict()}), 200


@app.route("/api/habits/<int:id>/stats", methods=["GET"])
@token_required
def get_habit_stats(user, id):
    habit = get_owned(Habit, id, user)
    today = local_today(tz=day_timezone())
    window = current_app.config.get("HABIT_STATS_WINDOW_DAYS", 30)
    daily_logs = load_daily_logs(user, habit, today, window)
    stats = compute_stats(daily_logs)
    logger.debug(f"Stats for habit {id}: {stats}")
    return jsonify({"habit": habit.to_dict(), "stats": stats, "dailyLogs": daily_logs}), 200
