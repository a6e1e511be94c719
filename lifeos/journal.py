import logging

from flask import current_app, jsonify
from sqlalchemy.exc import IntegrityError

from . import app
from .auth import token_required
from .dates import journal_title, local_today
from .errors import ConstraintViolation
from .models import db, Habit, Journal
from .ownership import get_owned
from .validation import get_json_body, validate_journal

logger = logging.getLogger(__name__)


def day_timezone(tz=None):
    return tz or current_app.config.get("DAY_BOUNDARY_TIMEZONE", "UTC")


def find_journal(user, day):
    return Journal.query.filter_by(author_id=user.id, date=day).first()


def ensure_today_journal(user, now=None, tz=None):
    """Find or create ``user``'s journal for the calendar day containing ``now``.

    The day is resolved in ``tz`` (default: DAY_BOUNDARY_TIMEZONE). Losing an
    insert race to another request is not an error: the row it wrote is
    returned instead.
    """
    today = local_today(now, day_timezone(tz))
    journal = find_journal(user, today)
    if journal:
        return journal

    journal = Journal(author_id=user.id, date=today, title=journal_title(today), content="")
    db.session.add(journal)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        journal = find_journal(user, today)
        if journal is None:
            raise
        logger.debug(f"Journal for {today} created concurrently for user {user.id}")
        return journal
    logger.info(f"Created journal {journal.id} for {today} for user {user.id}")
    return journal


@app.route("/api/journal", methods=["GET"])
@token_required
def list_journals(user):
    entries = Journal.query.filter_by(author_id=user.id).order_by(Journal.date.desc()).all()
    logger.debug(f"Fetched {len(entries)} journal entries for user {user.id}")
    return jsonify({"user": user.to_dict(), "entries": [entry.to_dict() for entry in entries]}), 200


@app.route("/api/journal", methods=["POST"])
@token_required
def create_journal(user):
    from .habits import upsert_habit_log

    data = validate_journal(get_json_body())
    day = data.get("date") or local_today(tz=day_timezone())
    habits = [(get_owned(Habit, log["habitId"], user), log) for log in data.get("habitLogs", [])]

    if find_journal(user, day):
        raise ConstraintViolation("journal", "date")
    entry = Journal(
        author_id=user.id,
        date=day,
        title=data["title"],
        content=data.get("content") or "",
        mood=data.get("mood", "neutral"),
    )
    db.session.add(entry)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConstraintViolation("journal", "date")

    for habit, log in habits:
        upsert_habit_log(entry.id, habit.id, log.get("completed", False), log.get("notes"))
    logger.info(f"Journal {entry.id} created for {day} by user {user.id}")
    return jsonify({"entry": entry.to_dict(include_logs=True)}), 201


@app.route("/api/journal/<int:id>", methods=["GET"])
@token_required
def get_journal(user, id):
    entry = get_owned(Journal, id, user)
    return jsonify({"entry": entry.to_dict(include_logs=True)}), 200


@app.route("/api/journal/<int:id>", methods=["PATCH"])
@token_required
def update_journal(user, id):
    data = validate_journal(get_json_body(), partial=True)
    entry = get_owned(Journal, id, user)
    entry.title = data.get("title", entry.title)
    if "content" in data:
        entry.content = data["content"] or ""
    entry.mood = data.get("mood", entry.mood)
    db.session.commit()
    logger.info(f"Journal {id} updated for user {user.id}")
    return jsonify({"entry": entry.to_dict()}), 200


@app.route("/api/journal/<int:id>", methods=["DELETE"])
@token_required
def delete_journal(user, id):
    entry = get_owned(Journal, id, user)
    db.session.delete(entry)
    db.session.commit()
    logger.info(f"Journal {id} deleted by user {user.id}")
    return jsonify({"message": "Journal entry deleted"}), 200
