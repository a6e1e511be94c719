from flask_sqlalchemy import SQLAlchemy

from .dates import format_day, isoformat, utcnow

db = SQLAlchemy()

TASK_STATUSES = ("pending", "in-progress", "completed")
TASK_PRIORITIES = ("low", "medium", "high")
MOODS = ("very-bad", "bad", "neutral", "good", "very-good")


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class User(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    external_id = db.Column(db.String(255), unique=True, nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    first_name = db.Column(db.String(120))
    last_name = db.Column(db.String(120))
    profile_image = db.Column(db.String(512))
    habits = db.relationship("Habit", backref="author", lazy=True, cascade="all, delete-orphan")
    journals = db.relationship("Journal", backref="author", lazy=True, cascade="all, delete-orphan")
    projects = db.relationship("Project", backref="author", lazy=True, cascade="all, delete-orphan")
    tasks = db.relationship("Task", backref="author", lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "externalId": self.external_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profileImage": self.profile_image,
            "createdAt": isoformat(self.created_at),
        }


class Habit(TimestampMixin, db.Model):
    __table_args__ = (db.UniqueConstraint("author_id", "name", name="uq_habit_author_name"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text)
    icon = db.Column(db.String(8))
    color = db.Column(db.String(7))
    active = db.Column(db.Boolean, nullable=False, default=True)
    author_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    logs = db.relationship("HabitLog", backref="habit", lazy=True, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
            "active": self.active,
            "authorId": self.author_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class Journal(TimestampMixin, db.Model):
    # One entry per user per calendar day
    __table_args__ = (db.UniqueConstraint("author_id", "date", name="uq_journal_author_date"),)

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False, default="")
    mood = db.Column(db.String(20), nullable=False, default="neutral")
    author_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    habit_logs = db.relationship("HabitLog", backref="journal", lazy=True, cascade="all, delete-orphan")

    def to_dict(self, include_logs=False):
        data = {
            "id": self.id,
            "date": format_day(self.date),
            "title": self.title,
            "content": self.content,
            "mood": self.mood,
            "authorId": self.author_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_logs:
            data["habitLogs"] = [log.to_dict() for log in self.habit_logs]
        return data


class HabitLog(TimestampMixin, db.Model):
    __table_args__ = (db.UniqueConstraint("journal_id", "habit_id", name="uq_habit_log_journal_habit"),)

    id = db.Column(db.Integer, primary_key=True)
    completed = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.String(300))
    journal_id = db.Column(db.Integer, db.ForeignKey("journal.id", ondelete="CASCADE"), nullable=False)
    habit_id = db.Column(db.Integer, db.ForeignKey("habit.id", ondelete="CASCADE"), nullable=False, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "completed": self.completed,
            "notes": self.notes,
            "journalId": self.journal_id,
            "habitId": self.habit_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class Project(TimestampMixin, db.Model):
    # Name uniqueness only holds among non-archived projects, see projects.py
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    color = db.Column(db.String(32))
    icon = db.Column(db.String(16))
    completed = db.Column(db.Boolean, nullable=False, default=False)
    archived = db.Column(db.Boolean, nullable=False, default=False)
    author_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    tasks = db.relationship(
        "Task", backref="project", lazy=True, cascade="all, delete-orphan", order_by="Task.created_at"
    )

    def to_dict(self, include_tasks=False):
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "completed": self.completed,
            "archived": self.archived,
            "authorId": self.author_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_tasks:
            data["tasks"] = [task.to_dict() for task in self.tasks]
        return data


class Task(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="pending")
    priority = db.Column(db.String(10), nullable=False, default="medium")
    due_date = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    author_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    project_id = db.Column(db.Integer, db.ForeignKey("project.id", ondelete="CASCADE"), nullable=True, index=True)

    def to_dict(self, include_project=False):
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "dueDate": isoformat(self.due_date),
            "completedAt": isoformat(self.completed_at),
            "projectId": self.project_id,
            "authorId": self.author_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if include_project:
            project = self.project
            data["project"] = {
                "id": project.id,
                "name": project.name,
                "color": project.color,
                "icon": project.icon,
            } if project else None
        return data
