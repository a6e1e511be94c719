"""Payload schemas for the JSON endpoints.

Each ``validate_*`` function returns a dict holding only the fields that were
sent, keyed the way the client sent them (so updates can tell "absent" from
"null"), or raises ValidationError with one issue per bad field.

Fields that may be omitted but never cleared default to ``None`` without
allowing it: pydantic does not validate defaults, so an explicit ``null`` is
still rejected.
"""
from datetime import date, datetime
from typing import Literal

import pydantic
from flask import request
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator

from .dates import to_naive_utc
from .errors import ValidationError
from .models import MOODS, TASK_PRIORITIES, TASK_STATUSES

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

Mood = Literal[MOODS]
TaskStatus = Literal[TASK_STATUSES]
TaskPriority = Literal[TASK_PRIORITIES]


def get_json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError([{"field": None, "message": "Request body must be a JSON object"}])
    return data


class HabitCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=50)
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, min_length=1, max_length=2)
    color: str | None = Field(None, pattern=COLOR_PATTERN)


class HabitUpdate(HabitCreate):
    name: str = Field(None, min_length=1, max_length=50)
    active: StrictBool = None


class HabitLogIn(BaseModel):
    completed: StrictBool
    notes: str | None = Field(None, max_length=300)


class JournalHabitLogIn(BaseModel):
    habit_id: StrictInt = Field(alias="habitId")
    completed: StrictBool = False
    notes: str | None = Field(None, max_length=300)


class JournalUpdate(BaseModel):
    title: str = Field(None, min_length=1)
    content: str | None = None
    mood: Mood = None


class JournalCreate(JournalUpdate):
    title: str = Field(min_length=1)
    day: date | None = Field(None, alias="date")
    habit_logs: list[JournalHabitLogIn] = Field(default_factory=list, alias="habitLogs")


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = Field(None, max_length=1000)
    color: str | None = Field(None, max_length=32)
    icon: str | None = Field(None, max_length=16)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class ProjectUpdate(ProjectCreate):
    name: str = Field(None, min_length=1)
    completed: StrictBool = None
    archived: StrictBool = None


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = Field(None, max_length=2000)
    project_id: StrictInt | None = Field(None, alias="projectId")
    priority: TaskPriority = None
    status: TaskStatus = None
    due_date: datetime | None = Field(None, alias="dueDate")

    @field_validator("due_date")
    @classmethod
    def store_as_utc(cls, value):
        return to_naive_utc(value) if value else value


class TaskUpdate(TaskCreate):
    title: str = Field(None, min_length=1)
    completed_at: datetime | None = Field(None, alias="completedAt")

    @field_validator("completed_at")
    @classmethod
    def completed_at_as_utc(cls, value):
        return to_naive_utc(value) if value else value


def issues_from(exc):
    issues = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        issues.append({"field": field or None, "message": error["msg"]})
    return issues


def _validate(schema, data):
    try:
        payload = schema.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(issues_from(e)) from e
    return payload.model_dump(by_alias=True, exclude_unset=True)


def validate_habit(data, partial=False):
    return _validate(HabitUpdate if partial else HabitCreate, data)


def validate_habit_log(data):
    return _validate(HabitLogIn, data)


def validate_journal(data, partial=False):
    return _validate(JournalUpdate if partial else JournalCreate, data)


def validate_project(data, partial=False):
    return _validate(ProjectUpdate if partial else ProjectCreate, data)


def validate_task(data, partial=False):
    return _validate(TaskUpdate if partial else TaskCreate, data)
