import logging

from flask import jsonify, request

from . import app
from .auth import token_required
from .dates import utcnow
from .errors import ValidationError
from .models import db, Project, Task, TASK_PRIORITIES, TASK_STATUSES
from .ownership import get_owned
from .projects import STATUS_ORDER
from .validation import get_json_body, validate_task

logger = logging.getLogger(__name__)

PRIORITY_ORDER = db.case({"high": 0, "medium": 1, "low": 2}, value=Task.priority, else_=3)


def completed_at_for(task, new_status, changes):
    """Stamp the completion time on entering ``completed``, clear it on leaving."""
    if new_status == "completed" and task.status != "completed":
        return utcnow()
    if new_status != "completed" and task.status == "completed":
        return None
    return changes.get("completedAt", task.completed_at)


@app.route("/api/tasks", methods=["GET"])
@token_required
def list_tasks(user):
    query = Task.query.filter_by(author_id=user.id)
    issues = []
    project_id = request.args.get("projectId")
    if project_id:
        if not project_id.isdigit():
            issues.append({"field": "projectId", "message": "projectId must be an integer"})
        else:
            query = query.filter_by(project_id=int(project_id))
    status = request.args.get("status")
    if status:
        if status not in TASK_STATUSES:
            issues.append({"field": "status", "message": f"status must be one of: {', '.join(TASK_STATUSES)}"})
        query = query.filter_by(status=status)
    priority = request.args.get("priority")
    if priority:
        if priority not in TASK_PRIORITIES:
            issues.append({"field": "priority", "message": f"priority must be one of: {', '.join(TASK_PRIORITIES)}"})
        query = query.filter_by(priority=priority)
    if issues:
        raise ValidationError(issues)

    tasks = query.order_by(STATUS_ORDER, Task.due_date.is_(None), Task.due_date.asc(), PRIORITY_ORDER).all()
    logger.debug(f"Fetched {len(tasks)} tasks for user {user.id}")
    return jsonify({"tasks": [task.to_dict(include_project=True) for task in tasks]}), 200


@app.route("/api/tasks", methods=["POST"])
@token_required
def create_task(user):
    data = validate_task(get_json_body())
    project_id = data.get("projectId")
    if project_id is not None:
        get_owned(Project, project_id, user)
    status = data.get("status", "pending")
    task = Task(
        title=data["title"],
        description=data.get("description"),
        project_id=project_id,
        priority=data.get("priority", "medium"),
        status=status,
        due_date=data.get("dueDate"),
        completed_at=utcnow() if status == "completed" else None,
        author_id=user.id,
    )
    db.session.add(task)
    db.session.commit()
    logger.info(f"Task {task.id} created for user {user.id}")
    return jsonify({"task": task.to_dict(include_project=True)}), 201


@app.route("/api/tasks/<int:id>", methods=["GET"])
@token_required
def get_task(user, id):
    task = get_owned(Task, id, user)
    return jsonify({"task": task.to_dict(include_project=True)}), 200


@app.route("/api/tasks/<int:id>", methods=["PATCH"])
@token_required
def update_task(user, id):
    data = validate_task(get_json_body(), partial=True)
    task = get_owned(Task, id, user)
    if "projectId" in data and data["projectId"] != task.project_id and data["projectId"] is not None:
        get_owned(Project, data["projectId"], user)

    status = data.get("status", task.status)
    task.completed_at = completed_at_for(task, status, data)
    task.status = status
    task.title = data.get("title", task.title)
    for field, column in (("description", "description"), ("projectId", "project_id"),
                          ("priority", "priority"), ("dueDate", "due_date")):
        if field in data:
            setattr(task, column, data[field])
    db.session.commit()
    logger.info(f"Task {id} updated for user {user.id}")
    return jsonify({"task": task.to_dict(include_project=True)}), 200


@app.route("/api/tasks/<int:id>", methods=["DELETE"])
@token_required
def delete_task(user, id):
    task = get_owned(Task, id, user)
    db.session.delete(task)
    db.session.commit()
    logger.info(f"Task {id} deleted by user {user.id}")
    return jsonify({"message": "Task deleted"}), 200
