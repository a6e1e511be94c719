import logging

from flask import jsonify, request

from . import app
from .analysis import compute_project_stats
from .auth import token_required
from .errors import ConstraintViolation
from .models import db, Project, Task
from .ownership import get_owned
from .validation import get_json_body, validate_project

logger = logging.getLogger(__name__)

# pending < in-progress < completed, then soonest due date, undated last
STATUS_ORDER = db.case(
    {"pending": 0, "in-progress": 1, "completed": 2}, value=Task.status, else_=3
)


def _name_taken(user, name, exclude_id=None):
    query = Project.query.filter(
        Project.author_id == user.id,
        Project.name == name,
        Project.archived.is_(False),
    )
    if exclude_id is not None:
        query = query.filter(Project.id != exclude_id)
    return query.first() is not None


def project_tasks(project):
    return (
        Task.query.filter_by(project_id=project.id)
        .order_by(STATUS_ORDER, Task.due_date.is_(None), Task.due_date.asc())
        .all()
    )


@app.route("/api/projects", methods=["GET"])
@token_required
def list_projects(user):
    query = Project.query.filter_by(author_id=user.id)
    if request.args.get("archived", "").lower() != "true":
        query = query.filter_by(archived=False)
    projects = query.order_by(Project.created_at.asc()).all()
    logger.debug(f"Fetched {len(projects)} projects for user {user.id}")
    return jsonify({"projects": [project.to_dict(include_tasks=True) for project in projects]}), 200


@app.route("/api/projects", methods=["POST"])
@token_required
def create_project(user):
    data = validate_project(get_json_body())
    if _name_taken(user, data["name"]):
        raise ConstraintViolation("project", "name")
    project = Project(
        name=data["name"],
        description=data.get("description"),
        color=data.get("color"),
        icon=data.get("icon"),
        author_id=user.id,
    )
    db.session.add(project)
    db.session.commit()
    logger.info(f"Project created: {project.name} for user {user.id}")
    return jsonify({"project": project.to_dict()}), 201


@app.route("/api/projects/<int:id>", methods=["GET"])
@token_required
def get_project(user, id):
    project = get_owned(Project, id, user)
    data = project.to_dict()
    data["tasks"] = [task.to_dict() for task in project_tasks(project)]
    return jsonify({"project": data}), 200


@app.route("/api/projects/<int:id>", methods=["PATCH"])
@token_required
def update_project(user, id):
    data = validate_project(get_json_body(), partial=True)
    project = get_owned(Project, id, user)
    name = data.get("name", project.name)
    archived = data.get("archived", project.archived)
    # Renaming or unarchiving may collide with another active project
    if not archived and (name != project.name or project.archived) and _name_taken(user, name, exclude_id=id):
        raise ConstraintViolation("project", "name")
    for field in ("name", "description", "color", "icon", "completed", "archived"):
        if field in data:
            setattr(project, field, data[field])
    db.session.commit()
    logger.info(f"Project {id} updated for user {user.id}")
    return jsonify({"project": project.to_dict()}), 200


@app.route("/api/projects/<int:id>", methods=["DELETE"])
@token_required
def delete_project(user, id):
    project = get_owned(Project, id, user)
    db.session.delete(project)
    db.session.commit()
    logger.info(f"Project {id} deleted by user {user.id}")
    return jsonify({"message": "Project deleted"}), 200


@app.route("/api/projects/<int:id>/stats", methods=["GET"])
@token_required
def get_project_stats(user, id):
    project = get_owned(Project, id, user)
    tasks = project_tasks(project)
    stats = compute_project_stats(tasks)
    logger.debug(f"Stats for project {id}: {stats}")
    return jsonify({
        "project": project.to_dict(),
        "tasks": [task.to_dict() for task in tasks],
        "stats": stats,
    }), 200
