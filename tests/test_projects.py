from datetime import datetime, timedelta

from lifeos.dates import utcnow
from lifeos.models import db, Project, Task


def make_project(user, name="Website", **fields):
    project = Project(name=name, author_id=user.id, **fields)
    db.session.add(project)
    db.session.commit()
    return project


def add_task(user, project, status="pending", priority="medium", due_date=None, title="Task"):
    task = Task(title=title, status=status, priority=priority, due_date=due_date,
                author_id=user.id, project_id=project.id if project else None)
    db.session.add(task)
    db.session.commit()
    return task


def test_project_stats(client, alice, auth_headers):
    project = make_project(alice)
    add_task(alice, project, "pending", "high", due_date=utcnow() + timedelta(days=2))
    add_task(alice, project, "pending", "low")
    add_task(alice, project, "completed", "high", due_date=utcnow() + timedelta(days=1))
    add_task(alice, project, "in-progress", "medium", due_date=utcnow() - timedelta(days=1))
    add_task(alice, None, "pending")

    response = client.get(f"/api/projects/{project.id}/stats", headers=auth_headers())

    assert response.status_code == 200
    body = response.get_json()
    assert body["project"]["name"] == "Website"
    assert len(body["tasks"]) == 4
    assert [task["status"] for task in body["tasks"]] == ["pending", "pending", "in-progress", "completed"]
    assert body["stats"] == {
        "totalTasks": 4,
        "completedTasks": 1,
        "progressPercentage": 25,
        "taskStatusCount": {"pending": 2, "inProgress": 1, "completed": 1},
        "taskPriorityCount": {"high": 2, "medium": 1, "low": 1},
        "upcomingTasks": 1,
    }


def test_empty_project_stats(client, alice, auth_headers):
    project = make_project(alice)
    stats = client.get(f"/api/projects/{project.id}/stats", headers=auth_headers()).get_json()["stats"]
    assert stats["progressPercentage"] == 0
    assert stats["totalTasks"] == 0


def test_foreign_project_stats_do_not_leak(client, alice, bob, auth_headers):
    project = make_project(bob, "Secret plan")
    response = client.get(f"/api/projects/{project.id}/stats", headers=auth_headers())
    assert response.status_code == 403
    assert "Secret plan" not in response.get_data(as_text=True)


def test_project_crud_and_archiving(client, alice, auth_headers):
    response = client.post("/api/projects", headers=auth_headers(), json={"name": "Garden", "icon": "G"})
    assert response.status_code == 201
    project_id = response.get_json()["project"]["id"]

    assert client.post("/api/projects", headers=auth_headers(), json={"name": "Garden"}).status_code == 409

    response = client.patch(f"/api/projects/{project_id}", headers=auth_headers(), json={"archived": True})
    assert response.get_json()["project"]["archived"] is True
    assert client.get("/api/projects", headers=auth_headers()).get_json()["projects"] == []
    listed = client.get("/api/projects?archived=true", headers=auth_headers()).get_json()["projects"]
    assert [project["name"] for project in listed] == ["Garden"]

    # the name is free again once the old project is archived
    assert client.post("/api/projects", headers=auth_headers(), json={"name": "Garden"}).status_code == 201
    response = client.patch(f"/api/projects/{project_id}", headers=auth_headers(), json={"archived": False})
    assert response.status_code == 409

    response = client.delete(f"/api/projects/{project_id}", headers=auth_headers())
    assert response.status_code == 200
    assert response.get_json() == {"message": "Project deleted"}
    assert db.session.get(Project, project_id) is None


def test_deleting_project_removes_tasks(client, alice, auth_headers):
    project = make_project(alice)
    add_task(alice, project)
    client.delete(f"/api/projects/{project.id}", headers=auth_headers())
    assert Task.query.count() == 0


def test_project_detail_includes_tasks(client, alice, auth_headers):
    project = make_project(alice)
    add_task(alice, project, title="Design")
    body = client.get(f"/api/projects/{project.id}", headers=auth_headers()).get_json()
    assert [task["title"] for task in body["project"]["tasks"]] == ["Design"]


def test_task_lifecycle(client, alice, auth_headers):
    project = make_project(alice)
    response = client.post("/api/tasks", headers=auth_headers(), json={
        "title": "Write copy",
        "projectId": project.id,
        "priority": "high",
        "dueDate": "2030-01-01T09:00:00Z",
    })
    assert response.status_code == 201
    task = response.get_json()["task"]
    assert task["status"] == "pending"
    assert task["dueDate"] == "2030-01-01T09:00:00Z"
    assert task["project"]["name"] == "Website"

    response = client.patch(f"/api/tasks/{task['id']}", headers=auth_headers(), json={"status": "completed"})
    assert response.get_json()["task"]["completedAt"] is not None

    response = client.patch(f"/api/tasks/{task['id']}", headers=auth_headers(), json={"status": "pending"})
    assert response.get_json()["task"]["completedAt"] is None

    response = client.delete(f"/api/tasks/{task['id']}", headers=auth_headers())
    assert response.status_code == 200
    assert response.get_json() == {"message": "Task deleted"}
    assert Task.query.count() == 0


def test_task_filters(client, alice, auth_headers):
    project = make_project(alice)
    add_task(alice, project, "pending", "high", title="A")
    add_task(alice, None, "completed", "low", title="B")

    def titles(query):
        body = client.get(f"/api/tasks{query}", headers=auth_headers()).get_json()
        return [task["title"] for task in body["tasks"]]

    assert titles("") == ["A", "B"]
    assert titles(f"?projectId={project.id}") == ["A"]
    assert titles("?status=completed") == ["B"]
    assert titles("?priority=high") == ["A"]
    assert client.get("/api/tasks?status=done", headers=auth_headers()).status_code == 400


def test_task_cannot_join_foreign_project(client, alice, bob, auth_headers):
    project = make_project(bob)
    response = client.post("/api/tasks", headers=auth_headers(), json={"title": "Sneak", "projectId": project.id})
    assert response.status_code == 403
    assert Task.query.count() == 0

    task = add_task(alice, None)
    response = client.patch(f"/api/tasks/{task.id}", headers=auth_headers(), json={"projectId": project.id})
    assert response.status_code == 403


def test_task_validation(client, alice, auth_headers):
    response = client.post("/api/tasks", headers=auth_headers(),
                           json={"status": "done", "dueDate": "tomorrow"})
    assert response.status_code == 400
    fields = {issue["field"] for issue in response.get_json()["issues"]}
    assert fields == {"title", "status", "dueDate"}


def test_due_date_is_stored_as_utc(app, alice):
    task = add_task(alice, None, due_date=datetime(2030, 1, 1, 9, 0))
    assert task.to_dict()["dueDate"] == "2030-01-01T09:00:00Z"
