"""Project progress numbers derived from a task set."""
from .dates import to_naive_utc, utcnow


def round_percent(part, whole):
    """``part / whole`` as a whole percentage, halves rounded up; 0 when ``whole`` is 0."""
    if not whole:
        return 0
    return (200 * part + whole) // (2 * whole)


def _field(task, name):
    return task[name] if isinstance(task, dict) else getattr(task, name)


def compute_project_stats(tasks, now=None):
    now = to_naive_utc(now) if now is not None else utcnow()
    status_count = {"pending": 0, "inProgress": 0, "completed": 0}
    priority_count = {"high": 0, "medium": 0, "low": 0}
    upcoming = 0

    for task in tasks:
        status = _field(task, "status")
        if status == "pending":
            status_count["pending"] += 1
        elif status == "in-progress":
            status_count["inProgress"] += 1
        elif status == "completed":
            status_count["completed"] += 1

        priority = _field(task, "priority")
        if priority in priority_count:
            priority_count[priority] += 1

        due_date = _field(task, "due_date")
        if status != "completed" and due_date is not None and to_naive_utc(due_date) >= now:
            upcoming += 1

    total = len(tasks)
    completed = status_count["completed"]
    return {
        "totalTasks": total,
        "completedTasks": completed,
        "progressPercentage": round_percent(completed, total),
        "taskStatusCount": status_count,
        "taskPriorityCount": priority_count,
        "upcomingTasks": upcoming,
    }
