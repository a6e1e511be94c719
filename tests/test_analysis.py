from datetime import datetime, timedelta, timezone

from lifeos.analysis import compute_project_stats, round_percent

NOW = datetime(2026, 10, 18, 12, 0)


def task(status="pending", priority="medium", due_date=None):
    return {"status": status, "priority": priority, "due_date": due_date}


def test_round_percent():
    assert round_percent(0, 0) == 0
    assert round_percent(1, 4) == 25
    assert round_percent(1, 8) == 13
    assert round_percent(2, 3) == 67
    assert round_percent(5, 5) == 100


def test_status_histogram_and_progress():
    tasks = [task("pending"), task("pending"), task("completed"), task("in-progress")]
    stats = compute_project_stats(tasks, now=NOW)
    assert stats["totalTasks"] == 4
    assert stats["completedTasks"] == 1
    assert stats["progressPercentage"] == 25
    assert stats["taskStatusCount"] == {"pending": 2, "inProgress": 1, "completed": 1}


def test_priority_histogram():
    tasks = [task(priority="high"), task(priority="low"), task(priority="low"), task()]
    stats = compute_project_stats(tasks, now=NOW)
    assert stats["taskPriorityCount"] == {"high": 1, "medium": 1, "low": 2}


def test_upcoming_skips_completed_undated_and_overdue():
    tasks = [
        task(due_date=NOW + timedelta(days=1)),
        task(due_date=NOW),
        task(due_date=NOW - timedelta(minutes=1)),
        task(),
        task("completed", due_date=NOW + timedelta(days=2)),
        task("in-progress", due_date=NOW + timedelta(hours=3)),
    ]
    assert compute_project_stats(tasks, now=NOW)["upcomingTasks"] == 3


def test_aware_now_is_compared_as_utc():
    tasks = [task(due_date=NOW + timedelta(minutes=30))]
    aware = NOW.replace(tzinfo=timezone.utc)
    assert compute_project_stats(tasks, now=aware)["upcomingTasks"] == 1


def test_no_tasks():
    stats = compute_project_stats([], now=NOW)
    assert stats["totalTasks"] == 0
    assert stats["progressPercentage"] == 0
    assert stats["upcomingTasks"] == 0
