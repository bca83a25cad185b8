from __future__ import annotations

from dataclasses import replace
from datetime import date, time

from src.timesheet_system.timesheet_system.core.enums import ReportingType, TaskStatus

DAY = date(2025, 6, 1)


def test_selector_groups_and_ranks_by_usage(selector_service, projects_repo, attendance_repo, time_logs_repo):
    build = projects_repo.add_task(client="Acme", project="Website", task="Build")
    review = projects_repo.add_task(client="Acme", project="Website", task="Review")
    audit = projects_repo.add_task(client="Acme", project="Audit", task="Interviews", reporting_type=ReportingType.DURATION)
    ops = projects_repo.add_task(client="Globex", project="Ops", task="On-call")
    for task_id in (build, review, audit, ops):
        projects_repo.assign_worker(task_id=task_id, user_id=1)

    rid = attendance_repo.add(user_id=1, work_date=DAY, start=time(9, 0), end=time(17, 0))
    for task_id in (review, review, audit, ops, ops, ops, ops):
        time_logs_repo.add(rid, 60, task_id=task_id)

    clients = selector_service.for_user(1)["clients"]

    assert [c["name"] for c in clients] == ["Globex", "Acme"]
    acme = clients[1]
    assert acme["reportCount"] == 3
    assert [p["name"] for p in acme["projects"]] == ["Website", "Audit"]
    assert [t["name"] for t in acme["projects"][0]["tasks"]] == ["Review", "Build"]
    assert acme["projects"][1]["reportingType"] == "duration"


def test_selector_breaks_ties_by_name(selector_service, projects_repo):
    for name in ("Zeta", "Alpha", "Mid"):
        projects_repo.assign_worker(task_id=projects_repo.add_task(task=name), user_id=1)

    tasks = selector_service.for_user(1)["clients"][0]["projects"][0]["tasks"]

    assert [t["name"] for t in tasks] == ["Alpha", "Mid", "Zeta"]
    assert all(t["reportCount"] == 0 for t in tasks)


def test_selector_hides_closed_tasks_and_inactive_projects(selector_service, projects_repo, catalog_service):
    open_task = projects_repo.add_task(client="Acme", project="Website", task="Build")
    closed_task = projects_repo.add_task(client="Acme", project="Website", task="Old")
    dead_task = projects_repo.add_task(client="Acme", project="Legacy", task="Anything")
    for task_id in (open_task, closed_task, dead_task):
        projects_repo.assign_worker(task_id=task_id, user_id=1)

    projects_repo.save_task(replace(projects_repo.get_task(closed_task), status=TaskStatus.CLOSED))
    catalog_service.delete_project(projects_repo.get_task(dead_task).project_id)

    clients = selector_service.for_user(1)["clients"]

    assert [p["name"] for p in clients[0]["projects"]] == ["Website"]
    assert [t["name"] for t in clients[0]["projects"][0]["tasks"]] == ["Build"]


def test_selector_for_user_without_assignments(selector_service):
    assert selector_service.for_user(7) == {"clients": []}
