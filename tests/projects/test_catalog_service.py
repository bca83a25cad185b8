from __future__ import annotations

from datetime import date

import pytest

from src.timesheet_system.timesheet_system.core.enums import ReportingType, Role, TaskStatus
from src.timesheet_system.timesheet_system.core.exceptions import ConflictError, NotFoundError, ValidationError


@pytest.fixture
def manager(users_repo):
    return users_repo.add(name="Manager", mail="pm@example.com", role=Role.ADMIN)


def test_client_names_are_unique(catalog_service):
    catalog_service.create_client(name="Acme")
    with pytest.raises(ConflictError):
        catalog_service.create_client(name="Acme")


def test_client_delete_is_soft(catalog_service):
    cid = catalog_service.create_client(name="Acme", description="d")
    catalog_service.delete_client(cid)

    assert catalog_service.get_client(cid).active is False
    assert catalog_service.list_clients(active=True) == []


def test_client_rename_to_taken_name_conflicts(catalog_service):
    catalog_service.create_client(name="Acme")
    other = catalog_service.create_client(name="Globex")
    with pytest.raises(ConflictError):
        catalog_service.update_client(other, name="Acme")


def test_project_requires_client_and_manager(catalog_service, manager):
    with pytest.raises(NotFoundError, match="Client"):
        catalog_service.create_project(
            name="Site", client_id=9, project_manager_id=manager.user_id, start_date=date(2025, 1, 1)
        )

    cid = catalog_service.create_client(name="Acme")
    with pytest.raises(NotFoundError, match="manager"):
        catalog_service.create_project(name="Site", client_id=cid, project_manager_id=99, start_date=date(2025, 1, 1))


def test_project_dates_must_be_ordered(catalog_service, manager):
    cid = catalog_service.create_client(name="Acme")
    with pytest.raises(ValidationError):
        catalog_service.create_project(
            name="Site",
            client_id=cid,
            project_manager_id=manager.user_id,
            start_date=date(2025, 2, 1),
            end_date=date(2025, 1, 1),
        )


def test_toggle_reporting_type(catalog_service, manager):
    cid = catalog_service.create_client(name="Acme")
    pid = catalog_service.create_project(
        name="Site", client_id=cid, project_manager_id=manager.user_id, start_date=date(2025, 1, 1)
    )

    assert catalog_service.toggle_reporting_type(pid) is ReportingType.DURATION
    assert catalog_service.toggle_reporting_type(pid) is ReportingType.START_END


def test_update_project_partial(catalog_service, manager):
    cid = catalog_service.create_client(name="Acme")
    pid = catalog_service.create_project(
        name="Site", client_id=cid, project_manager_id=manager.user_id, start_date=date(2025, 1, 1)
    )

    updated = catalog_service.update_project(pid, name="Portal", reporting_type=ReportingType.DURATION)

    assert (updated.name, updated.reporting_type, updated.client_id) == ("Portal", ReportingType.DURATION, cid)


def test_delete_project_closes_tasks_and_drops_assignments(catalog_service, projects_repo, users_repo):
    worker = users_repo.add()
    task_id = projects_repo.add_task()
    projects_repo.assign_worker(task_id=task_id, user_id=worker.user_id)
    project_id = projects_repo.get_task(task_id).project_id

    catalog_service.delete_project(project_id)

    assert catalog_service.get_project(project_id).active is False
    assert projects_repo.get_task(task_id).status is TaskStatus.CLOSED
    assert catalog_service.task_workers(task_id) == []


def test_delete_task_closes_and_unassigns(catalog_service, projects_repo, users_repo):
    worker = users_repo.add()
    task_id = projects_repo.add_task()
    catalog_service.assign(task_id=task_id, user_id=worker.user_id)
    assert catalog_service.task_workers(task_id) == [{"id": worker.user_id, "name": worker.name}]

    catalog_service.delete_task(task_id)

    assert catalog_service.get_task(task_id).status is TaskStatus.CLOSED
    assert catalog_service.task_workers(task_id) == []


def test_closing_task_through_update_unassigns(catalog_service, projects_repo, users_repo):
    worker = users_repo.add()
    task_id = projects_repo.add_task()
    catalog_service.assign(task_id=task_id, user_id=worker.user_id)

    catalog_service.update_task(task_id, status=TaskStatus.CLOSED)

    assert projects_repo.assignments == set()


def test_task_list_defaults_to_open(catalog_service, projects_repo):
    keep = projects_repo.add_task(task="Keep")
    gone = projects_repo.add_task(task="Gone")
    catalog_service.delete_task(gone)

    assert [t.task_id for t in catalog_service.list_tasks()] == [keep]
    assert len(catalog_service.list_tasks(status=None)) == 2


def test_assignments_need_open_task_and_active_user(catalog_service, projects_repo, users_repo):
    inactive = users_repo.add(mail="gone@example.com", active=False)
    task_id = projects_repo.add_task()

    with pytest.raises(NotFoundError):
        catalog_service.assign(task_id=task_id, user_id=inactive.user_id)

    catalog_service.delete_task(task_id)
    worker = users_repo.add(mail="w2@example.com")
    with pytest.raises(ValidationError):
        catalog_service.assign(task_id=task_id, user_id=worker.user_id)


def test_unassign_missing_assignment(catalog_service, projects_repo):
    task_id = projects_repo.add_task()
    with pytest.raises(NotFoundError):
        catalog_service.unassign(task_id=task_id, user_id=1)
