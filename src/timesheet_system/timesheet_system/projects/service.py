from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import replace
from datetime import date
from typing import Any, Callable, ContextManager, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import ReportingType, TaskStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Client, Project, Task
from .repository import ProjectRepository

logger = logging.getLogger(__name__)

UNSET: Any = object()


def _pick(value: Any, current: Any) -> Any:
    return current if value is UNSET else value


class ProjectCatalogService:
    """Admin use cases over the client -> project -> task hierarchy.

    Nothing here is hard-deleted: clients and projects are deactivated, tasks
    are closed and lose their worker assignments.
    """

    def __init__(
        self,
        projects: ProjectRepository,
        users: UserRepository,
        *,
        transaction: Optional[Callable[[], ContextManager[Any]]] = None,
    ):
        self._projects = projects
        self._users = users
        self._transaction = transaction or nullcontext

    # Clients
    def list_clients(self, *, active: Optional[bool] = None) -> Sequence[Client]:
        return self._projects.list_clients(active=active)

    def get_client(self, client_id: int) -> Client:
        client = self._projects.get_client(client_id)
        if not client:
            raise NotFoundError("Client not found")
        return client

    def create_client(self, *, name: str, description: Optional[str] = None) -> int:
        name = require_non_empty(name, "name")
        if self._projects.get_client_by_name(name):
            raise ConflictError("Client with this name already exists")
        return self._projects.create_client(name=name, description=description)

    def update_client(self, client_id: int, *, name: Any = UNSET, description: Any = UNSET, active: Any = UNSET) -> Client:
        client = self.get_client(client_id)
        updated = replace(
            client,
            name=client.name if name is UNSET else require_non_empty(name, "name"),
            description=_pick(description, client.description),
            active=bool(_pick(active, client.active)),
        )
        if updated.name != client.name:
            other = self._projects.get_client_by_name(updated.name)
            if other and other.client_id != client.client_id:
                raise ConflictError("Client with this name already exists")

        self._projects.update_client(
            client_id,
            name=updated.name,
            description=updated.description,
            active=updated.active,
        )
        return updated

    def delete_client(self, client_id: int) -> None:
        client = self.get_client(client_id)
        self._projects.update_client(client_id, name=client.name, description=client.description, active=False)

    # Projects
    def list_projects(self, *, client_id: Optional[int] = None, active: Optional[bool] = None) -> Sequence[Project]:
        return self._projects.list_projects(client_id=client_id, active=active)

    def get_project(self, project_id: int) -> Project:
        project = self._projects.get_project(project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def _require_client_and_manager(self, client_id: Optional[int], manager_id: Optional[int]) -> None:
        if client_id is not None and not self._projects.get_client(client_id):
            raise NotFoundError("Client not found")
        if manager_id is not None and not self._users.get_by_id(manager_id):
            raise NotFoundError("Project manager not found")

    def create_project(
        self,
        *,
        name: str,
        client_id: int,
        project_manager_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        description: Optional[str] = None,
        reporting_type: ReportingType = ReportingType.START_END,
    ) -> int:
        name = require_non_empty(name, "name")
        self._require_client_and_manager(client_id, project_manager_id)
        if end_date is not None and end_date < start_date:
            raise ValidationError("endDate must not be before startDate")

        return self._projects.create_project(
            name=name,
            client_id=client_id,
            project_manager_id=project_manager_id,
            start_date=start_date,
            end_date=end_date,
            description=description,
            reporting_type=reporting_type,
        )

    def update_project(self, project_id: int, **changes: Any) -> Project:
        """Partial update; keys are ``Project`` field names."""

        project = self.get_project(project_id)
        unknown = set(changes) - {
            "name",
            "client_id",
            "project_manager_id",
            "start_date",
            "end_date",
            "description",
            "reporting_type",
            "active",
        }
        if unknown:
            raise ValidationError(f"Unknown project fields: {', '.join(sorted(unknown))}")

        if "name" in changes:
            changes["name"] = require_non_empty(changes["name"], "name")
        if changes.get("start_date") is None:
            changes.pop("start_date", None)
        self._require_client_and_manager(changes.get("client_id"), changes.get("project_manager_id"))

        updated = replace(project, **changes)
        self._projects.save_project(updated)
        return updated

    def toggle_reporting_type(self, project_id: int) -> ReportingType:
        project = self.get_project(project_id)
        new_type = ReportingType.DURATION if project.reporting_type is ReportingType.START_END else ReportingType.START_END
        self._projects.save_project(replace(project, reporting_type=new_type))
        logger.info("Project %s reporting type switched to %s", project_id, new_type.value)
        return new_type

    def delete_project(self, project_id: int) -> None:
        with self._transaction():
            project = self.get_project(project_id)
            self._projects.save_project(replace(project, active=False))
            closed = self._projects.close_tasks_of_project(project_id)
        logger.info("Project %s deactivated, %d tasks closed", project_id, closed)

    # Tasks
    def list_tasks(self, *, project_id: Optional[int] = None, status: Optional[TaskStatus] = TaskStatus.OPEN) -> Sequence[Task]:
        """``status=None`` lists every task."""

        return self._projects.list_tasks(project_id=project_id, status=status)

    def get_task(self, task_id: int) -> Task:
        task = self._projects.get_task(task_id)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def create_task(
        self,
        *,
        name: str,
        project_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        description: Optional[str] = None,
        status: TaskStatus = TaskStatus.OPEN,
    ) -> int:
        name = require_non_empty(name, "name")
        self.get_project(project_id)
        return self._projects.create_task(
            name=name,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            description=description,
            status=status,
        )

    def update_task(self, task_id: int, **changes: Any) -> Task:
        """Partial update; closing a task also drops its assignments."""

        with self._transaction():
            task = self.get_task(task_id)
            unknown = set(changes) - {"name", "project_id", "start_date", "end_date", "description", "status"}
            if unknown:
                raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

            if "name" in changes:
                changes["name"] = require_non_empty(changes["name"], "name")
            if "project_id" in changes:
                self.get_project(changes["project_id"])

            updated = replace(task, **changes)
            self._projects.save_task(updated)
            if updated.status is TaskStatus.CLOSED:
                self._projects.remove_task_assignments(task_id)
        return updated

    def delete_task(self, task_id: int) -> None:
        with self._transaction():
            task = self.get_task(task_id)
            self._projects.save_task(replace(task, status=TaskStatus.CLOSED))
            self._projects.remove_task_assignments(task_id)

    # Assignments
    def task_workers(self, task_id: int) -> Sequence[dict]:
        self.get_task(task_id)
        return self._projects.list_task_workers(task_id)

    def assign(self, *, task_id: int, user_id: int) -> bool:
        task = self.get_task(task_id)
        if task.status is TaskStatus.CLOSED:
            raise ValidationError("Cannot assign workers to a closed task")
        user = self._users.get_by_id(user_id)
        if not user or not user.active:
            raise NotFoundError("User not found")
        return self._projects.assign_worker(task_id=task_id, user_id=user_id)

    def unassign(self, *, task_id: int, user_id: int) -> None:
        self.get_task(task_id)
        if not self._projects.unassign_worker(task_id=task_id, user_id=user_id):
            raise NotFoundError("Assignment not found")
