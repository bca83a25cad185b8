from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ReportingType, TaskStatus
from .model import Client, Project, Task, TaskContext


class ProjectRepository(Protocol):
    """Client -> Project -> Task hierarchy plus task/worker assignments."""

    # Clients
    def get_client(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    def get_client_by_name(self, name: str) -> Optional[Client]:
        raise NotImplementedError

    def list_clients(self, *, active: Optional[bool] = None) -> Sequence[Client]:
        raise NotImplementedError

    def create_client(self, *, name: str, description: Optional[str]) -> int:
        raise NotImplementedError

    def update_client(self, client_id: int, *, name: str, description: Optional[str], active: bool) -> bool:
        raise NotImplementedError

    # Projects
    def get_project(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def list_projects(self, *, client_id: Optional[int] = None, active: Optional[bool] = None) -> Sequence[Project]:
        raise NotImplementedError

    def create_project(
        self,
        *,
        name: str,
        client_id: int,
        project_manager_id: int,
        start_date: date,
        end_date: Optional[date],
        description: Optional[str],
        reporting_type: ReportingType,
    ) -> int:
        raise NotImplementedError

    def save_project(self, project: Project) -> bool:
        raise NotImplementedError

    def close_tasks_of_project(self, project_id: int) -> int:
        raise NotImplementedError

    # Tasks
    def get_task(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def get_task_context(self, task_id: int) -> Optional[TaskContext]:
        raise NotImplementedError

    def list_tasks(self, *, project_id: Optional[int] = None, status: Optional[TaskStatus] = None) -> Sequence[Task]:
        raise NotImplementedError

    def create_task(
        self,
        *,
        name: str,
        project_id: int,
        start_date: Optional[date],
        end_date: Optional[date],
        description: Optional[str],
        status: TaskStatus,
    ) -> int:
        raise NotImplementedError

    def save_task(self, task: Task) -> bool:
        raise NotImplementedError

    # Assignments
    def assign_worker(self, *, task_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def unassign_worker(self, *, task_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def remove_task_assignments(self, task_id: int) -> int:
        raise NotImplementedError

    def list_task_workers(self, task_id: int) -> Sequence[dict]:
        """Active users assigned to the task: ``{"id", "name"}``."""

        raise NotImplementedError

    def list_assigned_task_contexts(self, user_id: int) -> Sequence[TaskContext]:
        """Open tasks assigned to the user under active projects of active clients."""

        raise NotImplementedError
