"""Worker-facing project picker: assigned tasks grouped and ranked by usage."""

from __future__ import annotations

from typing import Any

from ..timelogs.repository import TimeLogRepository
from .repository import ProjectRepository


def _rank(item: dict[str, Any]) -> tuple[int, str]:
    return (-item["reportCount"], item["name"].casefold())


class ProjectSelectorService:
    def __init__(self, projects: ProjectRepository, time_logs: TimeLogRepository):
        self._projects = projects
        self._time_logs = time_logs

    def for_user(self, user_id: int) -> dict[str, list[dict[str, Any]]]:
        """Clients -> projects -> tasks, each level by report count desc, then name."""

        usage = self._time_logs.usage_counts_for_user(user_id)
        clients: dict[int, dict[str, Any]] = {}

        for ctx in self._projects.list_assigned_task_contexts(user_id):
            count = usage.get(ctx.task_id, 0)

            client = clients.setdefault(
                ctx.client_id,
                {"id": ctx.client_id, "name": ctx.client_name, "reportCount": 0, "projects": {}},
            )
            project = client["projects"].setdefault(
                ctx.project_id,
                {
                    "id": ctx.project_id,
                    "name": ctx.project_name,
                    "reportingType": ctx.reporting_type.value,
                    "reportCount": 0,
                    "tasks": [],
                },
            )
            project["tasks"].append({"id": ctx.task_id, "name": ctx.task_name, "reportCount": count})
            project["reportCount"] += count
            client["reportCount"] += count

        out = []
        for client in clients.values():
            projects = sorted(client["projects"].values(), key=_rank)
            for project in projects:
                project["tasks"].sort(key=_rank)
            out.append({**client, "projects": projects})
        out.sort(key=_rank)
        return {"clients": out}
