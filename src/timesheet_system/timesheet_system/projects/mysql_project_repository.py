from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import ReportingType, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Client, Project, Task, TaskContext
from .repository import ProjectRepository

_TASK_CONTEXT_SELECT = """
    SELECT
        t.id AS task_id, t.name AS task_name, t.status AS task_status,
        p.id AS project_id, p.name AS project_name, p.reporting_type, p.active AS project_active,
        c.id AS client_id, c.name AS client_name, c.active AS client_active
    FROM tasks t
    JOIN projects p ON p.id = t.project_id
    JOIN clients c ON c.id = p.client_id
"""


def _to_client(r: dict[str, Any]) -> Client:
    return Client(
        client_id=int(r["id"]),
        name=r["name"],
        description=r.get("description"),
        active=bool(r["active"]),
        created_at=r.get("created_at"),
    )


def _to_project(r: dict[str, Any]) -> Project:
    return Project(
        project_id=int(r["id"]),
        name=r["name"],
        client_id=int(r["client_id"]),
        project_manager_id=int(r["project_manager_id"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        description=r.get("description"),
        reporting_type=ReportingType(r["reporting_type"]),
        active=bool(r["active"]),
        created_at=r.get("created_at"),
    )


def _to_task(r: dict[str, Any]) -> Task:
    return Task(
        task_id=int(r["id"]),
        name=r["name"],
        project_id=int(r["project_id"]),
        start_date=r.get("start_date"),
        end_date=r.get("end_date"),
        description=r.get("description"),
        status=TaskStatus(r["status"]),
        created_at=r.get("created_at"),
    )


def _to_task_context(r: dict[str, Any]) -> TaskContext:
    return TaskContext(
        task_id=int(r["task_id"]),
        task_name=r["task_name"],
        task_status=TaskStatus(r["task_status"]),
        project_id=int(r["project_id"]),
        project_name=r["project_name"],
        reporting_type=ReportingType(r["reporting_type"]),
        project_active=bool(r["project_active"]),
        client_id=int(r["client_id"]),
        client_name=r["client_name"],
        client_active=bool(r["client_active"]),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_client(self, client_id: int) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM clients WHERE id=%s", (int(client_id),))
            r = fetchone(cur)
            return _to_client(r) if r else None

    def get_client_by_name(self, name: str) -> Optional[Client]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM clients WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_client(r) if r else None

    def list_clients(self, *, active: Optional[bool] = None) -> Sequence[Client]:
        sql = "SELECT * FROM clients"
        params: list[object] = []
        if active is not None:
            sql += " WHERE active=%s"
            params.append(int(active))
        sql += " ORDER BY name ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_client(r) for r in fetchall(cur)]

    def create_client(self, *, name: str, description: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO clients(name, description) VALUES(%s,%s)", (name, description))
            return int(cur.lastrowid)

    def update_client(self, client_id: int, *, name: str, description: Optional[str], active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE clients SET name=%s, description=%s, active=%s WHERE id=%s",
                (name, description, int(active), int(client_id)),
            )
            return cur.rowcount > 0

    def get_project(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM projects WHERE id=%s", (int(project_id),))
            r = fetchone(cur)
            return _to_project(r) if r else None

    def list_projects(self, *, client_id: Optional[int] = None, active: Optional[bool] = None) -> Sequence[Project]:
        clauses: list[str] = []
        params: list[object] = []
        if client_id is not None:
            clauses.append("client_id=%s")
            params.append(int(client_id))
        if active is not None:
            clauses.append("active=%s")
            params.append(int(active))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM projects {where} ORDER BY name ASC", tuple(params))
            return [_to_project(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO projects
                    (name, client_id, project_manager_id, start_date, end_date, description, reporting_type)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, int(client_id), int(project_manager_id), start_date, end_date, description, reporting_type.value),
            )
            return int(cur.lastrowid)

    def save_project(self, project: Project) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE projects
                SET name=%s, client_id=%s, project_manager_id=%s, start_date=%s, end_date=%s,
                    description=%s, reporting_type=%s, active=%s
                WHERE id=%s
                """,
                (
                    project.name,
                    project.client_id,
                    project.project_manager_id,
                    project.start_date,
                    project.end_date,
                    project.description,
                    project.reporting_type.value,
                    int(project.active),
                    project.project_id,
                ),
            )
            return cur.rowcount > 0

    def close_tasks_of_project(self, project_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE tasks SET status=%s WHERE project_id=%s",
                (TaskStatus.CLOSED.value, int(project_id)),
            )
            closed = int(cur.rowcount)
            cur.execute(
                "DELETE tw FROM task_worker tw JOIN tasks t ON t.id = tw.task_id WHERE t.project_id=%s",
                (int(project_id),),
            )
            return closed

    def get_task(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT * FROM tasks WHERE id=%s", (int(task_id),))
            r = fetchone(cur)
            return _to_task(r) if r else None

    def get_task_context(self, task_id: int) -> Optional[TaskContext]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_TASK_CONTEXT_SELECT + " WHERE t.id=%s", (int(task_id),))
            r = fetchone(cur)
            return _to_task_context(r) if r else None

    def list_tasks(self, *, project_id: Optional[int] = None, status: Optional[TaskStatus] = None) -> Sequence[Task]:
        clauses: list[str] = []
        params: list[object] = []
        if project_id is not None:
            clauses.append("project_id=%s")
            params.append(int(project_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM tasks {where} ORDER BY name ASC", tuple(params))
            return [_to_task(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(name, project_id, start_date, end_date, description, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, int(project_id), start_date, end_date, description, status.value),
            )
            return int(cur.lastrowid)

    def save_task(self, task: Task) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET name=%s, project_id=%s, start_date=%s, end_date=%s, description=%s, status=%s
                WHERE id=%s
                """,
                (
                    task.name,
                    task.project_id,
                    task.start_date,
                    task.end_date,
                    task.description,
                    task.status.value,
                    task.task_id,
                ),
            )
            return cur.rowcount > 0

    def assign_worker(self, *, task_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO task_worker(task_id, user_id) VALUES(%s,%s)",
                (int(task_id), int(user_id)),
            )
            return cur.rowcount > 0

    def unassign_worker(self, *, task_id: int, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM task_worker WHERE task_id=%s AND user_id=%s",
                (int(task_id), int(user_id)),
            )
            return cur.rowcount > 0

    def remove_task_assignments(self, task_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM task_worker WHERE task_id=%s", (int(task_id),))
            return int(cur.rowcount)

    def list_task_workers(self, task_id: int) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id, u.name
                FROM task_worker tw
                JOIN users u ON u.id = tw.user_id
                WHERE tw.task_id=%s AND u.active=1
                ORDER BY u.name ASC
                """,
                (int(task_id),),
            )
            return [{"id": int(r["id"]), "name": r["name"]} for r in fetchall(cur)]

    def list_assigned_task_contexts(self, user_id: int) -> Sequence[TaskContext]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _TASK_CONTEXT_SELECT
                + """
                JOIN task_worker tw ON tw.task_id = t.id
                WHERE tw.user_id=%s AND t.status=%s AND p.active=1 AND c.active=1
                """,
                (int(user_id), TaskStatus.OPEN.value),
            )
            return [_to_task_context(r) for r in fetchall(cur)]
