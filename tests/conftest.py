from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.timesheet_system.timesheet_system.attendance.model import AttendanceRecord
from src.timesheet_system.timesheet_system.attendance.service import AttendanceService
from src.timesheet_system.timesheet_system.core.enums import (
    AttendanceStatus,
    LocationStatus,
    ReportingType,
    Role,
    TaskStatus,
)
from src.timesheet_system.timesheet_system.projects.model import Client, Project, Task, TaskContext
from src.timesheet_system.timesheet_system.projects.selector import ProjectSelectorService
from src.timesheet_system.timesheet_system.projects.service import ProjectCatalogService
from src.timesheet_system.timesheet_system.timelogs.model import TimeLog, TimeLogDetail
from src.timesheet_system.timesheet_system.timelogs.service import TimeLogService
from src.timesheet_system.timesheet_system.users.model import User
from src.timesheet_system.timesheet_system.users.service import AuthService, UserService

FIXED_NOW = datetime(2025, 6, 1, 8, 0, tzinfo=timezone.utc)


class FakeAttendanceRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, AttendanceRecord] = {}

    def add(self, *, user_id, work_date, start=None, end=None, status=AttendanceStatus.WORK) -> int:
        return self.create(user_id=user_id, work_date=work_date, start_time=start, end_time=end, status=status)

    def get_by_id(self, attendance_id):
        return self.rows.get(int(attendance_id))

    def list_for_user_and_date(self, user_id, work_date, *, exclude_id=None):
        return [
            r
            for r in self.rows.values()
            if r.user_id == user_id and r.work_date == work_date and r.attendance_id != exclude_id
        ]

    def list_for_user_between(self, user_id, start, end):
        found = [r for r in self.rows.values() if r.user_id == user_id and start <= r.work_date <= end]
        return sorted(found, key=lambda r: (r.work_date, r.attendance_id), reverse=True)

    def create(self, *, user_id, work_date, start_time, end_time, status):
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = AttendanceRecord(
            attendance_id=rid,
            user_id=user_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        return rid

    def update(self, *, attendance_id, start_time, end_time, status):
        existing = self.rows.get(attendance_id)
        if not existing:
            return False
        self.rows[attendance_id] = replace(existing, start_time=start_time, end_time=end_time, status=status)
        return True


class FakeProjectRepo:
    def __init__(self, users: Optional["FakeUserRepo"] = None):
        self._users = users
        self._ids = {"client": 1, "project": 1, "task": 1}
        self.clients: dict[int, Client] = {}
        self.projects: dict[int, Project] = {}
        self.tasks: dict[int, Task] = {}
        self.assignments: set[tuple[int, int]] = set()

    def _next(self, kind: str) -> int:
        value = self._ids[kind]
        self._ids[kind] += 1
        return value

    # Clients
    def get_client(self, client_id):
        return self.clients.get(int(client_id))

    def get_client_by_name(self, name):
        return next((c for c in self.clients.values() if c.name == name), None)

    def list_clients(self, *, active=None):
        return [c for c in self.clients.values() if active is None or c.active == active]

    def create_client(self, *, name, description):
        cid = self._next("client")
        self.clients[cid] = Client(client_id=cid, name=name, description=description)
        return cid

    def update_client(self, client_id, *, name, description, active):
        self.clients[client_id] = replace(self.clients[client_id], name=name, description=description, active=active)
        return True

    # Projects
    def get_project(self, project_id):
        return self.projects.get(int(project_id))

    def list_projects(self, *, client_id=None, active=None):
        return [
            p
            for p in self.projects.values()
            if (client_id is None or p.client_id == client_id) and (active is None or p.active == active)
        ]

    def create_project(self, *, name, client_id, project_manager_id, start_date, end_date, description, reporting_type):
        pid = self._next("project")
        self.projects[pid] = Project(
            project_id=pid,
            name=name,
            client_id=client_id,
            project_manager_id=project_manager_id,
            start_date=start_date,
            end_date=end_date,
            description=description,
            reporting_type=reporting_type,
        )
        return pid

    def save_project(self, project):
        self.projects[project.project_id] = project
        return True

    def close_tasks_of_project(self, project_id):
        closed = 0
        for tid, task in list(self.tasks.items()):
            if task.project_id == project_id:
                self.tasks[tid] = replace(task, status=TaskStatus.CLOSED)
                self.remove_task_assignments(tid)
                closed += 1
        return closed

    # Tasks
    def get_task(self, task_id):
        return self.tasks.get(int(task_id))

    def get_task_context(self, task_id):
        task = self.tasks.get(int(task_id))
        if not task:
            return None
        project = self.projects[task.project_id]
        client = self.clients[project.client_id]
        return TaskContext(
            task_id=task.task_id,
            task_name=task.name,
            task_status=task.status,
            project_id=project.project_id,
            project_name=project.name,
            reporting_type=project.reporting_type,
            project_active=project.active,
            client_id=client.client_id,
            client_name=client.name,
            client_active=client.active,
        )

    def list_tasks(self, *, project_id=None, status=None):
        return [
            t
            for t in self.tasks.values()
            if (project_id is None or t.project_id == project_id) and (status is None or t.status == status)
        ]

    def create_task(self, *, name, project_id, start_date, end_date, description, status):
        tid = self._next("task")
        self.tasks[tid] = Task(
            task_id=tid,
            name=name,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            description=description,
            status=status,
        )
        return tid

    def save_task(self, task):
        self.tasks[task.task_id] = task
        return True

    # Assignments
    def assign_worker(self, *, task_id, user_id):
        key = (int(task_id), int(user_id))
        if key in self.assignments:
            return False
        self.assignments.add(key)
        return True

    def unassign_worker(self, *, task_id, user_id):
        key = (int(task_id), int(user_id))
        if key not in self.assignments:
            return False
        self.assignments.discard(key)
        return True

    def remove_task_assignments(self, task_id):
        doomed = {a for a in self.assignments if a[0] == task_id}
        self.assignments -= doomed
        return len(doomed)

    def list_task_workers(self, task_id):
        out = []
        for tid, uid in sorted(self.assignments):
            user = self._users.get_by_id(uid) if self._users else None
            if tid == task_id and user and user.active:
                out.append({"id": uid, "name": user.name})
        return out

    def list_assigned_task_contexts(self, user_id):
        out = []
        for tid, uid in sorted(self.assignments):
            if uid != user_id:
                continue
            ctx = self.get_task_context(tid)
            if ctx.task_status is TaskStatus.OPEN and ctx.project_active and ctx.client_active:
                out.append(ctx)
        return out

    # Test helpers
    def add_task(self, *, reporting_type=ReportingType.START_END, client="Acme", project="Website", task="Build") -> int:
        client_obj = self.get_client_by_name(client)
        cid = client_obj.client_id if client_obj else self.create_client(name=client, description=None)
        project_obj = next(
            (p for p in self.projects.values() if p.name == project and p.client_id == cid),
            None,
        )
        pid = (
            project_obj.project_id
            if project_obj
            else self.create_project(
                name=project,
                client_id=cid,
                project_manager_id=1,
                start_date=date(2025, 1, 1),
                end_date=None,
                description=None,
                reporting_type=reporting_type,
            )
        )
        return self.create_task(
            name=task,
            project_id=pid,
            start_date=None,
            end_date=None,
            description=None,
            status=TaskStatus.OPEN,
        )


class FakeTimeLogRepo:
    def __init__(self, attendance: FakeAttendanceRepo, projects: FakeProjectRepo):
        self._attendance = attendance
        self._projects = projects
        self._next_id = 1
        self.rows: dict[int, TimeLog] = {}

    def add(self, attendance_id, minutes, *, task_id=1, location=LocationStatus.OFFICE) -> int:
        return self.create(
            attendance_id=attendance_id,
            task_id=task_id,
            duration_min=minutes,
            start_time=None,
            end_time=None,
            location=location,
        )

    def get_by_id(self, log_id):
        return self.rows.get(int(log_id))

    def list_for_attendance(self, attendance_id):
        return [r for r in self.rows.values() if r.attendance_id == attendance_id]

    def count_for_attendance(self, attendance_id):
        return len(self.list_for_attendance(attendance_id))

    def total_minutes(self, attendance_id, *, exclude_log_id=None):
        return sum(r.duration_min for r in self.list_for_attendance(attendance_id) if r.log_id != exclude_log_id)

    def list_details_for_attendances(self, attendance_ids):
        out = []
        for log in self.rows.values():
            if log.attendance_id not in attendance_ids:
                continue
            ctx = self._projects.get_task_context(log.task_id)
            out.append(
                TimeLogDetail(
                    log=log,
                    task_name=ctx.task_name,
                    project_id=ctx.project_id,
                    project_name=ctx.project_name,
                    client_id=ctx.client_id,
                    client_name=ctx.client_name,
                )
            )
        return out

    def usage_counts_for_user(self, user_id):
        counts: dict[int, int] = {}
        for log in self.rows.values():
            record = self._attendance.get_by_id(log.attendance_id)
            if record and record.user_id == user_id:
                counts[log.task_id] = counts.get(log.task_id, 0) + 1
        return counts

    def create(self, *, attendance_id, task_id, duration_min, start_time, end_time, location, description=None):
        lid = self._next_id
        self._next_id += 1
        self.rows[lid] = TimeLog(
            log_id=lid,
            attendance_id=attendance_id,
            task_id=task_id,
            duration_min=duration_min,
            start_time=start_time,
            end_time=end_time,
            location=location,
            description=description,
        )
        return lid

    def update(self, *, log_id, task_id, duration_min, start_time, end_time, location, description=None):
        self.rows[log_id] = replace(
            self.rows[log_id],
            task_id=task_id,
            duration_min=duration_min,
            start_time=start_time,
            end_time=end_time,
            location=location,
            description=description,
        )
        return True

    def delete(self, log_id):
        return self.rows.pop(int(log_id), None) is not None


class FakeUserRepo:
    def __init__(self):
        self._next_id = 1
        self.rows: dict[int, User] = {}

    def add(self, *, name="Worker", mail="worker@example.com", password="worker123", role=Role.WORKER, active=True) -> User:
        uid = self.create_user(name=name, mail=mail, password_hash=generate_password_hash(password), role=role)
        if not active:
            self.set_active(uid, active=False)
        return self.rows[uid]

    def get_by_id(self, user_id):
        return self.rows.get(int(user_id))

    def get_by_mail(self, mail):
        return next((u for u in self.rows.values() if u.mail == mail), None)

    def list_users(self, *, active=True, role=None):
        return [
            u
            for u in self.rows.values()
            if (active is None or u.active == active) and (role is None or u.role == role)
        ]

    def create_user(self, *, name, mail, password_hash, role):
        uid = self._next_id
        self._next_id += 1
        self.rows[uid] = User(user_id=uid, name=name, mail=mail, password_hash=password_hash, role=role)
        return uid

    def update_user(self, user_id, *, name, mail, role, active):
        self.rows[user_id] = replace(self.rows[user_id], name=name, mail=mail, role=role, active=active)
        return True

    def set_active(self, user_id, *, active):
        self.rows[user_id] = replace(self.rows[user_id], active=active)
        return True

    def set_password_hash(self, user_id, password_hash):
        self.rows[user_id] = replace(self.rows[user_id], password_hash=password_hash)
        return True


class RecordingTransaction:
    """Counts transaction blocks and whether each one exited with an error."""

    def __init__(self):
        self.entered = 0
        self.rolled_back = 0

    def __call__(self):
        return self

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rolled_back += 1
        return False


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def users_repo():
    return FakeUserRepo()


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def projects_repo(users_repo):
    return FakeProjectRepo(users_repo)


@pytest.fixture
def time_logs_repo(attendance_repo, projects_repo):
    return FakeTimeLogRepo(attendance_repo, projects_repo)


@pytest.fixture
def transaction():
    return RecordingTransaction()


@pytest.fixture
def attendance_service(attendance_repo, time_logs_repo, projects_repo, transaction):
    return AttendanceService(attendance_repo, time_logs_repo, projects_repo, transaction=transaction)


@pytest.fixture
def time_log_service(time_logs_repo, attendance_repo, projects_repo, transaction):
    return TimeLogService(time_logs_repo, attendance_repo, projects_repo, transaction=transaction)


@pytest.fixture
def catalog_service(projects_repo, users_repo):
    return ProjectCatalogService(projects_repo, users_repo)


@pytest.fixture
def selector_service(projects_repo, time_logs_repo):
    return ProjectSelectorService(projects_repo, time_logs_repo)


@pytest.fixture
def auth_service(users_repo):
    return AuthService(users_repo, secret="test-jwt-secret")


@pytest.fixture
def user_service(users_repo):
    return UserService(users_repo)


@pytest.fixture
def work_day():
    return date(2025, 6, 1)


@pytest.fixture
def nine_to_five():
    return time(9, 0), time(17, 0)
