from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_TOKEN_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.selector import ProjectSelectorService
from .projects.service import ProjectCatalogService
from .timelogs.mysql_timelog_repository import MySQLTimeLogRepository
from .timelogs.service import TimeLogService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    attendance_repo: MySQLAttendanceRepository
    time_logs_repo: MySQLTimeLogRepository
    projects_repo: MySQLProjectRepository

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    time_log_service: TimeLogService
    project_catalog_service: ProjectCatalogService
    project_selector_service: ProjectSelectorService


def build_container(*, db_config: dict, jwt_secret: str, jwt_expires_hours: int = DEFAULT_TOKEN_HOURS) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    users_repo = MySQLUserRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    time_logs_repo = MySQLTimeLogRepository(conn)
    projects_repo = MySQLProjectRepository(conn)

    auth_service = AuthService(users_repo, secret=jwt_secret, expires_hours=jwt_expires_hours)
    user_service = UserService(users_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        time_logs_repo,
        projects_repo,
        transaction=conn.transaction,
    )
    time_log_service = TimeLogService(
        time_logs_repo,
        attendance_repo,
        projects_repo,
        transaction=conn.transaction,
    )
    project_catalog_service = ProjectCatalogService(projects_repo, users_repo, transaction=conn.transaction)
    project_selector_service = ProjectSelectorService(projects_repo, time_logs_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        time_logs_repo=time_logs_repo,
        projects_repo=projects_repo,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
        time_log_service=time_log_service,
        project_catalog_service=project_catalog_service,
        project_selector_service=project_selector_service,
    )
