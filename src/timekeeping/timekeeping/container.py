from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.policy import AttendancePolicy
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .database.memory import (
    InMemoryAttendanceRepository,
    InMemoryEmployeeDirectory,
    InMemoryRegularizationRepository,
    InMemoryStore,
)
from .database.transaction import TransactionManager
from .directory.model import Employee
from .directory.mysql_directory import MySQLEmployeeDirectory
from .directory.repository import EmployeeDirectory, IdentityProvider
from .queries.service import RecordQueryService
from .regularization.mysql_regularization_repository import MySQLRegularizationRepository
from .regularization.repository import RegularizationRepository
from .regularization.service import RegularizationService


@dataclass(frozen=True)
class Container:
    transactions: TransactionManager

    attendance_repo: AttendanceRepository
    regularization_repo: RegularizationRepository
    identity: IdentityProvider
    directory: EmployeeDirectory

    attendance_service: AttendanceService
    query_service: RecordQueryService
    regularization_service: RegularizationService


def _wire(
    *,
    transactions: TransactionManager,
    attendance_repo: AttendanceRepository,
    regularization_repo: RegularizationRepository,
    identity: IdentityProvider,
    directory: EmployeeDirectory,
    policy: AttendancePolicy,
    default_limit: int,
    max_limit: int,
) -> Container:
    attendance_service = AttendanceService(
        attendance_repo,
        transactions,
        policy=policy,
        strategy_factory=AttendanceStrategyFactory(),
    )
    query_service = RecordQueryService(
        attendance_repo,
        regularization_repo,
        directory,
        default_limit=default_limit,
        max_limit=max_limit,
    )
    regularization_service = RegularizationService(
        regularization_repo,
        attendance_repo,
        attendance_service,
        transactions,
        query_service,
    )
    return Container(
        transactions=transactions,
        attendance_repo=attendance_repo,
        regularization_repo=regularization_repo,
        identity=identity,
        directory=directory,
        attendance_service=attendance_service,
        query_service=query_service,
        regularization_service=regularization_service,
    )


def build_mysql_container(
    *,
    db_config: dict,
    policy: AttendancePolicy | None = None,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)
    directory = MySQLEmployeeDirectory(conn)
    return _wire(
        transactions=conn,
        attendance_repo=MySQLAttendanceRepository(conn),
        regularization_repo=MySQLRegularizationRepository(conn),
        identity=directory,
        directory=directory,
        policy=policy or AttendancePolicy(),
        default_limit=default_limit,
        max_limit=max_limit,
    )


def build_memory_container(
    *,
    employees: Iterable[Employee] = (),
    policy: AttendancePolicy | None = None,
    default_limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> Container:
    store = InMemoryStore()
    directory = InMemoryEmployeeDirectory(employees)
    return _wire(
        transactions=store,
        attendance_repo=InMemoryAttendanceRepository(store),
        regularization_repo=InMemoryRegularizationRepository(store),
        identity=directory,
        directory=directory,
        policy=policy or AttendancePolicy(),
        default_limit=default_limit,
        max_limit=max_limit,
    )


def build_container(*, settings: Any) -> Container:
    """Wire services for the storage backend named by ``settings.STORAGE``."""

    storage = str(getattr(settings, "STORAGE", "mysql")).strip().lower()
    policy = AttendancePolicy.from_settings(settings)
    default_limit = int(getattr(settings, "DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE))
    max_limit = int(getattr(settings, "MAX_PAGE_SIZE", MAX_PAGE_SIZE))

    if storage == "memory":
        return build_memory_container(policy=policy, default_limit=default_limit, max_limit=max_limit)
    if storage == "mysql":
        return build_mysql_container(
            db_config=getattr(settings, "DB_CONFIG"),
            policy=policy,
            default_limit=default_limit,
            max_limit=max_limit,
        )
    raise ValueError(f"Unknown STORAGE backend: {storage!r}")
