"""
sql_infrastructure.py

Relational implementation of the repository interfaces and the Unit of Work,
built on SQLAlchemy Core.

Schema
------
    employee          – login, contact, role and primary skill
    role              – catalogue of skill tags
    employee_role     – employee ↔ skill tag
    project
    project_employee  – project membership
    sub_project       → project
    task              → sub_project, employee (assignee)
    sub_task          → task

Integer keys are auto-incremented by the database.  Enums are stored by
machine name, dates as SQL DATE.  Cascading deletes are issued explicitly,
children first, so they work whether or not the backend enforces foreign
keys (SQLite does not by default).

Usage
-----
    engine = create_store("sqlite:///projecthub.db")
    uow = SqlAlchemyUnitOfWork(engine)
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine

from projecthub.application import (
    AbstractEmployeeRepository,
    AbstractProjectRepository,
    AbstractSubProjectRepository,
    AbstractSubTaskRepository,
    AbstractTaskRepository,
    AbstractUnitOfWork,
)
from projecthub.logs import get_logger
from projecthub.model import (
    Employee,
    EmployeeRole,
    Priority,
    Project,
    Skill,
    Status,
    SubProject,
    SubTask,
    Task,
)

logger = get_logger(__name__)

metadata = MetaData()


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

employee_table = Table(
    "employee", metadata,
    Column("employee_id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(100), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("email", String(255), nullable=False, default=""),
    Column("employee_role", String(32), nullable=False),
    Column("skill", String(64)),
)

role_table = Table(
    "role", metadata,
    Column("role_id", Integer, primary_key=True, autoincrement=True),
    Column("role_name", String(64), nullable=False, unique=True),
)

employee_role_table = Table(
    "employee_role", metadata,
    Column("employee_role_id", Integer, primary_key=True, autoincrement=True),
    Column("employee_id", Integer, ForeignKey("employee.employee_id", ondelete="CASCADE"), nullable=False),
    Column("role_id", Integer, ForeignKey("role.role_id", ondelete="CASCADE"), nullable=False),
    UniqueConstraint("employee_id", "role_id"),
)

project_table = Table(
    "project", metadata,
    Column("project_id", Integer, primary_key=True, autoincrement=True),
    Column("project_name", String(200), nullable=False),
    Column("project_description", Text, nullable=False, default=""),
    Column("project_customer", String(200), nullable=False, default=""),
    Column("project_start_date", Date),
    Column("project_deadline", Date),
    Column("project_duration", Integer, nullable=False, default=0),
)

project_employee_table = Table(
    "project_employee", metadata,
    Column("project_employee_id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", Integer, ForeignKey("project.project_id", ondelete="CASCADE"), nullable=False),
    Column("employee_id", Integer, ForeignKey("employee.employee_id", ondelete="CASCADE"), nullable=False),
    UniqueConstraint("project_id", "employee_id"),
)

sub_project_table = Table(
    "sub_project", metadata,
    Column("sub_project_id", Integer, primary_key=True, autoincrement=True),
    Column("project_id", Integer, ForeignKey("project.project_id", ondelete="CASCADE"), nullable=False),
    Column("sub_project_name", String(200), nullable=False),
    Column("sub_project_description", Text, nullable=False, default=""),
    Column("sub_project_status", String(32), nullable=False),
    Column("sub_project_start_date", Date),
    Column("sub_project_deadline", Date),
    Column("sub_project_duration", Integer, nullable=False, default=0),
)

task_table = Table(
    "task", metadata,
    Column("task_id", Integer, primary_key=True, autoincrement=True),
    Column("sub_project_id", Integer, ForeignKey("sub_project.sub_project_id", ondelete="CASCADE"), nullable=False),
    Column("employee_id", Integer, ForeignKey("employee.employee_id"), nullable=False),
    Column("task_name", String(200), nullable=False),
    Column("task_description", Text, nullable=False, default=""),
    Column("task_status", String(32), nullable=False),
    Column("task_priority", String(32), nullable=False),
    Column("task_note", Text, nullable=False, default=""),
    Column("task_start_date", Date),
    Column("task_deadline", Date),
    Column("task_duration", Integer, nullable=False, default=0),
)

sub_task_table = Table(
    "sub_task", metadata,
    Column("sub_task_id", Integer, primary_key=True, autoincrement=True),
    Column("task_id", Integer, ForeignKey("task.task_id", ondelete="CASCADE"), nullable=False),
    Column("sub_task_name", String(200), nullable=False),
    Column("sub_task_description", Text, nullable=False, default=""),
    Column("sub_task_status", String(32), nullable=False),
    Column("sub_task_priority", String(32), nullable=False),
    Column("sub_task_note", Text, nullable=False, default=""),
    Column("sub_task_start_date", Date),
    Column("sub_task_deadline", Date),
    Column("sub_task_duration", Integer, nullable=False, default=0),
)


def create_store(url: str, echo: bool = False) -> Engine:
    """Create an engine for ``url`` and make sure every table exists."""
    engine = create_engine(url, echo=echo)
    metadata.create_all(engine)
    logger.info("Relational store ready at %s", engine.url.render_as_string(hide_password=True))
    return engine


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------

def _project_values(p: Project) -> dict:
    return {
        "project_name": p.name,
        "project_description": p.description,
        "project_customer": p.customer,
        "project_start_date": p.start_date,
        "project_deadline": p.deadline,
        "project_duration": p.duration,
    }


def _row_to_project(row) -> Project:
    return Project(
        id=row.project_id,
        name=row.project_name,
        description=row.project_description,
        customer=row.project_customer,
        start_date=row.project_start_date,
        deadline=row.project_deadline,
    )


def _sub_project_values(sp: SubProject) -> dict:
    return {
        "project_id": sp.project_id,
        "sub_project_name": sp.name,
        "sub_project_description": sp.description,
        "sub_project_status": sp.status.value,
        "sub_project_start_date": sp.start_date,
        "sub_project_deadline": sp.deadline,
        "sub_project_duration": sp.duration,
    }


def _row_to_sub_project(row) -> SubProject:
    return SubProject(
        id=row.sub_project_id,
        project_id=row.project_id,
        name=row.sub_project_name,
        description=row.sub_project_description,
        status=Status(row.sub_project_status),
        start_date=row.sub_project_start_date,
        deadline=row.sub_project_deadline,
    )


def _task_values(t: Task) -> dict:
    return {
        "sub_project_id": t.sub_project_id,
        "employee_id": t.employee_id,
        "task_name": t.name,
        "task_description": t.description,
        "task_status": t.status.value,
        "task_priority": t.priority.value,
        "task_note": t.note,
        "task_start_date": t.start_date,
        "task_deadline": t.deadline,
        "task_duration": t.duration,
    }


def _row_to_task(row) -> Task:
    return Task(
        id=row.task_id,
        sub_project_id=row.sub_project_id,
        employee_id=row.employee_id,
        name=row.task_name,
        description=row.task_description,
        status=Status(row.task_status),
        priority=Priority(row.task_priority),
        note=row.task_note,
        start_date=row.task_start_date,
        deadline=row.task_deadline,
    )


def _sub_task_values(st: SubTask) -> dict:
    return {
        "task_id": st.task_id,
        "sub_task_name": st.name,
        "sub_task_description": st.description,
        "sub_task_status": st.status.value,
        "sub_task_priority": st.priority.value,
        "sub_task_note": st.note,
        "sub_task_start_date": st.start_date,
        "sub_task_deadline": st.deadline,
        "sub_task_duration": st.duration,
    }


def _row_to_sub_task(row) -> SubTask:
    return SubTask(
        id=row.sub_task_id,
        task_id=row.task_id,
        name=row.sub_task_name,
        description=row.sub_task_description,
        status=Status(row.sub_task_status),
        priority=Priority(row.sub_task_priority),
        note=row.sub_task_note,
        start_date=row.sub_task_start_date,
        deadline=row.sub_task_deadline,
    )


# ---------------------------------------------------------------------------
# Repository implementations
# ---------------------------------------------------------------------------

class SqlEmployeeRepository(AbstractEmployeeRepository):
    def __init__(self, conn: Connection):
        self._conn = conn

    def _skills_for(self, employee_id: int) -> List[Skill]:
        rows = self._conn.execute(
            select(role_table.c.role_name)
            .join(employee_role_table, employee_role_table.c.role_id == role_table.c.role_id)
            .where(employee_role_table.c.employee_id == employee_id)
            .order_by(employee_role_table.c.employee_role_id)
        ).fetchall()
        return [Skill(r.role_name) for r in rows]

    def _role_id(self, skill: Skill) -> int:
        row = self._conn.execute(
            select(role_table.c.role_id).where(role_table.c.role_name == skill.value)
        ).fetchone()
        if row:
            return row.role_id
        result = self._conn.execute(insert(role_table).values(role_name=skill.value))
        return result.inserted_primary_key[0]

    def _to_employee(self, row) -> Employee:
        return Employee(
            id=row.employee_id,
            username=row.username,
            password=row.password,
            email=row.email,
            role=EmployeeRole(row.employee_role),
            skill=Skill(row.skill) if row.skill else None,
            skills=self._skills_for(row.employee_id),
        )

    def add(self, employee: Employee) -> int:
        result = self._conn.execute(
            insert(employee_table).values(
                username=employee.username,
                password=employee.password,
                email=employee.email,
                employee_role=employee.role.value,
                skill=employee.skill.value if employee.skill else None,
            )
        )
        employee.id = result.inserted_primary_key[0]
        for skill in employee.skills:
            self._conn.execute(
                insert(employee_role_table).values(
                    employee_id=employee.id, role_id=self._role_id(skill)
                )
            )
        return employee.id

    def get(self, employee_id: int) -> Optional[Employee]:
        row = self._conn.execute(
            select(employee_table).where(employee_table.c.employee_id == employee_id)
        ).fetchone()
        return self._to_employee(row) if row else None

    def get_by_username(self, username: str) -> Optional[Employee]:
        row = self._conn.execute(
            select(employee_table).where(employee_table.c.username == username)
        ).fetchone()
        return self._to_employee(row) if row else None

    def list_all(self) -> List[Employee]:
        rows = self._conn.execute(
            select(employee_table).order_by(employee_table.c.employee_id)
        ).fetchall()
        return [self._to_employee(r) for r in rows]

    def list_by_role(self, role: EmployeeRole) -> List[Employee]:
        rows = self._conn.execute(
            select(employee_table)
            .where(employee_table.c.employee_role == role.value)
            .order_by(employee_table.c.employee_id)
        ).fetchall()
        return [self._to_employee(r) for r in rows]

    def validate_login(self, username: str, password: str) -> int:
        row = self._conn.execute(
            select(employee_table.c.employee_id).where(
                employee_table.c.username == username,
                employee_table.c.password == password,
            )
        ).fetchone()
        return row.employee_id if row else 0


class SqlProjectRepository(AbstractProjectRepository):
    def __init__(self, conn: Connection):
        self._conn = conn

    def add(self, project: Project) -> int:
        result = self._conn.execute(insert(project_table).values(**_project_values(project)))
        project.id = result.inserted_primary_key[0]
        return project.id

    def get(self, project_id: int) -> Optional[Project]:
        row = self._conn.execute(
            select(project_table).where(project_table.c.project_id == project_id)
        ).fetchone()
        return _row_to_project(row) if row else None

    def update(self, project: Project) -> bool:
        result = self._conn.execute(
            update(project_table)
            .where(project_table.c.project_id == project.id)
            .values(**_project_values(project))
        )
        return result.rowcount > 0

    def delete(self, project_id: int) -> bool:
        sub_project_ids = select(sub_project_table.c.sub_project_id).where(
            sub_project_table.c.project_id == project_id
        )
        task_ids = select(task_table.c.task_id).where(
            task_table.c.sub_project_id.in_(sub_project_ids)
        )
        self._conn.execute(delete(sub_task_table).where(sub_task_table.c.task_id.in_(task_ids)))
        self._conn.execute(delete(task_table).where(task_table.c.sub_project_id.in_(sub_project_ids)))
        self._conn.execute(delete(sub_project_table).where(sub_project_table.c.project_id == project_id))
        self._conn.execute(
            delete(project_employee_table).where(project_employee_table.c.project_id == project_id)
        )
        result = self._conn.execute(delete(project_table).where(project_table.c.project_id == project_id))
        return result.rowcount > 0

    def list_for_employee(self, employee_id: int) -> List[Project]:
        rows = self._conn.execute(
            select(project_table)
            .join(project_employee_table,
                  project_employee_table.c.project_id == project_table.c.project_id)
            .where(project_employee_table.c.employee_id == employee_id)
            .order_by(project_table.c.project_id)
        ).fetchall()
        return [_row_to_project(r) for r in rows]

    def add_member(self, employee_id: int, project_id: int) -> None:
        if employee_id in self.member_ids(project_id):
            return
        self._conn.execute(
            insert(project_employee_table).values(project_id=project_id, employee_id=employee_id)
        )

    def member_ids(self, project_id: int) -> List[int]:
        rows = self._conn.execute(
            select(project_employee_table.c.employee_id)
            .where(project_employee_table.c.project_id == project_id)
            .order_by(project_employee_table.c.project_employee_id)
        ).fetchall()
        return [r.employee_id for r in rows]

    def list_members(self, project_id: int) -> List[Employee]:
        employees = SqlEmployeeRepository(self._conn)
        ids = set(self.member_ids(project_id))
        return [e for e in employees.list_all() if e.id in ids]

    def list_available(self, project_id: int) -> List[Employee]:
        employees = SqlEmployeeRepository(self._conn)
        ids = set(self.member_ids(project_id))
        return [e for e in employees.list_all() if e.id not in ids]


class SqlSubProjectRepository(AbstractSubProjectRepository):
    def __init__(self, conn: Connection):
        self._conn = conn

    def add(self, sub_project: SubProject) -> int:
        result = self._conn.execute(
            insert(sub_project_table).values(**_sub_project_values(sub_project))
        )
        sub_project.id = result.inserted_primary_key[0]
        return sub_project.id

    def get(self, sub_project_id: int) -> Optional[SubProject]:
        row = self._conn.execute(
            select(sub_project_table).where(sub_project_table.c.sub_project_id == sub_project_id)
        ).fetchone()
        return _row_to_sub_project(row) if row else None

    def update(self, sub_project: SubProject) -> bool:
        result = self._conn.execute(
            update(sub_project_table)
            .where(sub_project_table.c.sub_project_id == sub_project.id)
            .values(**_sub_project_values(sub_project))
        )
        return result.rowcount > 0

    def delete(self, sub_project_id: int) -> bool:
        task_ids = select(task_table.c.task_id).where(task_table.c.sub_project_id == sub_project_id)
        self._conn.execute(delete(sub_task_table).where(sub_task_table.c.task_id.in_(task_ids)))
        self._conn.execute(delete(task_table).where(task_table.c.sub_project_id == sub_project_id))
        result = self._conn.execute(
            delete(sub_project_table).where(sub_project_table.c.sub_project_id == sub_project_id)
        )
        return result.rowcount > 0

    def list_for_project(self, project_id: int) -> List[SubProject]:
        rows = self._conn.execute(
            select(sub_project_table)
            .where(sub_project_table.c.project_id == project_id)
            .order_by(sub_project_table.c.sub_project_id)
        ).fetchall()
        return [_row_to_sub_project(r) for r in rows]


class SqlTaskRepository(AbstractTaskRepository):
    def __init__(self, conn: Connection):
        self._conn = conn

    def add(self, task: Task) -> int:
        result = self._conn.execute(insert(task_table).values(**_task_values(task)))
        task.id = result.inserted_primary_key[0]
        return task.id

    def get(self, task_id: int) -> Optional[Task]:
        row = self._conn.execute(
            select(task_table).where(task_table.c.task_id == task_id)
        ).fetchone()
        return _row_to_task(row) if row else None

    def update(self, task: Task) -> bool:
        result = self._conn.execute(
            update(task_table).where(task_table.c.task_id == task.id).values(**_task_values(task))
        )
        return result.rowcount > 0

    def delete(self, task_id: int) -> bool:
        self._conn.execute(delete(sub_task_table).where(sub_task_table.c.task_id == task_id))
        result = self._conn.execute(delete(task_table).where(task_table.c.task_id == task_id))
        return result.rowcount > 0

    def list_for_sub_project(self, sub_project_id: int) -> List[Task]:
        rows = self._conn.execute(
            select(task_table)
            .where(task_table.c.sub_project_id == sub_project_id)
            .order_by(task_table.c.task_id)
        ).fetchall()
        return [_row_to_task(r) for r in rows]

    def list_for_employee(self, employee_id: int) -> List[Task]:
        rows = self._conn.execute(
            select(task_table)
            .where(task_table.c.employee_id == employee_id)
            .order_by(task_table.c.task_id)
        ).fetchall()
        return [_row_to_task(r) for r in rows]


class SqlSubTaskRepository(AbstractSubTaskRepository):
    def __init__(self, conn: Connection):
        self._conn = conn

    def add(self, sub_task: SubTask) -> int:
        result = self._conn.execute(insert(sub_task_table).values(**_sub_task_values(sub_task)))
        sub_task.id = result.inserted_primary_key[0]
        return sub_task.id

    def get(self, sub_task_id: int) -> Optional[SubTask]:
        row = self._conn.execute(
            select(sub_task_table).where(sub_task_table.c.sub_task_id == sub_task_id)
        ).fetchone()
        return _row_to_sub_task(row) if row else None

    def update(self, sub_task: SubTask) -> bool:
        result = self._conn.execute(
            update(sub_task_table)
            .where(sub_task_table.c.sub_task_id == sub_task.id)
            .values(**_sub_task_values(sub_task))
        )
        return result.rowcount > 0

    def delete(self, sub_task_id: int) -> bool:
        result = self._conn.execute(
            delete(sub_task_table).where(sub_task_table.c.sub_task_id == sub_task_id)
        )
        return result.rowcount > 0

    def list_for_task(self, task_id: int) -> List[SubTask]:
        rows = self._conn.execute(
            select(sub_task_table)
            .where(sub_task_table.c.task_id == task_id)
            .order_by(sub_task_table.c.sub_task_id)
        ).fetchall()
        return [_row_to_sub_task(r) for r in rows]


# ---------------------------------------------------------------------------
# Unit of Work
# ---------------------------------------------------------------------------

class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Opens one connection (and transaction) per ``with`` block.  Leaving the
    block commits, or rolls back when an exception escapes.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._conn: Optional[Connection] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self._conn = self._engine.connect()
        self.employees = SqlEmployeeRepository(self._conn)
        self.projects = SqlProjectRepository(self._conn)
        self.sub_projects = SqlSubProjectRepository(self._conn)
        self.tasks = SqlTaskRepository(self._conn)
        self.sub_tasks = SqlSubTaskRepository(self._conn)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            self._conn.close()
            self._conn = None

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()
