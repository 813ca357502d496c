"""
application.py

Application layer for the projecthub work-item tracker.

Overview
--------
The application layer sits between the presentation layer (API) and the
domain / service layer.  It is responsible for:

  1. Defining clean output DTOs (dataclasses) that carry only the data the
     presentation layer needs; no raw domain objects (and no passwords)
     are leaked upward.
  2. Declaring abstract Repository interfaces so that the application layer
     remains fully persistence-agnostic (implementations live in
     infrastructure.py and sql_infrastructure.py).
  3. Declaring the UnitOfWork abstraction so that the repository calls of a
     single use case share one transactional boundary.
  4. Implementing Use Case handlers, one class per user-facing operation,
     that ask the AccessPolicy first and only then read or write.

Structure
---------
DTOs
    EmployeeDTO, ProjectDTO, SubProjectDTO, TaskDTO, SubTaskDTO

Repository interfaces
    AbstractEmployeeRepository
    AbstractProjectRepository
    AbstractSubProjectRepository
    AbstractTaskRepository
    AbstractSubTaskRepository

Unit of Work
    AbstractUnitOfWork

Use Cases
    --- Employees ---
    CreateEmployeeUseCase, LoginUseCase, GetEmployeeUseCase,
    ListEmployeesUseCase, ListTeamMembersUseCase

    --- Projects ---
    CreateProjectUseCase, UpdateProjectUseCase, GetProjectUseCase,
    ShowProjectsByEmployeeUseCase, DeleteProjectUseCase,
    AddEmployeeToProjectUseCase, ListProjectMembersUseCase,
    ListAvailableEmployeesUseCase

    --- Sub-projects ---
    CreateSubProjectUseCase, ShowSubProjectsByProjectUseCase,
    DeleteSubProjectUseCase

    --- Tasks ---
    CreateTaskUseCase, ShowTasksForEmployeeUseCase, GetTaskUseCase,
    UpdateTaskStatusUseCase, UpdateTaskNoteUseCase, DeleteTaskUseCase

    --- Sub-tasks ---
    CreateSubTaskUseCase, ShowSubTasksByTaskUseCase,
    UpdateSubTaskStatusUseCase, DeleteSubTaskUseCase

Design notes
------------
- Use cases receive commands / ids and return DTOs only.
- A permission denial is not an error: the use case logs it and returns
  None before touching any repository, and the presentation layer sends
  the user back to a safe view.
- Errors bubble up as NotFoundError, ValidationError (carrying the
  submitted fields for re-display) or InvalidCredentialsError.
- Dates flowing out are ISO-8601 strings; enums flow out by machine name.
"""

from __future__ import annotations

import abc
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from projecthub.logs import get_logger
from projecthub.model import (
    Employee,
    EmployeeRole,
    Priority,
    Project,
    Status,
    SubProject,
    SubTask,
    Task,
)
from projecthub.service import (
    AccessPolicy,
    EmployeeService,
    ProjectService,
    SubProjectService,
    SubTaskService,
    TaskService,
)

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ApplicationError(Exception):
    """Raised when a use case cannot complete due to a business rule violation."""


class NotFoundError(ApplicationError):
    """Raised when a requested entity does not exist."""


class ValidationError(ApplicationError):
    """
    Raised when submitted input is rejected before any write.

    ``fields`` holds the original input so the caller can re-display it.
    """

    def __init__(self, message: str, fields: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.fields = dict(fields or {})


class InvalidCredentialsError(ApplicationError):
    """Raised when a login does not match any employee."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fmt_date(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d else None


def _fields(cmd: Any) -> Dict[str, Any]:
    """Submitted input for re-display, minus anything secret."""
    data = asdict(cmd) if is_dataclass(cmd) else dict(cmd)
    data.pop("password", None)
    return data


# ===========================================================================
# DTO DEFINITIONS
# ===========================================================================

@dataclass
class EmployeeDTO:
    id: int
    username: str
    email: str
    role: str
    role_display: str
    skill: Optional[str]
    skills: List[str]


@dataclass
class ProjectDTO:
    id: int
    name: str
    description: str
    customer: str
    start_date: Optional[str]
    deadline: Optional[str]
    duration: int


@dataclass
class SubProjectDTO:
    id: int
    project_id: int
    name: str
    description: str
    status: str
    start_date: Optional[str]
    deadline: Optional[str]
    duration: int


@dataclass
class TaskDTO:
    id: int
    sub_project_id: int
    employee_id: int
    name: str
    description: str
    status: str
    status_display: str
    priority: str
    note: str
    start_date: Optional[str]
    deadline: Optional[str]
    duration: int


@dataclass
class SubTaskDTO:
    id: int
    task_id: int
    name: str
    description: str
    status: str
    status_display: str
    priority: str
    note: str
    start_date: Optional[str]
    deadline: Optional[str]
    duration: int


# ===========================================================================
# DTO ASSEMBLERS
# ===========================================================================

class _Assembler:
    """Converts domain model instances into DTOs."""

    @staticmethod
    def employee(e: Employee) -> EmployeeDTO:
        return EmployeeDTO(
            id=e.id,
            username=e.username,
            email=e.email,
            role=e.role.value,
            role_display=e.role.display_name,
            skill=e.skill.value if e.skill else None,
            skills=[s.value for s in e.skills],
        )

    @staticmethod
    def project(p: Project) -> ProjectDTO:
        return ProjectDTO(
            id=p.id,
            name=p.name,
            description=p.description,
            customer=p.customer,
            start_date=_fmt_date(p.start_date),
            deadline=_fmt_date(p.deadline),
            duration=p.duration,
        )

    @staticmethod
    def sub_project(sp: SubProject) -> SubProjectDTO:
        return SubProjectDTO(
            id=sp.id,
            project_id=sp.project_id,
            name=sp.name,
            description=sp.description,
            status=sp.status.value,
            start_date=_fmt_date(sp.start_date),
            deadline=_fmt_date(sp.deadline),
            duration=sp.duration,
        )

    @staticmethod
    def task(t: Task) -> TaskDTO:
        return TaskDTO(
            id=t.id,
            sub_project_id=t.sub_project_id,
            employee_id=t.employee_id,
            name=t.name,
            description=t.description,
            status=t.status.value,
            status_display=t.status.display_name,
            priority=t.priority.value,
            note=t.note,
            start_date=_fmt_date(t.start_date),
            deadline=_fmt_date(t.deadline),
            duration=t.duration,
        )

    @staticmethod
    def sub_task(st: SubTask) -> SubTaskDTO:
        return SubTaskDTO(
            id=st.id,
            task_id=st.task_id,
            name=st.name,
            description=st.description,
            status=st.status.value,
            status_display=st.status.display_name,
            priority=st.priority.value,
            note=st.note,
            start_date=_fmt_date(st.start_date),
            deadline=_fmt_date(st.deadline),
            duration=st.duration,
        )


# ===========================================================================
# REPOSITORY INTERFACES
# ===========================================================================

class AbstractEmployeeRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, employee: Employee) -> int: ...
    @abc.abstractmethod
    def get(self, employee_id: int) -> Optional[Employee]: ...
    @abc.abstractmethod
    def get_by_username(self, username: str) -> Optional[Employee]: ...
    @abc.abstractmethod
    def list_all(self) -> List[Employee]: ...
    @abc.abstractmethod
    def list_by_role(self, role: EmployeeRole) -> List[Employee]: ...

    @abc.abstractmethod
    def validate_login(self, username: str, password: str) -> int:
        """Return the matching employee id, or 0 when nothing matches."""


class AbstractProjectRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, project: Project) -> int: ...
    @abc.abstractmethod
    def get(self, project_id: int) -> Optional[Project]: ...
    @abc.abstractmethod
    def update(self, project: Project) -> bool: ...

    @abc.abstractmethod
    def delete(self, project_id: int) -> bool:
        """Remove the project, its member links and every descendant."""

    @abc.abstractmethod
    def list_for_employee(self, employee_id: int) -> List[Project]: ...
    @abc.abstractmethod
    def add_member(self, employee_id: int, project_id: int) -> None: ...
    @abc.abstractmethod
    def member_ids(self, project_id: int) -> List[int]: ...
    @abc.abstractmethod
    def list_members(self, project_id: int) -> List[Employee]: ...

    @abc.abstractmethod
    def list_available(self, project_id: int) -> List[Employee]:
        """Employees that are not yet members of the project."""


class AbstractSubProjectRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, sub_project: SubProject) -> int: ...
    @abc.abstractmethod
    def get(self, sub_project_id: int) -> Optional[SubProject]: ...
    @abc.abstractmethod
    def update(self, sub_project: SubProject) -> bool: ...
    @abc.abstractmethod
    def delete(self, sub_project_id: int) -> bool: ...
    @abc.abstractmethod
    def list_for_project(self, project_id: int) -> List[SubProject]: ...


class AbstractTaskRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, task: Task) -> int: ...
    @abc.abstractmethod
    def get(self, task_id: int) -> Optional[Task]: ...
    @abc.abstractmethod
    def update(self, task: Task) -> bool: ...
    @abc.abstractmethod
    def delete(self, task_id: int) -> bool: ...
    @abc.abstractmethod
    def list_for_sub_project(self, sub_project_id: int) -> List[Task]: ...
    @abc.abstractmethod
    def list_for_employee(self, employee_id: int) -> List[Task]: ...


class AbstractSubTaskRepository(abc.ABC):
    @abc.abstractmethod
    def add(self, sub_task: SubTask) -> int: ...
    @abc.abstractmethod
    def get(self, sub_task_id: int) -> Optional[SubTask]: ...
    @abc.abstractmethod
    def update(self, sub_task: SubTask) -> bool: ...
    @abc.abstractmethod
    def delete(self, sub_task_id: int) -> bool: ...
    @abc.abstractmethod
    def list_for_task(self, task_id: int) -> List[SubTask]: ...


# ===========================================================================
# UNIT OF WORK
# ===========================================================================

class AbstractUnitOfWork(abc.ABC):
    """
    Groups all repositories under a single transactional boundary.
    Use as a context manager:

        with uow:
            uow.projects.add(project)
            uow.commit()
    """
    employees: AbstractEmployeeRepository
    projects: AbstractProjectRepository
    sub_projects: AbstractSubProjectRepository
    tasks: AbstractTaskRepository
    sub_tasks: AbstractSubTaskRepository

    def __enter__(self) -> "AbstractUnitOfWork":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type:
            self.rollback()
        else:
            self.commit()

    @abc.abstractmethod
    def commit(self) -> None: ...

    @abc.abstractmethod
    def rollback(self) -> None: ...


# ===========================================================================
# SERVICE SINGLETONS (shared across use cases)
# ===========================================================================

_policy = AccessPolicy()
_employee_svc = EmployeeService()
_project_svc = ProjectService()
_sub_project_svc = SubProjectService()
_task_svc = TaskService()
_sub_task_svc = SubTaskService()


# ===========================================================================
# USE CASE HELPERS
# ===========================================================================

def _get_employee_or_raise(uow: AbstractUnitOfWork, employee_id: int) -> Employee:
    employee = uow.employees.get(employee_id)
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found.")
    return employee


def _get_project_or_raise(uow: AbstractUnitOfWork, project_id: int) -> Project:
    project = uow.projects.get(project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found.")
    return project


def _get_sub_project_or_raise(uow: AbstractUnitOfWork, sub_project_id: int) -> SubProject:
    sub_project = uow.sub_projects.get(sub_project_id)
    if sub_project is None:
        raise NotFoundError(f"SubProject {sub_project_id} not found.")
    return sub_project


def _get_task_or_raise(uow: AbstractUnitOfWork, task_id: int) -> Task:
    task = uow.tasks.get(task_id)
    if task is None:
        raise NotFoundError(f"Task {task_id} not found.")
    return task


def _get_sub_task_or_raise(uow: AbstractUnitOfWork, sub_task_id: int) -> SubTask:
    sub_task = uow.sub_tasks.get(sub_task_id)
    if sub_task is None:
        raise NotFoundError(f"SubTask {sub_task_id} not found.")
    return sub_task


def _denied(actor: Employee, action: str) -> None:
    logger.info("Employee %s (%s) may not %s; redirecting", actor.id, actor.role.value, action)
    return None


# ===========================================================================
# USE CASES — EMPLOYEES
# ===========================================================================

@dataclass
class CreateEmployeeCommand:
    username: str
    password: str
    email: str
    role: Optional[str]
    skill: Optional[str]
    skills: List[str] = field(default_factory=list)


class CreateEmployeeUseCase:
    """
    Register a new employee.  A role and a primary skill must be chosen;
    both may be given by machine name or display name.
    """

    def execute(self, cmd: CreateEmployeeCommand, uow: AbstractUnitOfWork) -> EmployeeDTO:
        with uow:
            try:
                employee = _employee_svc.create_employee(
                    username=cmd.username,
                    password=cmd.password,
                    email=cmd.email,
                    role=cmd.role,
                    skill=cmd.skill,
                    skills=cmd.skills,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), _fields(cmd)) from exc
            if uow.employees.get_by_username(employee.username) is not None:
                raise ValidationError(
                    f"Username '{employee.username}' is already taken.", _fields(cmd)
                )
            uow.employees.add(employee)
            uow.commit()
            logger.info("Created employee %s (%s)", employee.id, employee.role.value)
            return _Assembler.employee(employee)


class LoginUseCase:
    """Resolve credentials to an employee; the store's 0 sentinel means no match."""

    def execute(self, username: str, password: str, uow: AbstractUnitOfWork) -> EmployeeDTO:
        with uow:
            employee_id = uow.employees.validate_login(username, password)
            if employee_id == 0:
                logger.warning("Failed login for username %r", username)
                raise InvalidCredentialsError("Invalid username or password. Please try again.")
            return _Assembler.employee(_get_employee_or_raise(uow, employee_id))


class GetEmployeeUseCase:
    def execute(self, employee_id: int, uow: AbstractUnitOfWork) -> EmployeeDTO:
        with uow:
            return _Assembler.employee(_get_employee_or_raise(uow, employee_id))


class ListEmployeesUseCase:
    def execute(self, uow: AbstractUnitOfWork) -> List[EmployeeDTO]:
        with uow:
            return [_Assembler.employee(e) for e in uow.employees.list_all()]


class ListTeamMembersUseCase:
    def execute(self, uow: AbstractUnitOfWork) -> List[EmployeeDTO]:
        with uow:
            return [
                _Assembler.employee(e)
                for e in uow.employees.list_by_role(EmployeeRole.TEAM_MEMBER)
            ]


# ===========================================================================
# USE CASES — PROJECTS
# ===========================================================================

@dataclass
class CreateProjectCommand:
    name: str
    description: str
    customer: str
    start_date: Optional[date]
    deadline: Optional[date]
    acting_employee_id: int


class CreateProjectUseCase:
    """
    Create a project and register the creating manager as its first member.
    Returns None when the acting employee is not a manager.
    """

    def execute(self, cmd: CreateProjectCommand, uow: AbstractUnitOfWork) -> Optional[ProjectDTO]:
        with uow:
            actor = _get_employee_or_raise(uow, cmd.acting_employee_id)
            if not _policy.can_manage_project(actor):
                return _denied(actor, "create projects")
            try:
                project = _project_svc.create_project(
                    name=cmd.name,
                    description=cmd.description,
                    customer=cmd.customer,
                    start_date=cmd.start_date,
                    deadline=cmd.deadline,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), _fields(cmd)) from exc
            uow.projects.add(project)
            uow.projects.add_member(actor.id, project.id)
            uow.commit()
            logger.info("Employee %s created project %s", actor.id, project.id)
            return _Assembler.project(project)


@dataclass
class UpdateProjectCommand:
    project_id: int
    acting_employee_id: int
    name: Optional[str] = None
    description: Optional[str] = None
    customer: Optional[str] = None
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    clear_start_date: bool = False
    clear_deadline: bool = False


class UpdateProjectUseCase:
    def execute(self, cmd: UpdateProjectCommand, uow: AbstractUnitOfWork) -> Optional[ProjectDTO]:
        with uow:
            actor = _get_employee_or_raise(uow, cmd.acting_employee_id)
            if not _policy.can_manage_project(actor):
                return _denied(actor, "edit projects")
            project = _get_project_or_raise(uow, cmd.project_id)
            try:
                project = _project_svc.update_project(
                    project,
                    name=cmd.name,
                    description=cmd.description,
                    customer=cmd.customer,
                    start_date=cmd.start_date,
                    deadline=cmd.deadline,
                    clear_start_date=cmd.clear_start_date,
                    clear_deadline=cmd.clear_deadline,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), _fields(cmd)) from exc
            if not uow.projects.update(project):
                raise NotFoundError(f"Project {cmd.project_id} not found.")
            uow.commit()
            return _Assembler.project(project)


class GetProjectUseCase:
    def execute(self, project_id: int, uow: AbstractUnitOfWork) -> ProjectDTO:
        with uow:
            return _Assembler.project(_get_project_or_raise(uow, project_id))


class ShowProjectsByEmployeeUseCase:
    """Projects the employee is a member of, in creation order."""

    def execute(self, employee_id: int, uow: AbstractUnitOfWork) -> List[ProjectDTO]:
        with uow:
            _get_employee_or_raise(uow, employee_id)
            return [_Assembler.project(p) for p in uow.projects.list_for_employee(employee_id)]


class DeleteProjectUseCase:
    """
    Delete a project; the store cascades to sub-projects, tasks, sub-tasks
    and member links.  Returns True, or None when the actor is not allowed.
    """

    def execute(
        self,
        project_id: int,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[bool]:
        with uow:
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                if not _policy.can_manage_project(actor):
                    return _denied(actor, "delete projects")
            if not uow.projects.delete(project_id):
                raise NotFoundError(f"Project {project_id} not found.")
            uow.commit()
            logger.info("Deleted project %s", project_id)
            return True


@dataclass
class AddEmployeeToProjectCommand:
    project_id: int
    employee_id: int
    acting_employee_id: int


class AddEmployeeToProjectUseCase:
    """Add a member; returns the updated member list (None when denied)."""

    def execute(
        self, cmd: AddEmployeeToProjectCommand, uow: AbstractUnitOfWork
    ) -> Optional[List[EmployeeDTO]]:
        with uow:
            actor = _get_employee_or_raise(uow, cmd.acting_employee_id)
            if not _policy.can_manage_project(actor):
                return _denied(actor, "change project members")
            _get_project_or_raise(uow, cmd.project_id)
            _get_employee_or_raise(uow, cmd.employee_id)
            uow.projects.add_member(cmd.employee_id, cmd.project_id)
            uow.commit()
            return [_Assembler.employee(e) for e in uow.projects.list_members(cmd.project_id)]


class ListProjectMembersUseCase:
    def execute(self, project_id: int, uow: AbstractUnitOfWork) -> List[EmployeeDTO]:
        with uow:
            _get_project_or_raise(uow, project_id)
            return [_Assembler.employee(e) for e in uow.projects.list_members(project_id)]


class ListAvailableEmployeesUseCase:
    def execute(self, project_id: int, uow: AbstractUnitOfWork) -> List[EmployeeDTO]:
        with uow:
            _get_project_or_raise(uow, project_id)
            return [_Assembler.employee(e) for e in uow.projects.list_available(project_id)]


# ===========================================================================
# USE CASES — SUB-PROJECTS
# ===========================================================================

@dataclass
class CreateSubProjectCommand:
    project_id: int
    name: str
    description: str
    start_date: Optional[date]
    deadline: Optional[date]
    acting_employee_id: int
    status: str = Status.NOT_STARTED.value


class CreateSubProjectUseCase:
    def execute(self, cmd: CreateSubProjectCommand, uow: AbstractUnitOfWork) -> Optional[SubProjectDTO]:
        with uow:
            actor = _get_employee_or_raise(uow, cmd.acting_employee_id)
            if not _policy.can_create_sub_project(actor):
                return _denied(actor, "create sub-projects")
            _get_project_or_raise(uow, cmd.project_id)
            try:
                sub_project = _sub_project_svc.create_sub_project(
                    project_id=cmd.project_id,
                    name=cmd.name,
                    description=cmd.description,
                    start_date=cmd.start_date,
                    deadline=cmd.deadline,
                    status=cmd.status,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), _fields(cmd)) from exc
            uow.sub_projects.add(sub_project)
            uow.commit()
            logger.info("Employee %s created sub-project %s in project %s",
                        actor.id, sub_project.id, cmd.project_id)
            return _Assembler.sub_project(sub_project)


class ShowSubProjectsByProjectUseCase:
    def execute(self, project_id: int, uow: AbstractUnitOfWork) -> List[SubProjectDTO]:
        with uow:
            _get_project_or_raise(uow, project_id)
            return [_Assembler.sub_project(sp) for sp in uow.sub_projects.list_for_project(project_id)]


class DeleteSubProjectUseCase:
    def execute(
        self,
        sub_project_id: int,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[bool]:
        with uow:
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                if not _policy.can_create_sub_project(actor):
                    return _denied(actor, "delete sub-projects")
            if not uow.sub_projects.delete(sub_project_id):
                raise NotFoundError(f"SubProject {sub_project_id} not found.")
            uow.commit()
            logger.info("Deleted sub-project %s", sub_project_id)
            return True


# ===========================================================================
# USE CASES — TASKS
# ===========================================================================

@dataclass
class CreateTaskCommand:
    sub_project_id: int
    assignee_id: int
    name: str
    description: str
    start_date: Optional[date]
    deadline: Optional[date]
    acting_employee_id: int
    status: str = Status.NOT_STARTED.value
    priority: str = Priority.MEDIUM.value
    note: str = ""


class CreateTaskUseCase:
    """
    Create a task inside a sub-project.  Only managers may create tasks, and
    the assignee must already be a member of the sub-project's project.
    """

    def execute(self, cmd: CreateTaskCommand, uow: AbstractUnitOfWork) -> Optional[TaskDTO]:
        with uow:
            actor = _get_employee_or_raise(uow, cmd.acting_employee_id)
            if not _policy.can_create_task(actor):
                return _denied(actor, "create tasks")
            sub_project = _get_sub_project_or_raise(uow, cmd.sub_project_id)
            _get_employee_or_raise(uow, cmd.assignee_id)
            if not _policy.can_be_assigned(
                cmd.assignee_id, uow.projects.member_ids(sub_project.project_id)
            ):
                raise ValidationError(
                    f"Employee {cmd.assignee_id} is not a member of project "
                    f"{sub_project.project_id}.",
                    _fields(cmd),
                )
            try:
                task = _task_svc.create_task(
                    sub_project_id=cmd.sub_project_id,
                    employee_id=cmd.assignee_id,
                    name=cmd.name,
                    description=cmd.description,
                    start_date=cmd.start_date,
                    deadline=cmd.deadline,
                    status=cmd.status,
                    priority=cmd.priority,
                    note=cmd.note,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), _fields(cmd)) from exc
            uow.tasks.add(task)
            uow.commit()
            logger.info("Employee %s created task %s for employee %s",
                        actor.id, task.id, task.employee_id)
            return _Assembler.task(task)


class ShowTasksForEmployeeUseCase:
    """
    Tasks of one sub-project as seen by an employee: everything for a
    manager, only their own assignments for a team member.
    """

    def execute(self, employee_id: int, sub_project_id: int, uow: AbstractUnitOfWork) -> List[TaskDTO]:
        with uow:
            employee = _get_employee_or_raise(uow, employee_id)
            _get_sub_project_or_raise(uow, sub_project_id)
            if _policy.is_manager(employee):
                candidates = uow.tasks.list_for_sub_project(sub_project_id)
            else:
                candidates = uow.tasks.list_for_employee(employee.id)
            visible = _policy.visible_tasks(employee, sub_project_id, candidates)
            return [_Assembler.task(t) for t in visible]


class GetTaskUseCase:
    """A single task; team members may only open their own."""

    def execute(
        self,
        task_id: int,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[TaskDTO]:
        with uow:
            task = _get_task_or_raise(uow, task_id)
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                if not _policy.can_work_on_task(actor, task):
                    return _denied(actor, f"view task {task_id}")
            return _Assembler.task(task)


class UpdateTaskStatusUseCase:
    """
    Move a task to any known status.  ``new_status`` may be a machine name
    (``IN_PROGRESS``) or a display name (``In progress``).
    """

    def execute(
        self,
        task_id: int,
        new_status: str,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[TaskDTO]:
        with uow:
            task = _get_task_or_raise(uow, task_id)
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                if not _policy.can_work_on_task(actor, task):
                    return _denied(actor, f"change status of task {task_id}")
            try:
                _task_svc.change_status(task, new_status)
            except ValueError as exc:
                raise ValidationError(str(exc), {"task_id": task_id, "status": new_status}) from exc
            if not uow.tasks.update(task):
                raise NotFoundError(f"Task {task_id} not found.")
            uow.commit()
            return _Assembler.task(task)


class UpdateTaskNoteUseCase:
    def execute(
        self,
        task_id: int,
        note: Optional[str],
        acting_employee_id: int,
        uow: AbstractUnitOfWork,
    ) -> Optional[TaskDTO]:
        with uow:
            task = _get_task_or_raise(uow, task_id)
            actor = _get_employee_or_raise(uow, acting_employee_id)
            if not _policy.can_edit_note(actor, task):
                return _denied(actor, f"edit the note of task {task_id}")
            _task_svc.change_note(task, note)
            if not uow.tasks.update(task):
                raise NotFoundError(f"Task {task_id} not found.")
            uow.commit()
            return _Assembler.task(task)


class DeleteTaskUseCase:
    def execute(
        self,
        task_id: int,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[bool]:
        with uow:
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                if not _policy.can_create_task(actor):
                    return _denied(actor, "delete tasks")
            if not uow.tasks.delete(task_id):
                raise NotFoundError(f"Task {task_id} not found.")
            uow.commit()
            logger.info("Deleted task %s", task_id)
            return True


# ===========================================================================
# USE CASES — SUB-TASKS
# ===========================================================================

@dataclass
class CreateSubTaskCommand:
    task_id: int
    name: str
    description: str
    start_date: Optional[date]
    deadline: Optional[date]
    acting_employee_id: int
    status: str = Status.NOT_STARTED.value
    priority: str = Priority.MEDIUM.value
    note: str = ""


class CreateSubTaskUseCase:
    """Managers, and the assignee of the parent task, may split it into sub-tasks."""

    def execute(self, cmd: CreateSubTaskCommand, uow: AbstractUnitOfWork) -> Optional[SubTaskDTO]:
        with uow:
            actor = _get_employee_or_raise(uow, cmd.acting_employee_id)
            task = _get_task_or_raise(uow, cmd.task_id)
            if not _policy.can_work_on_task(actor, task):
                return _denied(actor, f"add sub-tasks to task {cmd.task_id}")
            try:
                sub_task = _sub_task_svc.create_sub_task(
                    task_id=cmd.task_id,
                    name=cmd.name,
                    description=cmd.description,
                    start_date=cmd.start_date,
                    deadline=cmd.deadline,
                    status=cmd.status,
                    priority=cmd.priority,
                    note=cmd.note,
                )
            except ValueError as exc:
                raise ValidationError(str(exc), _fields(cmd)) from exc
            uow.sub_tasks.add(sub_task)
            uow.commit()
            return _Assembler.sub_task(sub_task)


class ShowSubTasksByTaskUseCase:
    def execute(
        self,
        task_id: int,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[List[SubTaskDTO]]:
        with uow:
            task = _get_task_or_raise(uow, task_id)
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                if not _policy.can_work_on_task(actor, task):
                    return _denied(actor, f"view sub-tasks of task {task_id}")
            return [_Assembler.sub_task(st) for st in uow.sub_tasks.list_for_task(task_id)]


class UpdateSubTaskStatusUseCase:
    def execute(
        self,
        sub_task_id: int,
        new_status: str,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[SubTaskDTO]:
        with uow:
            sub_task = _get_sub_task_or_raise(uow, sub_task_id)
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                task = _get_task_or_raise(uow, sub_task.task_id)
                if not _policy.can_work_on_task(actor, task):
                    return _denied(actor, f"change status of sub-task {sub_task_id}")
            try:
                _sub_task_svc.change_status(sub_task, new_status)
            except ValueError as exc:
                raise ValidationError(
                    str(exc), {"sub_task_id": sub_task_id, "status": new_status}
                ) from exc
            if not uow.sub_tasks.update(sub_task):
                raise NotFoundError(f"SubTask {sub_task_id} not found.")
            uow.commit()
            return _Assembler.sub_task(sub_task)


class DeleteSubTaskUseCase:
    def execute(
        self,
        sub_task_id: int,
        uow: AbstractUnitOfWork,
        acting_employee_id: Optional[int] = None,
    ) -> Optional[bool]:
        with uow:
            if acting_employee_id is not None:
                actor = _get_employee_or_raise(uow, acting_employee_id)
                sub_task = _get_sub_task_or_raise(uow, sub_task_id)
                task = _get_task_or_raise(uow, sub_task.task_id)
                if not _policy.can_work_on_task(actor, task):
                    return _denied(actor, f"delete sub-task {sub_task_id}")
            if not uow.sub_tasks.delete(sub_task_id):
                raise NotFoundError(f"SubTask {sub_task_id} not found.")
            uow.commit()
            return True
