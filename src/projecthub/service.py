"""
service.py

Service layer for the projecthub work-item tracker.

Responsibilities
----------------
Each service class encapsulates the business rules for its entity.
Services receive and return domain model instances (from model.py).
No persistence is handled here; the application layer reads and writes
through the repositories and hands the loaded objects to these services.

Services
--------
- AccessPolicy        – Role-based visibility and write permissions
- EmployeeService     – Employee registration rules
- ProjectService      – Project creation / editing and schedule validation
- SubProjectService   – Sub-project creation
- TaskService         – Task creation, status and note changes
- SubTaskService      – Sub-task creation and status changes

Design notes
------------
- Business rule violations raise a ValueError with a descriptive message.
- Dates are validated before an entity is built, so a rejected write never
  reaches a repository.
- Permission questions are answered by AccessPolicy and never raise; the
  caller decides what a "no" means (the application layer short-circuits).
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Sequence

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

MIN_YEAR = 2000
MAX_YEAR = 2100


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _require_year_in_range(value: Optional[date], label: str) -> None:
    """Raise ValueError if a set date falls outside [MIN_YEAR, MAX_YEAR]."""
    if value is not None and not (MIN_YEAR <= value.year <= MAX_YEAR):
        raise ValueError(f"{label} year must be between {MIN_YEAR} and {MAX_YEAR}")


def validate_schedule(start_date: Optional[date], deadline: Optional[date]) -> None:
    """Check both ends of a schedule; the start date is reported first."""
    _require_year_in_range(start_date, "Start date")
    _require_year_in_range(deadline, "Deadline")


def _coerce(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    return enum_cls.parse(value)


# ---------------------------------------------------------------------------
# AccessPolicy
# ---------------------------------------------------------------------------

class AccessPolicy:
    """
    Decides what an employee may see and change.

    Two capabilities exist: managers (EmployeeRole.PROJECT_MANAGER) may do
    everything; team members may only see and work on tasks assigned to them.
    """

    def is_manager(self, employee: Employee) -> bool:
        return employee.role == EmployeeRole.PROJECT_MANAGER

    def visible_tasks(
        self,
        employee: Employee,
        sub_project_id: int,
        tasks: Iterable[Task],
    ) -> List[Task]:
        """
        Filter ``tasks`` down to what ``employee`` may see in one sub-project.

        Managers see every task in the sub-project; a team member sees the
        intersection of their own assignments with the sub-project.  Input
        order is kept.
        """
        in_scope = [t for t in tasks if t.sub_project_id == sub_project_id]
        if self.is_manager(employee):
            return in_scope
        return [t for t in in_scope if t.employee_id == employee.id]

    def can_create_task(self, employee: Employee) -> bool:
        return self.is_manager(employee)

    def can_create_sub_project(self, employee: Employee) -> bool:
        return self.is_manager(employee)

    def can_manage_project(self, employee: Employee) -> bool:
        """Create, edit and delete projects and their membership."""
        return self.is_manager(employee)

    def can_work_on_task(self, employee: Employee, task: Task) -> bool:
        """Any task visible to the employee under the visibility rule."""
        return self.is_manager(employee) or task.employee_id == employee.id

    def can_edit_note(self, employee: Employee, task: Task) -> bool:
        return self.can_work_on_task(employee, task)

    def can_be_assigned(self, employee_id: int, member_ids: Iterable[int]) -> bool:
        """A task's assignee must be a member of the task's project."""
        return employee_id in set(member_ids)


# ---------------------------------------------------------------------------
# EmployeeService
# ---------------------------------------------------------------------------

class EmployeeService:
    """Registration rules for employees."""

    def create_employee(
        self,
        username: str,
        password: str,
        email: str,
        role,
        skill,
        skills: Sequence = (),
    ) -> Employee:
        """
        Create and return a new Employee (unsaved).

        ``role`` and ``skill`` may be enum members, machine names or display
        names; both are required.
        """
        if not username or not username.strip():
            raise ValueError("Username must not be empty")
        if role is None or role == "":
            raise ValueError("Please select a role")
        if skill is None or skill == "":
            raise ValueError("Please select a skill")
        role = _coerce(EmployeeRole, role)
        skill = _coerce(Skill, skill)
        tags = [skill]
        for tag in (_coerce(Skill, s) for s in skills):
            if tag not in tags:
                tags.append(tag)
        return Employee(
            username=username.strip(),
            password=password,
            email=email,
            role=role,
            skill=skill,
            skills=tags,
        )


# ---------------------------------------------------------------------------
# ProjectService
# ---------------------------------------------------------------------------

class ProjectService:
    """
    Manages project creation and edits of the project-level schedule.
    """

    def create_project(
        self,
        name: str,
        description: str,
        customer: str,
        start_date: Optional[date],
        deadline: Optional[date],
    ) -> Project:
        """Create and return a new Project instance (unsaved)."""
        validate_schedule(start_date, deadline)
        return Project(
            name=name,
            description=description,
            customer=customer,
            start_date=start_date,
            deadline=deadline,
        )

    def update_project(
        self,
        project: Project,
        name: Optional[str] = None,
        description: Optional[str] = None,
        customer: Optional[str] = None,
        start_date: Optional[date] = None,
        deadline: Optional[date] = None,
        clear_start_date: bool = False,
        clear_deadline: bool = False,
    ) -> Project:
        """
        Apply field-level updates to a project; dates are re-validated.

        A ``None`` argument keeps the current value.  The ``clear_*`` flags
        unset a date instead, which drops the duration back to 0.
        """
        if clear_start_date:
            new_start = None
        else:
            new_start = start_date if start_date is not None else project.start_date
        if clear_deadline:
            new_deadline = None
        else:
            new_deadline = deadline if deadline is not None else project.deadline
        validate_schedule(new_start, new_deadline)
        if name is not None:
            project.name = name
        if description is not None:
            project.description = description
        if customer is not None:
            project.customer = customer
        project.reschedule(new_start, new_deadline)
        return project


# ---------------------------------------------------------------------------
# SubProjectService
# ---------------------------------------------------------------------------

class SubProjectService:

    def create_sub_project(
        self,
        project_id: int,
        name: str,
        description: str,
        start_date: Optional[date],
        deadline: Optional[date],
        status=Status.NOT_STARTED,
    ) -> SubProject:
        """Create and return a new SubProject (unsaved)."""
        validate_schedule(start_date, deadline)
        return SubProject(
            project_id=project_id,
            name=name,
            description=description,
            status=_coerce(Status, status),
            start_date=start_date,
            deadline=deadline,
        )


# ---------------------------------------------------------------------------
# TaskService
# ---------------------------------------------------------------------------

class TaskService:
    """
    Task creation and the two mutations team members perform: moving the
    status and writing the note.
    """

    def create_task(
        self,
        sub_project_id: int,
        employee_id: int,
        name: str,
        description: str,
        start_date: Optional[date],
        deadline: Optional[date],
        status=Status.NOT_STARTED,
        priority=Priority.MEDIUM,
        note: str = "",
    ) -> Task:
        """Create and return a new Task (unsaved)."""
        validate_schedule(start_date, deadline)
        return Task(
            sub_project_id=sub_project_id,
            employee_id=employee_id,
            name=name,
            description=description,
            status=_coerce(Status, status),
            priority=_coerce(Priority, priority),
            note=note or "",
            start_date=start_date,
            deadline=deadline,
        )

    def change_status(self, task: Task, new_status) -> Task:
        """Set any known status; transitions are unrestricted in both directions."""
        task.status = _coerce(Status, new_status)
        return task

    def change_note(self, task: Task, note: Optional[str]) -> Task:
        task.note = note or ""
        return task


# ---------------------------------------------------------------------------
# SubTaskService
# ---------------------------------------------------------------------------

class SubTaskService:

    def create_sub_task(
        self,
        task_id: int,
        name: str,
        description: str,
        start_date: Optional[date],
        deadline: Optional[date],
        status=Status.NOT_STARTED,
        priority=Priority.MEDIUM,
        note: str = "",
    ) -> SubTask:
        """Create and return a new SubTask (unsaved)."""
        validate_schedule(start_date, deadline)
        return SubTask(
            task_id=task_id,
            name=name,
            description=description,
            status=_coerce(Status, status),
            priority=_coerce(Priority, priority),
            note=note or "",
            start_date=start_date,
            deadline=deadline,
        )

    def change_status(self, sub_task: SubTask, new_status) -> SubTask:
        sub_task.status = _coerce(Status, new_status)
        return sub_task
