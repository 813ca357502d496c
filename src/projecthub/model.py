"""
model.py

Domain models for the projecthub work-item tracker.

Entities
--------
- Employee
- Project
- SubProject
- Task
- SubTask

Every work item is exclusively owned by its parent and refers to it by id
(SubProject.project_id, Task.sub_project_id, SubTask.task_id).  Project
membership is a many-to-many relation held by the store, not by the objects.

All models use Python dataclasses for clean, framework-agnostic definitions.
Integer primary keys are assigned by the store; ``0`` means "not yet saved".

Scheduled entities keep ``duration`` in sync with their dates: it is derived
when the object is built and whenever ``reschedule()`` moves the dates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DisplayEnum(str, Enum):
    """
    A closed enumeration whose members carry a machine name (the stored /
    wire value) and a human-readable display name.
    """

    def __new__(cls, value: str, display_name: str):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.display_name = display_name
        return obj

    @classmethod
    def from_display_name(cls, display_name: str):
        """
        Look a member up by its display name.

        Matching is case-insensitive and underscores count as spaces, so
        ``"Not_started"``, ``"not started"`` and ``"NOT_STARTED"`` all name
        the same member.  Unknown text raises ValueError.
        """
        if display_name is None:
            raise ValueError(f"Unknown {cls._label()}: None")
        normalized = display_name.replace("_", " ").strip().lower()
        for member in cls:
            if member.display_name.lower() == normalized:
                return member
        raise ValueError(f"Unknown {cls._label()}: {display_name}")

    @classmethod
    def parse(cls, text: str):
        """Accept either a machine name or a display name."""
        try:
            return cls(text)
        except ValueError:
            return cls.from_display_name(text)

    @classmethod
    def _label(cls) -> str:
        return cls.__name__.lower()


class Status(DisplayEnum):
    """Progress of a sub-project, task or sub-task.  Any transition is allowed."""
    NOT_STARTED = ("NOT_STARTED", "Not started")
    IN_PROGRESS = ("IN_PROGRESS", "In progress")
    COMPLETED = ("COMPLETED", "Completed")


class Priority(DisplayEnum):
    LOW = ("LOW", "Low")
    MEDIUM = ("MEDIUM", "Medium")
    HIGH = ("HIGH", "High")


class EmployeeRole(DisplayEnum):
    """
    The two roles that govern visibility and write permissions.

    PROJECT_MANAGER – Creates and deletes projects, sub-projects and tasks;
                      sees every task in a sub-project.
    TEAM_MEMBER     – Sees and works on the tasks assigned to them only.
    """
    PROJECT_MANAGER = ("PROJECT_MANAGER", "Project Manager")
    TEAM_MEMBER = ("TEAM_MEMBER", "Team Member")

    @classmethod
    def _label(cls) -> str:
        return "role"


class Skill(DisplayEnum):
    """Skill tags an employee can be registered with."""
    DEVELOPER = ("DEVELOPER", "Developer")
    FRONTEND_DEVELOPER = ("FRONTEND_DEVELOPER", "Frontend Developer")
    BACKEND_DEVELOPER = ("BACKEND_DEVELOPER", "Backend Developer")
    FULLSTACK_DEVELOPER = ("FULLSTACK_DEVELOPER", "Fullstack Developer")
    TESTER = ("TESTER", "Tester")
    UX_DESIGNER = ("UX_DESIGNER", "UX Designer")
    UI_DESIGNER = ("UI_DESIGNER", "UI Designer")
    SOLUTION_ARCHITECT = ("SOLUTION_ARCHITECT", "Solution Architect")
    TECHNICAL_CONSULTANT = ("TECHNICAL_CONSULTANT", "Technical Consultant")
    BUSINESS_CONSULTANT = ("BUSINESS_CONSULTANT", "Business Consultant")
    INTEGRATION_SPECIALIST = ("INTEGRATION_SPECIALIST", "Integration Specialist")
    ECOMMERCE_SPECIALIST = ("ECOMMERCE_SPECIALIST", "E-commerce Specialist")
    CMS_SPECIALIST = ("CMS_SPECIALIST", "CMS Specialist")
    PIM_DAM_SPECIALIST = ("PIM_DAM_SPECIALIST", "PIM/DAM Specialist")
    DEVOPS_ENGINEER = ("DEVOPS_ENGINEER", "DevOps Engineer")
    PROJECT_MANAGER = ("PROJECT_MANAGER", "Project Manager")
    DATA_AND_SEARCH_SPECIALIST = ("DATA_AND_SEARCH_SPECIALIST", "Data & Search Specialist")
    QUALITY_ASSURANCE_ENGINEER = ("QUALITY_ASSURANCE_ENGINEER", "Quality Assurance Engineer")

    @classmethod
    def _label(cls) -> str:
        return "skill"


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------


def recalculate_duration(start: Optional[date], end: Optional[date]) -> int:
    """
    Whole days from ``start`` to ``end`` (a same-day span is 0).

    Returns 0 when either date is missing or ``end`` is before ``start``;
    an inverted span means "not yet schedulable", not an error.
    """
    if start is None or end is None:
        return 0
    days = (end - start).days
    return days if days > 0 else 0


@dataclass
class _Scheduled:
    """Mixin for entities with a start date / deadline pair."""

    def __post_init__(self) -> None:
        self.duration = recalculate_duration(self.start_date, self.deadline)

    def reschedule(self, start_date: Optional[date], deadline: Optional[date]) -> None:
        """Move both dates and recompute ``duration`` in one step."""
        self.start_date = start_date
        self.deadline = deadline
        self.duration = recalculate_duration(start_date, deadline)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass
class Employee:
    """
    A person who logs in and works on projects.

    The password is an opaque string; it is compared as-is by the store
    and never inspected by the domain.
    """
    id: int = 0
    username: str = ""
    password: str = ""
    email: str = ""
    role: EmployeeRole = EmployeeRole.TEAM_MEMBER
    skill: Optional[Skill] = None                     # primary skill tag
    skills: List[Skill] = field(default_factory=list)


@dataclass
class Project(_Scheduled):
    """Top-level unit of work.  Owns sub-projects; has member employees."""
    id: int = 0
    name: str = ""
    description: str = ""
    customer: str = ""
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    duration: int = field(default=0, init=False)


@dataclass
class SubProject(_Scheduled):
    """A scoped phase of a project.  Owns tasks."""
    id: int = 0
    project_id: int = 0                               # FK → Project.id
    name: str = ""
    description: str = ""
    status: Status = Status.NOT_STARTED
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    duration: int = field(default=0, init=False)


@dataclass
class Task(_Scheduled):
    """
    An assignable unit of work inside a sub-project.

    ``employee_id`` is the assignee, who must be a member of the owning
    project; that rule is checked by the access policy when the task is
    created, not by the dataclass.
    """
    id: int = 0
    sub_project_id: int = 0                           # FK → SubProject.id
    employee_id: int = 0                              # FK → Employee.id (assignee)
    name: str = ""
    description: str = ""
    status: Status = Status.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    note: str = ""
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    duration: int = field(default=0, init=False)


@dataclass
class SubTask(_Scheduled):
    """The finest-grained trackable unit, owned by a task."""
    id: int = 0
    task_id: int = 0                                  # FK → Task.id
    name: str = ""
    description: str = ""
    status: Status = Status.NOT_STARTED
    priority: Priority = Priority.MEDIUM
    note: str = ""
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    duration: int = field(default=0, init=False)
