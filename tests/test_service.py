"""Unit tests for the access policy and domain services."""

from datetime import date

import pytest

from projecthub.model import Employee, EmployeeRole, Project, Skill, Status, Task
from projecthub.service import (
    AccessPolicy,
    EmployeeService,
    ProjectService,
    TaskService,
    validate_schedule,
)

MANAGER = Employee(id=1, username="anna", role=EmployeeRole.PROJECT_MANAGER)
MEMBER = Employee(id=2, username="ben", role=EmployeeRole.TEAM_MEMBER)
OTHER = Employee(id=3, username="carl", role=EmployeeRole.TEAM_MEMBER)


@pytest.fixture()
def policy():
    return AccessPolicy()


@pytest.fixture()
def tasks():
    return [
        Task(id=1, sub_project_id=10, employee_id=MEMBER.id, name="a"),
        Task(id=2, sub_project_id=10, employee_id=OTHER.id, name="b"),
        Task(id=3, sub_project_id=20, employee_id=MEMBER.id, name="c"),
        Task(id=4, sub_project_id=10, employee_id=MEMBER.id, name="d"),
    ]


class TestAccessPolicy:

    def test_manager_sees_whole_sub_project(self, policy, tasks):
        assert [t.id for t in policy.visible_tasks(MANAGER, 10, tasks)] == [1, 2, 4]

    def test_member_sees_own_tasks_in_sub_project(self, policy, tasks):
        assert [t.id for t in policy.visible_tasks(MEMBER, 10, tasks)] == [1, 4]
        assert [t.id for t in policy.visible_tasks(OTHER, 20, tasks)] == []

    def test_visible_tasks_does_not_mutate_input(self, policy, tasks):
        before = list(tasks)
        policy.visible_tasks(MEMBER, 10, tasks)
        assert tasks == before

    def test_only_managers_create_and_manage(self, policy):
        assert policy.can_create_task(MANAGER)
        assert policy.can_create_sub_project(MANAGER)
        assert policy.can_manage_project(MANAGER)
        assert not policy.can_create_task(MEMBER)
        assert not policy.can_create_sub_project(MEMBER)
        assert not policy.can_manage_project(MEMBER)

    def test_note_editing(self, policy, tasks):
        own, foreign = tasks[0], tasks[1]
        assert policy.can_edit_note(MEMBER, own)
        assert not policy.can_edit_note(MEMBER, foreign)
        assert policy.can_edit_note(MANAGER, foreign)

    def test_assignee_must_be_member(self, policy):
        assert policy.can_be_assigned(2, [1, 2])
        assert not policy.can_be_assigned(3, [1, 2])
        assert not policy.can_be_assigned(3, [])


class TestScheduleValidation:

    def test_bounds_are_inclusive(self):
        validate_schedule(date(2000, 1, 1), date(2100, 12, 31))

    def test_open_dates_are_allowed(self):
        validate_schedule(None, None)

    def test_start_before_2000_rejected(self):
        with pytest.raises(ValueError, match="Start date year must be between 2000 and 2100"):
            validate_schedule(date(1999, 12, 31), date(2025, 1, 1))

    def test_deadline_after_2100_rejected(self):
        with pytest.raises(ValueError, match="Deadline year must be between 2000 and 2100"):
            validate_schedule(date(2025, 1, 1), date(2101, 1, 1))


class TestEmployeeService:

    def test_role_and_skill_by_display_name(self):
        employee = EmployeeService().create_employee(
            "anna", "pw", "anna@acme.io", "Project Manager", "Solution Architect", ["Tester"]
        )
        assert employee.role is EmployeeRole.PROJECT_MANAGER
        assert employee.skill is Skill.SOLUTION_ARCHITECT
        assert employee.skills == [Skill.SOLUTION_ARCHITECT, Skill.TESTER]

    def test_duplicate_skill_tags_collapse(self):
        employee = EmployeeService().create_employee(
            "ben", "pw", "ben@acme.io", "TEAM_MEMBER", "TESTER", ["TESTER", "Tester"]
        )
        assert employee.skills == [Skill.TESTER]

    def test_role_required(self):
        with pytest.raises(ValueError, match="Please select a role"):
            EmployeeService().create_employee("ben", "pw", "ben@acme.io", None, "TESTER")

    def test_skill_required(self):
        with pytest.raises(ValueError, match="Please select a skill"):
            EmployeeService().create_employee("ben", "pw", "ben@acme.io", "TEAM_MEMBER", "")

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError, match="Unknown role"):
            EmployeeService().create_employee("ben", "pw", "ben@acme.io", "Boss", "TESTER")


class TestProjectService:

    def test_update_recomputes_duration(self):
        project = Project(id=1, name="p", start_date=date(2025, 1, 1), deadline=date(2025, 1, 10))
        ProjectService().update_project(project, deadline=date(2025, 1, 31))
        assert project.duration == 30

    def test_rejected_update_leaves_project_untouched(self):
        project = Project(id=1, name="p", start_date=date(2025, 1, 1), deadline=date(2025, 1, 10))
        with pytest.raises(ValueError):
            ProjectService().update_project(project, name="renamed", deadline=date(2101, 1, 1))
        assert project.name == "p"
        assert project.deadline == date(2025, 1, 10)
        assert project.duration == 9

    def test_none_keeps_dates_and_flags_clear_them(self):
        project = Project(id=1, name="p", start_date=date(2025, 1, 1), deadline=date(2025, 1, 10))
        ProjectService().update_project(project, name="renamed")
        assert project.deadline == date(2025, 1, 10)

        ProjectService().update_project(project, clear_deadline=True)
        assert project.deadline is None
        assert project.start_date == date(2025, 1, 1)
        assert project.duration == 0

        ProjectService().update_project(project, clear_start_date=True, deadline=date(2025, 2, 1))
        assert project.start_date is None
        assert project.deadline == date(2025, 2, 1)
        assert project.duration == 0


class TestTaskService:

    def test_status_transitions_unrestricted(self):
        service = TaskService()
        task = Task(id=1, status=Status.COMPLETED)
        service.change_status(task, "Not started")
        assert task.status is Status.NOT_STARTED
        service.change_status(task, "COMPLETED")
        assert task.status is Status.COMPLETED

    def test_clearing_note(self):
        task = Task(id=1, note="draft")
        TaskService().change_note(task, None)
        assert task.note == ""
