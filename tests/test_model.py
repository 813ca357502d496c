"""Unit tests for the domain model."""

from datetime import date

import pytest

from projecthub.model import (
    EmployeeRole,
    Priority,
    Project,
    Skill,
    Status,
    SubTask,
    Task,
    recalculate_duration,
)


class TestRecalculateDuration:
    """Whole days between start and deadline, clamped at zero."""

    def test_span_in_days(self):
        assert recalculate_duration(date(2025, 1, 1), date(2025, 1, 10)) == 9

    def test_same_day_is_zero(self):
        assert recalculate_duration(date(2025, 3, 3), date(2025, 3, 3)) == 0

    def test_inverted_span_is_zero(self):
        assert recalculate_duration(date(2025, 1, 10), date(2025, 1, 1)) == 0

    def test_missing_date_is_zero(self):
        assert recalculate_duration(None, date(2025, 1, 1)) == 0
        assert recalculate_duration(date(2025, 1, 1), None) == 0

    def test_crosses_leap_day(self):
        assert recalculate_duration(date(2024, 2, 28), date(2024, 3, 1)) == 2


class TestScheduledEntities:

    def test_duration_set_on_construction(self):
        project = Project(name="p", start_date=date(2025, 1, 1), deadline=date(2025, 1, 10))
        assert project.duration == 9

    def test_reschedule_recomputes_duration(self):
        task = Task(name="t", start_date=date(2025, 1, 1), deadline=date(2025, 1, 2))
        task.reschedule(date(2025, 1, 1), date(2025, 2, 1))
        assert task.duration == 31
        assert task.deadline == date(2025, 2, 1)

    def test_unscheduled_entity_has_zero_duration(self):
        assert SubTask(name="s").duration == 0

    def test_defaults(self):
        task = Task()
        assert task.id == 0
        assert task.status is Status.NOT_STARTED
        assert task.priority is Priority.MEDIUM


class TestDisplayNames:
    """Parsing enum members from their human-readable names."""

    def test_exact_display_name(self):
        assert Status.from_display_name("In progress") is Status.IN_PROGRESS

    def test_case_insensitive(self):
        assert Status.from_display_name("completed") is Status.COMPLETED

    def test_underscores_count_as_spaces(self):
        assert Status.from_display_name("Not_started") is Status.NOT_STARTED
        assert EmployeeRole.from_display_name("Project_Manager") is EmployeeRole.PROJECT_MANAGER

    def test_machine_name_resolves(self):
        assert Status.from_display_name("NOT_STARTED") is Status.NOT_STARTED

    def test_surrounding_whitespace_ignored(self):
        assert Priority.from_display_name("  High ") is Priority.HIGH

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown status: Blocked"):
            Status.from_display_name("Blocked")

        with pytest.raises(ValueError, match="Unknown role"):
            EmployeeRole.from_display_name("Intern")

    def test_none_raises(self):
        with pytest.raises(ValueError):
            Skill.from_display_name(None)

    def test_skill_display_names(self):
        assert Skill.from_display_name("UX Designer") is Skill.UX_DESIGNER
        assert Skill.from_display_name("pim/dam specialist") is Skill.PIM_DAM_SPECIALIST
        assert Skill.from_display_name("Data & Search Specialist") is Skill.DATA_AND_SEARCH_SPECIALIST


class TestMachineNames:

    def test_wire_value_lookup(self):
        assert Status("IN_PROGRESS") is Status.IN_PROGRESS
        assert Status.IN_PROGRESS.value == "IN_PROGRESS"
        assert Status.IN_PROGRESS.display_name == "In progress"

    def test_members_compare_as_strings(self):
        assert EmployeeRole.TEAM_MEMBER == "TEAM_MEMBER"

    def test_parse_accepts_either_form(self):
        assert Priority.parse("LOW") is Priority.LOW
        assert Priority.parse("Low") is Priority.LOW

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            Priority.parse("URGENT")
