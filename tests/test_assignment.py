from datetime import date, timedelta

import pytest

from conftest import make_employee
from domain.assignment import Assignment
from domain.errors import NotFoundError, ValidationError
from domain.schedule import Schedule
from rules.rotor import MAX_DATE, cycle_days


def test_default_assignment_is_monday_to_friday(employee):
    assignment = employee.assignments[0]
    assert assignment.end_date == MAX_DATE
    codes = [assignment.get_workday(day).code for day in cycle_days(date(2024, 1, 7), date(2024, 1, 13))]
    assert codes == ["", "D", "D", "D", "D", "D", ""]
    assert assignment.standard_work_hours() == 8.0


def test_rotation_is_periodic(employee):
    assignment = employee.assignments[0]
    for day in cycle_days(date(2024, 1, 1), date(2024, 1, 14)):
        base = assignment.get_workday(day)
        for weeks in (1, 5, 52):
            later = assignment.get_workday(day + timedelta(days=7 * weeks))
            assert (later.code, later.hours) == (base.code, base.hours)


def two_week_rotation(start=date(2024, 1, 1)) -> Assignment:
    day_shift = Schedule.blank(0)
    night_shift = Schedule.blank(1)
    for workday_id in range(1, 6):
        day_shift.change_workday(workday_id, "OPS", "D", 8)
        night_shift.change_workday(workday_id, "OPS", "N", 8)
    assignment = Assignment(id=1, site="HQ", workcenter="OPS", start_date=start, schedules=[day_shift, night_shift])
    assignment.set_rotation(None, 7)
    return assignment


def test_multiple_schedules_rotate_by_rotation_days():
    assignment = two_week_rotation()
    assert assignment.get_workday(date(2024, 1, 2)).code == "D"
    assert assignment.get_workday(date(2024, 1, 9)).code == "N"
    assert assignment.get_workday(date(2024, 1, 16)).code == "D"
    assert assignment.get_workday(date(2024, 1, 13)).code == ""


def test_rotation_date_shifts_phase():
    assignment = two_week_rotation()
    assignment.set_rotation(date(2024, 1, 8), 7)
    assert assignment.get_workday(date(2024, 1, 9)).code == "D"
    assert assignment.get_workday(date(2024, 1, 16)).code == "N"


def test_rotation_days_must_fit_every_schedule():
    assignment = two_week_rotation()
    assignment.change_schedule_days(1, 14)
    with pytest.raises(ValidationError):
        assignment.set_rotation(None, 7)
    assignment.set_rotation(None, 14)
    assert assignment.rotation_days == 14


def test_schedule_maintenance(employee):
    assignment = employee.assignments[0]
    added = assignment.add_schedule(14)
    assert added.id == 1 and len(added) == 14
    with pytest.raises(ValidationError):
        assignment.add_schedule(5)
    with pytest.raises(ValidationError):
        assignment.change_schedule_days(1, 10)
    with pytest.raises(NotFoundError):
        assignment.change_schedule_days(7, 14)
    assignment.change_workday(1, 3, "OPS", "N", 12)
    assignment.update_workday(1, 3, "hours", 10)
    assert assignment.schedules[1].get(3).hours == 10.0
    assignment.remove_schedule(0)
    assignment.remove_schedule(1)
    assert len(assignment.schedules) == 1
    assert len(assignment.schedules[0]) == 7
    assert assignment.schedules[0].working_days() == 0


def test_standard_work_hours_spreads_forty_hours():
    assignment = Assignment(id=1, start_date=date(2024, 1, 1))
    for workday_id in range(1, 5):
        assignment.change_workday(0, workday_id, "OPS", "D", 10)
    assert assignment.standard_work_hours() == 10.0


def test_labor_codes(employee):
    assignment = employee.assignments[0]
    assignment.add_labor_code("c1", "e1")
    assert len(assignment.labor_codes) == 1
    assignment.add_labor_code("A9", "01")
    assert [lc.chargenumber for lc in assignment.labor_codes] == ["A9", "C1"]
    assignment.remove_labor_code("A9", "01")
    assert employee.has_labor_code("C1", "E1")
    assert employee.has_labor_code_on(date(2024, 3, 1), "C1", "E1")
    assert not employee.has_labor_code_on(date(2023, 3, 1), "C1", "E1")


def test_add_assignment_closes_previous(employee):
    second = employee.add_assignment("HQ", "LAB", date(2024, 3, 4))
    first = employee.assignments[0]
    assert first.end_date == date(2024, 3, 3)
    assert second.end_date == MAX_DATE
    assert employee.assignment_on(date(2024, 3, 3)) is first
    assert employee.assignment_on(date(2024, 3, 4)) is second
    with pytest.raises(ValidationError):
        employee.add_assignment("HQ", "LAB", date(2024, 3, 4))
    assert second.end_date == MAX_DATE


def test_remove_assignment_closes_gaps():
    employee = make_employee()
    employee.add_assignment("HQ", "B", date(2024, 2, 5))
    employee.add_assignment("HQ", "C", date(2024, 3, 4))
    middle = employee.assignments[1]
    employee.remove_assignment(middle.id)
    assert employee.assignments[0].end_date == date(2024, 3, 3)

    last = employee.assignments[-1]
    employee.remove_assignment(last.id)
    assert employee.assignments[-1].end_date == MAX_DATE

    with pytest.raises(ValidationError):
        employee.remove_assignment(employee.assignments[0].id)
    with pytest.raises(NotFoundError):
        employee.remove_assignment(99)


def test_removing_first_assignment_keeps_successor_rotation(resolver):
    employee = make_employee()
    successor = employee.add_assignment("HQ", "OPS", date(2024, 2, 7))
    successor.schedules = two_week_rotation().schedules
    successor.set_rotation(None, 7)
    window = list(cycle_days(date(2024, 2, 7), date(2024, 4, 30)))
    before = [resolver.resolve(employee, day).code for day in window]

    employee.remove_assignment(employee.assignments[0].id)

    assert employee.assignments[0].start_date == date(2024, 1, 1)
    after = [resolver.resolve(employee, day).code for day in window]
    assert after == before
    assert resolver.resolve(employee, date(2024, 1, 2)) is not None
