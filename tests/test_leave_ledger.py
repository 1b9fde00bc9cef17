from datetime import date

import pytest

from domain import codes
from domain.employee import Employee
from domain.errors import NotFoundError, ValidationError
from domain.leave import AnnualLeave
from domain.work import Work


def test_add_leave_upserts_by_date_and_code(employee):
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_REQUESTED, 8, request_id="r1")
    employee.add_leave(date(2024, 1, 3), " v ", codes.LEAVE_APPROVED, 6, request_id="r2", tag_day="ny")
    assert len(employee.leaves) == 1
    leave = employee.leaves[0]
    assert (leave.status, leave.hours, leave.tag_day) == (codes.LEAVE_APPROVED, 6.0, "ny")
    assert leave.request_id == "r1"


def test_add_leave_fills_empty_request_link(employee):
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8, request_id="r9")
    assert employee.leaves[0].request_id == "r9"


def test_add_leave_by_explicit_id(employee):
    first = employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 1, 4), "S", codes.LEAVE_ACTUAL, 4, leave_id=first.id)
    assert len(employee.leaves) == 1
    assert employee.leaves[0].hours == 4.0
    other = employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8, leave_id=employee.next_leave_id())
    assert other.id != first.id
    assert len(employee.leaves) == 2


def test_leaves_sort_by_date_then_hours_descending(employee):
    employee.add_leave(date(2024, 1, 4), "S", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 2)
    employee.add_leave(date(2024, 1, 3), "H", codes.LEAVE_ACTUAL, 8)
    assert [(l.leave_date.day, l.code) for l in employee.leaves] == [(3, "H"), (3, "V"), (4, "S")]
    combined = employee.leave_on(date(2024, 1, 3))
    assert (combined.code, combined.hours) == ("H", 10.0)
    assert employee.leave_on(date(2024, 1, 5)) is None


def test_update_and_delete_leave(employee):
    leave = employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_APPROVED, 8)
    employee.update_leave(leave.id, "hours", "4")
    employee.update_leave(leave.id, "status", codes.LEAVE_ACTUAL)
    employee.update_leave(leave.id, "leavedate", "2024-01-05")
    assert (leave.hours, leave.status, leave.leave_date) == (4.0, codes.LEAVE_ACTUAL, date(2024, 1, 5))
    with pytest.raises(ValidationError):
        employee.update_leave(leave.id, "colour", "red")
    employee.delete_leave(leave.id)
    with pytest.raises(NotFoundError):
        employee.delete_leave(leave.id)


def test_remove_leaves_can_keep_actuals(employee):
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8, request_id="r1")
    employee.add_leave(date(2024, 1, 4), "V", codes.LEAVE_APPROVED, 8, request_id="r1")
    employee.add_leave(date(2024, 1, 5), "V", codes.LEAVE_APPROVED, 8, request_id="r2")
    removed = employee.remove_leaves(date(2024, 1, 1), date(2024, 1, 31), request_id="r1", include_actuals=False)
    assert removed == 1
    assert [l.leave_date.day for l in employee.leaves] == [3, 5]
    assert len(employee.leaves_for_request("r1")) == 1


def test_balance_carries_prior_year():
    employee = Employee(id="E1", balances=[AnnualLeave(year=2023, annual=120, carryover=10)])
    employee.add_leave(date(2024, 2, 1), "V", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 2, 2), "V", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 7, 3), "V", codes.LEAVE_ACTUAL, 4)
    employee.add_leave(date(2024, 7, 4), "V", codes.LEAVE_APPROVED, 8)
    employee.add_leave(date(2024, 7, 5), "S", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2023, 12, 29), "V", codes.LEAVE_ACTUAL, 8)
    balance = employee.create_leave_balance(2024)
    assert (balance.annual, balance.carryover) == (120, 110)


def test_first_balance_uses_policy_default(employee):
    balance = employee.create_leave_balance(2024)
    assert (balance.annual, balance.carryover) == (100.0, 0.0)
    balance.annual = 150
    again = employee.create_leave_balance(2024)
    assert again is balance
    assert len(employee.balances) == 1


def test_update_and_delete_balance(employee):
    employee.update_leave_balance(2025, 90, 5)
    employee.update_leave_balance(2024, 80, 0)
    assert [b.year for b in employee.balances] == [2024, 2025]
    employee.update_leave_balance(2025, 95, 6)
    assert employee.balance(2025).total() == 101.0
    employee.delete_leave_balance(2024)
    with pytest.raises(NotFoundError):
        employee.delete_leave_balance(2024)


def test_hour_aggregations(employee):
    employee.work = [
        Work(dateworked=date(2024, 1, 2), chargenumber="C1", extension="E1", hours=8),
        Work(dateworked=date(2024, 1, 3), chargenumber="X9", extension="01", hours=6),
        Work(dateworked=date(2024, 1, 4), chargenumber="C1", extension="E1", modtime=True, hours=3),
    ]
    employee.add_leave(date(2024, 1, 5), "V", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 1, 8), "S", codes.LEAVE_ACTUAL, 4)
    employee.add_leave(date(2024, 1, 9), "V", codes.LEAVE_APPROVED, 8)
    assert employee.worked_hours(date(2024, 1, 1), date(2024, 1, 31)) == 14.0
    assert employee.worked_hours(date(2024, 1, 1), date(2024, 1, 31), "C1", "E1") == 8.0
    assert employee.leave_hours(date(2024, 1, 1), date(2024, 1, 31)) == 12.0
    assert employee.pto_hours(date(2024, 1, 1), date(2024, 1, 31)) == 8.0
    assert employee.mod_time(date(2024, 1, 1), date(2024, 1, 31)) == 3.0
    assert employee.has_mod_time(date(2024, 1, 4), date(2024, 1, 4))
    assert not employee.has_mod_time(date(2024, 1, 5), date(2024, 1, 31))
    assert employee.last_workday() == date(2024, 1, 4)


def test_purge_drops_old_history(employee):
    employee.add_leave(date(2023, 6, 1), "V", codes.LEAVE_ACTUAL, 8)
    employee.add_leave(date(2024, 6, 1), "V", codes.LEAVE_ACTUAL, 8)
    employee.update_leave_balance(2023, 100, 0)
    employee.add_variation("HQ", date(2023, 5, 1))
    assert employee.purge(date(2024, 1, 1)) is False
    assert [l.leave_date.year for l in employee.leaves] == [2024]
    assert employee.balances == []
    assert employee.variations == []


def test_employee_document_keeps_children(employee):
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8, tag_day="ny")
    employee.update_leave_balance(2024, 100, 4)
    employee.add_variation("HQ", date(2024, 1, 10), mod=True)
    employee.work = [Work(dateworked=date(2024, 1, 2), hours=8)]
    document = employee.to_dict()
    assert "work" not in document
    restored = Employee.from_dict(document)
    assert restored.to_dict() == document
    assert restored.work is None
    assert restored.is_active(date(2024, 5, 1))
    assert not restored.is_active(date(2023, 5, 1))
