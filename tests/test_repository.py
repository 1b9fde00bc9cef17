from datetime import date

import pytest

from adapters.repository import EmployeeRepository
from conftest import make_employee
from domain import codes
from domain.errors import ConcurrentModificationError, NotFoundError, StateConflictError
from domain.work import Work
from services.employee_service import EmployeeService


@pytest.fixture
def repository(tmp_path):
    repo = EmployeeRepository(tmp_path / "scheduler.db")
    repo.insert_employee(make_employee())
    return repo


def test_load_returns_whole_document(repository):
    employee = repository.load_employee("E1")
    assert employee.version == 0
    assert employee.name.last_first() == "Smith, Ann"
    assert employee.assignments[0].labor_codes[0].chargenumber == "C1"
    assert employee.work is None
    with pytest.raises(NotFoundError):
        repository.load_employee("nobody")
    with pytest.raises(StateConflictError):
        repository.insert_employee(make_employee())


def test_replace_bumps_version(repository):
    employee = repository.load_employee("E1")
    employee.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8)
    repository.replace_employee(employee)
    assert employee.version == 1
    stored = repository.load_employee("E1")
    assert stored.version == 1
    assert len(stored.leaves) == 1


def test_stale_write_is_rejected(repository):
    first = repository.load_employee("E1")
    second = repository.load_employee("E1")
    first.add_leave(date(2024, 1, 3), "V", codes.LEAVE_ACTUAL, 8)
    repository.replace_employee(first)

    second.update_leave_balance(2024, 120, 0)
    with pytest.raises(ConcurrentModificationError):
        repository.replace_employee(second)

    stored = repository.load_employee("E1")
    assert len(stored.leaves) == 1
    assert stored.balances == []
    assert second.version == 0


def test_replace_unknown_employee(tmp_path):
    repository = EmployeeRepository(tmp_path / "empty.db")
    with pytest.raises(NotFoundError):
        repository.replace_employee(make_employee())


def test_work_is_stored_per_year(repository):
    repository.save_work("E1", 2024, [
        Work(dateworked=date(2024, 1, 3), chargenumber="C1", extension="E1", hours=8),
        Work(dateworked=date(2024, 1, 2), chargenumber="C1", extension="E1", hours=6),
    ])
    work = repository.load_work("E1", 2024)
    assert [w.dateworked for w in work] == [date(2024, 1, 2), date(2024, 1, 3)]
    assert repository.load_work("E1", 2023) == []
    employee = repository.load_employee("E1", year=2024)
    assert employee.worked_hours(date(2024, 1, 1), date(2024, 12, 31)) == 14.0
    assert "work" not in employee.to_dict()


def test_list_and_delete(repository):
    assert [e.id for e in repository.list_employees()] == ["E1"]
    repository.delete_employee("E1")
    assert repository.list_employees() == []


def test_service_persists_successful_changes(repository):
    service = EmployeeService(repository)
    result = service.create_leave_request("E1", date(2024, 1, 8), date(2024, 1, 12), "V")
    assert result.ok
    stored = repository.load_employee("E1")
    assert stored.version == 1
    assert stored.requests[0].id == result.leave_request.id

    submitted = service.update_leave_request("E1", result.leave_request.id, "requested", True)
    assert "submitted for approval" in submitted.message
    approved = service.approve_leave_request("E1", result.leave_request.id, "boss")
    assert approved.ok
    assert len(repository.load_employee("E1").leaves) == 5


def test_service_captures_errors_without_saving(repository, caplog):
    service = EmployeeService(repository)
    created = service.create_leave_request("E1", date(2024, 1, 8), date(2024, 1, 12), "V")
    result = service.approve_leave_request("E1", created.leave_request.id, "boss")
    assert isinstance(result.error, StateConflictError)
    assert not result.ok
    assert repository.load_employee("E1").version == 1
    assert "StateConflictError" in caplog.text

    missing = service.delete_leave_request("nobody", "x")
    assert isinstance(missing.error, NotFoundError)
    assert missing.employee is None


def test_service_reads(repository):
    service = EmployeeService(repository)
    assert service.create_leave_balance("E1", 2024).ok
    assert repository.load_employee("E1").balance(2024).annual == 100.0
    assert service.add_assignment("E1", "HQ", "LAB", date(2024, 6, 3)).ok
    workday = service.resolve("E1", date(2024, 6, 4))
    assert (workday.workcenter, workday.code) == ("LAB", "D")
    days = service.resolve_range("E1", date(2024, 6, 1), date(2024, 6, 3))
    assert [d for d, _ in days] == [date(2024, 6, 1), date(2024, 6, 2), date(2024, 6, 3)]
    assert isinstance(service.remove_assignment("E1", 99).error, NotFoundError)
