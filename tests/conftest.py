from datetime import date

import pytest

from adapters.config_loader import leave_catalog
from config import CONFIG
from domain.employee import Employee, EmployeeName
from services.leave_workflow import LeaveRequestWorkflow
from services.resolver import WorkdayResolver

# 2024-01-01 is a Monday; its Sunday epoch is 2023-12-31.
START = date(2024, 1, 1)


def make_employee(start: date = START, workcenter: str = "OPS", labor=("C1", "E1")) -> Employee:
    employee = Employee(id="E1", site="HQ", name=EmployeeName(first="Ann", last="Smith"))
    assignment = employee.add_assignment("HQ", workcenter, start)
    if labor:
        assignment.add_labor_code(*labor)
    return employee


@pytest.fixture
def employee() -> Employee:
    return make_employee()


@pytest.fixture
def resolver() -> WorkdayResolver:
    return WorkdayResolver()


@pytest.fixture
def workflow(resolver) -> LeaveRequestWorkflow:
    return LeaveRequestWorkflow(resolver)


@pytest.fixture
def catalog():
    return leave_catalog(CONFIG)
