"""Load, mutate and replace an employee document as one unit of work."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Iterable, List, Optional

from adapters.repository import EmployeeRepository
from domain.employee import Employee
from domain.errors import EngineError
from domain.schedule import Workday
from domain.work import EmployeeLaborCode, Workcode
from rules import rotor
from rules.rotor import as_day

from services.leave_workflow import LeaveRequestWorkflow, WorkflowResult
from services.resolver import GENERAL, WorkdayResolver

logger = logging.getLogger(__name__)

Mutation = Callable[[Employee], WorkflowResult]


class EmployeeService:
    """Aggregate boundary: engine errors are logged and returned, never persisted."""

    def __init__(
        self,
        repository: EmployeeRepository,
        catalog: Iterable[Workcode] = (),
        resolver: Optional[WorkdayResolver] = None,
        workflow: Optional[LeaveRequestWorkflow] = None,
    ) -> None:
        self.repository = repository
        self.catalog: List[Workcode] = list(catalog)
        self.resolver = resolver or WorkdayResolver()
        self.workflow = workflow or LeaveRequestWorkflow(self.resolver)

    def run(self, employee_id: str, mutate: Mutation) -> WorkflowResult:
        employee: Optional[Employee] = None
        try:
            employee = self.repository.load_employee(employee_id)
            result = mutate(employee)
            self.repository.replace_employee(employee)
        except EngineError as exc:
            logger.warning("employee %s: %s: %s", employee_id, type(exc).__name__, exc)
            return WorkflowResult(employee, None, None, exc)
        logger.info("employee %s: saved version %d", employee_id, employee.version)
        return result

    def _change(self, employee_id: str, action: Callable[[Employee], Any]) -> WorkflowResult:
        def mutate(employee: Employee) -> WorkflowResult:
            action(employee)
            return WorkflowResult(employee)

        return self.run(employee_id, mutate)

    # -- Leave requests ----------------------------------------------------------
    def create_leave_request(
        self, employee_id: str, start: rotor.DateLike, end: rotor.DateLike, code: str, comment: str = ""
    ) -> WorkflowResult:
        return self.run(employee_id, lambda emp: self.workflow.create(emp, start, end, code, comment))

    def update_leave_request(self, employee_id: str, request_id: str, field_name: str, value: Any) -> WorkflowResult:
        return self.run(employee_id, lambda emp: self.workflow.update(emp, request_id, field_name, value))

    def approve_leave_request(self, employee_id: str, request_id: str, approver: str) -> WorkflowResult:
        return self.run(employee_id, lambda emp: self.workflow.approve(emp, request_id, approver, self.catalog))

    def delete_leave_request(self, employee_id: str, request_id: str) -> WorkflowResult:
        return self.run(employee_id, lambda emp: self.workflow.delete(emp, request_id))

    # -- Ledger and assignments --------------------------------------------------
    def add_leave(
        self,
        employee_id: str,
        day: rotor.DateLike,
        code: str,
        status: str,
        hours: float,
        request_id: str = "",
        tag_day: Optional[str] = None,
    ) -> WorkflowResult:
        return self._change(employee_id, lambda emp: emp.add_leave(day, code, status, hours, request_id, tag_day))

    def create_leave_balance(self, employee_id: str, year: int) -> WorkflowResult:
        return self._change(employee_id, lambda emp: emp.create_leave_balance(year))

    def add_assignment(self, employee_id: str, site: str, workcenter: str, start: rotor.DateLike) -> WorkflowResult:
        return self._change(employee_id, lambda emp: emp.add_assignment(site, workcenter, start))

    def remove_assignment(self, employee_id: str, assignment_id: int) -> WorkflowResult:
        return self._change(employee_id, lambda emp: emp.remove_assignment(assignment_id))

    # -- Reads -------------------------------------------------------------------
    def resolve(
        self,
        employee_id: str,
        day: rotor.DateLike,
        mode: str = GENERAL,
        labor_codes: Optional[Iterable[EmployeeLaborCode]] = None,
    ) -> Optional[Workday]:
        day = as_day(day)
        employee = self.repository.load_employee(employee_id, year=day.year)
        return self.resolver.resolve(employee, day, mode, labor_codes)

    def resolve_range(self, employee_id: str, start: date, end: date, mode: str = GENERAL):
        start, end = as_day(start), as_day(end)
        employee = self.repository.load_employee(employee_id)
        years = range(start.year, end.year + 1)
        employee.work = [w for year in years for w in self.repository.load_work(employee_id, year)]
        return [(day, self.resolver.resolve(employee, day, mode)) for day in rotor.cycle_days(start, end)]


__all__ = ["EmployeeService"]
