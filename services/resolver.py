"""Read path: what is an employee scheduled to do on a given day."""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Iterable, Optional

from domain import codes
from domain.employee import Employee
from domain.errors import ValidationError
from domain.schedule import Workday
from domain.work import EmployeeLaborCode
from rules import rotor
from rules.rotor import ONE_DAY, as_day

logger = logging.getLogger(__name__)

GENERAL = "general"
ACTUAL = "actual"
NOLEAVES = "noleaves"
MODES = (GENERAL, ACTUAL, NOLEAVES)


class WorkdayResolver:
    """Layers assignment, variation, actual work and leave into one workday."""

    def __init__(self, default_hours: float = codes.DEFAULT_WORKDAY_HOURS) -> None:
        self.default_hours = default_hours

    # ------------------------------------------------------------------
    def standard_workday(self, employee: Employee, day: rotor.DateLike) -> float:
        assignment = employee.assignment_on(as_day(day))
        if assignment is None or assignment.schedules[0].working_days() == 0:
            return self.default_hours
        return assignment.standard_work_hours()

    def scheduled(self, employee: Employee, day: date) -> Optional[Workday]:
        """The planned workday: a covering variation wins over the assignment."""

        variation = employee.variation_on(day)
        if variation is not None:
            return variation.get_workday(day)
        assignment = employee.assignment_on(day)
        if assignment is None:
            return None
        return assignment.get_workday(day)

    def resolve(
        self,
        employee: Employee,
        day: rotor.DateLike,
        mode: str = GENERAL,
        labor_codes: Optional[Iterable[EmployeeLaborCode]] = None,
        suppress_after_last_work: bool = False,
    ) -> Optional[Workday]:
        if mode not in MODES:
            raise ValidationError(f"Unknown resolution mode: {mode}")
        day = as_day(day)
        if mode == ACTUAL:
            return self._resolve_actual(employee, day, labor_codes)
        if mode == NOLEAVES and suppress_after_last_work:
            last = employee.last_workday()
            if last is not None and day >= last:
                return None

        workday = self.scheduled(employee, day)
        actual = employee.actual_hours_on(day)
        if actual > 0.0:
            if workday is not None and not workday.is_empty:
                workday.hours = actual
            else:
                workday = self._stamp_previous(employee, day, actual) or workday
            logger.debug("employee %s %s: actual hours %.2f", employee.id, day, actual)
        if mode == NOLEAVES:
            return workday
        if workday is None or actual == 0.0:
            leave = self._leave_override(employee, day)
            if leave is not None:
                return leave
        return workday

    # ------------------------------------------------------------------
    def _stamp_previous(self, employee: Employee, day: date, hours: float) -> Optional[Workday]:
        # work after midnight belongs to the shift that started on an earlier day
        floor = employee.first_start()
        if floor is None:
            return None
        current = day - ONE_DAY
        while current >= floor:
            assignment = employee.assignment_on(current)
            if assignment is not None:
                candidate = assignment.get_workday(current)
                if candidate is not None and not candidate.is_empty:
                    candidate.hours = hours
                    return candidate
            current -= ONE_DAY
        return None

    def _leave_override(self, employee: Employee, day: date) -> Optional[Workday]:
        half = self.standard_workday(employee, day) / 2.0
        for leave in employee.leaves_on(day):
            if leave.hours > half or leave.is_actual:
                return Workday(workcenter=leave.workcenter, code=leave.code, hours=leave.hours)
        return None

    def _resolve_actual(
        self,
        employee: Employee,
        day: date,
        labor_codes: Optional[Iterable[EmployeeLaborCode]],
    ) -> Optional[Workday]:
        workday = self.scheduled(employee, day)
        if not self._is_primary_charge(employee, day, labor_codes):
            return workday
        actuals = [leave for leave in employee.leaves_on(day) if leave.is_actual]
        if not actuals:
            return workday
        largest = max(actuals, key=lambda leave: leave.hours)
        return Workday(code=largest.code, hours=sum(leave.hours for leave in actuals))

    def _is_primary_charge(
        self,
        employee: Employee,
        day: date,
        labor_codes: Optional[Iterable[EmployeeLaborCode]],
    ) -> bool:
        wanted = list(labor_codes or [])
        if not wanted:
            return True
        assignment = employee.assignment_on(day)
        if assignment is None:
            return False
        return any(assignment.has_labor_code(lc.chargenumber, lc.extension) for lc in wanted)

    # -- Period helpers ----------------------------------------------------------
    def assignment_for_period(
        self, employee: Employee, start: rotor.DateLike, end: rotor.DateLike
    ) -> Optional[Workday]:
        """The most frequent workcenter/code pair scheduled over the period."""

        counts: Counter = Counter()
        hours = {}
        for day in rotor.cycle_days(as_day(start), as_day(end)):
            workday = self.resolve(employee, day, NOLEAVES)
            if workday is None or workday.is_empty:
                continue
            key = (workday.workcenter, workday.code)
            counts[key] += 1
            hours.setdefault(key, workday.hours)
        if not counts:
            return None
        (workcenter, code), _ = counts.most_common(1)[0]
        return Workday(workcenter=workcenter, code=code, hours=hours[(workcenter, code)])

    def is_primary_code(self, employee: Employee, day: rotor.DateLike, labor: EmployeeLaborCode) -> bool:
        """Whether *labor* is one of the covering assignment's labor codes."""

        assignment = employee.assignment_on(as_day(day))
        if assignment is None:
            return False
        return assignment.has_labor_code(labor.chargenumber, labor.extension)


__all__ = ["WorkdayResolver", "GENERAL", "ACTUAL", "NOLEAVES", "MODES"]
