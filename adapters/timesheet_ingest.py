"""Monthly timesheet workbook reader.

Each row of ``Sheet1`` names an employee ("Last, First") in column 1 and holds
one cell per day of the month starting at column 3. Numeric cells are worked
hours; anything else is looked up as a leave alternate code.
"""
from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from openpyxl import load_workbook

from domain import codes
from domain.employee import Employee
from domain.errors import EngineError
from domain.work import Work, Workcode
from services.resolver import WorkdayResolver

logger = logging.getLogger(__name__)

HOURS_RE = re.compile(r"^[0-9]{1,2}(\.[0-9]+)?$")
SKIP_NAMES = {"name", "remarks", "n/a"}


class IngestError(EngineError):
    """Raised when a timesheet workbook does not have the expected layout."""


@dataclass
class IngestRow:
    employee_id: str
    day: date
    hours: float
    chargenumber: str = ""
    extension: str = ""
    code: str = ""

    @property
    def is_leave(self) -> bool:
        return bool(self.code)

    def sort_key(self) -> tuple:
        return (self.employee_id, self.day, self.code, self.chargenumber)


class TimesheetIngest:
    def __init__(
        self,
        month: date,
        catalog: Iterable[Workcode],
        resolver: Optional[WorkdayResolver] = None,
        sheet: str = "Sheet1",
        first_day_column: int = 3,
    ) -> None:
        self.month = date(month.year, month.month, 1)
        self.catalog = [wc for wc in catalog if wc.is_leave and wc.altcode]
        self.resolver = resolver or WorkdayResolver()
        self.sheet = sheet
        self.first_day_column = first_day_column
        self.days_in_month = calendar.monthrange(self.month.year, self.month.month)[1]

    def read(self, path: str | Path, employees: Sequence[Employee]) -> List[IngestRow]:
        workbook = load_workbook(Path(path), read_only=True, data_only=True)
        try:
            if self.sheet not in workbook.sheetnames:
                raise IngestError(f"Workbook {path} has no worksheet named {self.sheet}")
            by_name = {e.name.last_first().lower(): e for e in employees}
            rows: List[IngestRow] = []
            for values in workbook[self.sheet].iter_rows(values_only=True):
                if not values:
                    continue
                name = str(values[0] if values[0] is not None else "").strip()
                if not name or name.lower() in SKIP_NAMES:
                    continue
                employee = by_name.get(name.lower())
                if employee is None:
                    logger.debug("timesheet row %r matches no employee", name)
                    continue
                rows.extend(self._read_row(employee, values))
        finally:
            workbook.close()
        rows.sort(key=IngestRow.sort_key)
        logger.info("read %d timesheet entries from %s", len(rows), path)
        return rows

    def _read_row(self, employee: Employee, values: Sequence[object]) -> List[IngestRow]:
        rows: List[IngestRow] = []
        start = self.first_day_column - 1
        for offset in range(self.days_in_month):
            index = start + offset
            if index >= len(values) or values[index] is None:
                continue
            text = self._cell_text(values[index])
            if not text:
                continue
            day = self.month + timedelta(days=offset)
            row = self._hours_row(employee, day, text) if HOURS_RE.match(text) else self._leave_row(employee, day, text)
            if row is not None:
                rows.append(row)
        return rows

    @staticmethod
    def _cell_text(value: object) -> str:
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

    def _hours_row(self, employee: Employee, day: date, text: str) -> Optional[IngestRow]:
        assignment = employee.assignment_on(day)
        if assignment is None or not assignment.labor_codes:
            logger.debug("employee %s has no labor code on %s", employee.id, day)
            return None
        labor = assignment.labor_codes[0]
        return IngestRow(employee.id, day, float(text), labor.chargenumber, labor.extension)

    def _leave_row(self, employee: Employee, day: date, text: str) -> Optional[IngestRow]:
        for workcode in self.catalog:
            if codes.same_code(workcode.altcode, text):
                hours = self.resolver.standard_workday(employee, day)
                return IngestRow(employee.id, day, hours, code=workcode.id)
        logger.debug("employee %s: unknown timesheet code %r on %s", employee.id, text, day)
        return None


def apply_rows(employees: Iterable[Employee], rows: Iterable[IngestRow]) -> Dict[str, int]:
    """Write ingested rows onto the employees: Work records and ACTUAL leaves.

    Returns the number of rows applied per employee id.
    """

    by_id = {e.id: e for e in employees}
    applied: Dict[str, int] = {}
    for row in rows:
        employee = by_id.get(row.employee_id)
        if employee is None:
            continue
        if row.is_leave:
            employee.add_leave(row.day, row.code, codes.LEAVE_ACTUAL, row.hours)
        else:
            if employee.work is None:
                employee.work = []
            employee.work = [
                w for w in employee.work
                if not (w.on(row.day) and w.chargenumber == row.chargenumber and w.extension == row.extension)
            ]
            employee.work.append(
                Work(dateworked=row.day, chargenumber=row.chargenumber, extension=row.extension, hours=row.hours)
            )
        applied[employee.id] = applied.get(employee.id, 0) + 1
    for employee in by_id.values():
        employee.sort_all()
    return applied


__all__ = ["IngestError", "IngestRow", "TimesheetIngest", "apply_rows"]
