"""Employee aggregate: owns assignments, variations, leaves, balances and requests."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from rules import rotor
from rules.rotor import MAX_DATE, ONE_DAY, as_day

from . import codes
from .assignment import Assignment, Variation
from .errors import NotFoundError, ValidationError
from .leave import AnnualLeave, Leave, LeaveRequest
from .schedule import Schedule, Workday
from .work import Work


@dataclass
class EmployeeName:
    first: str = ""
    middle: str = ""
    last: str = ""

    def last_first(self) -> str:
        return f"{self.last}, {self.first}"

    def full(self) -> str:
        parts = [self.first, self.middle, self.last]
        return " ".join(p for p in parts if p)

    def to_dict(self) -> Dict[str, Any]:
        return {"first": self.first, "middle": self.middle, "last": self.last}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmployeeName":
        return cls(first=data.get("first") or "", middle=data.get("middle") or "", last=data.get("last") or "")


@dataclass
class CompanyInfo:
    company: str = ""
    employee_id: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"company": self.company, "employeeid": self.employee_id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompanyInfo":
        return cls(company=data.get("company") or "", employee_id=data.get("employeeid") or "")


@dataclass
class Employee:
    """The aggregate root. Children are created and changed only through it."""

    id: str
    team: str = ""
    site: str = ""
    email: str = ""
    name: EmployeeName = field(default_factory=EmployeeName)
    company_info: CompanyInfo = field(default_factory=CompanyInfo)
    version: int = 0
    assignments: List[Assignment] = field(default_factory=list)
    variations: List[Variation] = field(default_factory=list)
    balances: List[AnnualLeave] = field(default_factory=list)
    leaves: List[Leave] = field(default_factory=list)
    requests: List[LeaveRequest] = field(default_factory=list)
    # actual hours for the report period; supplied by the caller, never persisted here
    work: Optional[List[Work]] = None

    def __post_init__(self) -> None:
        self.sort_all()

    # -- Ordering ----------------------------------------------------------------
    def sort_all(self) -> None:
        self.assignments.sort(key=Assignment.sort_key)
        self.variations.sort(key=Variation.sort_key)
        self.balances.sort(key=lambda b: b.year)
        self.leaves.sort(key=Leave.sort_key)
        self.requests.sort(key=LeaveRequest.sort_key)
        if self.work:
            self.work.sort(key=Work.sort_key)

    def work_records(self) -> List[Work]:
        if not self.work:
            return []
        self.work.sort(key=Work.sort_key)
        return self.work

    # -- Assignments -------------------------------------------------------------
    def assignment(self, assignment_id: int) -> Assignment:
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        raise NotFoundError(f"Assignment {assignment_id} not found")

    def assignment_on(self, day: date) -> Optional[Assignment]:
        day = as_day(day)
        self.assignments.sort(key=Assignment.sort_key)
        for assignment in self.assignments:
            if assignment.covers(day):
                return assignment
        return None

    def first_start(self) -> Optional[date]:
        self.assignments.sort(key=Assignment.sort_key)
        return self.assignments[0].start_date if self.assignments else None

    def add_assignment(self, site: str, workcenter: str, start: rotor.DateLike) -> Assignment:
        """Open a new assignment at *start*, closing the current last one the day before."""

        start = as_day(start)
        self.assignments.sort(key=Assignment.sort_key)
        if self.assignments and start <= self.assignments[-1].start_date:
            raise ValidationError(
                f"New assignment must start after {self.assignments[-1].start_date.isoformat()}"
            )
        schedule = Schedule.blank(0, 7)
        for workday_id in range(1, 6):
            schedule.change_workday(workday_id, workcenter, codes.WORK_CODE, codes.DEFAULT_WORKDAY_HOURS)
        next_id = max((a.id for a in self.assignments), default=0) + 1
        if self.assignments:
            self.assignments[-1].end_date = start - ONE_DAY
        assignment = Assignment(
            id=next_id,
            site=site,
            workcenter=workcenter,
            start_date=start,
            end_date=MAX_DATE,
            schedules=[schedule],
        )
        self.assignments.append(assignment)
        return assignment

    def remove_assignment(self, assignment_id: int) -> None:
        """Remove an assignment and close the gap it leaves behind."""

        self.assignments.sort(key=Assignment.sort_key)
        position = next((i for i, a in enumerate(self.assignments) if a.id == assignment_id), None)
        if position is None:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        if len(self.assignments) == 1:
            raise ValidationError("An employee must keep at least one assignment")
        removed = self.assignments[position]
        if position == 0:
            successor = self.assignments[1]
            # keep the successor's rotation phase where it was before its start moves
            if successor.rotation_date is None:
                successor.rotation_date = successor.start_date
            successor.start_date = removed.start_date
        elif position == len(self.assignments) - 1:
            self.assignments[position - 1].end_date = removed.end_date
        else:
            self.assignments[position - 1].end_date = self.assignments[position + 1].start_date - ONE_DAY
        del self.assignments[position]

    # -- Variations --------------------------------------------------------------
    def variation(self, variation_id: int) -> Variation:
        for variation in self.variations:
            if variation.id == variation_id:
                return variation
        raise NotFoundError(f"Variation {variation_id} not found")

    def variation_on(self, day: date) -> Optional[Variation]:
        day = as_day(day)
        self.variations.sort(key=Variation.sort_key)
        for variation in self.variations:
            if variation.covers(day):
                return variation
        return None

    def find_variation(self, start: date, end: date, mod: bool) -> Optional[Variation]:
        for variation in self.variations:
            if variation.start_date == start and variation.end_date == end and variation.mod == mod:
                return variation
        return None

    def add_variation(
        self,
        site: str,
        start: rotor.DateLike,
        end: Optional[rotor.DateLike] = None,
        mids: bool = False,
        mod: bool = False,
    ) -> Variation:
        start = as_day(start)
        end = as_day(end) if end is not None else start
        if start > end:
            raise ValidationError("Variation start must not be after its end")
        variation = Variation(
            id=max((v.id for v in self.variations), default=0) + 1,
            site=site,
            mids=mids,
            mod=mod,
            start_date=start,
            end_date=end,
            schedule=Schedule(id=0, show_dates=True),
        )
        variation.set_schedule_days()
        self.variations.append(variation)
        self.variations.sort(key=Variation.sort_key)
        return variation

    def update_variation(self, variation_id: int, field_name: str, value: Any) -> Variation:
        variation = self.variation(variation_id)
        name = field_name.lower()
        if name == "site":
            variation.site = str(value)
        elif name == "mids":
            variation.mids = bool(value)
        elif name == "mod":
            variation.mod = bool(value)
        elif name in ("start", "startdate", "end", "enddate"):
            new_date = as_day(value)
            start = new_date if name.startswith("start") else variation.start_date
            end = new_date if name.startswith("end") else variation.end_date
            if start > end:
                raise ValidationError("Variation start must not be after its end")
            previous_start = variation.start_date
            variation.start_date = start
            variation.end_date = end
            variation.set_schedule_days(previous_start)
        else:
            raise ValidationError(f"Unknown variation field: {field_name}")
        self.variations.sort(key=Variation.sort_key)
        return variation

    def change_variation_workday(
        self, variation_id: int, day: rotor.DateLike, workcenter: str, code: str, hours: float
    ) -> None:
        variation = self.variation(variation_id)
        day = as_day(day)
        if not variation.covers(day):
            raise ValidationError(f"{day.isoformat()} is outside variation {variation_id}")
        variation.update_workday_by_date(day, workcenter, code, hours)

    def remove_variation(self, variation_id: int) -> None:
        self.variations.remove(self.variation(variation_id))

    # -- Leaves ------------------------------------------------------------------
    def next_leave_id(self) -> int:
        return max((leave.id for leave in self.leaves), default=0) + 1

    def leave(self, leave_id: int) -> Leave:
        for leave in self.leaves:
            if leave.id == leave_id:
                return leave
        raise NotFoundError(f"Leave {leave_id} not found")

    def leaves_on(self, day: date) -> List[Leave]:
        day = as_day(day)
        self.leaves.sort(key=Leave.sort_key)
        return [leave for leave in self.leaves if leave.leave_date == day]

    def leaves_for_request(self, request_id: str) -> List[Leave]:
        return [leave for leave in self.leaves if leave.request_id == request_id]

    def add_leave(
        self,
        day: rotor.DateLike,
        code: str,
        status: str,
        hours: float,
        request_id: str = "",
        tag_day: Optional[str] = None,
        leave_id: Optional[int] = None,
    ) -> Leave:
        """Insert a leave or update the one already recorded for the date and code.

        An existing row keeps its request link; ``request_id`` only fills an empty one.
        """

        day = as_day(day)
        found = None
        for leave in self.leaves:
            if leave_id is not None:
                if leave.id == leave_id:
                    found = leave
                    break
            elif leave.leave_date == day and codes.same_code(leave.code, code):
                found = leave
                break
        if found is not None:
            found.status = status
            found.hours = float(hours)
            if tag_day is not None:
                found.tag_day = tag_day
            if not found.request_id and request_id:
                found.request_id = request_id
        else:
            found = Leave(
                id=leave_id if leave_id is not None else self.next_leave_id(),
                leave_date=day,
                code=code,
                hours=hours,
                status=status,
                request_id=request_id,
                tag_day=tag_day,
            )
            self.leaves.append(found)
        self.leaves.sort(key=Leave.sort_key)
        return found

    def update_leave(self, leave_id: int, field_name: str, value: Any) -> Leave:
        leave = self.leave(leave_id)
        name = field_name.lower()
        if name in ("date", "leavedate"):
            leave.leave_date = as_day(value)
        elif name == "code":
            leave.code = str(value)
        elif name == "hours":
            leave.hours = float(value)
        elif name == "status":
            leave.status = str(value)
        elif name == "requestid":
            leave.request_id = str(value)
        elif name == "used":
            leave.used = bool(value)
        elif name in ("tag", "tagday"):
            leave.tag_day = value or None
        else:
            raise ValidationError(f"Unknown leave field: {field_name}")
        self.leaves.sort(key=Leave.sort_key)
        return leave

    def delete_leave(self, leave_id: int) -> None:
        self.leaves.remove(self.leave(leave_id))

    def remove_leaves(
        self,
        start: rotor.DateLike,
        end: rotor.DateLike,
        request_id: str = "",
        include_actuals: bool = True,
    ) -> int:
        """Drop leaves dated in [start, end]; returns how many were removed."""

        start, end = as_day(start), as_day(end)

        def doomed(leave: Leave) -> bool:
            if not rotor.in_window(leave.leave_date, start, end):
                return False
            if request_id and leave.request_id != request_id:
                return False
            return include_actuals or not leave.is_actual

        before = len(self.leaves)
        self.leaves = [leave for leave in self.leaves if not doomed(leave)]
        return before - len(self.leaves)

    def leave_on(self, day: rotor.DateLike) -> Optional[Workday]:
        """All leave for a day folded into one workday (largest entry's code, summed hours)."""

        entries = self.leaves_on(day)
        if not entries:
            return None
        largest = max(entries, key=lambda leave: leave.hours)
        return Workday(code=largest.code, hours=sum(leave.hours for leave in entries))

    # -- Balances ----------------------------------------------------------------
    def balance(self, year: int) -> Optional[AnnualLeave]:
        for balance in self.balances:
            if balance.year == year:
                return balance
        return None

    def create_leave_balance(self, year: int) -> AnnualLeave:
        existing = self.balance(year)
        if existing is not None:
            return existing
        previous = self.balance(year - 1)
        if previous is None:
            created = AnnualLeave(year=year, annual=codes.DEFAULT_ANNUAL_HOURS, carryover=0.0)
        else:
            taken = self.pto_hours(date(year, 1, 1), date(year, 12, 31))
            created = AnnualLeave(
                year=year,
                annual=previous.annual,
                carryover=previous.annual + previous.carryover - taken,
            )
        self.balances.append(created)
        self.balances.sort(key=lambda b: b.year)
        return created

    def update_leave_balance(self, year: int, annual: float, carryover: float) -> AnnualLeave:
        balance = self.balance(year)
        if balance is None:
            balance = AnnualLeave(year=year)
            self.balances.append(balance)
            self.balances.sort(key=lambda b: b.year)
        balance.annual = float(annual)
        balance.carryover = float(carryover)
        return balance

    def delete_leave_balance(self, year: int) -> None:
        balance = self.balance(year)
        if balance is None:
            raise NotFoundError(f"No leave balance for {year}")
        self.balances.remove(balance)

    # -- Hours -------------------------------------------------------------------
    def worked_hours(
        self,
        start: rotor.DateLike,
        end: rotor.DateLike,
        charge_number: Optional[str] = None,
        extension: Optional[str] = None,
    ) -> float:
        start, end = as_day(start), as_day(end)
        total = 0.0
        for work in self.work_records():
            if work.modtime or not rotor.in_window(work.dateworked, start, end):
                continue
            if charge_number is not None and not (
                codes.same_code(work.chargenumber, charge_number) and codes.same_code(work.extension, extension)
            ):
                continue
            total += work.hours
        return total

    def actual_hours_on(self, day: date) -> float:
        return self.worked_hours(day, day)

    def leave_hours(self, start: rotor.DateLike, end: rotor.DateLike) -> float:
        start, end = as_day(start), as_day(end)
        return sum(
            leave.hours
            for leave in self.leaves
            if leave.is_actual and rotor.in_window(leave.leave_date, start, end)
        )

    def pto_hours(self, start: rotor.DateLike, end: rotor.DateLike) -> float:
        start, end = as_day(start), as_day(end)
        return sum(
            leave.hours
            for leave in self.leaves
            if leave.is_actual
            and codes.same_code(leave.code, codes.VACATION)
            and rotor.in_window(leave.leave_date, start, end)
        )

    def mod_time(self, start: rotor.DateLike, end: rotor.DateLike) -> float:
        start, end = as_day(start), as_day(end)
        return sum(
            work.hours
            for work in self.work_records()
            if work.modtime and rotor.in_window(work.dateworked, start, end)
        )

    def has_mod_time(self, start: rotor.DateLike, end: rotor.DateLike) -> bool:
        return self.mod_time(start, end) > 0.0

    def last_workday(self) -> Optional[date]:
        worked = [work.dateworked for work in self.work_records() if work.hours > 0.0]
        return max(worked) if worked else None

    # -- Labor codes and status --------------------------------------------------
    def has_labor_code(self, charge_number: str, extension: str) -> bool:
        return any(a.has_labor_code(charge_number, extension) for a in self.assignments)

    def has_labor_code_on(self, day: rotor.DateLike, charge_number: str, extension: str) -> bool:
        assignment = self.assignment_on(as_day(day))
        return assignment is not None and assignment.has_labor_code(charge_number, extension)

    def is_active(self, day: rotor.DateLike) -> bool:
        return self.assignment_on(as_day(day)) is not None

    def purge(self, before: rotor.DateLike) -> bool:
        """Drop history older than *before*.

        Returns True when the employee's last assignment ended before that date,
        i.e. the employee itself can be purged.
        """

        before = as_day(before)
        self.variations = [v for v in self.variations if v.end_date >= before]
        self.leaves = [leave for leave in self.leaves if leave.leave_date >= before]
        self.requests = [r for r in self.requests if r.end_date >= before]
        self.balances = [b for b in self.balances if b.year >= before.year]
        self.assignments.sort(key=Assignment.sort_key)
        return bool(self.assignments) and self.assignments[-1].end_date < before

    # -- Requests ----------------------------------------------------------------
    def request(self, request_id: str) -> LeaveRequest:
        for request in self.requests:
            if request.id == request_id:
                return request
        raise NotFoundError(f"Leave request {request_id} not found")

    def request_for_dates(self, start: date, end: date) -> Optional[LeaveRequest]:
        for request in self.requests:
            if request.start_date == start and request.end_date == end:
                return request
        return None

    def add_request(self, request: LeaveRequest) -> None:
        self.requests.append(request)
        self.requests.sort(key=LeaveRequest.sort_key)

    def remove_request(self, request_id: str) -> None:
        self.requests.remove(self.request(request_id))

    # -- Documents ---------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        self.sort_all()
        return {
            "id": self.id,
            "team": self.team,
            "site": self.site,
            "email": self.email,
            "name": self.name.to_dict(),
            "companyinfo": self.company_info.to_dict(),
            "version": self.version,
            "assignments": [a.to_dict() for a in self.assignments],
            "variations": [v.to_dict() for v in self.variations],
            "balance": [b.to_dict() for b in self.balances],
            "leaves": [leave.to_dict() for leave in self.leaves],
            "requests": [r.to_dict() for r in self.requests],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], work: Optional[Iterable[Work]] = None) -> "Employee":
        return cls(
            id=str(data["id"]),
            team=data.get("team") or "",
            site=data.get("site") or "",
            email=data.get("email") or "",
            name=EmployeeName.from_dict(data.get("name") or {}),
            company_info=CompanyInfo.from_dict(data.get("companyinfo") or {}),
            version=int(data.get("version") or 0),
            assignments=[Assignment.from_dict(a) for a in data.get("assignments") or []],
            variations=[Variation.from_dict(v) for v in data.get("variations") or []],
            balances=[AnnualLeave.from_dict(b) for b in data.get("balance") or []],
            leaves=[Leave.from_dict(leave) for leave in data.get("leaves") or []],
            requests=[LeaveRequest.from_dict(r) for r in data.get("requests") or []],
            work=list(work) if work is not None else None,
        )


__all__ = ["Employee", "EmployeeName", "CompanyInfo"]
