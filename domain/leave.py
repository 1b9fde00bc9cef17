"""Leave ledger rows, annual balances and the leave request aggregate."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from rules import rotor
from rules.rotor import as_day

from . import codes
from .errors import NotFoundError
from .schedule import Workday


@dataclass
class Leave:
    id: int = 0
    leave_date: date = rotor.MIN_DATE
    code: str = ""
    hours: float = 0.0
    status: str = codes.LEAVE_REQUESTED
    request_id: str = ""
    used: bool = False
    tag_day: Optional[str] = None
    workcenter: str = ""

    def __post_init__(self) -> None:
        self.leave_date = as_day(self.leave_date)
        self.hours = float(self.hours)

    def sort_key(self) -> tuple:
        return (self.leave_date, -self.hours, self.code.lower())

    @property
    def is_actual(self) -> bool:
        return codes.is_actual(self.status)

    @property
    def is_blank(self) -> bool:
        return codes.is_blank(self.code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "leavedate": self.leave_date.isoformat(),
            "code": self.code,
            "hours": self.hours,
            "status": self.status,
            "requestid": self.request_id,
            "used": self.used,
            "tagday": self.tag_day,
            "workcenter": self.workcenter,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Leave":
        return cls(
            id=int(data.get("id", 0)),
            leave_date=as_day(data["leavedate"]),
            code=data.get("code") or "",
            hours=float(data.get("hours") or 0.0),
            status=data.get("status") or codes.LEAVE_REQUESTED,
            request_id=data.get("requestid") or "",
            used=bool(data.get("used", False)),
            tag_day=data.get("tagday"),
            workcenter=data.get("workcenter") or "",
        )


@dataclass
class AnnualLeave:
    year: int
    annual: float = codes.DEFAULT_ANNUAL_HOURS
    carryover: float = 0.0

    def total(self) -> float:
        return self.annual + self.carryover

    def to_dict(self) -> Dict[str, Any]:
        return {"year": self.year, "annual": self.annual, "carryover": self.carryover}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnualLeave":
        return cls(
            year=int(data["year"]),
            annual=float(data.get("annual") or 0.0),
            carryover=float(data.get("carryover") or 0.0),
        )


@dataclass
class LeaveRequestComment:
    comment: str
    commentdate: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {"commentdate": self.commentdate.isoformat(), "comment": self.comment}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaveRequestComment":
        stamp = data.get("commentdate")
        return cls(
            comment=data.get("comment") or "",
            commentdate=datetime.fromisoformat(stamp) if stamp else datetime.now(timezone.utc),
        )


ResolveFn = Callable[[date], Optional[Workday]]
HoursFn = Callable[[date], float]


@dataclass
class LeaveRequest:
    """A proposed multi-day leave with its day plan and approval state."""

    id: str
    employee_id: str = ""
    request_date: date = field(default_factory=lambda: datetime.now(timezone.utc).date())
    primary_code: str = codes.VACATION
    start_date: date = rotor.MIN_DATE
    end_date: date = rotor.MIN_DATE
    status: str = codes.REQUEST_DRAFT
    approved_by: str = ""
    approval_date: Optional[date] = None
    variation_id: Optional[int] = None
    requested_days: List[Leave] = field(default_factory=list)
    comments: List[LeaveRequestComment] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.request_date = as_day(self.request_date)
        self.start_date = as_day(self.start_date)
        self.end_date = as_day(self.end_date)
        self.status = codes.normalize_status(self.status) or codes.REQUEST_DRAFT
        if self.approval_date is not None:
            self.approval_date = as_day(self.approval_date)

    def sort_key(self) -> tuple:
        return (self.start_date, self.end_date, self.request_date)

    @property
    def is_mod(self) -> bool:
        return codes.is_mod(self.primary_code)

    @property
    def is_approved(self) -> bool:
        return codes.is_approved(self.status)

    def covers(self, day: date) -> bool:
        return rotor.in_window(day, self.start_date, self.end_date)

    def add_comment(self, text: str) -> None:
        self.comments.append(LeaveRequestComment(comment=text))

    def day_on(self, day: date) -> Optional[Leave]:
        for leave in self.requested_days:
            if leave.leave_date == day:
                return leave
        return None

    def non_blank_days(self) -> List[Leave]:
        return [leave for leave in self.requested_days if not leave.is_blank]

    def total_hours(self) -> float:
        return sum(leave.hours for leave in self.requested_days)

    def set_leave_days(self, resolve: ResolveFn, standard_hours: HoursFn, reset: bool = False) -> None:
        """Rebuild the day plan for every day of [start_date, end_date].

        ``resolve`` gives the employee's normal workday for a date and
        ``standard_hours`` the standard workday length. Unless ``reset`` is set,
        day-level edits already present for a date are carried into the new plan.
        """

        previous = {} if reset else {leave.leave_date: leave for leave in self.requested_days}
        days: List[Leave] = []
        for idx, day in enumerate(rotor.cycle_days(self.start_date, self.end_date)):
            workday = resolve(day)
            leave = Leave(id=idx, leave_date=day, status=codes.REQUEST_DRAFT, request_id=self.id)
            if workday is None or workday.is_empty:
                pass
            elif self.is_mod:
                leave.code = workday.code
                leave.hours = workday.hours
                leave.workcenter = workday.workcenter
            else:
                leave.code = self.primary_code
                if codes.same_code(self.primary_code, codes.HOLIDAY):
                    leave.hours = codes.HOLIDAY_HOURS
                else:
                    leave.hours = standard_hours(day)
            prior = previous.get(day)
            if prior is not None:
                leave.code = prior.code
                leave.hours = prior.hours
                leave.status = prior.status
                leave.tag_day = prior.tag_day
                leave.workcenter = prior.workcenter
            days.append(leave)
        self.requested_days = days

    def update_leave_day(
        self,
        day: date,
        code: str,
        hours: float,
        status: Optional[str] = None,
        workcenter: Optional[str] = None,
    ) -> Leave:
        """Patch one planned day; a blank code always carries zero hours."""

        day = as_day(day)
        leave = self.day_on(day)
        if leave is None:
            raise NotFoundError(f"Leave request {self.id} has no day {day.isoformat()}")
        leave.code = code or ""
        leave.hours = 0.0 if codes.is_blank(code) else float(hours)
        if status is not None:
            leave.status = status
        if workcenter is not None:
            leave.workcenter = workcenter
        return leave

    def stamp_days(self, status: str) -> None:
        for leave in self.non_blank_days():
            leave.status = status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeid": self.employee_id,
            "requestDate": self.request_date.isoformat(),
            "primarycode": self.primary_code,
            "startdate": self.start_date.isoformat(),
            "enddate": self.end_date.isoformat(),
            "status": self.status,
            "approvedby": self.approved_by,
            "approvalDate": self.approval_date.isoformat() if self.approval_date else None,
            "variationid": self.variation_id,
            "requesteddays": [leave.to_dict() for leave in self.requested_days],
            "comments": [c.to_dict() for c in self.comments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaveRequest":
        return cls(
            id=data["id"],
            employee_id=data.get("employeeid") or "",
            request_date=as_day(data.get("requestDate") or data["startdate"]),
            primary_code=data.get("primarycode") or codes.VACATION,
            start_date=as_day(data["startdate"]),
            end_date=as_day(data["enddate"]),
            status=data.get("status") or codes.REQUEST_DRAFT,
            approved_by=data.get("approvedby") or "",
            approval_date=as_day(data["approvalDate"]) if data.get("approvalDate") else None,
            variation_id=data.get("variationid"),
            requested_days=[Leave.from_dict(d) for d in data.get("requesteddays") or []],
            comments=[LeaveRequestComment.from_dict(c) for c in data.get("comments") or []],
        )


__all__ = ["Leave", "AnnualLeave", "LeaveRequestComment", "LeaveRequest"]
