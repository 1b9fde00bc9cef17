"""Write path: the leave request state machine."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from domain import codes
from domain.assignment import Variation
from domain.employee import Employee
from domain.errors import EngineError, StateConflictError, ValidationError
from domain.leave import LeaveRequest
from domain.work import Workcode, is_leave_code
from rules import rotor
from rules.rotor import MAX_DATE, MIN_DATE, ONE_DAY, as_day

from services.resolver import GENERAL, WorkdayResolver

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    employee: Optional[Employee]
    leave_request: Optional[LeaveRequest] = None
    message: Optional[str] = None
    error: Optional[EngineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _fmt(day: date) -> str:
    return day.strftime("%m/%d/%Y")


def _period(request: LeaveRequest) -> str:
    return f"{_fmt(request.start_date)} - {_fmt(request.end_date)}"


def _split_dates(value: Any) -> Tuple[date, date]:
    if isinstance(value, str):
        parts = value.split("|")
        if len(parts) != 2:
            raise ValidationError(f"Expected 'start|end', got {value!r}")
        return as_day(parts[0]), as_day(parts[1])
    try:
        start, end = value
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Expected a pair of dates, got {value!r}") from exc
    return as_day(start), as_day(end)


def _parse_day(value: Any) -> Tuple[date, str, float, Optional[str]]:
    if isinstance(value, Mapping):
        day = value.get("date") or value.get("leavedate")
        if day is None:
            raise ValidationError("Request day needs a date")
        return as_day(day), str(value.get("code") or ""), float(value.get("hours") or 0.0), value.get("workcenter")
    parts = str(value).split("|")
    if len(parts) < 3:
        raise ValidationError(f"Expected 'date|code|hours[|workcenter]', got {value!r}")
    try:
        hours = float(parts[2]) if parts[2] else 0.0
    except ValueError as exc:
        raise ValidationError(f"Invalid hours in {value!r}") from exc
    workcenter = parts[3] if len(parts) > 3 else None
    return as_day(parts[0]), parts[1].strip(), hours, workcenter


class LeaveRequestWorkflow:
    """Creates, edits, approves and deletes leave requests on an employee."""

    def __init__(
        self,
        resolver: Optional[WorkdayResolver] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.resolver = resolver or WorkdayResolver()
        self.clock = clock

    def _today(self) -> date:
        return as_day(self.clock())

    def _plan(self, employee: Employee, request: LeaveRequest, reset: bool) -> None:
        request.set_leave_days(
            lambda day: self.resolver.resolve(employee, day, GENERAL),
            lambda day: self.resolver.standard_workday(employee, day),
            reset=reset,
        )

    def _retract(self, employee: Employee, request: LeaveRequest, start: date = MIN_DATE, end: date = MAX_DATE) -> int:
        return employee.remove_leaves(start, end, request_id=request.id, include_actuals=False)

    @staticmethod
    def _mod_variation(employee: Employee, request: LeaveRequest) -> Optional[Variation]:
        if request.variation_id is None:
            return None
        for variation in employee.variations:
            if variation.id == request.variation_id:
                return variation
        return None

    def _drop_variation(self, employee: Employee, request: LeaveRequest) -> None:
        variation = self._mod_variation(employee, request)
        if variation is not None:
            employee.remove_variation(variation.id)
        request.variation_id = None

    # -- create ------------------------------------------------------------------
    def create(
        self,
        employee: Employee,
        start: rotor.DateLike,
        end: rotor.DateLike,
        code: str,
        comment: str = "",
    ) -> WorkflowResult:
        start, end = as_day(start), as_day(end)
        if start > end:
            raise ValidationError("Leave request start must not be after its end")
        if codes.is_blank(code):
            raise ValidationError("Leave request needs a primary code")

        existing = employee.request_for_dates(start, end)
        if existing is not None:
            if comment:
                existing.add_comment(comment)
            logger.info("employee %s: request %s already covers %s", employee.id, existing.id, _period(existing))
            return WorkflowResult(employee, existing)

        request = LeaveRequest(
            id=uuid.uuid4().hex,
            employee_id=employee.id,
            request_date=self._today(),
            primary_code=code.strip(),
            start_date=start,
            end_date=end,
            status=codes.REQUEST_DRAFT,
        )
        request.add_comment("Request Created")
        if comment:
            request.add_comment(comment)
        self._plan(employee, request, reset=True)
        employee.add_request(request)
        logger.info("employee %s: created leave request %s for %s", employee.id, request.id, _period(request))
        return WorkflowResult(employee, request)

    # -- update ------------------------------------------------------------------
    def update(self, employee: Employee, request_id: str, field_name: str, value: Any) -> WorkflowResult:
        request = employee.request(request_id)
        handlers: Dict[str, Callable[[Employee, LeaveRequest, Any], Optional[str]]] = {
            "start": self._update_start,
            "startdate": self._update_start,
            "end": self._update_end,
            "enddate": self._update_end,
            "dates": self._update_dates,
            "code": self._update_code,
            "primarycode": self._update_code,
            "requested": self._submit,
            "unapprove": self._unapprove,
            "day": self._update_day,
            "requestday": self._update_day,
            "comment": self._add_comment,
            "addcomment": self._add_comment,
        }
        handler = handlers.get(field_name.lower())
        if handler is None:
            raise ValidationError(f"Unknown leave request field: {field_name}")
        message = handler(employee, request, value)
        employee.requests.sort(key=LeaveRequest.sort_key)
        logger.info("employee %s: request %s updated (%s)", employee.id, request.id, field_name.lower())
        return WorkflowResult(employee, request, message)

    def _update_start(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        return self._change_dates(employee, request, as_day(value), request.end_date)

    def _update_end(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        return self._change_dates(employee, request, request.start_date, as_day(value))

    def _update_dates(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        start, end = _split_dates(value)
        return self._change_dates(employee, request, start, end)

    def _change_dates(self, employee: Employee, request: LeaveRequest, start: date, end: date) -> Optional[str]:
        if start > end:
            raise ValidationError("Leave request start must not be after its end")
        old_start, old_end = request.start_date, request.end_date
        if request.is_approved:
            if start < old_start or end > old_end:
                # growing past the approved window needs a fresh approval
                self._retract(employee, request)
                self._drop_variation(employee, request)
                self._clear_approval(request)
            else:
                if start > old_start:
                    self._retract(employee, request, old_start, start - ONE_DAY)
                if end < old_end:
                    self._retract(employee, request, end + ONE_DAY, old_end)
                variation = self._mod_variation(employee, request)
                if variation is not None:
                    previous_start = variation.start_date
                    variation.start_date, variation.end_date = start, end
                    variation.set_schedule_days(previous_start)
                    employee.variations.sort(key=Variation.sort_key)
        request.start_date, request.end_date = start, end
        self._plan(employee, request, reset=False)
        request.add_comment(
            f"Dates changed from {_fmt(old_start)} - {_fmt(old_end)} to {_period(request)}"
        )
        return None

    def _update_code(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        code = str(value or "").strip()
        if not code:
            raise ValidationError("Leave request needs a primary code")
        previous = request.primary_code
        request.primary_code = code
        self._plan(employee, request, reset=True)
        request.add_comment(f"Primary code changed from {previous} to {code}")
        return None

    def _submit(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        if request.is_approved:
            raise StateConflictError(f"Leave request {request.id} is already approved")
        request.status = codes.REQUEST_REQUESTED
        request.stamp_days(codes.LEAVE_REQUESTED)
        request.add_comment("Request submitted for approval")
        return (
            f"Leave Request from {employee.name.last_first()} submitted for approval. "
            f"Requested leave dates: {_period(request)}."
        )

    def _unapprove(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        if not request.is_approved:
            raise StateConflictError(f"Leave request {request.id} is not approved")
        self._retract(employee, request)
        self._drop_variation(employee, request)
        self._clear_approval(request)
        request.stamp_days(codes.LEAVE_REQUESTED)
        reason = str(value or "").strip() if not isinstance(value, bool) else ""
        request.add_comment(f"Request unapproved: {reason}" if reason else "Request unapproved")
        return f"Leave Request for period of {_period(request)} was unapproved."

    def _update_day(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        day, code, hours, workcenter = _parse_day(value)
        leave_day = request.update_leave_day(day, code, hours, workcenter=workcenter)
        if request.is_approved:
            self._mirror_day(employee, request, leave_day.leave_date, leave_day.code, leave_day.hours, leave_day.workcenter)
        request.add_comment(f"Day {_fmt(day)} changed to {leave_day.code or 'blank'} ({leave_day.hours:g} hours)")
        return None

    def _mirror_day(
        self, employee: Employee, request: LeaveRequest, day: date, code: str, hours: float, workcenter: str
    ) -> None:
        if request.is_mod:
            variation = self._mod_variation(employee, request)
            if variation is not None:
                variation.update_workday_by_date(day, workcenter if code else "", code, hours)
                return
        linked = [leave for leave in employee.leaves_on(day) if leave.request_id == request.id]
        if codes.is_blank(code):
            self._retract(employee, request, day, day)
            return
        if linked:
            target = linked[0]
            target.code = code
            target.hours = hours
        else:
            employee.add_leave(day, code, codes.LEAVE_APPROVED, hours, request_id=request.id, leave_id=employee.next_leave_id())

    def _add_comment(self, employee: Employee, request: LeaveRequest, value: Any) -> Optional[str]:
        text = str(value or "").strip()
        if not text:
            raise ValidationError("Comment must not be empty")
        request.add_comment(text)
        return None

    @staticmethod
    def _clear_approval(request: LeaveRequest) -> None:
        request.status = codes.REQUEST_DRAFT
        request.approved_by = ""
        request.approval_date = None

    # -- approve -----------------------------------------------------------------
    def approve(
        self,
        employee: Employee,
        request_id: str,
        approver: str,
        catalog: Iterable[Workcode] = (),
    ) -> WorkflowResult:
        request = employee.request(request_id)
        if request.status == codes.REQUEST_DRAFT:
            raise StateConflictError(f"Leave request {request.id} has not been submitted")
        catalog = list(catalog)

        self._retract(employee, request)
        request.status = codes.REQUEST_APPROVED
        request.approved_by = approver
        request.approval_date = self._today()
        request.stamp_days(codes.LEAVE_APPROVED)

        if request.is_mod:
            self._approve_mod(employee, request, catalog)
        else:
            for day in request.non_blank_days():
                self._materialize(employee, request, day.leave_date, day.code, day.hours, day.tag_day)

        request.add_comment(f"Request approved by {approver}")
        logger.info("employee %s: request %s approved by %s", employee.id, request.id, approver)
        return WorkflowResult(
            employee,
            request,
            f"Leave Request was approved for period of {_period(request)}.",
        )

    def _materialize(
        self, employee: Employee, request: LeaveRequest, day: date, code: str, hours: float, tag_day: Optional[str]
    ) -> None:
        employee.add_leave(
            day,
            code,
            codes.LEAVE_APPROVED,
            hours,
            request_id=request.id,
            tag_day=tag_day,
            leave_id=employee.next_leave_id(),
        )

    def _approve_mod(self, employee: Employee, request: LeaveRequest, catalog: Iterable[Workcode]) -> None:
        variation = self._mod_variation(employee, request) or employee.find_variation(
            request.start_date, request.end_date, True
        )
        if variation is None:
            variation = employee.add_variation(employee.site, request.start_date, request.end_date, mod=True)
        else:
            variation.start_date, variation.end_date = request.start_date, request.end_date
            variation.schedule.workdays = []
            variation.set_schedule_days()
            employee.variations.sort(key=Variation.sort_key)
        request.variation_id = variation.id
        variation.schedule.show_dates = True
        for day in request.non_blank_days():
            if is_leave_code(day.code, catalog):
                self._materialize(employee, request, day.leave_date, day.code, day.hours, day.tag_day)
            else:
                variation.update_workday_by_date(day.leave_date, day.workcenter, day.code, day.hours)

    # -- delete ------------------------------------------------------------------
    def delete(self, employee: Employee, request_id: str) -> WorkflowResult:
        request = employee.request(request_id)
        if request.is_approved:
            employee.remove_leaves(MIN_DATE, MAX_DATE, request_id=request.id, include_actuals=True)
            self._drop_variation(employee, request)
        employee.remove_request(request.id)
        logger.info("employee %s: request %s deleted", employee.id, request.id)
        return WorkflowResult(employee, None)


__all__ = ["LeaveRequestWorkflow", "WorkflowResult"]
