"""Assignments and variations: the dated holders of schedules."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from rules import rotor
from rules.rotor import MAX_DATE, as_day

from . import codes
from .errors import NotFoundError, ValidationError
from .schedule import Schedule, Workday, validate_days
from .work import EmployeeLaborCode


@dataclass
class Assignment:
    """An employee's normal work pattern at a site/workcenter for a date range.

    ``rotation_date`` is the phase anchor of the rotation; when unset the
    assignment start is used. Either way the epoch is the Sunday on or before.
    """

    id: int = 0
    site: str = ""
    workcenter: str = ""
    start_date: date = rotor.MIN_DATE
    end_date: date = MAX_DATE
    schedules: List[Schedule] = field(default_factory=list)
    rotation_date: Optional[date] = None
    rotation_days: int = 0
    labor_codes: List[EmployeeLaborCode] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.start_date = as_day(self.start_date)
        self.end_date = as_day(self.end_date)
        if self.rotation_date is not None:
            self.rotation_date = as_day(self.rotation_date)
        if not self.schedules:
            self.schedules.append(Schedule.blank(0))
        self.schedules.sort(key=lambda s: s.id)
        self.labor_codes.sort(key=EmployeeLaborCode.sort_key)

    def sort_key(self) -> tuple:
        return (self.start_date, self.end_date)

    @property
    def anchor(self) -> date:
        return self.rotation_date or self.start_date

    def covers(self, day: date) -> bool:
        return rotor.in_window(day, self.start_date, self.end_date)

    def covers_site(self, site: str, day: date) -> bool:
        return codes.same_code(self.site, site) and self.covers(day)

    # -- Resolution --------------------------------------------------------------
    def standard_work_hours(self) -> float:
        """Daily hours of a 40-hour week spread over the first schedule's working days."""

        schedule = self.schedules[0]
        count = schedule.working_days()
        if count == 0:
            return codes.DEFAULT_WORKDAY_HOURS
        return (codes.STANDARD_WEEK_HOURS * schedule.weeks()) / count

    def get_workday(self, day: date) -> Optional[Workday]:
        offset = rotor.day_offset(self.anchor, day)
        if len(self.schedules) == 1 or self.rotation_days <= 0:
            return self.schedules[0].at_offset(offset)
        index = rotor.rotation_index(offset, self.rotation_days, len(self.schedules))
        return self.schedules[index].at_offset(offset)

    # -- Schedules ---------------------------------------------------------------
    def _schedule(self, schedule_id: int) -> Schedule:
        for schedule in self.schedules:
            if schedule.id == schedule_id:
                return schedule
        raise NotFoundError(f"Schedule {schedule_id} not found")

    def add_schedule(self, days: int) -> Schedule:
        validate_days(days)
        self.schedules.sort(key=lambda s: s.id)
        schedule = Schedule.blank(self.schedules[-1].id + 1, days)
        self.schedules.append(schedule)
        return schedule

    def change_schedule_days(self, schedule_id: int, days: int) -> None:
        validate_days(days)
        self._schedule(schedule_id).set_schedule_days(days)

    def change_workday(self, schedule_id: int, workday_id: int, workcenter: str, code: str, hours: float) -> None:
        self._schedule(schedule_id).change_workday(workday_id, workcenter, code, hours)

    def update_workday(self, schedule_id: int, workday_id: int, field_name: str, value: Any) -> None:
        self._schedule(schedule_id).update_workday(workday_id, field_name, value)

    def remove_schedule(self, schedule_id: int) -> None:
        schedule = self._schedule(schedule_id)
        self.schedules.remove(schedule)
        if not self.schedules:
            self.schedules.append(Schedule.blank(0))

    def set_rotation(self, rotation_date: Optional[date], rotation_days: int) -> None:
        if rotation_days < 0:
            raise ValidationError("Rotation days cannot be negative")
        if rotation_days and len(self.schedules) > 1:
            for schedule in self.schedules:
                if rotation_days % len(schedule) != 0:
                    raise ValidationError(
                        f"Rotation days ({rotation_days}) must be a multiple of schedule {schedule.id} "
                        f"length ({len(schedule)})"
                    )
        self.rotation_date = as_day(rotation_date) if rotation_date else None
        self.rotation_days = rotation_days

    # -- Labor codes -------------------------------------------------------------
    def has_labor_code(self, chargenumber: str, extension: str) -> bool:
        return any(lc.matches(chargenumber, extension) for lc in self.labor_codes)

    def add_labor_code(self, chargenumber: str, extension: str) -> None:
        if self.has_labor_code(chargenumber, extension):
            return
        self.labor_codes.append(EmployeeLaborCode(chargenumber, extension))
        self.labor_codes.sort(key=EmployeeLaborCode.sort_key)

    def remove_labor_code(self, chargenumber: str, extension: str) -> None:
        self.labor_codes = [lc for lc in self.labor_codes if not lc.matches(chargenumber, extension)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "site": self.site,
            "workcenter": self.workcenter,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "schedules": [s.to_dict() for s in self.schedules],
            "rotationdate": self.rotation_date.isoformat() if self.rotation_date else None,
            "rotationdays": self.rotation_days,
            "laborcodes": [lc.to_dict() for lc in self.labor_codes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assignment":
        return cls(
            id=int(data.get("id", 0)),
            site=data.get("site") or "",
            workcenter=data.get("workcenter") or "",
            start_date=as_day(data["startDate"]),
            end_date=as_day(data.get("endDate") or MAX_DATE),
            schedules=[Schedule.from_dict(s) for s in data.get("schedules") or []],
            rotation_date=as_day(data["rotationdate"]) if data.get("rotationdate") else None,
            rotation_days=int(data.get("rotationdays") or 0),
            labor_codes=[EmployeeLaborCode.from_dict(lc) for lc in data.get("laborcodes") or []],
        )


@dataclass
class Variation:
    """A temporary schedule that replaces the assignment inside its window."""

    id: int = 0
    site: str = ""
    mids: bool = False
    mod: bool = False
    start_date: date = rotor.MIN_DATE
    end_date: date = rotor.MIN_DATE
    schedule: Schedule = field(default_factory=Schedule)

    def __post_init__(self) -> None:
        self.start_date = as_day(self.start_date)
        self.end_date = as_day(self.end_date)

    def sort_key(self) -> tuple:
        return (self.start_date, self.end_date, self.id)

    def covers(self, day: date) -> bool:
        return rotor.in_window(day, self.start_date, self.end_date)

    def set_schedule_days(self, previous_start: Optional[date] = None) -> None:
        """Size the schedule from the Sunday before start to the Saturday after end.

        Entries already set are kept on the same calendar date when that date
        still falls inside the new span. ``previous_start`` is the start the
        existing entries were laid out against (defaults to the current one).
        """

        old_epoch = rotor.week_start(as_day(previous_start) if previous_start else self.start_date)
        previous = [wd for wd in self.schedule.workdays if not wd.is_empty]
        epoch = rotor.week_start(self.start_date)
        days = (rotor.week_end(self.end_date) - epoch).days + 1
        self.schedule.workdays = [Workday(id=idx) for idx in range(days)]
        shift = (old_epoch - epoch).days
        for workday in previous:
            new_id = workday.id + shift
            if 0 <= new_id < days:
                self.schedule.change_workday(new_id, workday.workcenter, workday.code, workday.hours)

    def offset_of(self, day: date) -> int:
        return rotor.day_offset(self.start_date, day)

    def get_workday(self, day: date) -> Optional[Workday]:
        return self.schedule.at_offset(self.offset_of(day))

    def change_workday(self, workday_id: int, workcenter: str, code: str, hours: float) -> None:
        self.schedule.change_workday(workday_id, workcenter, code, hours)

    def update_workday(self, workday_id: int, field_name: str, value: Any) -> None:
        self.schedule.update_workday(workday_id, field_name, value)

    def update_workday_by_date(self, day: date, workcenter: str, code: str, hours: float) -> None:
        day = as_day(day)
        if self.covers(day):
            self.schedule.change_workday(self.offset_of(day), workcenter, code, hours)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "site": self.site,
            "mids": self.mids,
            "mod": self.mod,
            "startdate": self.start_date.isoformat(),
            "enddate": self.end_date.isoformat(),
            "schedule": self.schedule.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variation":
        return cls(
            id=int(data.get("id", 0)),
            site=data.get("site") or "",
            mids=bool(data.get("mids", False)),
            mod=bool(data.get("mod", False)),
            start_date=as_day(data["startdate"]),
            end_date=as_day(data["enddate"]),
            schedule=Schedule.from_dict(data.get("schedule") or {}),
        )


__all__ = ["Assignment", "Variation"]
