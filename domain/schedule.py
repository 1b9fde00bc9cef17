"""Workday values and the cyclic schedule they live in."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

from .errors import NotFoundError, ValidationError


@dataclass
class Workday:
    """One day of work: where, what code and how many hours."""

    id: int = 0
    workcenter: str = ""
    code: str = ""
    hours: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.code == ""

    def copy(self) -> "Workday":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "workcenter": self.workcenter, "code": self.code, "hours": self.hours}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workday":
        return cls(
            id=int(data.get("id", 0)),
            workcenter=data.get("workcenter") or "",
            code=data.get("code") or "",
            hours=float(data.get("hours") or 0.0),
        )


def validate_days(days: int) -> None:
    if days <= 0 or days % 7 != 0:
        raise ValidationError("Schedule days must be greater than zero and a multiple of seven")


@dataclass
class Schedule:
    """A fixed-length cycle of workdays addressed by offset (workday id)."""

    id: int = 0
    workdays: List[Workday] = field(default_factory=list)
    show_dates: bool = False

    def __post_init__(self) -> None:
        self.workdays.sort(key=lambda wd: wd.id)

    @classmethod
    def blank(cls, schedule_id: int = 0, days: int = 7) -> "Schedule":
        schedule = cls(id=schedule_id)
        schedule.set_schedule_days(days)
        return schedule

    def __len__(self) -> int:
        return len(self.workdays)

    def __iter__(self) -> Iterator[Workday]:
        return iter(self.workdays)

    # -- Lookups -----------------------------------------------------------------
    def _find(self, workday_id: int) -> Optional[Workday]:
        for workday in self.workdays:
            if workday.id == workday_id:
                return workday
        return None

    def get(self, workday_id: int) -> Workday:
        """Return a copy of the workday at *workday_id*, or a blank one."""

        found = self._find(workday_id)
        return found.copy() if found else Workday(id=workday_id)

    def at_offset(self, offset: int) -> Optional[Workday]:
        if not self.workdays:
            return None
        return self.get(offset % len(self.workdays))

    def working_days(self) -> int:
        return sum(1 for wd in self.workdays if not wd.is_empty)

    def weeks(self) -> int:
        return len(self.workdays) // 7

    # -- Mutation ----------------------------------------------------------------
    def change_workday(self, workday_id: int, workcenter: str, code: str, hours: float) -> None:
        found = self._find(workday_id)
        if found:
            found.workcenter = workcenter
            found.code = code
            found.hours = float(hours)
            return
        self.workdays.append(Workday(id=workday_id, workcenter=workcenter, code=code, hours=float(hours)))
        self.workdays.sort(key=lambda wd: wd.id)

    def update_workday(self, workday_id: int, field_name: str, value: Any) -> None:
        """Update one field of a workday; ``copy`` repeats the previous working day."""

        found = self._find(workday_id)
        if found is None:
            raise NotFoundError(f"Workday {workday_id} not found")
        name = field_name.lower()
        if name == "workcenter":
            found.workcenter = str(value)
        elif name == "code":
            found.code = str(value)
        elif name == "hours":
            found.hours = float(value)
        elif name == "copy":
            source = self._previous_working(workday_id)
            if source:
                found.workcenter = source.workcenter
                found.code = source.code
                found.hours = source.hours
        else:
            raise ValidationError(f"Unknown workday field: {field_name}")

    def _previous_working(self, workday_id: int) -> Optional[Workday]:
        # walks backward, wrapping around the cycle, until it returns to the start
        position = next(i for i, wd in enumerate(self.workdays) if wd.id == workday_id)
        count = len(self.workdays)
        for step in range(1, count):
            candidate = self.workdays[(position - step) % count]
            if candidate.code and candidate.workcenter and candidate.hours > 0.0:
                return candidate.copy()
        return None

    def set_schedule_days(self, days: int) -> None:
        """Grow with blank days or trim from the end, then renumber 0..days-1."""

        validate_days(days)
        self.workdays.sort(key=lambda wd: wd.id)
        if days > len(self.workdays):
            self.workdays.extend(Workday() for _ in range(days - len(self.workdays)))
        else:
            del self.workdays[days:]
        for idx, workday in enumerate(self.workdays):
            workday.id = idx

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "workdays": [wd.to_dict() for wd in self.workdays],
            "showdates": self.show_dates,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        return cls(
            id=int(data.get("id", 0)),
            workdays=[Workday.from_dict(wd) for wd in data.get("workdays") or []],
            show_dates=bool(data.get("showdates", False)),
        )


__all__ = ["Workday", "Schedule", "validate_days"]

