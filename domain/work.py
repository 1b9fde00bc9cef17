"""Actual work records, labor codes and the leave-code catalog entry."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from rules.rotor import MIN_DATE, as_day

from . import codes


@dataclass
class EmployeeLaborCode:
    chargenumber: str = ""
    extension: str = ""

    def matches(self, chargenumber: str, extension: str) -> bool:
        return codes.same_code(self.chargenumber, chargenumber) and codes.same_code(self.extension, extension)

    def sort_key(self) -> tuple:
        return (self.chargenumber, self.extension)

    def to_dict(self) -> Dict[str, Any]:
        return {"chargenumber": self.chargenumber, "extension": self.extension}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmployeeLaborCode":
        return cls(chargenumber=data.get("chargenumber") or "", extension=data.get("extension") or "")


@dataclass
class Work:
    """Hours actually charged to a labor code on one day."""

    dateworked: date = MIN_DATE
    chargenumber: str = ""
    extension: str = ""
    paycode: int = 1
    modtime: bool = False
    hours: float = 0.0

    def __post_init__(self) -> None:
        self.dateworked = as_day(self.dateworked)

    def sort_key(self) -> tuple:
        return (self.dateworked, self.chargenumber, self.extension)

    def on(self, day: date) -> bool:
        return self.dateworked == day

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dateworked": self.dateworked.isoformat(),
            "chargenumber": self.chargenumber,
            "extension": self.extension,
            "paycode": self.paycode,
            "modtime": self.modtime,
            "hours": self.hours,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Work":
        return cls(
            dateworked=as_day(data["dateworked"]),
            chargenumber=data.get("chargenumber") or "",
            extension=data.get("extension") or "",
            paycode=int(data.get("paycode", 1)),
            modtime=bool(data.get("modtime", False)),
            hours=float(data.get("hours") or 0.0),
        )


@dataclass(frozen=True)
class Workcode:
    """Catalog entry describing a work or leave code."""

    id: str
    title: str = ""
    is_leave: bool = False
    altcode: Optional[str] = None

    def matches(self, code: str) -> bool:
        if codes.same_code(self.id, code):
            return True
        return bool(self.altcode) and codes.same_code(self.altcode, code)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workcode":
        return cls(
            id=data["id"],
            title=data.get("title", data["id"]),
            is_leave=bool(data.get("isLeave", data.get("is_leave", False))),
            altcode=data.get("altcode"),
        )


def is_leave_code(code: str, catalog) -> bool:
    """True when *code* names a leave entry of *catalog* by id or alternate code."""

    return any(entry.is_leave and entry.matches(code) for entry in catalog)


__all__ = ["EmployeeLaborCode", "Work", "Workcode", "is_leave_code"]
