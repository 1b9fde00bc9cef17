"""Canonical leave codes, statuses and code helpers."""
from __future__ import annotations

from typing import Optional

__all__ = [
    "VACATION",
    "HOLIDAY",
    "MOD",
    "WORK_CODE",
    "LEAVE_REQUESTED",
    "LEAVE_APPROVED",
    "LEAVE_ACTUAL",
    "REQUEST_DRAFT",
    "REQUEST_REQUESTED",
    "REQUEST_APPROVED",
    "REQUEST_STATUSES",
    "STANDARD_WEEK_HOURS",
    "DEFAULT_WORKDAY_HOURS",
    "HOLIDAY_HOURS",
    "DEFAULT_ANNUAL_HOURS",
    "same_code",
    "is_blank",
    "is_mod",
    "is_actual",
    "is_approved",
    "normalize_status",
]

VACATION = "V"
HOLIDAY = "H"
MOD = "mod"
# Work code used by the default Monday-Friday schedule of a new assignment.
WORK_CODE = "D"

LEAVE_REQUESTED = "REQUESTED"
LEAVE_APPROVED = "APPROVED"
LEAVE_ACTUAL = "ACTUAL"

REQUEST_DRAFT = "DRAFT"
REQUEST_REQUESTED = "REQUESTED"
REQUEST_APPROVED = "APPROVED"
REQUEST_STATUSES = (REQUEST_DRAFT, REQUEST_REQUESTED, REQUEST_APPROVED)

STANDARD_WEEK_HOURS = 40.0
DEFAULT_WORKDAY_HOURS = 8.0
HOLIDAY_HOURS = 8.0
DEFAULT_ANNUAL_HOURS = 100.0


def _normalize(code: Optional[str]) -> str:
    return (code or "").strip().lower()


def same_code(a: Optional[str], b: Optional[str]) -> bool:
    """Compare two codes the way every ledger lookup does: trimmed, case-insensitive."""

    return _normalize(a) == _normalize(b)


def is_blank(code: Optional[str]) -> bool:
    return _normalize(code) == ""


def is_mod(code: Optional[str]) -> bool:
    return _normalize(code) == MOD


def is_actual(status: Optional[str]) -> bool:
    return _normalize(status) == LEAVE_ACTUAL.lower()


def is_approved(status: Optional[str]) -> bool:
    return _normalize(status) == REQUEST_APPROVED.lower()


def normalize_status(status: Optional[str]) -> str:
    """Stored documents carry mixed-case statuses ("Approved"); keep them upper."""

    return (status or "").strip().upper()
