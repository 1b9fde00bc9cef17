# -*- coding: utf-8 -*-
"""
Engine configuration. Every tunable value lives here; JSON/YAML files passed to
the CLI are merged on top (see adapters/config_loader.py).
"""

CONFIG = {
    # SQLite file holding employee documents and per-year work records
    "database": "scheduler.db",

    # Policy defaults used when an employee has no data of its own
    "policy": {
        "default_workday_hours": 8.0,   # no covering assignment / no working days
    },

    # Leave-code catalog. altcode is the short code typed on timesheets.
    "leave_codes": [
        {"id": "V",   "title": "Vacation",          "isLeave": True,  "altcode": "v"},
        {"id": "S",   "title": "Sick",              "isLeave": True,  "altcode": "s"},
        {"id": "H",   "title": "Holiday",           "isLeave": True,  "altcode": "h"},
        {"id": "LWOP", "title": "Leave Without Pay", "isLeave": True, "altcode": "lw"},
        {"id": "JD",  "title": "Jury Duty",         "isLeave": True,  "altcode": "jd"},
        {"id": "mod", "title": "Modified Time",     "isLeave": False, "altcode": None},
        {"id": "D",   "title": "Day Shift",         "isLeave": False, "altcode": None},
    ],

    # Timesheet workbook layout
    "ingest": {
        "sheet": "Sheet1",
        "first_day_column": 3,
    },

    "logging": {
        "enabled": True,
        "level": "INFO",
        "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        "file": None,   # e.g. "logs/scheduler.log"
    },
}
