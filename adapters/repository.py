"""SQLite repository for employee documents and their work records."""
from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional

from domain.employee import Employee
from domain.errors import ConcurrentModificationError, NotFoundError, StateConflictError
from domain.work import Work

logger = logging.getLogger(__name__)


class EmployeeRepository:
    """Stores each employee as one JSON document guarded by a version number."""

    def __init__(self, path: str | Path = "scheduler.db") -> None:
        self.path = Path(path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS employees (
                    id TEXT PRIMARY KEY,
                    version INTEGER NOT NULL,
                    document TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS work (
                    employee_id TEXT NOT NULL,
                    year INTEGER NOT NULL,
                    document TEXT NOT NULL,
                    PRIMARY KEY (employee_id, year)
                )
                """
            )
            conn.commit()

    # -- Employees ---------------------------------------------------------------
    def insert_employee(self, employee: Employee) -> None:
        document = employee.to_dict()
        with self._connect() as conn:
            try:
                conn.execute(
                    "INSERT INTO employees(id, version, document) VALUES (?, ?, ?)",
                    (employee.id, employee.version, json.dumps(document)),
                )
            except sqlite3.IntegrityError as exc:
                raise StateConflictError(f"Employee {employee.id} already exists") from exc
            conn.commit()
        logger.info("inserted employee %s", employee.id)

    def load_employee(self, employee_id: str, year: Optional[int] = None) -> Employee:
        """Load the whole employee; with *year* its work records are attached too."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT version, document FROM employees WHERE id = ?", (employee_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        data = json.loads(row[1])
        data["version"] = int(row[0])
        work = self.load_work(employee_id, year) if year is not None else None
        return Employee.from_dict(data, work=work)

    def replace_employee(self, employee: Employee) -> None:
        """Write the document back if nobody else changed it since it was loaded."""

        document = employee.to_dict()
        document["version"] = employee.version + 1
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE employees SET version = version + 1, document = ? WHERE id = ? AND version = ?",
                (json.dumps(document), employee.id, employee.version),
            )
            if cursor.rowcount == 0:
                exists = conn.execute("SELECT version FROM employees WHERE id = ?", (employee.id,)).fetchone()
                if exists is None:
                    raise NotFoundError(f"Employee {employee.id} not found")
                raise ConcurrentModificationError(
                    f"Employee {employee.id} was modified (stored version {exists[0]}, loaded {employee.version})"
                )
            conn.commit()
        employee.version += 1
        logger.info("replaced employee %s at version %d", employee.id, employee.version)

    def delete_employee(self, employee_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM work WHERE employee_id = ?", (employee_id,))
            conn.execute("DELETE FROM employees WHERE id = ?", (employee_id,))
            conn.commit()

    def list_employees(self) -> List[Employee]:
        with self._connect() as conn:
            rows = conn.execute("SELECT version, document FROM employees ORDER BY id").fetchall()
        employees = []
        for version, document in rows:
            data = json.loads(document)
            data["version"] = int(version)
            employees.append(Employee.from_dict(data))
        return employees

    # -- Work --------------------------------------------------------------------
    def load_work(self, employee_id: str, year: int) -> List[Work]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT document FROM work WHERE employee_id = ? AND year = ?", (employee_id, year)
            ).fetchone()
        if row is None:
            return []
        records = [Work.from_dict(item) for item in json.loads(row[0])]
        records.sort(key=Work.sort_key)
        return records

    def save_work(self, employee_id: str, year: int, work: Iterable[Work]) -> None:
        records = sorted(work, key=Work.sort_key)
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO work(employee_id, year, document) VALUES (?, ?, ?)",
                (employee_id, year, json.dumps([w.to_dict() for w in records])),
            )
            conn.commit()
        logger.info("saved %d work records for employee %s (%d)", len(records), employee_id, year)


__all__ = ["EmployeeRepository"]
