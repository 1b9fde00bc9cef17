"""Command line entry point for the schedule and leave engine."""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

import click

from adapters.config_loader import build_config, leave_catalog
from adapters.logging_config import configure_logging
from adapters.repository import EmployeeRepository
from adapters.timesheet_ingest import TimesheetIngest, apply_rows
from domain.employee import Employee
from domain.errors import EngineError
from rules.rotor import as_day
from services.employee_service import EmployeeService
from services.leave_workflow import WorkflowResult
from services.resolver import MODES, WorkdayResolver


def _service(ctx: click.Context) -> EmployeeService:
    config: Dict[str, Any] = ctx.obj["config"]
    resolver = WorkdayResolver(default_hours=float(config["policy"]["default_workday_hours"]))
    return EmployeeService(EmployeeRepository(config["database"]), leave_catalog(config), resolver=resolver)


def _report(result: WorkflowResult) -> None:
    if result.error is not None:
        raise click.ClickException(str(result.error))
    if result.leave_request is not None:
        click.echo(f"request {result.leave_request.id} {result.leave_request.status}")
    if result.message:
        click.echo(result.message)


def _parse_day(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return as_day(value)
    except ValueError as exc:
        raise click.BadParameter(f"{value!r} is not an ISO date") from exc


@click.group()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="JSON/YAML overrides.")
@click.option("--database", type=click.Path(dir_okay=False), help="SQLite file (overrides the config).")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], database: Optional[str]) -> None:
    """Resolve employee schedules and manage leave."""
    config = build_config(config_path)
    if database:
        config["database"] = database
    configure_logging(config.get("logging"))
    ctx.obj = {"config": config}


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Recreate the database from scratch.")
@click.pass_context
def init_db_command(ctx: click.Context, force: bool) -> None:
    """Create the employee and work tables."""
    path = Path(ctx.obj["config"]["database"])
    if force and path.exists():
        path.unlink()
    EmployeeRepository(path)
    click.echo("Database initialized.")


@cli.command("import-employee")
@click.argument("document", type=click.File("r", encoding="utf-8"))
@click.pass_context
def import_employee(ctx: click.Context, document) -> None:
    """Insert an employee from a JSON document."""
    employee = Employee.from_dict(json.load(document))
    repository = EmployeeRepository(ctx.obj["config"]["database"])
    try:
        repository.insert_employee(employee)
    except EngineError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Imported employee {employee.id}.")


@cli.command("export-employee")
@click.argument("employee_id")
@click.pass_context
def export_employee(ctx: click.Context, employee_id: str) -> None:
    repository = EmployeeRepository(ctx.obj["config"]["database"])
    try:
        employee = repository.load_employee(employee_id)
    except EngineError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(employee.to_dict(), indent=2))


@cli.command()
@click.argument("employee_id")
@click.argument("start", callback=_parse_day)
@click.option("--end", callback=_parse_day, help="Last day (inclusive); defaults to START.")
@click.option("--mode", type=click.Choice(MODES), default="general", show_default=True)
@click.pass_context
def resolve(ctx: click.Context, employee_id: str, start: date, end: Optional[date], mode: str) -> None:
    """Print the effective workday for each day of a period."""
    try:
        days = _service(ctx).resolve_range(employee_id, start, end or start, mode)
    except EngineError as exc:
        raise click.ClickException(str(exc)) from exc
    for day, workday in days:
        if workday is None or workday.is_empty:
            click.echo(f"{day.isoformat()}\t-")
        else:
            click.echo(f"{day.isoformat()}\t{workday.workcenter}\t{workday.code}\t{workday.hours:g}")


@cli.command()
@click.argument("employee_id")
@click.argument("year", type=int)
@click.pass_context
def balance(ctx: click.Context, employee_id: str, year: int) -> None:
    """Create (if needed) and print the leave balance for YEAR."""
    result = _service(ctx).create_leave_balance(employee_id, year)
    _report(result)
    entry = result.employee.balance(year)
    click.echo(f"{year}\tannual={entry.annual:g}\tcarryover={entry.carryover:g}")


@cli.group()
def request() -> None:
    """Leave request workflow."""


@request.command("create")
@click.argument("employee_id")
@click.argument("start", callback=_parse_day)
@click.argument("end", callback=_parse_day)
@click.argument("code")
@click.option("--comment", default="")
@click.pass_context
def request_create(ctx: click.Context, employee_id: str, start: date, end: date, code: str, comment: str) -> None:
    _report(_service(ctx).create_leave_request(employee_id, start, end, code, comment))


@request.command("update")
@click.argument("employee_id")
@click.argument("request_id")
@click.argument("field")
@click.argument("value", required=False, default="")
@click.pass_context
def request_update(ctx: click.Context, employee_id: str, request_id: str, field: str, value: str) -> None:
    _report(_service(ctx).update_leave_request(employee_id, request_id, field, value))


@request.command("approve")
@click.argument("employee_id")
@click.argument("request_id")
@click.argument("approver")
@click.pass_context
def request_approve(ctx: click.Context, employee_id: str, request_id: str, approver: str) -> None:
    _report(_service(ctx).approve_leave_request(employee_id, request_id, approver))


@request.command("delete")
@click.argument("employee_id")
@click.argument("request_id")
@click.pass_context
def request_delete(ctx: click.Context, employee_id: str, request_id: str) -> None:
    _report(_service(ctx).delete_leave_request(employee_id, request_id))
    click.echo(f"Deleted request {request_id}.")


@cli.command()
@click.argument("workbook", type=click.Path(exists=True, dir_okay=False))
@click.option("--month", required=True, help="Timesheet month as YYYY-MM.")
@click.pass_context
def ingest(ctx: click.Context, workbook: str, month: str) -> None:
    """Load worked hours and actual leave from a monthly timesheet."""
    config = ctx.obj["config"]
    try:
        first = as_day(f"{month}-01")
    except ValueError as exc:
        raise click.BadParameter(f"{month!r} is not YYYY-MM", param_hint="--month") from exc
    repository = EmployeeRepository(config["database"])
    employees = repository.list_employees()
    for employee in employees:
        employee.work = repository.load_work(employee.id, first.year)
    reader = TimesheetIngest(
        first,
        leave_catalog(config),
        resolver=WorkdayResolver(default_hours=float(config["policy"]["default_workday_hours"])),
        sheet=config["ingest"]["sheet"],
        first_day_column=int(config["ingest"]["first_day_column"]),
    )
    try:
        rows = reader.read(workbook, employees)
    except EngineError as exc:
        raise click.ClickException(str(exc)) from exc
    applied = apply_rows(employees, rows)
    for employee in employees:
        if employee.id not in applied:
            continue
        try:
            repository.replace_employee(employee)
        except EngineError as exc:
            raise click.ClickException(str(exc)) from exc
        repository.save_work(employee.id, first.year, employee.work or [])
    click.echo(f"Ingested {len(rows)} entries for {len(applied)} employees.")


if __name__ == "__main__":
    cli()
