from __future__ import annotations

import calendar
from typing import Optional

from flask import Flask

from ..common.http import (
    arg_date,
    arg_int,
    current_employee_id,
    current_role,
    iso,
    json_body,
    login_required,
    money,
    ok,
    privileged_required,
)
from ..common.validators import optional_float
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .model import AttendanceRecord, AttendanceStats, BreakPeriod, Location, Punch


def _punch_dict(p: Optional[Punch]) -> Optional[dict]:
    if p is None:
        return None
    return {
        "time": iso(p.time),
        "method": p.method.value,
        "location": p.location.to_dict() if p.location else None,
    }


def _break_dict(b: BreakPeriod) -> dict:
    return {"start": iso(b.start), "end": iso(b.end), "duration_minutes": b.duration_minutes}


def record_to_dict(r: Optional[AttendanceRecord]) -> Optional[dict]:
    if r is None:
        return None
    return {
        "id": r.attendance_id,
        "employee_id": r.employee_id,
        "date": r.work_date.isoformat(),
        "check_in": _punch_dict(r.check_in),
        "check_out": _punch_dict(r.check_out),
        "breaks": [_break_dict(b) for b in r.breaks],
        "total_hours": money(r.total_hours),
        "overtime_hours": money(r.overtime_hours),
        "status": r.status.value,
        "notes": r.notes,
    }


def stats_to_dict(s: AttendanceStats) -> dict:
    return {
        "total_days": s.total_days,
        "present_days": s.present_days,
        "late_days": s.late_days,
        "half_days": s.half_days,
        "absent_days": s.absent_days,
        "total_hours": money(s.total_hours),
        "overtime_hours": money(s.overtime_hours),
        "average_hours": money(s.average_hours),
        "attendance_percentage": money(s.attendance_percentage),
    }


def _punch_input(data: dict) -> tuple[str, Optional[Location]]:
    method = str(data.get("method") or "manual")
    latitude = optional_float(data.get("latitude"), "latitude")
    longitude = optional_float(data.get("longitude"), "longitude")
    location = None
    if latitude is not None and longitude is not None:
        address = data.get("address")
        location = Location(latitude=latitude, longitude=longitude, address=address.strip() if address else None)
    return method, location


def _target_employee(requested: Optional[int]) -> int:
    """Employees only see themselves; privileged roles may ask for anyone."""
    me = current_employee_id()
    if requested is None or requested == me:
        return me
    if current_role() in (Role.ADMIN, Role.MANAGER):
        return requested
    raise AuthorizationError("Access denied")


def register(app: Flask, container: Container) -> None:
    ledger = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        method, location = _punch_input(json_body())
        record = ledger.check_in(current_employee_id(), method=method, location=location)
        return ok({"attendance": record_to_dict(record)}, "Checked in successfully")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        method, location = _punch_input(json_body())
        record = ledger.check_out(current_employee_id(), method=method, location=location)
        return ok({"attendance": record_to_dict(record)}, "Checked out successfully")

    @app.route("/api/attendance/break-start", methods=["POST"], endpoint="attendance_break_start")
    @login_required
    def break_start():
        record = ledger.start_break(current_employee_id())
        return ok({"attendance": record_to_dict(record)}, "Break started successfully")

    @app.route("/api/attendance/break-end", methods=["POST"], endpoint="attendance_break_end")
    @login_required
    def break_end():
        record = ledger.end_break(current_employee_id())
        return ok({"attendance": record_to_dict(record)}, "Break ended successfully")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        record = ledger.get_today(current_employee_id())
        return ok({"attendance": record_to_dict(record)})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def list_range():
        employee_id = _target_employee(arg_int("employee_id"))
        start = arg_date("start_date", required=True)
        end = arg_date("end_date", required=True)
        records = ledger.list_range(employee_id, start, end)
        return ok({"attendance": [record_to_dict(r) for r in records]})

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def stats():
        employee_id = _target_employee(arg_int("employee_id"))
        # Missing bounds default to the current month.
        today = ledger.today()
        start = arg_date("start_date") or today.replace(day=1)
        end = arg_date("end_date") or today.replace(day=calendar.monthrange(today.year, today.month)[1])
        return ok({"stats": stats_to_dict(ledger.stats(employee_id, start, end))})

    @app.route("/api/attendance/absent", methods=["POST"], endpoint="attendance_mark_absent")
    @privileged_required
    def mark_absent():
        data = json_body()
        employee_id = arg_int("employee_id", source=data)
        if employee_id is None:
            raise ValidationError("Valid employee_id required")
        work_date = arg_date("date", source=data) or ledger.today()
        record = ledger.mark_absent(employee_id, work_date, notes=data.get("notes"))
        return ok({"attendance": record_to_dict(record)}, "Marked absent", status=201)
