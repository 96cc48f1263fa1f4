from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import from_storage, to_storage
from ..common.validators import to_decimal
from ..core.enums import AttendanceStatus, PunchMethod
from ..core.exceptions import DuplicateAttendanceRecord
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord, BreakPeriod, Location, Punch
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date,
    check_in_time, check_in_method, check_in_location,
    check_out_time, check_out_method, check_out_location,
    break_periods, total_hours, overtime_hours, status, notes, version
"""


def _load_json(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else None
    return value


def _iso(moment: Optional[datetime]) -> Optional[str]:
    stored = to_storage(moment)
    return stored.isoformat() if stored else None


def _from_iso(value: Optional[str], tz: ZoneInfo) -> Optional[datetime]:
    return from_storage(datetime.fromisoformat(value), tz) if value else None


def _dump_breaks(breaks: Sequence[BreakPeriod]) -> str:
    return json.dumps(
        [{"start": _iso(b.start), "end": _iso(b.end), "duration_minutes": b.duration_minutes} for b in breaks]
    )


def _load_breaks(value: Any, tz: ZoneInfo) -> tuple[BreakPeriod, ...]:
    items = _load_json(value) or []
    return tuple(
        BreakPeriod(
            start=_from_iso(item["start"], tz),
            end=_from_iso(item.get("end"), tz),
            duration_minutes=item.get("duration_minutes"),
        )
        for item in items
    )


def _dump_location(location: Optional[Location]) -> Optional[str]:
    return json.dumps(location.to_dict()) if location else None


def _punch(row: dict, prefix: str, tz: ZoneInfo) -> Optional[Punch]:
    moment = row.get(f"{prefix}_time")
    if moment is None:
        return None
    return Punch(
        time=from_storage(moment, tz),
        method=PunchMethod(row.get(f"{prefix}_method") or PunchMethod.MANUAL.value),
        location=Location.from_dict(_load_json(row.get(f"{prefix}_location"))),
    )


def _punch_params(punch: Optional[Punch]) -> tuple:
    if punch is None:
        return (None, None, None)
    return (to_storage(punch.time), punch.method.value, _dump_location(punch.location))


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: ZoneInfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_record(self, r: dict) -> AttendanceRecord:
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            employee_id=int(r["employee_id"]),
            work_date=r["work_date"],
            check_in=_punch(r, "check_in", self._tz),
            check_out=_punch(r, "check_out", self._tz),
            breaks=_load_breaks(r.get("break_periods"), self._tz),
            total_hours=to_decimal(r.get("total_hours") or 0),
            overtime_hours=to_decimal(r.get("overtime_hours") or 0),
            status=AttendanceStatus(r["status"]),
            notes=r.get("notes"),
            version=int(r.get("version") or 0),
        )

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return self._to_record(r) if r else None

    def list_for_employee(self, employee_id: int, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start_date, end_date),
            )
            return [self._to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date,
                        check_in_time, check_in_method, check_in_location,
                        check_out_time, check_out_method, check_out_location,
                        break_periods, total_hours, overtime_hours, status, notes, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (
                        int(record.employee_id),
                        record.work_date,
                        *_punch_params(record.check_in),
                        *_punch_params(record.check_out),
                        _dump_breaks(record.breaks),
                        record.total_hours,
                        record.overtime_hours,
                        record.status.value,
                        record.notes,
                    ),
                )
                new_id = int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicateAttendanceRecord(record.employee_id, record.work_date) from exc
            raise
        return record.evolve(attendance_id=new_id, version=0)

    def update(self, record: AttendanceRecord, *, expected_version: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_method=%s, check_in_location=%s,
                    check_out_time=%s, check_out_method=%s, check_out_location=%s,
                    break_periods=%s, total_hours=%s, overtime_hours=%s,
                    status=%s, notes=%s, version=version + 1
                WHERE attendance_id=%s AND version=%s
                """,
                (
                    *_punch_params(record.check_in),
                    *_punch_params(record.check_out),
                    _dump_breaks(record.breaks),
                    record.total_hours,
                    record.overtime_hours,
                    record.status.value,
                    record.notes,
                    int(record.attendance_id),
                    int(expected_version),
                ),
            )
            return cur.rowcount > 0
