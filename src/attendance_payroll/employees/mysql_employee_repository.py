from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import to_decimal
from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        monthly_salary=to_decimal(row["monthly_salary"]),
        status=EmployeeStatus(row["status"]),
        hire_date=row.get("hire_date"),
        full_name=row.get("full_name"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, monthly_salary, status, hire_date
                FROM employees
                WHERE employee_id=%s
                """,
                (int(employee_id),),
            )
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, full_name, monthly_salary, status, hire_date
                FROM employees
                WHERE status=%s
                ORDER BY employee_id ASC
                """,
                (EmployeeStatus.ACTIVE.value,),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]
