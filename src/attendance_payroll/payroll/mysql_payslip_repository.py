from __future__ import annotations

from datetime import date
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import from_storage, to_storage
from ..common.validators import to_decimal
from ..core.enums import PayslipStatus
from ..core.exceptions import DuplicatePayrollPeriod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Allowances, Deductions, OvertimePay, Payslip
from .repository import PayslipRepository

_COLUMNS = """
    payslip_id, employee_id, period_start, period_end, basic_salary,
    overtime_hours, overtime_rate, overtime_amount,
    allowance_transport, allowance_meal, allowance_medical, allowance_other,
    deduction_tax, deduction_insurance, deduction_provident, deduction_other,
    gross_salary, net_salary, status, processed_by, processed_at, payment_date
"""


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: ZoneInfo):
        self._conn_factory = conn_factory
        self._tz = tz

    def _to_payslip(self, r: dict) -> Payslip:
        return Payslip(
            payslip_id=int(r["payslip_id"]),
            employee_id=int(r["employee_id"]),
            period_start=r["period_start"],
            period_end=r["period_end"],
            basic_salary=to_decimal(r["basic_salary"]),
            overtime=OvertimePay(
                hours=to_decimal(r["overtime_hours"]),
                rate=to_decimal(r["overtime_rate"]),
                amount=to_decimal(r["overtime_amount"]),
            ),
            allowances=Allowances(
                transport=to_decimal(r["allowance_transport"]),
                meal=to_decimal(r["allowance_meal"]),
                medical=to_decimal(r["allowance_medical"]),
                other=to_decimal(r["allowance_other"]),
            ),
            deductions=Deductions(
                tax=to_decimal(r["deduction_tax"]),
                insurance=to_decimal(r["deduction_insurance"]),
                provident_fund=to_decimal(r["deduction_provident"]),
                other=to_decimal(r["deduction_other"]),
            ),
            status=PayslipStatus(r["status"]),
            processed_by=r.get("processed_by"),
            processed_at=from_storage(r.get("processed_at"), self._tz),
            payment_date=r.get("payment_date"),
        )

    def get_by_id(self, payslip_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payslips WHERE payslip_id=%s", (int(payslip_id),))
            r = fetchone(cur)
            return self._to_payslip(r) if r else None

    def get_for_period(self, employee_id: int, period_start: date, period_end: date) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payslips
                WHERE employee_id=%s AND period_start=%s AND period_end=%s
                """,
                (int(employee_id), period_start, period_end),
            )
            r = fetchone(cur)
            return self._to_payslip(r) if r else None

    def create(self, payslip: Payslip) -> Payslip:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payslips(
                        employee_id, period_start, period_end, basic_salary,
                        overtime_hours, overtime_rate, overtime_amount,
                        allowance_transport, allowance_meal, allowance_medical, allowance_other,
                        deduction_tax, deduction_insurance, deduction_provident, deduction_other,
                        gross_salary, net_salary, status, processed_by, processed_at, payment_date
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(payslip.employee_id),
                        payslip.period_start,
                        payslip.period_end,
                        payslip.basic_salary,
                        payslip.overtime.hours,
                        payslip.overtime.rate,
                        payslip.overtime.amount,
                        payslip.allowances.transport,
                        payslip.allowances.meal,
                        payslip.allowances.medical,
                        payslip.allowances.other,
                        payslip.deductions.tax,
                        payslip.deductions.insurance,
                        payslip.deductions.provident_fund,
                        payslip.deductions.other,
                        payslip.gross_salary,
                        payslip.net_salary,
                        payslip.status.value,
                        payslip.processed_by,
                        to_storage(payslip.processed_at),
                        payslip.payment_date,
                    ),
                )
                new_id = int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise DuplicatePayrollPeriod(payslip.employee_id, payslip.period_start, payslip.period_end) from exc
            raise
        return payslip.evolve(payslip_id=new_id)

    def update_status(
        self,
        payslip_id: int,
        *,
        from_status: PayslipStatus,
        to_status: PayslipStatus,
        payment_date: Optional[date] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payslips
                SET status=%s, payment_date=COALESCE(%s, payment_date)
                WHERE payslip_id=%s AND status=%s
                """,
                (to_status.value, payment_date, int(payslip_id), from_status.value),
            )
            return cur.rowcount > 0

    def list(
        self,
        *,
        employee_id: Optional[int] = None,
        status: Optional[PayslipStatus] = None,
        period_from: Optional[date] = None,
        period_to: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Payslip]:
        clauses = ["1=1"]
        params: list[object] = []

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if period_from is not None:
            clauses.append("period_start >= %s")
            params.append(period_from)
        if period_to is not None:
            clauses.append("period_start <= %s")
            params.append(period_to)

        where = " AND ".join(clauses)
        params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payslips
                WHERE {where}
                ORDER BY period_start DESC, employee_id ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params),
            )
            return [self._to_payslip(r) for r in fetchall(cur)]
