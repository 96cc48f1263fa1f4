from __future__ import annotations

from flask import Flask, request

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
from ..container import Container
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.enums import PRIVILEGED_ROLES
from ..core.exceptions import AuthorizationError, ValidationError
from .model import Payslip, PayrollBatchResult, PayrollOverview


def payslip_to_dict(p: Payslip) -> dict:
    return {
        "id": p.payslip_id,
        "employee_id": p.employee_id,
        "pay_period": {"start_date": p.period_start.isoformat(), "end_date": p.period_end.isoformat()},
        "basic_salary": money(p.basic_salary),
        "overtime": {
            "hours": money(p.overtime.hours),
            "rate": money(p.overtime.rate),
            "amount": money(p.overtime.amount),
        },
        "allowances": {
            "transport": money(p.allowances.transport),
            "meal": money(p.allowances.meal),
            "medical": money(p.allowances.medical),
            "other": money(p.allowances.other),
        },
        "deductions": {
            "tax": money(p.deductions.tax),
            "insurance": money(p.deductions.insurance),
            "provident_fund": money(p.deductions.provident_fund),
            "other": money(p.deductions.other),
        },
        "gross_salary": money(p.gross_salary),
        "net_salary": money(p.net_salary),
        "status": p.status.value,
        "processed_by": p.processed_by,
        "processed_at": iso(p.processed_at),
        "payment_date": iso(p.payment_date),
    }


def batch_to_dict(batch: PayrollBatchResult) -> dict:
    return {
        "pay_period": {"start_date": batch.period_start.isoformat(), "end_date": batch.period_end.isoformat()},
        "results": [
            {
                "employee_id": r.employee_id,
                "status": r.outcome.value,
                "payroll_id": r.payslip_id,
                "net_salary": money(r.net_salary),
                "message": r.message,
            }
            for r in batch.results
        ],
    }


def overview_to_dict(o: PayrollOverview) -> dict:
    return {
        "total_payrolls": o.total_payslips,
        "total_gross_salary": money(o.total_gross),
        "total_net_salary": money(o.total_net),
        "total_deductions": money(o.total_deductions),
        "total_overtime_amount": money(o.total_overtime_amount),
        "processed_payrolls": o.processed_count,
        "paid_payrolls": o.paid_count,
    }


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service

    @app.route("/api/payroll/calculate", methods=["POST"], endpoint="payroll_calculate")
    @privileged_required
    def calculate():
        data = json_body()
        start = arg_date("pay_period_start", required=True, source=data)
        end = arg_date("pay_period_end", required=True, source=data)
        employee_id = arg_int("employee_id", source=data)
        batch = payroll.calculate_batch(
            start,
            end,
            actor_role=current_role(),
            employee_ids=[employee_id] if employee_id is not None else None,
            processed_by=current_employee_id(),
        )
        return ok(batch_to_dict(batch), "Payroll calculation completed")

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    @login_required
    def list_payslips():
        employee_id = arg_int("employee_id")
        if current_role() not in PRIVILEGED_ROLES:
            employee_id = current_employee_id()
        payslips = payroll.list_payslips(
            employee_id=employee_id,
            status=request.args.get("status") or None,
            period_from=arg_date("pay_period_start"),
            period_to=arg_date("pay_period_end"),
            limit=arg_int("limit", DEFAULT_PAGE_LIMIT),
            offset=arg_int("offset", 0),
        )
        return ok({"payrolls": [payslip_to_dict(p) for p in payslips]})

    @app.route("/api/payroll/<int:payslip_id>", methods=["GET"], endpoint="payroll_get")
    @login_required
    def get_payslip(payslip_id: int):
        payslip = payroll.get_payslip(payslip_id)
        if current_role() not in PRIVILEGED_ROLES and payslip.employee_id != current_employee_id():
            raise AuthorizationError("Access denied")
        return ok({"payroll": payslip_to_dict(payslip)})

    @app.route("/api/payroll/<int:payslip_id>/status", methods=["PUT"], endpoint="payroll_update_status")
    @privileged_required
    def update_status(payslip_id: int):
        data = json_body()
        status = data.get("status")
        if not status:
            raise ValidationError("Valid status required")
        payslip = payroll.update_status(payslip_id, status, payment_date=arg_date("payment_date", source=data))
        return ok({"payroll": payslip_to_dict(payslip)}, "Payroll status updated successfully")

    @app.route("/api/payroll/stats/overview", methods=["GET"], endpoint="payroll_overview")
    @privileged_required
    def overview():
        year = arg_int("year", container.clock.now().year)
        month = arg_int("month")
        return ok({"overview": overview_to_dict(payroll.overview(year, month))})
