"""Example: use the service layer directly (no Flask).

Controllers are only a thin layer; the ledger and payroll rules live in the
services wired by the container.
"""

import importlib
from datetime import date

from dotenv import load_dotenv

from config import get_settings_module

from attendance_payroll.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    today = container.attendance_service.get_today(employee_id=1)
    print("today:", today)

    first = date.today().replace(day=1)
    stats = container.attendance_service.stats(1, first, date.today())
    print("month to date:", stats)

    overview = container.payroll_service.overview(first.year, first.month)
    print("payroll overview:", overview)


if __name__ == "__main__":
    main()
