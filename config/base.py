"""Settings shared by every environment.

Policy values are read from the environment so a deployment can change
thresholds and rates without code changes.
"""
import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_payroll"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Attendance ledger
TIMEZONE = os.getenv("TIMEZONE", "UTC")
WORKDAY_START = os.getenv("WORKDAY_START", "09:00")
LATE_THRESHOLD_MINUTES = int(os.getenv("LATE_THRESHOLD_MINUTES", "60"))
STANDARD_DAY_HOURS = os.getenv("STANDARD_DAY_HOURS", "8")
HALF_DAY_HOURS = os.getenv("HALF_DAY_HOURS", "4")

# Payroll
STANDARD_MONTH_DAYS = int(os.getenv("STANDARD_MONTH_DAYS", "30"))
OVERTIME_MULTIPLIER = os.getenv("OVERTIME_MULTIPLIER", "1.5")
ALLOWANCES = {
    "transport": os.getenv("ALLOWANCE_TRANSPORT", "5000"),
    "meal": os.getenv("ALLOWANCE_MEAL", "3000"),
    "medical": os.getenv("ALLOWANCE_MEDICAL", "2000"),
    "other": os.getenv("ALLOWANCE_OTHER", "0"),
}
INSURANCE_RATE = os.getenv("INSURANCE_RATE", "0.02")
PROVIDENT_FUND_RATE = os.getenv("PROVIDENT_FUND_RATE", "0.08")
OTHER_DEDUCTION = os.getenv("OTHER_DEDUCTION", "0")
PAYSLIP_INITIAL_STATUS = os.getenv("PAYSLIP_INITIAL_STATUS", "draft")
