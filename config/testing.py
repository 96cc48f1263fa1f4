from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "DEBUG"

AUTO_INIT_DB = False
TIMEZONE = "UTC"
WORKDAY_START = "09:00"
LATE_THRESHOLD_MINUTES = 60
STANDARD_DAY_HOURS = "8"
HALF_DAY_HOURS = "4"
STANDARD_MONTH_DAYS = 30
OVERTIME_MULTIPLIER = "1.5"
ALLOWANCES = {"transport": "5000", "meal": "3000", "medical": "2000", "other": "0"}
INSURANCE_RATE = "0.02"
PROVIDENT_FUND_RATE = "0.08"
OTHER_DEDUCTION = "0"
PAYSLIP_INITIAL_STATUS = "draft"
