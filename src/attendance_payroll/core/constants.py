"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Policy values are overridable through the settings modules.
"""

from decimal import Decimal

DEFAULT_TIMEZONE = "UTC"
DEFAULT_WORKDAY_START = "09:00"
DEFAULT_LATE_THRESHOLD_MINUTES = 60
DEFAULT_STANDARD_DAY_HOURS = Decimal("8")
DEFAULT_HALF_DAY_HOURS = Decimal("4")

DEFAULT_STANDARD_MONTH_DAYS = 30
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")
DEFAULT_INSURANCE_RATE = Decimal("0.02")
DEFAULT_PROVIDENT_FUND_RATE = Decimal("0.08")
DEFAULT_ALLOWANCES = {
    "transport": Decimal("5000"),
    "meal": Decimal("3000"),
    "medical": Decimal("2000"),
    "other": Decimal("0"),
}

# (upper bound of bracket, marginal rate); None = unbounded
DEFAULT_TAX_BRACKETS = (
    (Decimal("50000"), Decimal("0")),
    (Decimal("100000"), Decimal("0.10")),
    (Decimal("200000"), Decimal("0.20")),
    (None, Decimal("0.30")),
)

MONEY_QUANT = Decimal("0.01")
RATE_QUANT = Decimal("0.0001")
HOURS_QUANT = Decimal("0.01")

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500
