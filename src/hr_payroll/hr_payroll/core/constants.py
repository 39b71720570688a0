"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

DEFAULT_OFFICE_START = time(9, 0)
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_STANDARD_DAY_HOURS = Decimal("8")
DEFAULT_HALF_DAY_HOURS = Decimal("4")
DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")
DEFAULT_WEEKLY_OFF_DAYS = (5, 6)  # Saturday, Sunday

DEFAULT_LIST_LIMIT = 200
EMPLOYEE_CODE_PREFIX = "EMP"

# Professional tax slabs (monthly gross upper bound, amount). Above the last
# bound the state cap from the statutory rate table applies.
PROFESSIONAL_TAX_SLABS = (
    (Decimal("15000"), Decimal("0")),
    (Decimal("25000"), Decimal("150")),
    (Decimal("40000"), Decimal("200")),
)
PROFESSIONAL_TAX_TOP = Decimal("300")
