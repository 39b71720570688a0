from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles supplied by the auth layer; only ADMIN and HR may run payroll."""

    ADMIN = "admin"
    HR = "hr"
    STAFF = "staff"


class EmploymentType(str, Enum):
    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    CONTRACT = "contract"
    INTERN = "intern"


class AttendanceStatus(str, Enum):
    """Daily attendance status stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    REMOTE = "remote"
    LEAVE = "leave"


class TaxRegime(str, Enum):
    OLD = "old"
    NEW = "new"


class PeriodStatus(str, Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    APPROVED = "approved"
    PAID = "paid"
    LOCKED = "locked"


class RecordStatus(str, Enum):
    DRAFT = "draft"
    CALCULATED = "calculated"
    APPROVED = "approved"
    PAID = "paid"
    ERROR = "error"


class MissingAttendancePolicy(str, Enum):
    """How a working day without any attendance row is counted."""

    ABSENT = "absent"
    EXCLUDE = "exclude"


class AdvanceStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RECOVERED = "recovered"


class PaymentMode(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"
    CASH = "cash"
