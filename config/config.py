import os


def _payroll_from_env() -> dict:
    """Company payroll policy; parsed into PayrollPolicy by the app factory."""
    return {
        "OFFICE_START": os.getenv("PAYROLL_OFFICE_START", "09:00"),
        "LATE_GRACE_MINUTES": int(os.getenv("PAYROLL_LATE_GRACE_MINUTES", "0")),
        "STANDARD_DAY_HOURS": os.getenv("PAYROLL_STANDARD_DAY_HOURS", "8"),
        "HALF_DAY_HOURS": os.getenv("PAYROLL_HALF_DAY_HOURS", "4"),
        "OVERTIME_MULTIPLIER": os.getenv("PAYROLL_OVERTIME_MULTIPLIER", "1.5"),
        "WEEKLY_OFF_DAYS": tuple(
            int(d) for d in os.getenv("PAYROLL_WEEKLY_OFF_DAYS", "5,6").split(",") if d.strip()
        ),
        "MISSING_ATTENDANCE_POLICY": os.getenv("PAYROLL_MISSING_ATTENDANCE_POLICY", "absent"),
    }


def _db_from_env(default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "payroll_db"),
    }
