class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class MissingSalaryStructure(DomainError):
    """Raised when no salary structure covers the reference date."""

    def __init__(self, staff_id: int, reference_date):
        super().__init__(f"No active salary structure for staff {staff_id} on {reference_date.isoformat()}")
        self.staff_id = staff_id
        self.reference_date = reference_date


class InvalidPeriodTransition(DomainError):
    """Raised on an illegal payroll period or record state change."""

    def __init__(self, current, target):
        super().__init__(f"Cannot move from '{current.value}' to '{target.value}'")
        self.current = current
        self.target = target


class RateTableNotFound(DomainError):
    """Raised when no statutory rate or tax slab covers the period date."""
