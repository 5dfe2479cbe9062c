from typing import Optional


class BudgetError(Exception):
    """Base error. ``message`` is what the user gets to see."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BudgetError):
    pass


class TransportError(BudgetError):

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(BudgetError):
    pass


class InFlightError(BudgetError):
    """Raised when an operation is submitted again before the first call returned."""

    def __init__(self, operation: str):
        super().__init__(f"'{operation}' is already in progress, please wait.")
        self.operation = operation
