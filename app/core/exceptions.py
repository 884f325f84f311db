"""
Domain errors raised by the subscription ledger and plan catalog.

Services raise these; app.main maps them to HTTP responses.
"""
from typing import Optional


class LedgerError(Exception):
    """Base class for request-scoped ledger failures"""

    kind = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """A required field is missing or a value is outside its permitted set"""

    kind = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTransitionError(LedgerError):
    """Requested status change is not in the allowed transition set"""

    kind = "invalid_transition"

    def __init__(self, current_status: str, target_status: str):
        super().__init__(
            f"Cannot transition subscription from '{current_status}' to '{target_status}'"
        )
        self.current_status = current_status
        self.target_status = target_status


class NotFoundError(LedgerError):
    """Identifier does not resolve to an existing record"""

    kind = "not_found"

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} '{identifier}' not found")
        self.resource = resource
        self.identifier = identifier
