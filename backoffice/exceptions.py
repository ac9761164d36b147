"""
Domain errors raised by the back-office services
"""
from typing import Optional


class BackofficeError(Exception):
    """Base class for all service errors"""


class ValidationError(BackofficeError, ValueError):
    """A record failed an invariant; nothing was persisted"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ConfirmationRequired(BackofficeError):
    """A destructive operation was attempted without explicit confirmation"""

    def __init__(self, message: str, record_id: Optional[int] = None):
        super().__init__(message)
        self.record_id = record_id


class RecordNotFound(BackofficeError, LookupError):
    def __init__(self, entity: str, record_id):
        super().__init__(f"{entity} {record_id} not found")
        self.entity = entity
        self.record_id = record_id


class ExternalFetchFailure(BackofficeError):
    """The record store (or another upstream) could not be read; safe to retry"""
