# app/dispensing_engine/errors.py
"""
Dispensing Engine Errors
Each error knows the HTTP status it maps to; routes turn them into HTTPException.
"""
from typing import Optional


class DispensingError(Exception):
    """Base class for every failure the fulfillment workflow reports."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DispensingError):
    """Malformed or clinically out-of-bounds input. Nothing was written."""

    status_code = 400

    def __init__(self, detail: str, line_index: Optional[int] = None):
        super().__init__(detail)
        self.line_index = line_index


class NotFoundError(DispensingError):
    """A referenced patient, prescriber, medication, prescription or transport record is missing."""

    status_code = 404


class InsufficientStockError(DispensingError):
    status_code = 400

    def __init__(self, medication_id: int, available: int, required: int):
        super().__init__(
            f"Insufficient stock for medication {medication_id}. "
            f"Available: {available}, required: {required}"
        )
        self.medication_id = medication_id
        self.available = available
        self.required = required


class DependencyError(DispensingError):
    """The storage collaborator failed. The transaction was rolled back."""

    status_code = 500


class DispatchFailure(DispensingError):
    """The robot could not be reached or refused the command.

    Only raised and caught inside the dispatch client; callers of
    create/revise never see it, so it is never mapped to an HTTP status.
    """
