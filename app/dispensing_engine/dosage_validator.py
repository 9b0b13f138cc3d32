# app/dispensing_engine/dosage_validator.py

"""
Dosage Validator - Clinical bounds for prescription lines
DETERMINISTIC and side-effect free: runs over the whole submission
before anything is written or dispatched.
"""
import logging
from typing import Protocol, Sequence, Optional

from app.dispensing_engine.errors import ValidationError

logger = logging.getLogger(__name__)

DOSE_MIN_MG = 100
DOSE_MAX_MG = 1000
FREQUENCY_MIN_DAYS = 1
FREQUENCY_MAX_DAYS = 30


class DosageLine(Protocol):
    medication_id: Optional[int]
    dose: int
    frequency: int


def validate_lines(lines: Sequence[DosageLine]) -> None:
    """
    Check every proposed line against the clinical bounds.

    Raises ValidationError for the first offending line:
    - medication_id missing or falsy
    - dose outside [100, 1000] mg
    - frequency outside [1, 30] days
    - medication repeated within the same submission
    """
    if not lines:
        raise ValidationError("At least one medication line is required")

    seen = set()
    for index, line in enumerate(lines):
        if not line.medication_id:
            raise ValidationError(f"Line {index}: medicationId is required", line_index=index)

        if not DOSE_MIN_MG <= line.dose <= DOSE_MAX_MG:
            raise ValidationError(
                f"Line {index}: dose {line.dose}mg for medication {line.medication_id} "
                f"must be between {DOSE_MIN_MG} and {DOSE_MAX_MG}mg",
                line_index=index,
            )

        if not FREQUENCY_MIN_DAYS <= line.frequency <= FREQUENCY_MAX_DAYS:
            raise ValidationError(
                f"Line {index}: frequency {line.frequency} days for medication {line.medication_id} "
                f"must be between {FREQUENCY_MIN_DAYS} and {FREQUENCY_MAX_DAYS} days",
                line_index=index,
            )

        if line.medication_id in seen:
            raise ValidationError(
                f"Line {index}: medication {line.medication_id} appears more than once",
                line_index=index,
            )
        seen.add(line.medication_id)

    logger.debug(f"✓ {len(lines)} medication line(s) within clinical bounds")
