"""
Tests for the pure dosage validator.
"""

import pytest

from app.dispensing_engine.dosage_validator import validate_lines
from app.dispensing_engine.errors import ValidationError
from app.system_models.prescription_model.prescription_schemas import MedicationLineIn


def line(medication_id=1, dose=500, frequency=10):
    return MedicationLineIn(medication_id=medication_id, dose=dose, frequency=frequency)


class TestClinicalBounds:
    """Dose 100-1000 mg, frequency 1-30 days, both inclusive."""

    @pytest.mark.parametrize("dose", [100, 1000])
    def test_accepts_dose_boundaries(self, dose):
        validate_lines([line(dose=dose)])

    @pytest.mark.parametrize("frequency", [1, 30])
    def test_accepts_frequency_boundaries(self, frequency):
        validate_lines([line(frequency=frequency)])

    @pytest.mark.parametrize("dose", [99, 1001])
    def test_rejects_dose_out_of_range(self, dose):
        with pytest.raises(ValidationError, match="dose"):
            validate_lines([line(dose=dose)])

    @pytest.mark.parametrize("frequency", [0, 31])
    def test_rejects_frequency_out_of_range(self, frequency):
        with pytest.raises(ValidationError, match="frequency"):
            validate_lines([line(frequency=frequency)])

    @pytest.mark.parametrize("medication_id", [None, 0])
    def test_rejects_missing_medication(self, medication_id):
        with pytest.raises(ValidationError, match="medicationId"):
            validate_lines([line(medication_id=medication_id)])


class TestWholeSubmission:
    def test_empty_submission_is_rejected(self):
        with pytest.raises(ValidationError):
            validate_lines([])

    def test_reports_first_offending_line(self):
        lines = [line(1), line(2, dose=50), line(3, frequency=99)]

        with pytest.raises(ValidationError) as exc_info:
            validate_lines(lines)

        assert exc_info.value.line_index == 1
        assert exc_info.value.status_code == 400

    def test_late_bad_line_fails_the_whole_submission(self):
        lines = [line(1), line(2), line(3, dose=1001)]

        with pytest.raises(ValidationError) as exc_info:
            validate_lines(lines)

        assert exc_info.value.line_index == 2

    def test_rejects_repeated_medication(self):
        with pytest.raises(ValidationError, match="more than once"):
            validate_lines([line(7), line(7, dose=200)])

    def test_valid_submission_returns_none(self):
        assert validate_lines([line(1), line(2, dose=100, frequency=1)]) is None
