# app/system_models/prescription_model/prescription_schemas.py
from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

# Bounds are NOT declared here: the dosage validator owns them so that
# out-of-range values come back as a clinical 400, not a schema 422.


class MedicationLineIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    medication_id: Optional[int] = Field(None, alias="medicationId")
    dose: int = Field(..., description="Dose in mg")
    frequency: int = Field(..., description="Treatment length in days")


class PrescriptionCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    patient_id: int = Field(..., alias="patientId")
    prescriber_id: int = Field(..., alias="prescriberId")
    medications: List[MedicationLineIn]


class PrescriptionRevise(BaseModel):
    medications: List[MedicationLineIn]


class PrescriptionCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prescription_id: int = Field(..., alias="prescriptionId")
    transport_id: Optional[int] = Field(None, alias="transportId")


class PrescriptionRevisedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    updated_medication_ids: List[int] = Field(default_factory=list, alias="updatedMedicationIds")
    ignored_medication_ids: List[int] = Field(default_factory=list, alias="ignoredMedicationIds")


class PrescriptionSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prescription_id: int = Field(..., alias="prescriptionId")
    patient_id: int = Field(..., alias="patientId")
    prescriber_id: int = Field(..., alias="prescriberId")
    issued_at: datetime = Field(..., alias="issuedAt")
    patient_name: str = Field(..., alias="patientName")
    doctor_name: str = Field(..., alias="doctorName")


class PrescriptionLineResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prescription_id: int = Field(..., alias="prescriptionId")
    medication_id: int = Field(..., alias="medicationId")
    dose: int
    frequency: int
    medication_name: str = Field(..., alias="medicationName")
    current_stock: int = Field(..., alias="currentStock")


class PatientPrescriptionRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prescription_id: int = Field(..., alias="prescriptionId")
    issued_at: datetime = Field(..., alias="issuedAt")
    doctor: str
    medication_id: int = Field(..., alias="medId")
    medication_name: str = Field(..., alias="medName")
    dose: int
    frequency: int
