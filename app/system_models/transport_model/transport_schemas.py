# app/system_models/transport_model/transport_schemas.py
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class TransportStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    transport_id: int = Field(..., alias="transportId")
    # Checked against TransportStatus by the workflow, so an unknown value is a 400
    status: str


class TransportRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., serialization_alias="transportId")
    medication_id: int = Field(..., serialization_alias="medicationId")
    patient_id: int = Field(..., serialization_alias="patientId")
    prescription_id: Optional[int] = Field(None, serialization_alias="prescriptionId")
    recorded_at: datetime = Field(..., serialization_alias="recordedAt")
    status: str
