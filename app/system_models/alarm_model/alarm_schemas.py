# app/system_models/alarm_model/alarm_schemas.py
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class RobotErrorReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: Optional[str] = Field(None, max_length=255)
    transport_id: Optional[int] = Field(None, alias="transportId")


class AlarmResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    alarm_type: str = Field(..., serialization_alias="alarmType")
    description: str
    raised_at: datetime = Field(..., serialization_alias="raisedAt")
    status: str
    transport_id: Optional[int] = Field(None, serialization_alias="transportId")
