# app/system_models/transport_model/transport_model.py
import enum

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.database.connection import Base
from app.helpers.time import utcnow


class TransportStatus(str, enum.Enum):
    IN_PROGRESS = "in-progress"
    DELIVERED = "delivered"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransportStatus.IN_PROGRESS


class TransportRecord(Base):
    """One physical dispensing attempt. Rows are never deleted."""

    __tablename__ = "transport_records"

    id = Column(Integer, primary_key=True, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=True)

    recorded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    status = Column(String(50), default=TransportStatus.IN_PROGRESS.value, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<TransportRecord {self.id}: medication={self.medication_id} patient={self.patient_id} status={self.status}>"
