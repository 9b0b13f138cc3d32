# app/system_models/prescription_model/prescription_model.py
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.helpers.time import utcnow

class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    prescriber_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    issued_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    patient = relationship("Patient", back_populates="prescriptions")
    prescriber = relationship("User")
    lines = relationship(
        "PrescriptionLine",
        back_populates="prescription",
        cascade="all, delete-orphan",
        order_by="PrescriptionLine.id",
    )


class PrescriptionLine(Base):
    __tablename__ = "prescription_lines"

    id = Column(Integer, primary_key=True)
    prescription_id = Column(Integer, ForeignKey("prescriptions.id"), nullable=False, index=True)
    medication_id = Column(Integer, ForeignKey("medications.id"), nullable=False)

    dose_mg = Column(Integer, nullable=False)
    frequency_days = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("prescription_id", "medication_id", name="uq_prescription_medication"),
    )

    prescription = relationship("Prescription", back_populates="lines")
    medication = relationship("Medication")
