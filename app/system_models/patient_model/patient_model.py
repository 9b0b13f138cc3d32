# app/system_models/patient_model/patient_model.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.database.connection import Base
from app.helpers.time import utcnow

class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    national_id = Column(String, nullable=True)
    address = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Physical location used by the dispensing robot
    ward = Column(String, nullable=True)
    bed = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    prescriptions = relationship("Prescription", back_populates="patient")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Patient {self.id}: {self.first_name} {self.last_name} (ward {self.ward}, bed {self.bed})>"
