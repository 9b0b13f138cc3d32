# app/system_services/prescription_queries.py
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dispensing_engine.errors import NotFoundError
from app.system_models.medication_model.medication_model import Medication
from app.system_models.patient_model.patient_model import Patient
from app.system_models.prescription_model.prescription_model import Prescription, PrescriptionLine
from app.system_models.prescription_model.prescription_schemas import (
    PatientPrescriptionRow,
    PrescriptionLineResponse,
    PrescriptionSummary,
)
from app.system_models.transport_model.transport_model import TransportRecord
from app.users.user_models.user_model import User


def _name(first, last) -> str:
    return " ".join(p for p in (first, last) if p)


async def list_prescriptions(db: AsyncSession) -> List[PrescriptionSummary]:
    """All prescriptions, newest first, with patient and doctor names."""
    result = await db.execute(
        select(Prescription, Patient.first_name, Patient.last_name, User.first_name, User.last_name)
        .join(Patient, Patient.id == Prescription.patient_id)
        .join(User, User.id == Prescription.prescriber_id)
        .order_by(Prescription.issued_at.desc(), Prescription.id.desc())
    )
    return [
        PrescriptionSummary(
            prescription_id=p.id,
            patient_id=p.patient_id,
            prescriber_id=p.prescriber_id,
            issued_at=p.issued_at,
            patient_name=_name(pf, pl),
            doctor_name=_name(df, dl),
        )
        for p, pf, pl, df, dl in result.all()
    ]


async def list_prescription_lines(db: AsyncSession, prescription_id: int) -> List[PrescriptionLineResponse]:
    result = await db.execute(
        select(PrescriptionLine, Medication.name, Medication.current_stock)
        .join(Medication, Medication.id == PrescriptionLine.medication_id)
        .where(PrescriptionLine.prescription_id == prescription_id)
        .order_by(PrescriptionLine.id)
    )
    return [
        PrescriptionLineResponse(
            prescription_id=line.prescription_id,
            medication_id=line.medication_id,
            dose=line.dose_mg,
            frequency=line.frequency_days,
            medication_name=name,
            current_stock=stock,
        )
        for line, name, stock in result.all()
    ]


async def list_patient_prescriptions(db: AsyncSession, patient_id: int) -> List[PatientPrescriptionRow]:
    """One row per prescribed medication for the patient, newest prescription first."""
    result = await db.execute(
        select(Prescription, PrescriptionLine, Medication.name, User.first_name, User.last_name)
        .join(PrescriptionLine, PrescriptionLine.prescription_id == Prescription.id)
        .join(Medication, Medication.id == PrescriptionLine.medication_id)
        .join(User, User.id == Prescription.prescriber_id)
        .where(Prescription.patient_id == patient_id)
        .order_by(Prescription.issued_at.desc(), Prescription.id.desc(), PrescriptionLine.id)
    )
    return [
        PatientPrescriptionRow(
            prescription_id=p.id,
            issued_at=p.issued_at,
            doctor=_name(df, dl),
            medication_id=line.medication_id,
            medication_name=med_name,
            dose=line.dose_mg,
            frequency=line.frequency_days,
        )
        for p, line, med_name, df, dl in result.all()
    ]


async def list_transport_records(db: AsyncSession) -> List[TransportRecord]:
    result = await db.scalars(
        select(TransportRecord).order_by(TransportRecord.recorded_at.desc(), TransportRecord.id.desc())
    )
    return list(result.all())


async def get_transport_record(db: AsyncSession, transport_id: int) -> TransportRecord:
    record = await db.get(TransportRecord, transport_id)
    if record is None:
        raise NotFoundError(f"Transport record {transport_id} not found")
    return record
