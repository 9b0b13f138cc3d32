# app/dispensing_engine/persistence.py
"""
Persistence Orchestrator
Sequences the durable writes of a prescription. Each operation runs in one
database transaction: any failure rolls back header, lines, stock and
transport record together.
"""
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dispensing_engine.dispatch_client import DispatchCommand
from app.dispensing_engine.dosage_validator import DosageLine
from app.dispensing_engine.errors import DependencyError, DispensingError, NotFoundError, ValidationError
from app.dispensing_engine.stock_engine import consume, reconcile, stock_units_for
from app.helpers.time import utcnow
from app.system_models.medication_model.medication_model import Medication
from app.system_models.patient_model.patient_model import Patient
from app.system_models.prescription_model.prescription_model import Prescription, PrescriptionLine
from app.system_models.transport_model.transport_model import TransportRecord, TransportStatus
from app.users.user_models.user_model import User

logger = logging.getLogger(__name__)


@dataclass
class CreatedPrescription:
    prescription_id: int
    transport_id: Optional[int]
    # Released to the robot only after commit
    dispatch_commands: List[DispatchCommand] = field(default_factory=list)


@dataclass
class RevisionOutcome:
    prescription_id: int
    updated_medication_ids: List[int] = field(default_factory=list)
    ignored_medication_ids: List[int] = field(default_factory=list)
    stock_deltas: dict = field(default_factory=dict)


@asynccontextmanager
async def transaction(db: AsyncSession):
    """Commit on success, roll back on any failure; storage errors become DependencyError."""
    try:
        yield
        await db.commit()
    except DispensingError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"❌ Database error, transaction rolled back: {e}", exc_info=True)
        raise DependencyError(f"Database error: {e}") from e
    except BaseException:
        await db.rollback()
        raise


async def create_prescription_records(
    db: AsyncSession,
    patient_id: int,
    prescriber_id: int,
    lines: Sequence[DosageLine],
) -> CreatedPrescription:
    """
    Write a new prescription and reserve its stock.

    Lines are processed in submission order. The first line also opens an
    in-progress transport record for the patient.
    """
    commands: List[DispatchCommand] = []
    transport: Optional[TransportRecord] = None

    async with transaction(db):
        # References are checked before the header insert so a missing row is a
        # 404 rather than a foreign key violation
        patient = await db.get(Patient, patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        if await db.get(User, prescriber_id) is None:
            raise NotFoundError(f"Prescriber {prescriber_id} not found")

        prescription = Prescription(
            patient_id=patient_id,
            prescriber_id=prescriber_id,
            issued_at=utcnow(),
        )
        db.add(prescription)
        await db.flush()
        logger.info(f"📝 Prescription {prescription.id} opened for patient {patient_id}")

        for index, line in enumerate(lines):
            medication = (
                await db.execute(
                    select(Medication.id, Medication.tag_id).where(Medication.id == line.medication_id)
                )
            ).first()
            if medication is None:
                raise NotFoundError(f"Medication {line.medication_id} not found")

            units = stock_units_for(line.dose, line.frequency)
            logger.info(
                f"💊 Medication {line.medication_id}: {line.dose}mg x {line.frequency} days "
                f"= {line.dose * line.frequency}mg -> {units} stock unit(s)"
            )
            await consume(db, line.medication_id, units)

            db.add(
                PrescriptionLine(
                    prescription_id=prescription.id,
                    medication_id=line.medication_id,
                    dose_mg=line.dose,
                    frequency_days=line.frequency,
                )
            )

            if index == 0:
                transport = TransportRecord(
                    medication_id=line.medication_id,
                    patient_id=patient_id,
                    prescription_id=prescription.id,
                    recorded_at=utcnow(),
                    status=TransportStatus.IN_PROGRESS.value,
                )
                db.add(transport)

            commands.append(
                DispatchCommand.for_line(
                    ward=patient.ward,
                    bed=patient.bed,
                    tag=medication.tag_id,
                    medication_id=line.medication_id,
                    prescription_id=prescription.id,
                )
            )

        await db.flush()
        prescription_id = prescription.id
        transport_id = transport.id if transport is not None else None

    logger.info(f"✅ Prescription {prescription_id} committed with {len(commands)} line(s)")
    return CreatedPrescription(
        prescription_id=prescription_id,
        transport_id=transport_id,
        dispatch_commands=commands,
    )


# Attempts to overwrite a line whose stored dosage keeps changing under us
LINE_OVERWRITE_ATTEMPTS = 3


async def _overwrite_line(db: AsyncSession, line_id: int, dose: int, frequency: int) -> Tuple[int, int]:
    """
    Set a line's dose/frequency only if it still holds the values just read.

    Returns the replaced (dose, frequency). A concurrent revise that committed
    first makes the conditional UPDATE miss, and the line is read again so the
    stock delta is computed against what is actually stored.
    """
    for _ in range(LINE_OVERWRITE_ATTEMPTS):
        old_dose, old_frequency = (
            await db.execute(
                select(PrescriptionLine.dose_mg, PrescriptionLine.frequency_days).where(
                    PrescriptionLine.id == line_id
                )
            )
        ).one()
        result = await db.execute(
            update(PrescriptionLine)
            .where(
                PrescriptionLine.id == line_id,
                PrescriptionLine.dose_mg == old_dose,
                PrescriptionLine.frequency_days == old_frequency,
            )
            .values(dose_mg=dose, frequency_days=frequency)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return old_dose, old_frequency
        logger.info(f"🔁 Prescription line {line_id} changed concurrently, reading it again")

    raise DependencyError(f"Prescription line {line_id} kept changing concurrently, retry the revision")


async def revise_prescription_records(
    db: AsyncSession,
    prescription_id: int,
    lines: Sequence[DosageLine],
) -> RevisionOutcome:
    """
    Overwrite dose/frequency of existing lines and settle the stock difference.

    Submitted medications without an existing line are ignored, never inserted.
    """
    outcome = RevisionOutcome(prescription_id=prescription_id)

    async with transaction(db):
        exists = await db.scalar(select(Prescription.id).where(Prescription.id == prescription_id))
        if exists is None:
            raise NotFoundError(f"Prescription {prescription_id} not found")

        result = await db.execute(
            select(PrescriptionLine.medication_id, PrescriptionLine.id).where(
                PrescriptionLine.prescription_id == prescription_id
            )
        )
        line_ids = {medication_id: line_id for medication_id, line_id in result.all()}

        for line in lines:
            line_id = line_ids.get(line.medication_id)
            if line_id is None:
                logger.warning(
                    f"⚠️  Prescription {prescription_id} has no line for medication "
                    f"{line.medication_id}, ignoring"
                )
                outcome.ignored_medication_ids.append(line.medication_id)
                continue

            old_dose, old_frequency = await _overwrite_line(db, line_id, line.dose, line.frequency)
            old_units = stock_units_for(old_dose, old_frequency)
            new_units = stock_units_for(line.dose, line.frequency)
            delta = await reconcile(db, line.medication_id, old_units, new_units)
            logger.info(
                f"💊 Medication {line.medication_id}: old={old_units} unit(s), "
                f"new={new_units} unit(s), delta={delta}"
            )

            outcome.updated_medication_ids.append(line.medication_id)
            outcome.stock_deltas[line.medication_id] = delta

    logger.info(
        f"✅ Prescription {prescription_id} revised: "
        f"{len(outcome.updated_medication_ids)} updated, {len(outcome.ignored_medication_ids)} ignored"
    )
    return outcome


async def advance_transport_record(
    db: AsyncSession,
    transport_id: int,
    status: TransportStatus,
) -> TransportRecord:
    """Move one transport record, addressed by id, out of in-progress."""
    async with transaction(db):
        record = await db.get(TransportRecord, transport_id)
        if record is None:
            raise NotFoundError(f"Transport record {transport_id} not found")

        current = TransportStatus(record.status)
        if current.is_terminal:
            raise ValidationError(
                f"Transport record {transport_id} is already '{current.value}'"
            )

        record.status = status.value
        record.updated_at = utcnow()

    logger.info(f"🚚 Transport record {transport_id}: {current.value} -> {status.value}")
    return record
