# app/dispensing_engine/fulfillment.py
"""
Prescription Fulfillment Workflow
1. Validate every line (pure, whole submission)
2. Reserve stock and write the prescription in one transaction
3. Hand the dispense commands to the robot queue, after commit
"""
import logging
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.dispensing_engine.dispatch_client import DispatchCommand
from app.dispensing_engine.dosage_validator import validate_lines
from app.dispensing_engine.errors import ValidationError
from app.dispensing_engine.persistence import (
    CreatedPrescription,
    RevisionOutcome,
    advance_transport_record,
    create_prescription_records,
    revise_prescription_records,
)
from app.system_models.prescription_model.prescription_schemas import PrescriptionCreate, PrescriptionRevise
from app.system_models.transport_model.transport_model import TransportRecord, TransportStatus

logger = logging.getLogger(__name__)


class Dispatcher(Protocol):
    def submit(self, command: DispatchCommand) -> bool: ...


class PrescriptionFulfillmentWorkflow:
    """Entry point for creating and revising prescriptions."""

    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher

    async def create_prescription(self, db: AsyncSession, request: PrescriptionCreate) -> CreatedPrescription:
        logger.info(
            f"Creating prescription for patient {request.patient_id} "
            f"by prescriber {request.prescriber_id} with {len(request.medications)} line(s)"
        )
        validate_lines(request.medications)

        created = await create_prescription_records(
            db,
            patient_id=request.patient_id,
            prescriber_id=request.prescriber_id,
            lines=request.medications,
        )

        # Robot availability never changes the clinical outcome
        for command in created.dispatch_commands:
            self.dispatcher.submit(command)
        return created

    async def revise_prescription(
        self, db: AsyncSession, prescription_id: int, request: PrescriptionRevise
    ) -> RevisionOutcome:
        logger.info(f"Revising prescription {prescription_id} with {len(request.medications)} line(s)")
        validate_lines(request.medications)
        return await revise_prescription_records(db, prescription_id, request.medications)

    async def advance_transport_status(self, db: AsyncSession, transport_id: int, status: str) -> TransportRecord:
        try:
            target = TransportStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in TransportStatus)
            raise ValidationError(f"Unknown transport status '{status}'. Allowed: {allowed}")
        return await advance_transport_record(db, transport_id, target)
