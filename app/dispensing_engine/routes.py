# app/dispensing_engine/routes.py
"""
Prescription Fulfillment Routes
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import get_db
from app.dispensing_engine.dependencies import get_dispatcher, get_workflow
from app.dispensing_engine.dispatch_client import DispatchQueue
from app.dispensing_engine.errors import DispensingError
from app.dispensing_engine.fulfillment import PrescriptionFulfillmentWorkflow
from app.system_models.alarm_model.alarm_schemas import AlarmResponse, RobotErrorReport
from app.system_models.prescription_model.prescription_schemas import (
    PatientPrescriptionRow,
    PrescriptionCreate,
    PrescriptionCreatedResponse,
    PrescriptionLineResponse,
    PrescriptionRevise,
    PrescriptionRevisedResponse,
    PrescriptionSummary,
)
from app.system_models.transport_model.transport_schemas import TransportRecordResponse, TransportStatusUpdate
from app.system_services import prescription_queries
from app.system_services.robot_alarms import list_alarms, record_robot_error

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(e: DispensingError) -> HTTPException:
    if e.status_code >= 500:
        logger.error(f"❌ {type(e).__name__}: {e.detail}")
    else:
        logger.warning(f"⚠️  Request rejected ({type(e).__name__}): {e.detail}")
    return HTTPException(status_code=e.status_code, detail=e.detail)


# ============================================================
# ✅ PRESCRIPTIONS
# ============================================================
@router.post("/prescriptions", response_model=PrescriptionCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_prescription_endpoint(
    prescription: PrescriptionCreate,
    db: AsyncSession = Depends(get_db),
    workflow: PrescriptionFulfillmentWorkflow = Depends(get_workflow),
):
    """
    Validate, reserve stock, record the prescription and queue robot dispatch.

    The response does not depend on the robot: dispatch happens after commit.
    """
    try:
        created = await workflow.create_prescription(db, prescription)
    except DispensingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"❌ Error creating prescription: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return PrescriptionCreatedResponse(prescription_id=created.prescription_id, transport_id=created.transport_id)


@router.put("/prescriptions/{prescription_id}", response_model=PrescriptionRevisedResponse)
async def revise_prescription_endpoint(
    prescription_id: int,
    revision: PrescriptionRevise,
    db: AsyncSession = Depends(get_db),
    workflow: PrescriptionFulfillmentWorkflow = Depends(get_workflow),
):
    """Change dose/frequency of existing lines; stock moves by the difference only."""
    try:
        outcome = await workflow.revise_prescription(db, prescription_id, revision)
    except DispensingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"❌ Error updating prescription {prescription_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
    return PrescriptionRevisedResponse(
        success=True,
        updated_medication_ids=outcome.updated_medication_ids,
        ignored_medication_ids=outcome.ignored_medication_ids,
    )


@router.get("/prescriptions", response_model=List[PrescriptionSummary])
async def list_prescriptions_endpoint(db: AsyncSession = Depends(get_db)):
    return await prescription_queries.list_prescriptions(db)


@router.get("/prescriptions/{prescription_id}/medications", response_model=List[PrescriptionLineResponse])
async def list_prescription_medications_endpoint(prescription_id: int, db: AsyncSession = Depends(get_db)):
    return await prescription_queries.list_prescription_lines(db, prescription_id)


@router.get("/patients/{patient_id}/prescriptions", response_model=List[PatientPrescriptionRow])
async def list_patient_prescriptions_endpoint(patient_id: int, db: AsyncSession = Depends(get_db)):
    return await prescription_queries.list_patient_prescriptions(db, patient_id)


# ============================================================
# ✅ TRANSPORT RECORDS
# ============================================================
@router.post("/transport-status", response_model=TransportRecordResponse)
async def advance_transport_status_endpoint(
    update: TransportStatusUpdate,
    db: AsyncSession = Depends(get_db),
    workflow: PrescriptionFulfillmentWorkflow = Depends(get_workflow),
):
    """Advance the transport record returned by prescription creation."""
    try:
        return await workflow.advance_transport_status(db, update.transport_id, update.status)
    except DispensingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"❌ Error updating transport {update.transport_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/transport-records", response_model=List[TransportRecordResponse])
async def list_transport_records_endpoint(db: AsyncSession = Depends(get_db)):
    return await prescription_queries.list_transport_records(db)


@router.get("/transport-records/{transport_id}", response_model=TransportRecordResponse)
async def get_transport_record_endpoint(transport_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await prescription_queries.get_transport_record(db, transport_id)
    except DispensingError as e:
        raise _http_error(e)


# ============================================================
# ✅ ROBOT
# ============================================================
@router.post("/robot/error", response_model=AlarmResponse, status_code=status.HTTP_201_CREATED)
async def robot_error_endpoint(report: RobotErrorReport, db: AsyncSession = Depends(get_db)):
    """Called by the robot when a command fails on its side."""
    try:
        return await record_robot_error(db, report.description, report.transport_id)
    except DispensingError as e:
        raise _http_error(e)
    except Exception as e:
        logger.error(f"❌ Error recording robot alarm: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/alarms", response_model=List[AlarmResponse])
async def list_alarms_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_alarms(db)


@router.get("/robot/dispatch-stats")
async def dispatch_stats_endpoint(dispatcher: DispatchQueue = Depends(get_dispatcher)):
    """Outcome counters of the robot dispatch worker since startup."""
    return dispatcher.snapshot()
