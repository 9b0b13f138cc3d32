# app/system_services/robot_alarms.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.dispensing_engine.errors import NotFoundError
from app.dispensing_engine.persistence import transaction
from app.helpers.time import utcnow
from app.system_models.alarm_model.alarm_model import Alarm
from app.system_models.transport_model.transport_model import TransportRecord

logger = logging.getLogger(__name__)

ROBOT_ERROR = "ROBOT_ERROR"
DEFAULT_ROBOT_ERROR_DESCRIPTION = "Standard robot error"


async def record_robot_error(
    db: AsyncSession,
    description: Optional[str] = None,
    transport_id: Optional[int] = None,
) -> Alarm:
    """Store an alarm reported by the robot, optionally tied to a transport record."""
    description = (description or "").strip() or DEFAULT_ROBOT_ERROR_DESCRIPTION

    async with transaction(db):
        if transport_id is not None and await db.get(TransportRecord, transport_id) is None:
            raise NotFoundError(f"Transport record {transport_id} not found")

        alarm = Alarm(
            alarm_type=ROBOT_ERROR,
            description=description,
            raised_at=utcnow(),
            status="new",
            transport_id=transport_id,
        )
        db.add(alarm)

    logger.warning(f"🚨 Robot error recorded (alarm {alarm.id}, transport {transport_id}): {description}")
    return alarm


async def list_alarms(db: AsyncSession) -> List[Alarm]:
    result = await db.scalars(select(Alarm).order_by(Alarm.raised_at.desc(), Alarm.id.desc()))
    return list(result.all())
