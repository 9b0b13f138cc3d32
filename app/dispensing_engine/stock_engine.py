# app/dispensing_engine/stock_engine.py

"""
Stock Reconciliation Engine
Turns a dose/frequency pair into stock units and applies it to a medication's
stock counter. Every check-and-mutate is a single conditional UPDATE, so two
concurrent prescriptions can never both pass the availability check.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.dispensing_engine.errors import InsufficientStockError, NotFoundError
from app.system_models.medication_model.medication_model import Medication

logger = logging.getLogger(__name__)

MG_PER_GRAM = 1000
GRAMS_PER_STOCK_UNIT = 5
MG_PER_STOCK_UNIT = MG_PER_GRAM * GRAMS_PER_STOCK_UNIT


def stock_units_for(dose: int, frequency: int) -> int:
    """
    Stock units consumed by one prescription line.

    total mg = dose * frequency, one unit covers 5 g, always rounded up:
        100mg x 1 day   -> 0.1 g -> 1 unit
        1000mg x 30 days -> 30 g -> 6 units
    """
    total_mg = dose * frequency
    # Integer ceiling keeps the result exact for every input
    return (total_mg + MG_PER_STOCK_UNIT - 1) // MG_PER_STOCK_UNIT


async def _current_stock(db: AsyncSession, medication_id: int) -> int:
    stock = await db.scalar(
        select(Medication.current_stock).where(Medication.id == medication_id)
    )
    if stock is None:
        raise NotFoundError(f"Medication {medication_id} not found")
    return stock


async def consume(db: AsyncSession, medication_id: int, units: int) -> None:
    """
    Decrement stock by `units` iff at least that much is available.

    Raises InsufficientStockError (stock untouched) or NotFoundError.
    """
    if units <= 0:
        raise ValueError(f"units to consume must be positive, got {units}")

    result = await db.execute(
        update(Medication)
        .where(Medication.id == medication_id, Medication.current_stock >= units)
        .values(current_stock=Medication.current_stock - units)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        logger.info(f"📦 Medication {medication_id}: consumed {units} unit(s)")
        return

    # Nothing matched: either the row is missing or stock is too low
    available = await _current_stock(db, medication_id)
    logger.warning(
        f"⚠️  Insufficient stock for medication {medication_id}: {available} < {units}"
    )
    raise InsufficientStockError(medication_id, available=available, required=units)


async def refund(db: AsyncSession, medication_id: int, units: int) -> None:
    """Return `units` to stock."""
    if units <= 0:
        raise ValueError(f"units to refund must be positive, got {units}")

    result = await db.execute(
        update(Medication)
        .where(Medication.id == medication_id)
        .values(current_stock=Medication.current_stock + units)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError(f"Medication {medication_id} not found")
    logger.info(f"↩️ Medication {medication_id}: refunded {units} unit(s)")


async def reconcile(db: AsyncSession, medication_id: int, old_units: int, new_units: int) -> int:
    """
    Apply only the signed difference between previous and new consumption.

    delta > 0 consumes the extra units (availability checked),
    delta < 0 refunds, delta == 0 touches nothing. Returns delta.
    """
    delta = new_units - old_units
    if delta > 0:
        await consume(db, medication_id, delta)
    elif delta < 0:
        await refund(db, medication_id, -delta)
    else:
        logger.debug(f"Medication {medication_id}: no stock change")
    return delta
