"""
Pytest configuration and shared fixtures for the dispensing backend

- Every test gets its own file-backed SQLite database (separate connections,
  so concurrent sessions really contend for the stock row)
- The robot is never contacted: a recording dispatcher stands in for the queue
"""

from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.model_registry  # noqa: F401  (registers every table on Base.metadata)
from app.database.connection import Base
from app.system_models.medication_model.medication_model import Medication
from app.system_models.patient_model.patient_model import Patient
from app.users.user_models.user_model import User

# ============================================
# DATABASE
# ============================================


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'medigo_test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory):
    """
    One doctor, one patient in ward 3 / bed 7, and three medications:

    - plenty: 10 units, tag RFID-A
    - scarce: 1 unit, tag RFID-B
    - untagged: 20 units, no tag on file
    """
    async with session_factory() as session:
        doctor = User(email="doctor@medigo.local", first_name="Ana", last_name="Ionescu", role="doctor")
        patient = Patient(first_name="Elena", last_name="Dumitru", ward="3", bed="7")
        plenty = Medication(name="Paracetamol", tag_id="RFID-A", current_stock=10)
        scarce = Medication(name="Morphine", tag_id="RFID-B", current_stock=1)
        untagged = Medication(name="Ibuprofen", tag_id=None, current_stock=20)
        session.add_all([doctor, patient, plenty, scarce, untagged])
        await session.commit()

        return SimpleNamespace(
            prescriber_id=doctor.id,
            patient_id=patient.id,
            plenty_id=plenty.id,
            scarce_id=scarce.id,
            untagged_id=untagged.id,
        )


@pytest.fixture
def stock_of(session_factory):
    """Read a medication's stock through a fresh session."""

    async def _stock_of(medication_id: int) -> int:
        async with session_factory() as session:
            medication = await session.get(Medication, medication_id)
            return medication.current_stock

    return _stock_of


# ============================================
# DISPATCH
# ============================================


class RecordingDispatcher:
    """Accepts every command and keeps it for inspection."""

    def __init__(self):
        self.commands = []

    def submit(self, command) -> bool:
        self.commands.append(command)
        return True

    def snapshot(self) -> dict:
        return {"queued": len(self.commands)}


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()
