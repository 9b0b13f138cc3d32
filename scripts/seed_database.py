# scripts/seed_database.py
#  to run the script, run the following command:
#  python scripts/seed_database.py

"""
Database Seeding Script
Creates the tables and loads a demo ward: doctors, patients and stocked medications
"""
import sys
import asyncio
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.database.connection import AsyncSessionLocal, engine, init_models
from app.system_models.medication_model.medication_model import Medication
from app.system_models.patient_model.patient_model import Patient
from app.users.user_models.user_model import User

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DOCTORS = [
    {"email": "a.ionescu@medigo.local", "first_name": "Ana", "last_name": "Ionescu", "role": "doctor"},
    {"email": "m.popa@medigo.local", "first_name": "Mihai", "last_name": "Popa", "role": "doctor"},
]

PATIENTS = [
    {"first_name": "Elena", "last_name": "Dumitru", "ward": "1", "bed": "3"},
    {"first_name": "Radu", "last_name": "Stan", "ward": "2", "bed": "1"},
    {"first_name": "Ioana", "last_name": "Marin", "ward": "2", "bed": "4"},
]

MEDICATIONS = [
    {"name": "Paracetamol", "description": "Analgesic", "tag_id": "RFID-0001", "current_stock": 40},
    {"name": "Amoxicillin", "description": "Antibiotic", "tag_id": "RFID-0002", "current_stock": 25},
    {"name": "Ibuprofen", "description": "NSAID", "tag_id": "RFID-0003", "current_stock": 10},
]


async def seed() -> bool:
    await init_models()

    async with AsyncSessionLocal() as db:
        existing = await db.scalar(select(Medication.id).limit(1))
        if existing is not None:
            logger.info("ℹ️  Database already seeded, nothing to do")
            await engine.dispose()
            return True

        db.add_all([User(**d) for d in DOCTORS])
        db.add_all([Patient(**p) for p in PATIENTS])
        db.add_all([Medication(**m) for m in MEDICATIONS])
        await db.commit()

    logger.info(f"✓ Seeded {len(DOCTORS)} doctors, {len(PATIENTS)} patients, {len(MEDICATIONS)} medications")
    await engine.dispose()
    return True


if __name__ == "__main__":
    print("\n" + "="*60)
    print("   MEDIGO - DATABASE SEED")
    print("="*60 + "\n")

    success = asyncio.run(seed())

    if success:
        print("\n" + "="*60)
        print("   ✅ SUCCESS - Database ready!")
        print("="*60 + "\n")
        sys.exit(0)
    else:
        sys.exit(1)
