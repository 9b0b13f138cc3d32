# app/system_models/medication_model/medication_model.py
from sqlalchemy import Column, Integer, String, CheckConstraint
from app.database.connection import Base


class Medication(Base):
    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # RFID tag the robot uses to pick the right box
    tag_id = Column(String, nullable=True)

    # Stock units, 1 unit = 5 g of active substance
    current_stock = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="check_stock_non_negative"),
    )

    def __repr__(self):
        return f"<Medication {self.id}: {self.name} (stock={self.current_stock})>"
