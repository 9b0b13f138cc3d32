# app/system_models/alarm_model/alarm_model.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.database.connection import Base
from app.helpers.time import utcnow


class Alarm(Base):
    __tablename__ = "alarms"

    id = Column(Integer, primary_key=True, index=True)
    alarm_type = Column(String(50), nullable=False)
    description = Column(String(255), nullable=False)
    raised_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    status = Column(String(20), default="new", nullable=False)

    transport_id = Column(Integer, ForeignKey("transport_records.id"), nullable=True)

    def __repr__(self):
        return f"<Alarm {self.id}: {self.alarm_type} ({self.status})>"
