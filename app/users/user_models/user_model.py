# app/users/user_models/user_model.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint
from app.database.connection import Base
from app.helpers.time import utcnow


class User(Base):
    """Hospital staff. Doctors act as prescribers."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, default="doctor", nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'doctor', 'nurse')", name='check_role_values'),
    )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def __repr__(self):
        return f"<User(id={self.id}, first_name='{self.first_name}', last_name='{self.last_name}', role='{self.role}')>"
