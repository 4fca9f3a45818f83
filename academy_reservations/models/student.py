# academy_reservations/models/student.py
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, func, text
from sqlalchemy.orm import relationship
from academy_reservations.db.base_class import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String, primary_key=True, default=lambda: f"stu_{uuid.uuid4().hex[:12]}")
    name = Column(String, nullable=False)
    email = Column(String, nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, server_default=text("true"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    reservations = relationship("Reservation", back_populates="student", passive_deletes=True)
