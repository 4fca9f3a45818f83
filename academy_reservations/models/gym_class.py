# academy_reservations/models/gym_class.py
import uuid
from sqlalchemy import Column, String, DateTime, Integer, CheckConstraint, func
from sqlalchemy.orm import relationship
from academy_reservations.db.base_class import Base


class GymClass(Base):
    """
    A scheduled class occurrence at the academy.

    Owned by the scheduling side of the system; the reservation engine only
    reads it (existence, status, capacity, start time) and locks its row to
    serialise bookings for the class.
    """
    __tablename__ = "classes"

    id = Column(String, primary_key=True, default=lambda: f"cls_{uuid.uuid4().hex[:12]}")
    name = Column(String, nullable=False)
    modality = Column(String(50), nullable=True)  # e.g. BJJ Gi, No-Gi, Muay Thai
    instructor_name = Column(String, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, server_default="60")

    # NULL means unlimited
    capacity = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, server_default="SCHEDULED")  # SCHEDULED, IN_PROGRESS, COMPLETED, CANCELLED

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    reservations = relationship("Reservation", back_populates="gym_class", passive_deletes=True)

    __table_args__ = (
        CheckConstraint('capacity IS NULL OR capacity >= 0', name='check_class_capacity_positive'),
    )
