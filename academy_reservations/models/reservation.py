# academy_reservations/models/reservation.py
"""
Reservation model: one booking attempt by a student for a class.

Status lifecycle: CONFIRMED / WAITLISTED on creation, then CANCELLED,
EXPIRED (lazy, time based) or CONFIRMED (promotion, manual confirm).
queue_position is only set while WAITLISTED, expires_at only while CONFIRMED.
"""

import uuid
from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from academy_reservations.db.base_class import Base


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String, primary_key=True, default=lambda: f"rsv_{uuid.uuid4().hex[:12]}")
    class_id = Column(String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(String(20), nullable=False)  # CONFIRMED, WAITLISTED, EXPIRED, CANCELLED, NO_SHOW
    queue_position = Column(Integer, nullable=True)

    # Timestamps
    reserved_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    gym_class = relationship("GymClass", back_populates="reservations")
    student = relationship("Student", back_populates="reservations")

    __table_args__ = (
        UniqueConstraint('class_id', 'student_id', name='unique_class_student_reservation'),
        CheckConstraint(
            "(status = 'WAITLISTED' AND queue_position IS NOT NULL) "
            "OR (status <> 'WAITLISTED' AND queue_position IS NULL)",
            name='check_queue_position_only_when_waitlisted',
        ),
        CheckConstraint('queue_position IS NULL OR queue_position >= 1', name='check_queue_position_positive'),
        Index('ix_reservations_class_status', 'class_id', 'status'),
    )
