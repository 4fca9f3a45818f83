# academy_reservations/models/__init__.py
# Import all models to ensure SQLAlchemy can resolve relationships

from academy_reservations.db.base_class import Base
from academy_reservations.models.gym_class import GymClass
from academy_reservations.models.student import Student
from academy_reservations.models.reservation import Reservation
