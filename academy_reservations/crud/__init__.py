# academy_reservations/crud/__init__.py

from .crud_gym_class import gym_class
from .crud_reservation import reservation
from .crud_student import student
