# academy_reservations/crud/crud_student.py
from academy_reservations.crud.base import CRUDBase
from academy_reservations.models.student import Student
from academy_reservations.schemas.student import StudentCreate


class CRUDStudent(CRUDBase[Student, StudentCreate]):
    pass


student = CRUDStudent(Student)
