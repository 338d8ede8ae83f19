"""Student repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_occupancy.models.base.enums import StudentStatus
from hostel_occupancy.models.student import Student
from hostel_occupancy.repositories.base import BaseRepository


class StudentRepository(BaseRepository[Student]):
    def __init__(self, db: Session):
        super().__init__(Student, db)

    def save(self, student: Student) -> Student:
        self.db.add(student)
        self.flush()
        return student

    def find_by_booking_ref(self, booking_id: str) -> Optional[Student]:
        return self.db.query(Student).filter(Student.booking_ref_id == booking_id).first()

    def list_by_hostel(self, hostel_id: str, status: Optional[str] = None) -> List[Student]:
        query = self.db.query(Student).filter(Student.hostel_id == hostel_id)
        if status:
            query = query.filter(Student.status == status)
        return query.order_by(Student.created_at).all()


    def find_active_for_user(self, user_id: str, hostel_id: str) -> Optional[Student]:
        return (
            self.db.query(Student)
            .filter(
                Student.user_id == user_id,
                Student.hostel_id == hostel_id,
                Student.status == StudentStatus.ACTIVE,
            )
            .first()
        )
