from hostel_occupancy.repositories.student.student_repository import StudentRepository

__all__ = ["StudentRepository"]
