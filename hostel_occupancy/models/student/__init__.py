from hostel_occupancy.models.student.student import Student

__all__ = ["Student"]
