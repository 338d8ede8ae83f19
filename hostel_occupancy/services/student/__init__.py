from hostel_occupancy.services.student.student_conversion_service import (
    StudentConversionService,
    generate_student_code,
)

__all__ = ["StudentConversionService", "generate_student_code"]
