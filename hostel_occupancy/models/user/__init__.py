from hostel_occupancy.models.user.user import User, user_student_profiles

__all__ = ["User", "user_student_profiles"]
