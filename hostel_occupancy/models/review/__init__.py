from hostel_occupancy.models.review.review import Review

__all__ = ["Review"]
