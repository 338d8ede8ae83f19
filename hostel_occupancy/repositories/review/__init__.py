from hostel_occupancy.repositories.review.review_repository import ReviewRepository

__all__ = ["ReviewRepository"]
