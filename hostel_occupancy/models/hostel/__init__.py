from hostel_occupancy.models.hostel.hostel import Hostel

__all__ = ["Hostel"]
