from hostel_occupancy.repositories.hostel.hostel_repository import HostelRepository

__all__ = ["HostelRepository"]
