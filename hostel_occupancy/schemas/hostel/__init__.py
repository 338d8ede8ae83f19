from hostel_occupancy.schemas.hostel.hostel_base import HostelAddressUpdate, HostelCreate, HostelResponse

__all__ = ["HostelAddressUpdate", "HostelCreate", "HostelResponse"]
