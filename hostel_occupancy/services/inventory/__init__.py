"""Inventory store: hostels, rooms and beds."""

from hostel_occupancy.services.inventory.bed_service import BedService
from hostel_occupancy.services.inventory.hostel_service import HostelService
from hostel_occupancy.services.inventory.room_service import RoomService

__all__ = ["BedService", "HostelService", "RoomService"]
