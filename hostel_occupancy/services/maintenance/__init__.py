"""Maintenance tickets raised against hostels, rooms and beds."""

from hostel_occupancy.services.maintenance.maintenance_service import MaintenanceService

__all__ = ["MaintenanceService"]
