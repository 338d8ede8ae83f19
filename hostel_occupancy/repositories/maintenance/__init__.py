from hostel_occupancy.repositories.maintenance.maintenance_repository import MaintenanceRepository

__all__ = ["MaintenanceRepository"]
