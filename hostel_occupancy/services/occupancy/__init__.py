"""
Occupancy coordination: atomic bed, booking and student transitions.
"""

from hostel_occupancy.services.occupancy.occupancy_coordinator import OccupancyCoordinator

__all__ = ["OccupancyCoordinator"]
