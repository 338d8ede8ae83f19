from hostel_occupancy.repositories.room.room_repository import RoomRepository

__all__ = ["RoomRepository"]
