"""User repository."""

from sqlalchemy.orm import Session

from hostel_occupancy.models.user import User
from hostel_occupancy.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(User, db)
