"""
Hostel model.

A hostel is owned by one user and owns its rooms. The rating aggregate is
written only by an explicit recompute issued after review writes.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_occupancy.models.base.base_model import TimestampModel

__all__ = ["Hostel"]


class Hostel(TimestampModel):
    """Hostel listing with address and rating aggregate."""

    __tablename__ = "hostels"

    owner_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Address
    address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line2: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Rating aggregate
    rating_average: Mapped[Decimal] = mapped_column(
        Numeric(3, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    rating_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    rooms: Mapped[List["Room"]] = relationship(
        "Room",
        back_populates="hostel",
        cascade="all, delete-orphan",
        order_by="Room.room_number",
    )

    def apply_rating(self, average: Optional[Decimal], count: int) -> None:
        """Store a freshly computed rating aggregate."""
        self.rating_count = count
        self.rating_average = (
            Decimal(average).quantize(Decimal("0.01")) if count and average is not None else Decimal("0.00")
        )

    def __repr__(self) -> str:
        return f"<Hostel(id={self.id}, name={self.name})>"
