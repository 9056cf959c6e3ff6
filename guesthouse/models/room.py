from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

if TYPE_CHECKING:
    from .guest import Guest

class RoomType(str, PyEnum):
    AC = "AC"
    NON_AC = "Non-AC"

class RoomStatus(str, PyEnum):
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"

class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    room_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    room_type: Mapped[str] = mapped_column(String(20), nullable=False, default=RoomType.NON_AC.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=RoomStatus.AVAILABLE.value)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    guests: Mapped[list[Guest]] = relationship(back_populates="room")


def room_sort_key(room: Room) -> tuple:
    """Numeric room numbers first in numeric order, anything else after, alphabetically."""
    number = (room.room_number or "").strip()
    if number.isdigit():
        return (0, int(number), number)
    return (1, 0, number)
