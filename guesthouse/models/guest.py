from __future__ import annotations
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from enum import Enum as PyEnum
from sqlalchemy import Integer, String, ForeignKey, Date, Time, Numeric, Boolean, DateTime, event
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base

if TYPE_CHECKING:
    from .room import Room

class PaymentMode(str, PyEnum):
    CASH = "Cash"
    ONLINE = "Online"

def to_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))

class Guest(Base):
    """A guest's stay. A stay is open until ``checked_out_at`` is set."""

    __tablename__ = "guests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    id_proof: Mapped[str] = mapped_column(String(200), nullable=False)
    room_id: Mapped[int | None] = mapped_column(ForeignKey("rooms.id", ondelete="SET NULL"), index=True, nullable=True)
    # Cached so closed stays and listings keep showing the room without a join
    room_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    check_in: Mapped[date] = mapped_column(Date, nullable=False, default=date.today, index=True)
    check_out: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    check_out_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    checked_out_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    pending_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    is_frequent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_mode: Mapped[str | None] = mapped_column(String(20), nullable=True)
    pay_to_whom: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    room: Mapped[Optional[Room]] = relationship(back_populates="guests")

    @property
    def is_open(self) -> bool:
        return self.checked_out_at is None

    @property
    def pending_display(self) -> Decimal:
        return max(to_money(self.pending_amount), Decimal("0.00"))


@event.listens_for(Guest, "before_insert")
@event.listens_for(Guest, "before_update")
def _recompute_pending(mapper, connection, target: Guest):
    target.pending_amount = to_money(target.total_amount) - to_money(target.paid_amount)
