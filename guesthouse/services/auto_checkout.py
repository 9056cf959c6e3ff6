import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from ..db import with_retry
from ..models import Guest, Room, RoomStatus
from .events import GUESTS, ROOMS, mark_changed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpiredBooking:
    """The state of an open booking as seen by the scan; used as the CAS guard."""

    id: int
    room_id: int | None
    check_out: date
    check_out_time: time | None


@dataclass
class ReconciliationResult:
    checked_out: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"checked_out": self.checked_out, "skipped": self.skipped, "failed": self.failed}


def checkout_cutoff(check_out: date | None, check_out_time: time | None = None) -> datetime | None:
    """
    The moment a stay is due to end.
    - no checkout date: None, the stay only ends by manual checkout
    - checkout date without a time: the end of that day (full-day policy)
    - checkout date with a time: that exact time, so 00:00 means the start of the day
    """
    if check_out is None:
        return None
    if check_out_time is None:
        return datetime.combine(check_out, time.max)
    return datetime.combine(check_out, check_out_time)


def cutoff_passed(now: datetime, check_out: date | None, check_out_time: time | None = None) -> bool:
    cutoff = checkout_cutoff(check_out, check_out_time)
    return cutoff is not None and now >= cutoff


def find_expired_bookings(db: Session, now: datetime) -> list[ExpiredBooking]:
    """Open bookings whose checkout cutoff is at or before ``now``."""

    def _load():
        rows = db.execute(
            select(Guest.id, Guest.room_id, Guest.check_out, Guest.check_out_time)
            .where(
                Guest.checked_out_at.is_(None),
                Guest.check_out.is_not(None),
                Guest.check_out <= now.date(),
            )
            .order_by(Guest.check_out.asc(), Guest.id.asc())
        ).all()
        return [ExpiredBooking(id=r.id, room_id=r.room_id, check_out=r.check_out, check_out_time=r.check_out_time) for r in rows]

    return [b for b in with_retry(_load, db) if cutoff_passed(now, b.check_out, b.check_out_time)]


def checkout_expired_booking(db: Session, booking: ExpiredBooking, now: datetime) -> bool:
    """
    Close one stay with a compare-and-swap against the state the scan saw.
    Returns False when another run (or an edit) got there first; nothing is written then.
    """
    guard = [
        Guest.id == booking.id,
        Guest.checked_out_at.is_(None),
        Guest.check_out == booking.check_out,
    ]
    if booking.check_out_time is None:
        guard.append(Guest.check_out_time.is_(None))
    else:
        guard.append(Guest.check_out_time == booking.check_out_time)

    result = db.execute(
        update(Guest)
        .where(*guard)
        .values(checked_out_at=now, room_id=None, room_number=None, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        return False

    changed = [GUESTS]
    if booking.room_id is not None:
        # Only free the room if no other open stay still holds it
        still_held = exists().where(Guest.room_id == booking.room_id, Guest.checked_out_at.is_(None))
        released = db.execute(
            update(Room)
            .where(Room.id == booking.room_id, Room.status == RoomStatus.OCCUPIED.value, ~still_held)
            .values(status=RoomStatus.AVAILABLE.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if released.rowcount:
            changed.append(ROOMS)
    mark_changed(db, *changed)
    db.commit()
    return True


def run_auto_checkout(db: Session, now: datetime | None = None) -> ReconciliationResult:
    """
    Check out every open booking whose cutoff has passed and release its room.
    Each booking is handled in its own transaction: a failure is logged and the
    scan moves on. Running it again is a no-op for bookings already closed.
    """
    now = now or datetime.now()
    result = ReconciliationResult()
    for booking in find_expired_bookings(db, now):
        try:
            if checkout_expired_booking(db, booking, now):
                logger.info("Auto-checked out booking %s (checkout %s %s)", booking.id, booking.check_out, booking.check_out_time or "end of day")
                result.checked_out.append(booking.id)
            else:
                logger.debug("Booking %s already reconciled, skipping", booking.id)
                result.skipped.append(booking.id)
        except Exception:
            db.rollback()
            logger.exception("Auto-checkout failed for booking %s", booking.id)
            result.failed.append(booking.id)
    if result.checked_out or result.failed:
        logger.info(
            "Auto-checkout finished: %d checked out, %d skipped, %d failed",
            len(result.checked_out), len(result.skipped), len(result.failed),
        )
    return result
