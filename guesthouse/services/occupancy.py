from datetime import date, datetime

from sqlalchemy.orm import Session

from ..models import Guest, Room, RoomStatus


def occupy_room(guest: Guest, room: Room):
    """Attach an open stay to a room and mark the room occupied."""
    guest.room_id = room.id
    guest.room_number = room.room_number
    room.status = RoomStatus.OCCUPIED.value


def release_room(db: Session, room_id: int | None, leaving_guest_id: int | None = None) -> bool:
    """
    Mark a room available again unless another open stay still holds it.
    Returns True when the status changed.
    """
    if room_id is None:
        return False
    room = db.get(Room, room_id)
    if not room or room.status != RoomStatus.OCCUPIED.value:
        return False
    q = db.query(Guest.id).filter(Guest.room_id == room_id, Guest.checked_out_at.is_(None))
    if leaving_guest_id is not None:
        q = q.filter(Guest.id != leaving_guest_id)
    if q.first():
        return False
    room.status = RoomStatus.AVAILABLE.value
    return True


def detach_room(db: Session, guest: Guest):
    old_room_id = guest.room_id
    guest.room_id = None
    guest.room_number = None
    release_room(db, old_room_id, leaving_guest_id=guest.id)


def check_out_guest(db: Session, guest: Guest, now: datetime | None = None):
    """Manual checkout: the stay ends today and its room is freed."""
    now = now or datetime.now()
    guest.check_out = now.date()
    guest.checked_out_at = now
    detach_room(db, guest)


def validate_stay_dates(check_in: date, check_out: date | None, check_out_time) -> str | None:
    if check_out is not None and check_out < check_in:
        return "check_out must not be before check_in"
    if check_out is None and check_out_time is not None:
        return "check_out_time requires a check_out date"
    return None
