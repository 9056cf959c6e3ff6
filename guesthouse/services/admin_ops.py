import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from ..models import Guest, Room, RoomStatus
from .events import GUESTS, ROOMS, mark_changed

logger = logging.getLogger(__name__)


class AdminAction(str, Enum):
    CLEAR_GUESTS = "clear_guests"
    CLEAR_ROOMS = "clear_rooms"
    CLEAR_ALL = "clear_all"


SUCCESS_MESSAGES = {
    AdminAction.CLEAR_GUESTS: "Guest data cleared successfully",
    AdminAction.CLEAR_ROOMS: "Room data cleared successfully",
    AdminAction.CLEAR_ALL: "All data cleared successfully",
}

FAILURE_MESSAGES = {
    "delete_guests": "Failed to clear guest data",
    "detach_guests": "Failed to detach guests from rooms",
    "delete_rooms": "Failed to clear room data",
    "release_rooms": "Failed to release occupied rooms",
}


@dataclass
class StepResult:
    operation: str
    success: bool
    error: str | None = None


def _delete_guests(db: Session):
    db.execute(delete(Guest))
    mark_changed(db, GUESTS)


def _detach_guests(db: Session):
    db.execute(update(Guest).values(room_id=None, room_number=None))
    mark_changed(db, GUESTS)


def _release_rooms(db: Session):
    db.execute(
        update(Room)
        .where(Room.status == RoomStatus.OCCUPIED.value)
        .values(status=RoomStatus.AVAILABLE.value)
    )
    mark_changed(db, ROOMS)


def _delete_rooms(db: Session):
    db.execute(delete(Room))
    mark_changed(db, ROOMS)


def _plan(action: AdminAction) -> list[tuple[str, Callable[[Session], None]]]:
    if action == AdminAction.CLEAR_GUESTS:
        return [("delete_guests", _delete_guests), ("release_rooms", _release_rooms)]
    if action == AdminAction.CLEAR_ROOMS:
        return [("detach_guests", _detach_guests), ("delete_rooms", _delete_rooms)]
    return [("delete_guests", _delete_guests), ("delete_rooms", _delete_rooms)]


def perform_admin_action(db: Session, action: AdminAction) -> list[StepResult]:
    """
    Run the bulk deletes for ``action``. Each step commits on its own; a failed
    step is rolled back, reported, and later steps still run.
    """
    results = []
    for name, step in _plan(action):
        try:
            step(db)
            db.commit()
            results.append(StepResult(operation=name, success=True))
        except Exception:
            db.rollback()
            logger.exception("Admin operation %s failed during %s", action.value, name)
            results.append(StepResult(operation=name, success=False, error=FAILURE_MESSAGES[name]))
    return results
