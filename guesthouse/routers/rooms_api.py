from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db, with_retry
from ..models import Guest, Room, RoomStatus, RoomType, room_sort_key
from ..services.occupancy import detach_room

router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])

# ==== Schemas ====

class RoomOut(BaseModel):
    id: int
    room_number: str
    room_type: RoomType
    status: RoomStatus
    price: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        from_attributes = True

class RoomCreateIn(BaseModel):
    room_number: str = Field(min_length=1, max_length=20)
    room_type: RoomType
    status: RoomStatus = Field(default=RoomStatus.AVAILABLE)
    price: float = Field(default=0, ge=0)

class RoomUpdateIn(BaseModel):
    room_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    room_type: Optional[RoomType] = None
    status: Optional[RoomStatus] = None
    price: Optional[float] = Field(default=None, ge=0)

# ==== Helpers ====

def get_room_or_404(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return room

def _ensure_unique_number(db: Session, room_number: str, room_id: int | None = None):
    q = db.query(Room.id).filter(Room.room_number == room_number)
    if room_id is not None:
        q = q.filter(Room.id != room_id)
    if q.first():
        raise HTTPException(status_code=409, detail=f"Room {room_number} already exists")

# ==== Endpoints ====

@router.get("", response_model=List[RoomOut])
def api_rooms(db: Session = Depends(get_db)):
    rooms = with_retry(lambda: db.query(Room).all(), db)
    return sorted(rooms, key=room_sort_key)

@router.get("/available", response_model=List[RoomOut])
def api_available_rooms(db: Session = Depends(get_db)):
    rooms = with_retry(lambda: db.query(Room).filter(Room.status == RoomStatus.AVAILABLE.value).all(), db)
    return sorted(rooms, key=room_sort_key)

@router.get("/{room_id}", response_model=RoomOut)
def api_room(room_id: int, db: Session = Depends(get_db)):
    return get_room_or_404(db, room_id)

@router.post("", response_model=RoomOut, status_code=201)
def api_create_room(payload: RoomCreateIn, db: Session = Depends(get_db)):
    number = payload.room_number.strip()
    if not number:
        raise HTTPException(status_code=400, detail="room_number is required")
    _ensure_unique_number(db, number)
    room = Room(
        room_number=number,
        room_type=RoomType(payload.room_type).value,
        status=RoomStatus(payload.status).value,
        price=payload.price,
    )
    db.add(room)
    db.commit()
    db.refresh(room)
    return room

@router.patch("/{room_id}", response_model=RoomOut)
def api_update_room(room_id: int, payload: RoomUpdateIn, db: Session = Depends(get_db)):
    room = get_room_or_404(db, room_id)
    if payload.room_number is not None:
        number = payload.room_number.strip()
        if not number:
            raise HTTPException(status_code=400, detail="room_number is required")
        _ensure_unique_number(db, number, room.id)
        if number != room.room_number:
            room.room_number = number
            # keep the cached number on open stays in step
            for g in db.query(Guest).filter(Guest.room_id == room.id, Guest.checked_out_at.is_(None)).all():
                g.room_number = number
    if payload.room_type is not None:
        room.room_type = RoomType(payload.room_type).value
    if payload.status is not None:
        room.status = RoomStatus(payload.status).value
    if payload.price is not None:
        room.price = payload.price
    db.commit()
    db.refresh(room)
    return room

@router.delete("/{room_id}", status_code=204)
def api_delete_room(room_id: int, db: Session = Depends(get_db)):
    room = get_room_or_404(db, room_id)
    for g in db.query(Guest).filter(Guest.room_id == room.id).all():
        detach_room(db, g)
    db.delete(room)
    db.commit()
    return Response(status_code=204)
