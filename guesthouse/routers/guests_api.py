import logging
from datetime import date, datetime, time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db, with_retry
from ..models import Guest, Room, RoomStatus, PaymentMode
from ..services.auto_checkout import run_auto_checkout
from ..services.occupancy import occupy_room, detach_room, check_out_guest, validate_stay_dates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/guests", tags=["guests"])

# ==== Schemas ====

class GuestOut(BaseModel):
    id: int
    name: str
    phone: str
    id_proof: str
    room_id: Optional[int] = None
    room_number: Optional[str] = None
    check_in: date
    check_out: Optional[date] = None
    check_out_time: Optional[time] = None
    checked_out_at: Optional[datetime] = None
    total_amount: float
    paid_amount: float
    pending_amount: float
    is_frequent: bool
    payment_mode: Optional[PaymentMode] = None
    pay_to_whom: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        use_enum_values = True
        from_attributes = True

class GuestCreateIn(BaseModel):
    # "entry" mode books a room without guest details
    entry_mode: bool = False
    name: Optional[str] = None
    phone: Optional[str] = None
    id_proof_type: Optional[str] = None
    id_proof: Optional[str] = None
    room_id: int
    check_in: date = Field(default_factory=date.today)
    check_out: Optional[date] = None
    check_out_time: Optional[time] = None
    total_amount: float = Field(default=0, ge=0)
    paid_amount: float = Field(default=0, ge=0)
    payment_mode: Optional[PaymentMode] = None
    pay_to_whom: Optional[str] = None

class GuestUpdateIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    id_proof: Optional[str] = None
    room_id: Optional[int] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    check_out_time: Optional[time] = None
    total_amount: Optional[float] = Field(default=None, ge=0)
    paid_amount: Optional[float] = Field(default=None, ge=0)
    is_frequent: Optional[bool] = None
    payment_mode: Optional[PaymentMode] = None
    pay_to_whom: Optional[str] = None

class ReconcileOut(BaseModel):
    checked_out: List[int]
    skipped: List[int]
    failed: List[int]

# ==== Helpers ====

def get_guest_or_404(db: Session, guest_id: int) -> Guest:
    guest = db.get(Guest, guest_id)
    if not guest:
        raise HTTPException(status_code=404, detail="Guest not found")
    return guest

def _clean(value: Optional[str]) -> str:
    return (value or "").strip()

def _payment_fields(mode: Optional[PaymentMode], pay_to_whom: Optional[str]) -> tuple[str | None, str | None]:
    if mode is None:
        return None, None
    mode = PaymentMode(mode)
    if mode == PaymentMode.ONLINE:
        return mode.value, _clean(pay_to_whom) or None
    return mode.value, None

def search_guests(guests: list[Guest], query: str) -> list[Guest]:
    term = query.strip().lower()
    if not term:
        return guests
    return [
        g for g in guests
        if term in g.name.lower()
        or term in g.phone
        or term in g.id_proof.lower()
        or term in (g.room_number or "")
    ]

# ==== Endpoints ====

@router.get("", response_model=List[GuestOut])
def api_guests(db: Session = Depends(get_db), q: Optional[str] = None):
    guests = with_retry(lambda: db.query(Guest).order_by(Guest.created_at.desc(), Guest.id.desc()).all(), db)
    if q:
        guests = search_guests(guests, q)
    return guests

@router.get("/pending", response_model=List[GuestOut])
def api_pending_guests(db: Session = Depends(get_db)):
    return with_retry(lambda: db.query(Guest).filter(Guest.pending_amount > 0).order_by(Guest.created_at.desc(), Guest.id.desc()).all(), db)

@router.post("/reconcile", response_model=ReconcileOut)
def api_reconcile(db: Session = Depends(get_db)):
    return run_auto_checkout(db).as_dict()

@router.get("/{guest_id}", response_model=GuestOut)
def api_guest(guest_id: int, db: Session = Depends(get_db)):
    return get_guest_or_404(db, guest_id)

@router.post("", response_model=GuestOut, status_code=201)
def api_create_guest(payload: GuestCreateIn, db: Session = Depends(get_db)):
    room = db.get(Room, payload.room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")

    if payload.entry_mode:
        name = _clean(payload.name) or f"Guest - Room {room.room_number}"
        phone = _clean(payload.phone) or "N/A"
        id_proof = "Entry Mode"
    else:
        name, phone, proof = _clean(payload.name), _clean(payload.phone), _clean(payload.id_proof)
        missing = [f for f, v in (("name", name), ("phone", phone), ("id_proof", proof)) if not v]
        if missing:
            raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")
        proof_type = _clean(payload.id_proof_type)
        id_proof = f"{proof_type}: {proof}" if proof_type else proof

    error = validate_stay_dates(payload.check_in, payload.check_out, payload.check_out_time)
    if error:
        raise HTTPException(status_code=400, detail=error)
    if room.status != RoomStatus.AVAILABLE.value:
        raise HTTPException(status_code=409, detail=f"Room {room.room_number} is not available")

    payment_mode, pay_to_whom = _payment_fields(payload.payment_mode, payload.pay_to_whom)
    guest = Guest(
        name=name,
        phone=phone,
        id_proof=id_proof,
        check_in=payload.check_in,
        check_out=payload.check_out,
        check_out_time=payload.check_out_time,
        total_amount=payload.total_amount,
        paid_amount=payload.paid_amount,
        is_frequent=False,
        payment_mode=payment_mode,
        pay_to_whom=pay_to_whom,
    )
    occupy_room(guest, room)
    db.add(guest)
    db.commit()
    db.refresh(guest)
    logger.info("Guest %s booked into room %s", guest.id, room.room_number)
    return guest

@router.patch("/{guest_id}", response_model=GuestOut)
def api_update_guest(guest_id: int, payload: GuestUpdateIn, db: Session = Depends(get_db)):
    guest = get_guest_or_404(db, guest_id)
    fields = payload.model_fields_set

    for attr in ("name", "phone", "id_proof"):
        if attr in fields:
            value = _clean(getattr(payload, attr))
            if not value:
                raise HTTPException(status_code=400, detail=f"{attr} must not be empty")
            setattr(guest, attr, value)

    check_in = payload.check_in if payload.check_in is not None else guest.check_in
    check_out = payload.check_out if "check_out" in fields else guest.check_out
    if check_out is None and not guest.is_open:
        raise HTTPException(status_code=409, detail="Guest has already checked out")
    check_out_time = payload.check_out_time if "check_out_time" in fields else guest.check_out_time
    error = validate_stay_dates(check_in, check_out, check_out_time)
    if error:
        raise HTTPException(status_code=400, detail=error)
    guest.check_in = check_in
    guest.check_out = check_out
    guest.check_out_time = check_out_time

    if payload.total_amount is not None:
        guest.total_amount = payload.total_amount
    if payload.paid_amount is not None:
        guest.paid_amount = payload.paid_amount
    if payload.is_frequent is not None:
        guest.is_frequent = payload.is_frequent
    if "payment_mode" in fields or "pay_to_whom" in fields:
        mode = payload.payment_mode if "payment_mode" in fields else guest.payment_mode
        guest.payment_mode, guest.pay_to_whom = _payment_fields(mode, payload.pay_to_whom if "pay_to_whom" in fields else guest.pay_to_whom)

    if "room_id" in fields and payload.room_id != guest.room_id:
        if payload.room_id is None:
            detach_room(db, guest)
        else:
            if not guest.is_open:
                raise HTTPException(status_code=409, detail="Guest has already checked out")
            room = db.get(Room, payload.room_id)
            if not room:
                raise HTTPException(status_code=404, detail="Room not found")
            if room.status != RoomStatus.AVAILABLE.value:
                raise HTTPException(status_code=409, detail=f"Room {room.room_number} is not available")
            detach_room(db, guest)
            occupy_room(guest, room)

    db.commit()
    db.refresh(guest)
    return guest

@router.post("/{guest_id}/checkout", response_model=GuestOut)
def api_checkout_guest(guest_id: int, db: Session = Depends(get_db)):
    guest = get_guest_or_404(db, guest_id)
    if not guest.is_open:
        raise HTTPException(status_code=409, detail="Guest has already checked out")
    check_out_guest(db, guest)
    db.commit()
    db.refresh(guest)
    logger.info("Guest %s checked out manually", guest.id)
    return guest

@router.delete("/{guest_id}", status_code=204)
def api_delete_guest(guest_id: int, db: Session = Depends(get_db)):
    guest = get_guest_or_404(db, guest_id)
    if guest.is_open:
        detach_room(db, guest)
    db.delete(guest)
    db.commit()
    return Response(status_code=204)
