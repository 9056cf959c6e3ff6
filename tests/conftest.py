import os
import tempfile
from datetime import date, time

# Point the app at a throwaway database before anything imports the engine
_tmpdir = tempfile.mkdtemp(prefix="guesthouse-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmpdir, 'test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_PASSWORD"] = "letmein"
os.environ["AUTO_CHECKOUT_ON_STARTUP"] = "false"
os.environ["DB_RETRY_BASE_DELAY"] = "0"

import pytest
from fastapi.testclient import TestClient

from guesthouse.db import Base, SessionLocal, engine
from guesthouse.main import app
from guesthouse.models import Guest, Room, RoomStatus, RoomType


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_room(db):
    def _make(number="101", status=RoomStatus.AVAILABLE, room_type=RoomType.AC, price=1500):
        room = Room(room_number=number, room_type=room_type.value, status=status.value, price=price)
        db.add(room)
        db.commit()
        db.refresh(room)
        return room
    return _make


@pytest.fixture
def make_stay(db):
    """An open stay holding ``room`` (which is marked Occupied)."""
    def _make(room=None, check_in=date(2024, 1, 1), check_out=None, check_out_time: time | None = None,
              total=1000, paid=0, name="Asha Rao", phone="9876543210"):
        guest = Guest(
            name=name,
            phone=phone,
            id_proof="Passport: X1234567",
            check_in=check_in,
            check_out=check_out,
            check_out_time=check_out_time,
            total_amount=total,
            paid_amount=paid,
        )
        if room is not None:
            guest.room_id = room.id
            guest.room_number = room.room_number
            room.status = RoomStatus.OCCUPIED.value
        db.add(guest)
        db.commit()
        db.refresh(guest)
        return guest
    return _make
