from decimal import Decimal

from guesthouse.models import Room


def _create(client, number, **extra):
    return client.post("/api/v1/rooms", json={"room_number": number, "room_type": "Non-AC", "price": 900, **extra})


def test_create_and_get_room(client):
    res = _create(client, "101")
    assert res.status_code == 201
    room = res.json()
    assert room["room_type"] == "Non-AC"
    assert room["status"] == "Available"
    assert room["price"] == 900.0
    assert client.get(f"/api/v1/rooms/{room['id']}").json()["room_number"] == "101"


def test_duplicate_room_number_conflicts(client):
    _create(client, "101")
    assert _create(client, " 101 ").status_code == 409


def test_rooms_sort_numerically(client):
    for number in ["10", "9", "Annex", "101", "2"]:
        _create(client, number)
    assert [r["room_number"] for r in client.get("/api/v1/rooms").json()] == ["2", "9", "10", "101", "Annex"]


def test_available_rooms_excludes_occupied_and_maintenance(client):
    _create(client, "1")
    _create(client, "2", status="Maintenance")
    _create(client, "3", status="Occupied")
    assert [r["room_number"] for r in client.get("/api/v1/rooms/available").json()] == ["1"]


def test_invalid_room_type_and_price_are_rejected(client):
    assert client.post("/api/v1/rooms", json={"room_number": "5", "room_type": "Deluxe"}).status_code == 422
    assert _create(client, "5", price=-1).status_code == 422


def test_renumbering_updates_open_stays(client):
    room = _create(client, "101").json()
    guest = client.post("/api/v1/guests", json={"entry_mode": True, "room_id": room["id"]}).json()

    res = client.patch(f"/api/v1/rooms/{room['id']}", json={"room_number": "111", "price": 1100})

    assert res.status_code == 200
    assert res.json()["room_number"] == "111"
    assert res.json()["price"] == 1100.0
    assert client.get(f"/api/v1/guests/{guest['id']}").json()["room_number"] == "111"


def test_renumbering_to_existing_number_conflicts(client):
    _create(client, "101")
    second = _create(client, "102").json()
    assert client.patch(f"/api/v1/rooms/{second['id']}", json={"room_number": "101"}).status_code == 409


def test_delete_room_detaches_guests(client):
    room = _create(client, "101").json()
    guest = client.post("/api/v1/guests", json={"entry_mode": True, "room_id": room["id"]}).json()

    assert client.delete(f"/api/v1/rooms/{room['id']}").status_code == 204

    assert client.get(f"/api/v1/rooms/{room['id']}").status_code == 404
    body = client.get(f"/api/v1/guests/{guest['id']}").json()
    assert body["room_id"] is None
    assert body["room_number"] is None


def test_price_is_stored_as_money(client, db):
    room = _create(client, "305", price=1234.5).json()
    assert room["price"] == 1234.5
    assert db.get(Room, room["id"]).price == Decimal("1234.50")
