import pytest
from alembic import command
from alembic.config import Config
from pathlib import Path
from sqlalchemy import create_engine, event, inspect
from sqlalchemy.exc import OperationalError

from guesthouse.db import engine, with_retry
from guesthouse.models import Room
from guesthouse.routers import expenses_api


def _transient():
    return OperationalError("SELECT 1", {}, Exception("database is locked"))


def test_with_retry_recovers_from_transient_errors():
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise _transient()
        return "ok"

    assert with_retry(flaky, attempts=3, base_delay=0) == "ok"
    assert len(calls) == 3


def test_with_retry_gives_up():
    calls = []

    def down():
        calls.append(1)
        raise _transient()

    with pytest.raises(OperationalError):
        with_retry(down, attempts=2, base_delay=0)
    assert len(calls) == 2


def test_with_retry_does_not_retry_other_errors():
    calls = []

    def bug():
        calls.append(1)
        raise KeyError("x")

    with pytest.raises(KeyError):
        with_retry(bug, attempts=5, base_delay=0)
    assert len(calls) == 1


def test_store_outage_is_a_503(client, monkeypatch):
    def unavailable(fn, *args, **kwargs):
        raise _transient()

    monkeypatch.setattr(expenses_api, "with_retry", unavailable)
    res = client.get("/api/v1/expenses")
    assert res.status_code == 503
    assert res.json() == {"detail": "Database temporarily unavailable"}


def test_migration_creates_schema(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", url)
    cfg.attributes["configure_logger"] = False

    command.upgrade(cfg, "head")

    tables = set(inspect(create_engine(url)).get_table_names())
    assert {"rooms", "guests", "expenses", "settings"} <= tables


@pytest.fixture
def drop_rooms_reads():
    """Once armed via ``failures["left"]``, SELECTs on rooms fail like a dropped connection."""
    failures = {"left": 0, "seen": 0}

    def _break(conn, cursor, statement, parameters, context, executemany):
        if failures["left"] and statement.lstrip().upper().startswith("SELECT") and "FROM rooms" in statement:
            failures["left"] -= 1
            failures["seen"] += 1
            return "SELECT * FROM connection_went_away", ()
        return statement, parameters

    def _as_disconnect(ctx):
        if ctx.statement and "connection_went_away" in ctx.statement:
            ctx.is_disconnect = True

    event.listen(engine, "before_cursor_execute", _break, retval=True)
    event.listen(engine, "handle_error", _as_disconnect)
    try:
        yield failures
    finally:
        event.remove(engine, "before_cursor_execute", _break)
        event.remove(engine, "handle_error", _as_disconnect)


def test_with_retry_recovers_session_after_dropped_connection(db, make_room, drop_rooms_reads):
    make_room("101")
    drop_rooms_reads["left"] = 1

    rooms = with_retry(lambda: db.query(Room).all(), db, attempts=3, base_delay=0)

    assert [r.room_number for r in rooms] == ["101"]
    assert drop_rooms_reads["seen"] == 1


def test_dropped_connection_on_list_recovers(client, make_room, drop_rooms_reads):
    make_room("101")
    drop_rooms_reads["left"] = 1

    res = client.get("/api/v1/rooms")

    assert res.status_code == 200
    assert [r["room_number"] for r in res.json()] == ["101"]
    assert drop_rooms_reads["seen"] == 1


def test_persistent_connection_loss_is_a_503(client, make_room, drop_rooms_reads):
    make_room("101")
    drop_rooms_reads["left"] = 100

    res = client.get("/api/v1/rooms")

    assert res.status_code == 503
    assert res.json() == {"detail": "Database temporarily unavailable"}
    assert drop_rooms_reads["seen"] == 3
