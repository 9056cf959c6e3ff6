from fastapi.testclient import TestClient

from guesthouse.config import settings
from guesthouse.main import app
from guesthouse.services.events import ENTITIES, bus


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_debug_change_logging_does_not_pile_up_across_restarts(monkeypatch):
    monkeypatch.setattr(settings, "DEBUG", True)
    before = {entity: bus.subscriber_count(entity) for entity in ENTITIES}

    for _ in range(3):
        with TestClient(app):
            assert all(bus.subscriber_count(e) == before[e] + 1 for e in ENTITIES)

    assert {entity: bus.subscriber_count(entity) for entity in ENTITIES} == before
