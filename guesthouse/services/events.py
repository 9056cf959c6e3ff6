"""
Change notifications for the rooms, guests and expenses collections.

Views register a callback per entity with ``bus.subscribe`` and drop it with
``Subscription.unsubscribe()`` when they go away. Events are published only after
the database transaction that caused them commits.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

from sqlalchemy import event
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

ROOMS = "rooms"
GUESTS = "guests"
EXPENSES = "expenses"
ENTITIES = (ROOMS, GUESTS, EXPENSES)

# Room status follows bookings, so guest changes also refresh room views
_ALSO_NOTIFY = {GUESTS: (ROOMS,)}

_SESSION_KEY = "changed_entities"


@dataclass(frozen=True)
class ChangeEvent:
    entity: str


Callback = Callable[[ChangeEvent], None]


@dataclass(eq=False)
class Subscription:
    bus: "EventBus"
    entity: str
    callback: Callback
    active: bool = field(default=True)

    def unsubscribe(self):
        if self.active:
            self.bus._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc):
        self.unsubscribe()


class EventBus:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Subscription]] = {}

    def subscribe(self, entity: str, callback: Callback) -> Subscription:
        if entity not in ENTITIES:
            raise ValueError(f"Unknown entity: {entity}")
        sub = Subscription(bus=self, entity=entity, callback=callback)
        with self._lock:
            self._subscribers.setdefault(entity, []).append(sub)
        return sub

    def _remove(self, sub: Subscription):
        with self._lock:
            subs = self._subscribers.get(sub.entity, [])
            if sub in subs:
                subs.remove(sub)

    def subscriber_count(self, entity: str) -> int:
        with self._lock:
            return len(self._subscribers.get(entity, []))

    def publish(self, *entities: str):
        targets: list[str] = []
        for entity in entities:
            for name in (entity, *_ALSO_NOTIFY.get(entity, ())):
                if name not in targets:
                    targets.append(name)
        for name in targets:
            with self._lock:
                subs = list(self._subscribers.get(name, []))
            evt = ChangeEvent(entity=name)
            for sub in subs:
                try:
                    sub.callback(evt)
                except Exception:
                    logger.exception("Subscriber for %s failed", name)


bus = EventBus()


def mark_changed(session: Session, *entities: str):
    """Record entities touched by bulk statements, which bypass flush tracking."""
    session.info.setdefault(_SESSION_KEY, set()).update(entities)


@event.listens_for(Session, "after_flush")
def _collect_flushed(session: Session, flush_context):
    touched = set()
    for obj in list(session.new) + list(session.dirty) + list(session.deleted):
        table = getattr(obj, "__tablename__", None)
        if table in ENTITIES:
            touched.add(table)
    if touched:
        mark_changed(session, *touched)


@event.listens_for(Session, "after_commit")
def _publish_committed(session: Session):
    changed = session.info.pop(_SESSION_KEY, None)
    if changed:
        bus.publish(*sorted(changed))


@event.listens_for(Session, "after_rollback")
def _discard_rolled_back(session: Session):
    session.info.pop(_SESSION_KEY, None)
