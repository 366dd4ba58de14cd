# events.py
# Lifecycle event bus.
#
# Delivery is synchronous and in emission order; subscribers are called in
# the order they subscribed. Observers cannot stop a run: a raising
# observer is logged and the remaining observers still receive the event.

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class Event(str, Enum):
    TASK_START = "taskStart"
    PLAN_CREATED = "planCreated"
    STEP_START = "stepStart"
    STEP_COMPLETE = "stepComplete"
    STEP_FAILED = "stepFailed"
    TASK_COMPLETE = "taskComplete"
    TASK_FAILED = "taskFailed"


Observer = Callable[[Event, dict[str, Any]], None]


class EventBus:
    def __init__(self) -> None:
        # (filter, callback); filter None means every event.
        self._subscribers: list[tuple[Event | None, Observer]] = []

    def subscribe(self, event: Event | None, callback: Observer) -> Callable[[], None]:
        """Register callback for one event (or all, with None). Returns an unsubscribe function."""
        entry = (Event(event) if event is not None else None, callback)
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    def unsubscribe(self, event: Event | None, callback: Observer) -> None:
        key = Event(event) if event is not None else None
        self._subscribers = [
            (flt, cb) for flt, cb in self._subscribers if not (flt == key and cb == callback)
        ]

    def emit(self, event: Event, **payload: Any) -> None:
        event = Event(event)
        for flt, callback in list(self._subscribers):
            if flt is not None and flt is not event:
                continue
            try:
                callback(event, payload)
            except Exception:
                logger.exception("Observer %r failed handling %s", callback, event.value)

    def __len__(self) -> int:
        return len(self._subscribers)
