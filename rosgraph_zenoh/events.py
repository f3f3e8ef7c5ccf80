"""QoS event bookkeeping and user callbacks for new data."""

from __future__ import annotations

import dataclasses
import enum
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .guard_condition import WaitSetData

EventCallback = Callable[[Any, int], None]


class RmwEventType(enum.IntEnum):
    """Event types as requested by the client library."""

    LIVELINESS_CHANGED = 0
    REQUESTED_DEADLINE_MISSED = 1
    REQUESTED_QOS_INCOMPATIBLE = 2
    MESSAGE_LOST = 3
    SUBSCRIPTION_INCOMPATIBLE_TYPE = 4
    SUBSCRIPTION_MATCHED = 5
    LIVELINESS_LOST = 6
    OFFERED_DEADLINE_MISSED = 7
    OFFERED_QOS_INCOMPATIBLE = 8
    PUBLISHER_INCOMPATIBLE_TYPE = 9
    PUBLICATION_MATCHED = 10
    INVALID = 11


class EventType(enum.IntEnum):
    """Event types supported by this middleware."""

    INVALID = 0
    # subscription events
    REQUESTED_QOS_INCOMPATIBLE = 1
    MESSAGE_LOST = 2
    SUBSCRIPTION_INCOMPATIBLE_TYPE = 3
    SUBSCRIPTION_MATCHED = 4
    # publisher events
    OFFERED_QOS_INCOMPATIBLE = 5
    PUBLISHER_INCOMPATIBLE_TYPE = 6
    PUBLICATION_MATCHED = 7


_EVENT_MAP: Dict[RmwEventType, EventType] = {
    RmwEventType.REQUESTED_QOS_INCOMPATIBLE: EventType.REQUESTED_QOS_INCOMPATIBLE,
    RmwEventType.OFFERED_QOS_INCOMPATIBLE: EventType.OFFERED_QOS_INCOMPATIBLE,
    RmwEventType.MESSAGE_LOST: EventType.MESSAGE_LOST,
    RmwEventType.SUBSCRIPTION_MATCHED: EventType.SUBSCRIPTION_MATCHED,
    RmwEventType.PUBLICATION_MATCHED: EventType.PUBLICATION_MATCHED,
    RmwEventType.SUBSCRIPTION_INCOMPATIBLE_TYPE: EventType.SUBSCRIPTION_INCOMPATIBLE_TYPE,
    RmwEventType.PUBLISHER_INCOMPATIBLE_TYPE: EventType.PUBLISHER_INCOMPATIBLE_TYPE,
}


def zenoh_event_from_rmw_event(rmw_event_type: int) -> EventType:
    """Map a client-library event type to a supported one, or INVALID."""
    try:
        return _EVENT_MAP.get(RmwEventType(rmw_event_type), EventType.INVALID)
    except ValueError:
        return EventType.INVALID


def _checked(event_id: int) -> EventType:
    try:
        return EventType(event_id)
    except ValueError:
        raise ValueError(
            f"Event type [{event_id}] is not supported; report this bug."
        ) from None


@dataclass
class EventStatus:
    """Counters of an event status and whether it changed since the last take."""

    total_count: int = 0
    total_count_change: int = 0
    current_count: int = 0
    current_count_change: int = 0
    data: str = ""
    changed: bool = False


class DataCallbackManager:
    """Calls a user callback when new data arrives, buffering counts until one is set."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._callback: Optional[EventCallback] = None
        self._user_data: Any = None
        self._unread_count = 0

    def set_callback(self, callback: Optional[EventCallback], user_data: Any = None) -> None:
        """Set or clear the callback; arrivals before it was set are reported at once."""
        with self._lock:
            if callback is not None:
                if self._unread_count:
                    callback(user_data, self._unread_count)
                    self._unread_count = 0
                self._user_data = user_data
                self._callback = callback
            else:
                self._user_data = None
                self._callback = None

    def trigger_callback(self) -> None:
        """Report one arrival to the callback, or count it if none is set."""
        with self._lock:
            if self._callback is not None:
                self._callback(self._user_data, 1)
            else:
                self._unread_count += 1


class EventsManager:
    """Tracks QoS event statuses, their callbacks and the wait sets waiting on them."""

    def __init__(self) -> None:
        self._event_lock = threading.RLock()
        self._condition_lock = threading.RLock()
        self._wait_set_data: Dict[EventType, Optional[WaitSetData]] = {
            kind: None for kind in EventType
        }
        self._callbacks: Dict[EventType, Optional[EventCallback]] = {
            kind: None for kind in EventType
        }
        self._user_data: Dict[EventType, Any] = {kind: None for kind in EventType}
        self._unread_counts: Dict[EventType, int] = {kind: 0 for kind in EventType}
        self._statuses: List[EventStatus] = [EventStatus() for _ in EventType]

    def event_set_callback(
        self, event_id: int, callback: Optional[EventCallback], user_data: Any = None
    ) -> None:
        """Set the callback for an event; pending occurrences are reported at once."""
        event = _checked(event_id)
        with self._event_lock:
            self._callbacks[event] = callback
            self._user_data[event] = user_data
            if callback is not None and self._unread_counts[event]:
                callback(user_data, self._unread_counts[event])
                self._unread_counts[event] = 0

    def take_event_status(self, event_id: int) -> EventStatus:
        """Return a copy of the status and reset its change counters."""
        event = _checked(event_id)
        with self._event_lock:
            status = self._statuses[event]
            taken = dataclasses.replace(status)
            status.current_count_change = 0
            status.total_count_change = 0
            status.changed = False
            return taken

    def update_event_status(self, event_id: int, current_count_change: int) -> None:
        """Apply a change to the current count, then fire the callback and wake waiters."""
        event = _checked(event_id)
        with self._event_lock:
            status = self._statuses[event]
            increase = max(0, current_count_change)
            status.total_count += increase
            status.total_count_change += increase
            status.current_count += current_count_change
            status.current_count_change += current_count_change
            status.changed = True
        self._trigger_event_callback(event)
        self._notify_event(event)

    def queue_has_data_and_attach_condition_if_not(
        self, event_id: int, wait_set_data: WaitSetData
    ) -> bool:
        """Return True if the status changed; otherwise attach ``wait_set_data``."""
        event = _checked(event_id)
        with self._condition_lock:
            if self._statuses[event].changed:
                return True
            self._wait_set_data[event] = wait_set_data
            return False

    def detach_condition_and_event_queue_is_empty(self, event_id: int) -> bool:
        """Detach the wait set and return True when the status has not changed."""
        event = _checked(event_id)
        with self._condition_lock:
            self._wait_set_data[event] = None
            return not self._statuses[event].changed

    def _trigger_event_callback(self, event: EventType) -> None:
        with self._event_lock:
            callback = self._callbacks[event]
            if callback is not None:
                callback(self._user_data[event], 1)
            else:
                self._unread_counts[event] += 1

    def _notify_event(self, event: EventType) -> None:
        with self._condition_lock:
            wait_set_data = self._wait_set_data[event]
            if wait_set_data is not None:
                wait_set_data.notify()