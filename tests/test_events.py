import threading

import pytest

from rosgraph_zenoh.events import (
    DataCallbackManager,
    EventsManager,
    EventStatus,
    EventType,
    RmwEventType,
    zenoh_event_from_rmw_event,
)
from rosgraph_zenoh.guard_condition import WaitSetData


@pytest.mark.parametrize(
    "rmw_event, expected",
    [
        (RmwEventType.REQUESTED_QOS_INCOMPATIBLE, EventType.REQUESTED_QOS_INCOMPATIBLE),
        (RmwEventType.OFFERED_QOS_INCOMPATIBLE, EventType.OFFERED_QOS_INCOMPATIBLE),
        (RmwEventType.MESSAGE_LOST, EventType.MESSAGE_LOST),
        (RmwEventType.SUBSCRIPTION_MATCHED, EventType.SUBSCRIPTION_MATCHED),
        (RmwEventType.PUBLICATION_MATCHED, EventType.PUBLICATION_MATCHED),
        (RmwEventType.SUBSCRIPTION_INCOMPATIBLE_TYPE, EventType.SUBSCRIPTION_INCOMPATIBLE_TYPE),
        (RmwEventType.PUBLISHER_INCOMPATIBLE_TYPE, EventType.PUBLISHER_INCOMPATIBLE_TYPE),
        (RmwEventType.LIVELINESS_CHANGED, EventType.INVALID),
        (RmwEventType.OFFERED_DEADLINE_MISSED, EventType.INVALID),
        (RmwEventType.INVALID, EventType.INVALID),
    ],
)
def test_event_mapping(rmw_event, expected):
    assert zenoh_event_from_rmw_event(rmw_event) is expected


def test_unknown_rmw_event_number_maps_to_invalid():
    assert zenoh_event_from_rmw_event(999) is EventType.INVALID


def test_data_callback_counts_unread_until_set():
    manager = DataCallbackManager()
    manager.trigger_callback()
    manager.trigger_callback()
    calls = []
    manager.set_callback(lambda data, count: calls.append((data, count)), "ud")
    assert calls == [("ud", 2)]
    manager.trigger_callback()
    assert calls == [("ud", 2), ("ud", 1)]


def test_data_callback_cleared_counts_again():
    manager = DataCallbackManager()
    calls = []
    manager.set_callback(lambda data, count: calls.append(count), None)
    manager.set_callback(None)
    manager.trigger_callback()
    assert calls == []
    manager.set_callback(lambda data, count: calls.append(count), None)
    assert calls == [1]


def test_update_and_take_status():
    events = EventsManager()
    events.update_event_status(EventType.SUBSCRIPTION_MATCHED, 3)
    events.update_event_status(EventType.SUBSCRIPTION_MATCHED, -1)
    status = events.take_event_status(EventType.SUBSCRIPTION_MATCHED)
    assert status.total_count == 3
    assert status.total_count_change == 3
    assert status.current_count == 2
    assert status.current_count_change == 2
    assert status.changed is True
    again = events.take_event_status(EventType.SUBSCRIPTION_MATCHED)
    assert again == EventStatus(total_count=3, current_count=2)


def test_statuses_are_independent():
    events = EventsManager()
    events.update_event_status(EventType.PUBLICATION_MATCHED, 1)
    assert events.take_event_status(EventType.SUBSCRIPTION_MATCHED) == EventStatus()


def test_event_callback_receives_pending_then_live():
    events = EventsManager()
    events.update_event_status(EventType.MESSAGE_LOST, 1)
    events.update_event_status(EventType.MESSAGE_LOST, 1)
    calls = []
    events.event_set_callback(
        EventType.MESSAGE_LOST, lambda data, count: calls.append((data, count)), "ud"
    )
    assert calls == [("ud", 2)]
    events.update_event_status(EventType.MESSAGE_LOST, 1)
    assert calls == [("ud", 2), ("ud", 1)]


def test_attach_and_detach_wait_set():
    events = EventsManager()
    data = WaitSetData()
    event = EventType.PUBLICATION_MATCHED
    assert events.queue_has_data_and_attach_condition_if_not(event, data) is False
    events.update_event_status(event, 1)
    assert data.triggered is True
    assert events.queue_has_data_and_attach_condition_if_not(event, WaitSetData()) is True
    assert events.detach_condition_and_event_queue_is_empty(event) is False
    events.take_event_status(event)
    assert events.detach_condition_and_event_queue_is_empty(event) is True


def test_detached_wait_set_not_notified():
    events = EventsManager()
    data = WaitSetData()
    event = EventType.MESSAGE_LOST
    events.queue_has_data_and_attach_condition_if_not(event, data)
    events.detach_condition_and_event_queue_is_empty(event)
    events.update_event_status(event, 1)
    assert data.triggered is False


def test_update_wakes_waiting_thread():
    events = EventsManager()
    data = WaitSetData()
    event = EventType.SUBSCRIPTION_MATCHED
    assert events.queue_has_data_and_attach_condition_if_not(event, data) is False
    results = []
    waiter = threading.Thread(target=lambda: results.append(data.wait(5)))
    waiter.start()
    events.update_event_status(event, 1)
    waiter.join(5)
    assert results == [True]


@pytest.mark.parametrize("bad_id", [len(EventType), 100, -1])
def test_invalid_event_id_raises(bad_id):
    events = EventsManager()
    with pytest.raises(ValueError):
        events.take_event_status(bad_id)
    with pytest.raises(ValueError):
        events.update_event_status(bad_id, 1)
    with pytest.raises(ValueError):
        events.event_set_callback(bad_id, None, None)
    with pytest.raises(ValueError):
        events.queue_has_data_and_attach_condition_if_not(bad_id, WaitSetData())
    with pytest.raises(ValueError):
        events.detach_condition_and_event_queue_is_empty(bad_id)