import pytest
from enum import Enum, auto
from engine.core.events import EventBus, Event

class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()

def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT, data="test")

    assert len(received) == 1
    assert received[0].type == MockEvent.TEST_EVENT
    assert received[0].data["data"] == "test"
    assert received[0]["data"] == "test"
    assert received[0].get("missing", 3) == 3

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 0

def test_event_priority(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("low"), priority=1)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("high"), priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("normal"), priority=5)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("normal2"), priority=5)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["high", "normal", "normal2", "low"]

def test_event_consumption(event_bus):
    received = []

    def consumer(event):
        received.append("consumer")
        event.consume()

    def later_handler(event):
        received.append("later")

    event_bus.subscribe(MockEvent.TEST_EVENT, consumer, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, later_handler, priority=5)

    event = event_bus.publish(MockEvent.TEST_EVENT)

    assert received == ["consumer"]
    assert event.consumed

def test_one_shot_handler(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, one_shot=True)

    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1

def test_publish_inside_handler_is_queued(event_bus):
    order = []

    def outer(event):
        event_bus.publish(MockEvent.OTHER_EVENT)
        order.append("outer done")

    event_bus.subscribe(MockEvent.TEST_EVENT, outer)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: order.append("other"))

    event_bus.publish(MockEvent.TEST_EVENT)

    # Nested event runs after the outer handler finished
    assert order == ["outer done", "other"]

def test_handler_error_does_not_reach_publisher(event_bus):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(MockEvent.TEST_EVENT, broken, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1

def test_clear(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append)
    event_bus.subscribe(MockEvent.OTHER_EVENT, received.append)

    event_bus.clear(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.OTHER_EVENT)
    assert [e.type for e in received] == [MockEvent.OTHER_EVENT]

    event_bus.clear()
    event_bus.publish(MockEvent.OTHER_EVENT)
    assert len(received) == 1

def test_event_defaults():
    event = Event(type=MockEvent.TEST_EVENT)
    assert event.data == {}
    assert not event.consumed
