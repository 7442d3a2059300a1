"""
Unit tests for the domain event bus
"""

import pytest

from qrmenu.core.events import BusinessUpdated, EventBus, RemoteWriteFailed


def test_emit_calls_sync_handlers():
    bus = EventBus()
    received = []
    bus.subscribe("BusinessUpdated", received.append)

    event = BusinessUpdated(slug="mikail-cafe", fields=["name"])
    bus.emit(event)

    assert received == [event]


def test_handler_error_does_not_stop_others():
    """Test one failing handler does not prevent delivery to the rest"""
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe("BusinessUpdated", broken)
    bus.subscribe("BusinessUpdated", received.append)

    bus.emit(BusinessUpdated(slug="mikail-cafe", fields=["name"]))

    assert len(received) == 1


def test_emit_without_loop_drops_async_handler():
    bus = EventBus()
    calls = []

    async def handler(event):
        calls.append(event)

    bus.subscribe("BusinessUpdated", handler)
    bus.emit(BusinessUpdated(slug="mikail-cafe", fields=["name"]))

    assert calls == []


@pytest.mark.asyncio
async def test_publish_awaits_async_handlers():
    bus = EventBus()
    calls = []

    async def handler(event):
        calls.append(event.operation)

    bus.subscribe("RemoteWriteFailed", handler)
    await bus.publish(RemoteWriteFailed(
        slug="mikail-cafe", mutation_id="m", operation="add_tag", error="offline"
    ))

    assert calls == ["add_tag"]


def test_unsubscribe_and_counts():
    bus = EventBus()
    bus.subscribe("BusinessUpdated", print)
    bus.subscribe("TenantLoaded", print)

    assert bus.subscriber_count() == 2
    bus.unsubscribe("BusinessUpdated", print)
    assert bus.subscriber_count("BusinessUpdated") == 0

    bus.clear_subscribers()
    assert bus.subscriber_count() == 0


def test_event_to_dict():
    data = RemoteWriteFailed(
        slug="mikail-cafe", mutation_id="abc", operation="delete_product", error="rejected"
    ).to_dict()

    assert data["event_type"] == "RemoteWriteFailed"
    assert data["operation"] == "delete_product"
    assert "occurred_at" in data
