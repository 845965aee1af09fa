# tests/unit/events/test_bus.py — v1
"""Tests for events/bus.py — task and global subscriptions, delivery isolation."""

from __future__ import annotations

import pytest

from arlo.events.bus import TASK_EVENT_TYPES, EventBus, EventType


class TestEventType:
    def test_task_scoped(self):
        assert EventType.TASK_CREATED.is_task_scoped
        assert EventType.EXECUTION_STEP_FAILED.is_task_scoped
        assert not EventType.GIT_OPERATION.is_task_scoped
        assert EventType.FILE_OPERATION not in TASK_EVENT_TYPES


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_task_subscriber_receives_own_events(self):
        bus = EventBus()
        received = []
        bus.subscribe("t1", received.append)

        await bus.publish("t1", EventType.TASK_LOG_ADDED, {"log": "hello"})
        await bus.publish("t2", EventType.TASK_LOG_ADDED, {"log": "other"})
        await bus.publish("t1", EventType.GIT_OPERATION, {"operation": "push"})

        assert received == [{"log": "hello"}]

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self):
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe("t1", received.append)
        assert bus.subscriber_count("t1") == 1

        unsubscribe()
        unsubscribe()
        await bus.publish("t1", EventType.TASK_UPDATED, {"updates": {}})

        assert received == []
        assert bus.subscriber_count("t1") == 0
        assert not bus.has_subscribers("t1")
        assert bus.listener_count(EventType.TASK_UPDATED, "t1") == 0

    def test_counts_multiple_subscribers(self):
        bus = EventBus()
        first = bus.subscribe("t1", lambda d: None)
        bus.subscribe("t1", lambda d: None)
        assert bus.subscriber_count("t1") == 2
        first()
        assert bus.subscriber_count("t1") == 1

    @pytest.mark.asyncio
    async def test_fan_out_follows_unsubscribe(self):
        bus = EventBus()
        first_seen, second_seen = [], []
        unsubscribe_first = bus.subscribe("t1", first_seen.append)
        unsubscribe_second = bus.subscribe("t1", second_seen.append)

        await bus.publish("t1", EventType.TASK_LOG_ADDED, {"message": "one"})
        assert first_seen == [{"message": "one"}]
        assert second_seen == [{"message": "one"}]

        unsubscribe_first()
        await bus.publish("t1", EventType.TASK_LOG_ADDED, {"message": "two"})
        assert first_seen == [{"message": "one"}]
        assert second_seen == [{"message": "one"}, {"message": "two"}]

        unsubscribe_second()
        assert bus.subscriber_count("t1") == 0
        assert not bus.has_subscribers("t1")


class TestGlobalListeners:
    @pytest.mark.asyncio
    async def test_global_listener_gets_task_id(self):
        bus = EventBus()
        received = []
        bus.on(EventType.TASK_STATUS_CHANGED, received.append)
        await bus.publish("t9", EventType.TASK_STATUS_CHANGED, {"status": "running"})
        assert received == [{"task_id": "t9", "status": "running"}]

    @pytest.mark.asyncio
    async def test_task_listeners_before_global(self):
        bus = EventBus()
        order = []
        bus.on(EventType.TASK_COMPLETED, lambda d: order.append("global"))
        bus.subscribe("t1", lambda d: order.append("task"))
        await bus.publish("t1", EventType.TASK_COMPLETED)
        assert order == ["task", "global"]

    @pytest.mark.asyncio
    async def test_on_for_single_task(self):
        bus = EventBus()
        received = []
        off = bus.on(EventType.GIT_OPERATION, received.append, task_id="t1")
        await bus.publish("t1", EventType.GIT_OPERATION, {"operation": "commit"})
        off()
        await bus.publish("t1", EventType.GIT_OPERATION, {"operation": "push"})
        assert received == [{"operation": "commit"}]


class TestDelivery:
    @pytest.mark.asyncio
    async def test_async_handler_awaited(self):
        bus = EventBus()
        received = []

        async def handler(data):
            received.append(data["log"])

        bus.subscribe("t1", handler)
        await bus.publish("t1", EventType.TASK_LOG_ADDED, {"log": "x"})
        assert received == ["x"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self, caplog):
        bus = EventBus()
        received = []

        def broken(data):
            raise RuntimeError("boom")

        bus.subscribe("t1", broken)
        bus.subscribe("t1", received.append)
        await bus.publish("t1", EventType.TASK_FAILED, {"status": "failed"})

        assert received == [{"status": "failed"}]
        assert "Event handler failed for task:failed" in caplog.text

    @pytest.mark.asyncio
    async def test_handler_may_unsubscribe_during_delivery(self):
        bus = EventBus()
        received = []
        unsubscribe = None

        def once(data):
            received.append(data)
            unsubscribe()

        unsubscribe = bus.subscribe("t1", once)
        await bus.publish("t1", EventType.TASK_UPDATED, {"n": 1})
        await bus.publish("t1", EventType.TASK_UPDATED, {"n": 2})
        assert received == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_publish_does_not_share_data_dict(self):
        bus = EventBus()
        payload = {"status": "running"}
        bus.on(EventType.TASK_STATUS_CHANGED, lambda d: d.update(extra=True))
        await bus.publish("t1", EventType.TASK_STATUS_CHANGED, payload)
        assert payload == {"status": "running"}
