import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from cronbeat.backend import SchedulerBackend
from cronbeat.beat import Beat
from cronbeat.errors import BrokerConnectionError, BrokerError, NotConnectedError
from cronbeat.schedule import DeltaSchedule, Schedule


class MockBroker:
    def __init__(self, send_failures=None, reconnect_failures=None):
        self.sent = []
        self.send_failures = list(send_failures or [])
        self.reconnect_failures = list(reconnect_failures or [])
        self.reconnect_calls = 0

    async def send(self, message, queue):
        if self.send_failures:
            raise self.send_failures.pop(0)
        self.sent.append((message, queue, datetime.now(timezone.utc)))

    async def reconnect(self, timeout):
        self.reconnect_calls += 1
        if self.reconnect_failures:
            raise self.reconnect_failures.pop(0)


def factory(task_name):
    return lambda: {"task": task_name}


def make_beat(broker, **kwargs):
    kwargs.setdefault("broker_connection_retry_delay", 0)
    return Beat("dummy_beat", broker, **kwargs)


async def run_for(beat, seconds):
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(beat.start(), timeout=seconds)


def test_route_first_matching_rule():
    beat = make_beat(
        MockBroker(),
        task_routes=[("dummy_task2", "dummy_queue2"), ("dummy_*", "dummy_queue")],
    )
    assert beat.route("dummy_task2") == "dummy_queue2"
    assert beat.route("dummy_task") == "dummy_queue"
    assert beat.route("other") is None


def test_schedule_task_uses_default_queue_and_explicit_queue():
    beat = make_beat(MockBroker(), default_queue="fallback")
    beat.schedule_task("a", factory("a"), DeltaSchedule(1))
    beat.schedule_task("b", factory("b"), DeltaSchedule(1), queue="q", name="named")
    by_name = {t.name: t.queue for t in beat.scheduler.scheduled_tasks}
    assert by_name == {"a": "fallback", "named": "q"}


@pytest.mark.asyncio
async def test_task_with_delta_schedule():
    broker = MockBroker()
    beat = make_beat(broker, task_routes=[("dummy_*", "dummy_queue")])
    beat.schedule_task("dummy_task", factory("dummy_task"), DeltaSchedule(timedelta(milliseconds=100)))

    start_time = datetime.now(timezone.utc)
    await run_for(beat, 0.25)

    tasks = sorted(broker.sent, key=lambda item: item[2])
    assert len(tasks) == 3
    assert all(queue == "dummy_queue" for _, queue, _ in tasks)
    assert tasks[0][2] - start_time < timedelta(milliseconds=50)
    assert tasks[1][2] - start_time < timedelta(milliseconds=150)


@pytest.mark.asyncio
async def test_scheduling_two_tasks():
    broker = MockBroker()
    beat = make_beat(
        broker,
        task_routes=[("dummy_task2", "dummy_queue2"), ("dummy_*", "dummy_queue")],
    )
    beat.schedule_task("dummy_task", factory("dummy_task"), DeltaSchedule(timedelta(milliseconds=300)))
    beat.schedule_task("dummy_task2", factory("dummy_task2"), DeltaSchedule(timedelta(milliseconds=215)))

    await run_for(beat, 1.0)

    task1 = [item for item in broker.sent if item[0]["task"] == "dummy_task"]
    task2 = [item for item in broker.sent if item[0]["task"] == "dummy_task2"]
    assert len(task1) == 4
    assert len(task2) == 5
    assert {queue for _, queue, _ in task1} == {"dummy_queue"}
    assert {queue for _, queue, _ in task2} == {"dummy_queue2"}


class TenMillisSchedule(Schedule):
    def next_call_at(self, last_run_at):
        return datetime.now(timezone.utc) + timedelta(milliseconds=10)


@pytest.mark.asyncio
async def test_task_with_delayed_first_run():
    broker = MockBroker()
    beat = make_beat(broker, task_routes=[("*", "dummy_queue")])
    beat.schedule_task("dummy_task", factory("dummy_task"), TenMillisSchedule())

    await run_for(beat, 0.05)

    assert len(broker.sent) > 0
    assert broker.sent[0][1] == "dummy_queue"


class CountingBackend(SchedulerBackend):
    def __init__(self):
        self.num_sync_calls = 0

    def should_sync(self):
        return True

    def sync(self, scheduled_tasks):
        self.num_sync_calls += 1


@pytest.mark.asyncio
async def test_beat_max_sleep_duration():
    backend = CountingBackend()
    beat = make_beat(
        MockBroker(),
        scheduler_backend=backend,
        max_sleep_duration=timedelta(milliseconds=1),
    )

    await run_for(beat, 0.05)

    assert backend.num_sync_calls >= 2


@pytest.mark.asyncio
async def test_reconnects_after_connection_error():
    broker = MockBroker(send_failures=[BrokerConnectionError("lost")])
    beat = make_beat(broker)
    beat.schedule_task("dummy_task", factory("dummy_task"), DeltaSchedule(timedelta(milliseconds=10)))

    await run_for(beat, 0.05)

    assert broker.reconnect_calls == 1
    assert len(broker.sent) >= 1


@pytest.mark.asyncio
async def test_reconnect_exhausted_raises_not_connected():
    broker = MockBroker(
        send_failures=[BrokerConnectionError("lost")],
        reconnect_failures=[BrokerConnectionError("down"), BrokerConnectionError("down")],
    )
    beat = make_beat(broker, broker_connection_max_retries=2)
    beat.schedule_task("dummy_task", factory("dummy_task"), DeltaSchedule(1))

    with pytest.raises(NotConnectedError):
        await asyncio.wait_for(beat.start(), timeout=1)
    assert broker.reconnect_calls == 2


@pytest.mark.asyncio
async def test_non_connection_error_is_raised():
    broker = MockBroker(send_failures=[BrokerError("bad message")])
    beat = make_beat(broker)
    beat.schedule_task("dummy_task", factory("dummy_task"), DeltaSchedule(1))

    with pytest.raises(BrokerError, match="bad message"):
        await asyncio.wait_for(beat.start(), timeout=1)
    assert broker.reconnect_calls == 0


@pytest.mark.asyncio
async def test_connection_error_raised_when_retry_disabled():
    broker = MockBroker(send_failures=[BrokerConnectionError("lost")])
    beat = make_beat(broker, broker_connection_retry=False)
    beat.schedule_task("dummy_task", factory("dummy_task"), DeltaSchedule(1))

    with pytest.raises(BrokerConnectionError):
        await asyncio.wait_for(beat.start(), timeout=1)
    assert broker.reconnect_calls == 0