import asyncio

import pytest

from localstore import LocalStorage
from localstore.services.sweeper import ExpirySweeper


def test_sweeper_leaves_only_unexpired_records(make_storage):
    storage = make_storage(sweep_interval=30)

    async def scenario():
        await storage.init()
        for i in range(5):
            await storage.set_item(f"short{i}", i, ttl=10)
        for i in range(3):
            await storage.set_item(f"keep{i}", i)
        await asyncio.sleep(0.2)
        keys = await storage.keys()
        await storage.close()
        return sorted(keys)

    assert asyncio.run(scenario()) == ["keep0", "keep1", "keep2"]


def test_init_without_interval_does_not_start_sweeper(make_storage):
    storage = make_storage()

    async def scenario():
        await storage.init()
        return storage.sweeper_running

    assert asyncio.run(scenario()) is False


def test_reconfiguring_restarts_or_stops_sweeper(make_storage):
    storage = make_storage(sweep_interval=1000)

    async def scenario():
        await storage.init()
        first = storage._sweeper
        await storage.init(sweep_interval=500)
        second = storage._sweeper
        restarted = first is not second and not first.running and second.running
        interval = second.interval_ms
        await storage.init(sweep_interval=None)
        return restarted, interval, storage.sweeper_running

    assert asyncio.run(scenario()) == (True, 500.0, False)


def test_context_manager_stops_sweeper(storage_dir):
    async def scenario():
        async with LocalStorage(directory=storage_dir, sweep_interval=1000) as storage:
            running = storage.sweeper_running
        return running, storage.sweeper_running

    assert asyncio.run(scenario()) == (True, False)


def test_sweep_failures_do_not_stop_the_loop():
    calls = []

    async def flaky_sweep():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("disk went away")
        return 0

    async def scenario():
        sweeper = ExpirySweeper(flaky_sweep, interval_ms=10)
        sweeper.start()
        await asyncio.sleep(0.1)
        running = sweeper.running
        await sweeper.stop()
        return running

    assert asyncio.run(scenario()) is True
    assert len(calls) >= 2


def test_run_once_returns_removed_count():
    async def sweep():
        return 3

    sweeper = ExpirySweeper(sweep, interval_ms=1000)
    assert asyncio.run(sweeper.run_once()) == 3


def test_interval_must_be_positive():
    async def sweep():
        return 0

    with pytest.raises(ValueError):
        ExpirySweeper(sweep, interval_ms=0)


def test_overlapping_sweeps_are_safe(make_storage, clock):
    storage = make_storage()

    async def scenario():
        for i in range(10):
            await storage.set_item(f"k{i}", i, ttl=10)
        clock.advance(20)
        counts = await asyncio.gather(storage.remove_expired_items(), storage.remove_expired_items())
        return sum(counts), await storage.length()

    total, remaining = asyncio.run(scenario())
    assert total == 10
    assert remaining == 0
