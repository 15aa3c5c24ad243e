"""Tests for the periodic refresh job."""

import asyncio

from avbindings.scheduler import RefreshJob
from tests.conftest import run_async


def test_job_ticks_until_cancelled():
    async def do_test():
        ticks = []

        async def refresh():
            ticks.append(len(ticks))

        job = RefreshJob("test", refresh, interval=0.01)
        job.start()
        assert job.is_running

        await asyncio.sleep(0.1)
        await job.cancel()
        assert not job.is_running

        count = len(ticks)
        assert count >= 2
        await asyncio.sleep(0.05)
        assert len(ticks) == count

    run_async(do_test())


def test_failing_tick_does_not_stop_job():
    async def do_test():
        calls = []

        async def refresh():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")

        job = RefreshJob("failing", refresh, interval=0.01)
        job.start()
        await asyncio.sleep(0.1)
        await job.cancel()

        assert len(calls) >= 2

    run_async(do_test())


def test_initial_delay():
    async def do_test():
        calls = []

        async def refresh():
            calls.append(1)

        job = RefreshJob("delayed", refresh, interval=10, initial_delay=0.2)
        job.start()
        await asyncio.sleep(0.05)
        assert calls == []
        await job.cancel()

    run_async(do_test())


def test_start_twice_keeps_one_task():
    async def do_test():
        calls = []

        async def refresh():
            calls.append(1)

        job = RefreshJob("once", refresh, interval=10)
        job.start()
        job.start()
        await asyncio.sleep(0.05)
        await job.cancel()

        assert calls == [1]

    run_async(do_test())


def test_cancel_without_start():
    async def refresh():
        pass

    run_async(RefreshJob("idle", refresh, interval=1).cancel())
