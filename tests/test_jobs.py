import asyncio

import pytest

from smm_broker.jobs import PeriodicJob


@pytest.mark.asyncio
async def test_job_runs_immediately_and_repeats():
    calls = []

    async def work():
        calls.append(len(calls))

    job = PeriodicJob("counter", 0.01, work)
    job.start()
    await asyncio.sleep(0.05)
    await job.stop()

    assert len(calls) >= 2
    assert job.running is False


@pytest.mark.asyncio
async def test_job_can_wait_for_first_interval():
    calls = []

    async def work():
        calls.append(1)

    job = PeriodicJob("lazy", 10, work, run_immediately=False)
    job.start()
    await asyncio.sleep(0.01)
    await job.stop()

    assert calls == []


@pytest.mark.asyncio
async def test_failing_run_is_logged_and_loop_continues(caplog):
    attempts = []

    async def flaky():
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("boom")

    job = PeriodicJob("flaky", 0.01, flaky)
    job.start()
    await asyncio.sleep(0.05)
    await job.stop()

    assert len(attempts) >= 2
    assert job.failures == 1
    assert "Job flaky failed" in caplog.text


@pytest.mark.asyncio
async def test_stop_waits_for_the_current_run():
    finished = []

    async def slow():
        await asyncio.sleep(0.05)
        finished.append(1)

    job = PeriodicJob("slow", 60, slow)
    job.start()
    await asyncio.sleep(0.01)
    await job.stop()

    assert finished == [1]


def test_interval_must_be_positive():
    async def work():
        return None

    with pytest.raises(ValueError):
        PeriodicJob("bad", 0, work)
