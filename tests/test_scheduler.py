"""Tests for the background refresh scheduler."""

import asyncio

import pytest

from conftest import FakeGenerator, make_tip

from petdash.aggregators.dashboard import DashboardAggregator
from petdash.autonomous.scheduler import JOB_ID, RefreshScheduler, SchedulerState
from petdash.config.settings import settings
from petdash.models import RefreshMode


class RecordingAggregator:
    def __init__(self, error: Exception | None = None) -> None:
        self.runs: list[tuple[list, RefreshMode]] = []
        self.error = error

    async def run(self, pets, mode=RefreshMode.INTERACTIVE):
        self.runs.append((list(pets), mode))
        if self.error is not None:
            raise self.error


def test_tick_without_pets_touches_nothing(sink, clock):
    generator = FakeGenerator()
    aggregator = DashboardAggregator(generator, sink=sink, clock=clock)
    scheduler = RefreshScheduler(aggregator, pets=lambda: [])

    assert asyncio.run(scheduler.tick()) is False
    assert generator.calls == []
    assert sink.events == []


def test_tick_skipped_when_session_inactive(pets):
    aggregator = RecordingAggregator()
    scheduler = RefreshScheduler(aggregator, pets=lambda: pets, is_active=lambda: False)

    assert asyncio.run(scheduler.tick()) is False
    assert aggregator.runs == []


def test_tick_runs_background_refresh(pets):
    aggregator = RecordingAggregator()
    scheduler = RefreshScheduler(aggregator, pets=lambda: pets)

    assert asyncio.run(scheduler.tick()) is True
    assert aggregator.runs == [(pets, RefreshMode.BACKGROUND)]


def test_tick_reads_pets_each_time(max_pet, luna_pet):
    current = [[max_pet]]
    aggregator = RecordingAggregator()
    scheduler = RefreshScheduler(aggregator, pets=lambda: current[0])

    asyncio.run(scheduler.tick())
    current[0] = [max_pet, luna_pet]
    asyncio.run(scheduler.tick())

    assert [len(pets) for pets, _ in aggregator.runs] == [1, 2]


def test_tick_survives_refresh_errors(pets):
    aggregator = RecordingAggregator(error=RuntimeError("boom"))
    scheduler = RefreshScheduler(aggregator, pets=lambda: pets)

    assert asyncio.run(scheduler.tick()) is True


def test_background_tick_keeps_content_without_loading(max_pet, sink, clock):
    generator = FakeGenerator(tips={"max": make_tip("max")})
    aggregator = DashboardAggregator(generator, sink=sink, clock=clock)
    asyncio.run(aggregator.run([max_pet]))
    sink.events.clear()

    asyncio.run(RefreshScheduler(aggregator, pets=lambda: [max_pet]).tick())

    assert sink.of("loading") == []
    assert len(sink.of("tips")) == 1


def test_interval_defaults_to_settings(pets):
    scheduler = RefreshScheduler(RecordingAggregator(), pets=lambda: pets)

    assert scheduler.interval_seconds == settings.refresh.interval_seconds
    assert RefreshScheduler(RecordingAggregator(), pets=lambda: pets, interval_seconds=60).interval_seconds == 60


def test_start_and_stop(pets):
    async def scenario():
        scheduler = RefreshScheduler(RecordingAggregator(), pets=lambda: pets)
        before = scheduler.state

        scheduler.start()
        running = scheduler.state
        jobs = [job.id for job in scheduler.scheduler.get_jobs()]

        scheduler.stop()
        return before, running, jobs, scheduler.state

    before, running, jobs, after = asyncio.run(scenario())

    assert before is SchedulerState.IDLE
    assert running is SchedulerState.RUNNING
    assert jobs == [JOB_ID]
    assert after is SchedulerState.IDLE


def test_start_twice_keeps_one_job(pets):
    async def scenario():
        scheduler = RefreshScheduler(RecordingAggregator(), pets=lambda: pets)
        scheduler.start()
        first_token = scheduler._cancelled
        scheduler.start()
        jobs = scheduler.scheduler.get_jobs()
        scheduler.stop()
        return first_token, jobs

    first_token, jobs = asyncio.run(scenario())

    assert len(jobs) == 1
    assert first_token.is_set()


def test_stop_is_idempotent(pets):
    async def scenario():
        scheduler = RefreshScheduler(RecordingAggregator(), pets=lambda: pets)
        scheduler.stop()
        scheduler.start()
        scheduler.stop()
        scheduler.stop()
        return scheduler.state

    assert asyncio.run(scenario()) is SchedulerState.IDLE


def test_tick_after_stop_does_nothing(pets):
    aggregator = RecordingAggregator()

    async def scenario():
        scheduler = RefreshScheduler(aggregator, pets=lambda: pets)
        scheduler.start()
        token = scheduler._cancelled
        scheduler.stop()
        return await scheduler.tick(token)

    assert asyncio.run(scenario()) is False
    assert aggregator.runs == []


def test_cancelled_tick_lets_refresh_finish(pets, clock):
    async def scenario():
        gate = asyncio.Event()
        generator = FakeGenerator(tips={"max": make_tip("max"), "luna": make_tip("luna")}, gate=gate)
        aggregator = DashboardAggregator(generator, clock=clock)
        scheduler = RefreshScheduler(aggregator, pets=lambda: pets)

        tick = asyncio.create_task(scheduler.tick())
        while not aggregator.is_running:
            await asyncio.sleep(0)
        tick.cancel()
        gate.set()
        with pytest.raises(asyncio.CancelledError):
            await tick
        while aggregator.is_running:
            await asyncio.sleep(0.01)
        return aggregator.snapshot

    snapshot = asyncio.run(asyncio.wait_for(scenario(), timeout=5))

    assert [t.pet_id for t in snapshot.tips] == ["max", "luna"]


def test_stop_during_refresh_lets_it_finish(pets, clock):
    async def scenario():
        gate = asyncio.Event()
        generator = FakeGenerator(tips={"max": make_tip("max"), "luna": make_tip("luna")}, gate=gate)
        aggregator = DashboardAggregator(generator, clock=clock)
        scheduler = RefreshScheduler(aggregator, pets=lambda: pets, interval_seconds=1)

        scheduler.start()
        while not aggregator.is_running:
            await asyncio.sleep(0.05)
        scheduler.stop()
        await asyncio.sleep(0)
        gate.set()
        while aggregator.is_running:
            await asyncio.sleep(0.01)
        return aggregator.snapshot, generator.calls, scheduler.state

    snapshot, calls, state = asyncio.run(asyncio.wait_for(scenario(), timeout=10))

    assert len(snapshot.tips) == 2
    assert [c for c in calls if c[0] == "tip"] == [("tip", "max"), ("tip", "luna")]
    assert state is SchedulerState.IDLE
