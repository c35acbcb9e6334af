"""
Tests for SamplingScheduler.

These tests drive the real asyncio loop against a scripted metric source with
very short intervals.
"""

import asyncio
import itertools

import pytest

from throttlewatch.models import Conclusion, ProcessReading
from throttlewatch.monitoring import SamplingScheduler, SchedulerState


def stop_after(count, holder):
    """after_read hook stopping the scheduler in ``holder`` after ``count`` reads."""

    def hook(reads):
        if reads >= count:
            holder["scheduler"].request_stop()

    return hook


class TestSamplingScheduler:
    """Tests for the sampling loop."""

    def test_initial_state(self, test_utils):
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        scheduler = SamplingScheduler(source, test_utils.make_app_config())

        assert scheduler.state is SchedulerState.IDLE
        assert scheduler.report is None
        assert scheduler.tracker.logical_cores == 4

    @pytest.mark.asyncio
    async def test_stop_after_ticks_produces_diagnosis(self, test_utils):
        holder = {}
        source = test_utils.FakeMetricSource(
            [test_utils.make_snapshot(cpu_load_pct=20.0, clock_mhz=3900.0)],
            after_read=stop_after(3, holder),
        )
        scheduler = SamplingScheduler(source, test_utils.make_app_config())
        holder["scheduler"] = scheduler

        report = await scheduler.run()

        assert scheduler.state is SchedulerState.TERMINATED
        assert report.ended_by == "cancelled"
        assert report.state.sample_count == 3
        assert report.state.end_time is not None
        assert report.diagnosis is not None
        assert Conclusion.HEALTHY in report.diagnosis.conclusions

    @pytest.mark.asyncio
    async def test_stop_before_any_tick_gives_no_diagnosis(self, test_utils):
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        scheduler = SamplingScheduler(source, test_utils.make_app_config())
        scheduler.request_stop()

        report = await scheduler.run()

        assert source.reads == 0
        assert report.state.sample_count == 0
        assert report.diagnosis is None
        assert report.ended_by == "cancelled"
        assert scheduler.state is SchedulerState.TERMINATED

    @pytest.mark.asyncio
    async def test_stop_interrupts_the_wait(self, test_utils):
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        scheduler = SamplingScheduler(source, test_utils.make_app_config(interval_seconds=60.0))

        task = asyncio.create_task(scheduler.run())
        for _ in range(200):
            if scheduler.aggregator is not None and scheduler.aggregator.state.sample_count:
                break
            await asyncio.sleep(0.01)
        scheduler.request_stop()
        report = await asyncio.wait_for(task, timeout=5.0)

        assert report.state.sample_count == 1
        assert report.diagnosis is not None

    @pytest.mark.asyncio
    async def test_task_cancellation_still_finalizes(self, test_utils):
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        scheduler = SamplingScheduler(source, test_utils.make_app_config(interval_seconds=60.0))

        task = asyncio.create_task(scheduler.run())
        for _ in range(200):
            if scheduler.aggregator is not None and scheduler.aggregator.state.sample_count:
                break
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert scheduler.state is SchedulerState.TERMINATED
        assert scheduler.report.ended_by == "cancelled"
        assert scheduler.report.state.sample_count == 1
        assert scheduler.report.diagnosis is not None

    @pytest.mark.asyncio
    async def test_finite_duration(self, test_utils):
        ticks = itertools.count(0.0, 25.0)
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        scheduler = SamplingScheduler(
            source,
            test_utils.make_app_config(duration_minutes=1.0),
            clock=lambda: next(ticks),
        )

        report = await scheduler.run()

        # Clock reads: start 0, checks at 25 and 50 tick, 75 ends.
        assert report.ended_by == "duration"
        assert report.state.sample_count == 2
        assert report.state.start_time == 0.0
        assert report.state.end_time == 100.0
        assert source.since_values == [0.0, 0.0]

    @pytest.mark.asyncio
    async def test_failed_snapshot_skips_the_tick(self, test_utils):
        holder = {}
        source = test_utils.FakeMetricSource(
            [test_utils.make_snapshot(), RuntimeError("WMI unavailable"), test_utils.make_snapshot()],
            after_read=stop_after(3, holder),
        )
        scheduler = SamplingScheduler(source, test_utils.make_app_config())
        holder["scheduler"] = scheduler

        report = await scheduler.run()

        assert source.reads == 3
        assert scheduler.skipped_ticks == 1
        assert report.state.sample_count == 2

    @pytest.mark.asyncio
    async def test_failed_snapshot_reseeds_cpu_attribution(self, test_utils):
        holder = {}
        source = test_utils.FakeMetricSource(
            [
                test_utils.make_snapshot(processes=[ProcessReading(1, "burner", 0.0, 0)]),
                RuntimeError("WMI unavailable"),
                test_utils.make_snapshot(processes=[ProcessReading(1, "burner", 0.02, 0)]),
                test_utils.make_snapshot(processes=[ProcessReading(1, "burner", 0.03, 0)]),
            ],
            cores=1,
            after_read=stop_after(4, holder),
        )
        received = []
        scheduler = SamplingScheduler(source, test_utils.make_app_config(), observers=[received.append])
        holder["scheduler"] = scheduler

        await scheduler.run()

        first, after_skip, last = received
        assert first.top_cpu_process is None
        # The CPU time accumulated over the skipped tick is not attributed.
        assert after_skip.top_cpu_process is None
        assert last.top_cpu_process.pct == 100.0
        assert all(s.top_cpu_process is None or s.top_cpu_process.pct <= 100.0 for s in received)

    @pytest.mark.asyncio
    async def test_observer_errors_do_not_stop_the_loop(self, test_utils):
        holder = {}
        received = []

        def broken_observer(sample):
            raise OSError("disk full")

        source = test_utils.FakeMetricSource([test_utils.make_snapshot()], after_read=stop_after(2, holder))
        scheduler = SamplingScheduler(
            source, test_utils.make_app_config(), observers=[broken_observer, received.append]
        )
        holder["scheduler"] = scheduler

        report = await scheduler.run()

        assert report.state.sample_count == 2
        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_samples_carry_derived_values(self, test_utils):
        holder = {}
        procs_1 = [ProcessReading(1, "app", 2.0, 100 * 1024 * 1024)]
        procs_2 = [ProcessReading(1, "app", 2.01, 200 * 1024 * 1024)]
        source = test_utils.FakeMetricSource(
            [
                test_utils.make_snapshot(cpu_load_pct=90.0, clock_mhz=1000.0, processes=procs_1),
                test_utils.make_snapshot(
                    cpu_load_pct=90.0, clock_mhz=1000.0, processes=procs_2, thermal_event_count=2
                ),
            ],
            after_read=stop_after(2, holder),
        )
        received = []
        config = test_utils.make_app_config()
        config.monitor.detection.min_low_clock_streak = 2
        scheduler = SamplingScheduler(source, config, observers=[received.append])
        holder["scheduler"] = scheduler

        report = await scheduler.run()

        first, second = received
        assert first.top_cpu_process is None
        assert first.top_mem_process.mb == 100.0
        assert first.low_clock and not first.alert
        assert first.high_load
        # 0.01s over the 0.01s interval on 4 cores.
        assert second.top_cpu_process.pct == 25.0
        assert second.alert
        assert second.low_clock_streak == 2
        assert report.state.thermal_events_total == 2
        assert Conclusion.EVENT_LOG_HEAT in report.diagnosis.conclusions

    @pytest.mark.asyncio
    async def test_cannot_run_twice(self, test_utils):
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        scheduler = SamplingScheduler(source, test_utils.make_app_config())
        scheduler.request_stop()
        await scheduler.run()

        with pytest.raises(RuntimeError):
            await scheduler.run()

    def test_run_blocking(self, test_utils):
        holder = {}
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()], after_read=stop_after(1, holder))
        scheduler = SamplingScheduler(source, test_utils.make_app_config())
        holder["scheduler"] = scheduler

        report = scheduler.run_blocking()

        assert report.state.sample_count == 1
        assert scheduler.state is SchedulerState.TERMINATED
