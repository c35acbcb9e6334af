"""
Tests for SessionRunner, the wiring of a full session.

A scripted metric source replaces psutil; the session is stopped through the
runner after a fixed number of reads.
"""

import json

import pytest

from throttlewatch.cli.orchestrator import SessionRunner, session_output_dir
from throttlewatch.models import ProcessReading


@pytest.fixture
def throttled_source(test_utils):
    snapshots = [
        test_utils.make_snapshot(
            timestamp=1000.0 + i,
            cpu_load_pct=95.0,
            clock_mhz=2000.0,
            processes=[
                ProcessReading(
                    identity=(10, 1.0),
                    name="cc1plus",
                    cpu_seconds=1.0 + i,
                    resident_bytes=300 * 1024 * 1024,
                )
            ],
        )
        for i in range(4)
    ]
    holder = {}

    def stop_after_four(reads):
        if reads >= 4:
            holder["runner"].request_shutdown()

    source = test_utils.FakeMetricSource(snapshots, after_read=stop_after_four)
    return source, holder


class TestSessionRunner:
    """Tests for one complete, stopped session."""

    def test_session_saves_results(self, temp_dir, test_utils, throttled_source):
        source, holder = throttled_source
        runner = SessionRunner(
            test_utils.make_app_config(),
            output_dir=temp_dir / "session",
            alerts=False,
            plots=False,
            source_factory=lambda: source,
        )
        holder["runner"] = runner

        report = runner.run()

        assert report.ended_by == "cancelled"
        assert report.state.sample_count == 4
        assert source.closed
        manager = runner.data_manager
        assert manager.samples_path.exists()
        assert manager.samples_log_path.exists()
        summary = json.loads(manager.summary_json_path.read_text())
        assert summary["ended_by"] == "cancelled"
        assert summary["session"]["sample_count"] == 4
        assert "thermal throttling" in summary["diagnosis"]["conclusions"]

    def test_session_without_output(self, test_utils, throttled_source):
        source, holder = throttled_source
        runner = SessionRunner(
            test_utils.make_app_config(),
            output_dir=None,
            alerts=False,
            source_factory=lambda: source,
        )
        holder["runner"] = runner

        report = runner.run()

        assert report.state.sample_count == 4
        assert runner.data_manager is None

    def test_shutdown_before_run(self, test_utils):
        source = test_utils.FakeMetricSource([test_utils.make_snapshot()])
        runner = SessionRunner(
            test_utils.make_app_config(), alerts=False, source_factory=lambda: source
        )
        runner.request_shutdown()

        report = runner.run()

        assert report.state.sample_count == 0
        assert report.diagnosis is None
        assert source.reads == 0

    def test_session_output_dir(self, temp_dir):
        path = session_output_dir(temp_dir)

        assert path.parent == temp_dir
        assert path.name.startswith("session_")
