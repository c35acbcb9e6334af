"""
Unit tests for per-process CPU attribution.
"""

import pytest

from throttlewatch.attribution import (
    ProcessDeltaTracker,
    normalize_process_name,
    top_memory_process,
)
from throttlewatch.models import ProcessReading


def reading(identity, name, cpu_seconds, resident_bytes=0):
    return ProcessReading(identity=identity, name=name, cpu_seconds=cpu_seconds, resident_bytes=resident_bytes)


@pytest.mark.unit
class TestProcessDeltaTracker:
    """Test cases for ProcessDeltaTracker."""

    def test_delta_to_percentage(self):
        """2.0s then 7.0s over a 5s interval on 4 cores is 25%."""
        tracker = ProcessDeltaTracker(logical_cores=4, excluded_names=[])
        tracker.observe([reading(1, "build", 2.0)], 5.0)

        result = tracker.observe([reading(1, "build", 7.0)], 5.0)

        assert result.shares[0].pct == 25.0
        assert result.top.name == "build"
        assert result.top.pct == 25.0

    def test_first_observation_only_seeds(self):
        tracker = ProcessDeltaTracker(logical_cores=4, excluded_names=[])

        result = tracker.observe([reading(1, "old", 5000.0)], 5.0)

        assert result.shares == []
        assert result.top is None
        assert tracker.tracked_count == 1

    def test_new_process_mid_session_contributes_nothing(self):
        tracker = ProcessDeltaTracker(logical_cores=2, excluded_names=[])
        tracker.observe([reading(1, "a", 1.0)], 1.0)

        result = tracker.observe([reading(1, "a", 1.5), reading(2, "b", 300.0)], 1.0)

        assert [s.name for s in result.shares] == ["a"]
        assert result.top.name == "a"
        assert result.top.pct == 25.0

    def test_recycled_pid_is_a_new_process(self):
        tracker = ProcessDeltaTracker(logical_cores=1, excluded_names=[])
        tracker.observe([reading((42, 100.0), "first", 10.0)], 1.0)

        result = tracker.observe([reading((42, 200.0), "second", 0.5)], 1.0)

        assert result.top is None

    def test_rounded_to_one_decimal(self):
        tracker = ProcessDeltaTracker(logical_cores=3, excluded_names=[])
        tracker.observe([reading(1, "p", 0.0)], 1.0)

        result = tracker.observe([reading(1, "p", 1.0)], 1.0)

        assert result.top.pct == 33.3

    def test_counter_going_backwards_clamps_to_zero(self):
        tracker = ProcessDeltaTracker(logical_cores=4, excluded_names=[])
        tracker.observe([reading(1, "p", 10.0)], 5.0)

        result = tracker.observe([reading(1, "p", 8.0)], 5.0)

        assert result.shares[0].pct == 0.0
        assert result.top is None

    def test_excluded_names_never_top(self):
        tracker = ProcessDeltaTracker(logical_cores=1)
        procs = [reading(1, "svchost.exe", 0.0), reading(2, "MsMpEng.exe", 0.0), reading(3, "app", 0.0)]
        tracker.observe(procs, 1.0)

        result = tracker.observe(
            [reading(1, "svchost.exe", 0.9), reading(2, "MsMpEng.exe", 0.8), reading(3, "app", 0.1)],
            1.0,
        )

        assert result.top.name == "app"
        assert len(result.shares) == 3

    def test_exclusion_is_case_insensitive_and_ignores_exe(self):
        tracker = ProcessDeltaTracker(logical_cores=1, excluded_names=["WmiPrvSE"])

        assert tracker.is_excluded("wmiprvse.EXE")
        assert tracker.is_excluded("WMIPRVSE")
        assert not tracker.is_excluded("wmiprvse-helper")

    def test_only_excluded_activity_gives_no_top(self):
        tracker = ProcessDeltaTracker(logical_cores=1)
        tracker.observe([reading(1, "Idle", 0.0)], 1.0)

        result = tracker.observe([reading(1, "Idle", 0.9)], 1.0)

        assert result.top is None

    def test_ties_go_to_first_listed(self):
        tracker = ProcessDeltaTracker(logical_cores=1, excluded_names=[])
        tracker.observe([reading(1, "first", 0.0), reading(2, "second", 0.0)], 1.0)

        result = tracker.observe([reading(1, "first", 0.5), reading(2, "second", 0.5)], 1.0)

        assert result.top.name == "first"

    def test_exited_processes_are_swept(self):
        tracker = ProcessDeltaTracker(logical_cores=1, excluded_names=[])
        tracker.observe([reading(1, "a", 0.0), reading(2, "b", 0.0)], 1.0)

        tracker.observe([reading(2, "b", 0.1)], 1.0)

        assert tracker.tracked_count == 1

    def test_missing_process_list_drops_baseline(self):
        tracker = ProcessDeltaTracker(logical_cores=1, excluded_names=[])
        tracker.observe([reading(1, "burner", 0.0)], 5.0)

        skipped = tracker.observe(None, 5.0)
        reseeded = tracker.observe([reading(1, "burner", 10.0)], 5.0)
        result = tracker.observe([reading(1, "burner", 14.0)], 5.0)

        assert skipped.top is None
        # Two intervals of CPU time are never divided by one interval.
        assert reseeded.top is None
        assert reseeded.shares == []
        assert result.top.pct == 80.0

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            ProcessDeltaTracker(logical_cores=0)
        tracker = ProcessDeltaTracker(logical_cores=1)
        with pytest.raises(ValueError):
            tracker.observe([], 0)


@pytest.mark.unit
class TestProcessHelpers:
    """Test cases for name normalization and top memory selection."""

    @pytest.mark.parametrize(
        "name,expected",
        [("Chrome.EXE", "chrome"), ("  svchost.exe ", "svchost"), ("python3", "python3"), ("exe", "exe")],
    )
    def test_normalize_process_name(self, name, expected):
        assert normalize_process_name(name) == expected

    def test_top_memory_process(self):
        procs = [
            reading(1, "small", 0.0, 10 * 1024 * 1024),
            reading(2, "big", 0.0, 1536 * 1024 * 1024),
            reading(3, "also-big", 0.0, 1536 * 1024 * 1024),
        ]

        top = top_memory_process(procs)

        assert top.name == "big"
        assert top.mb == 1536.0

    def test_top_memory_process_without_list(self):
        assert top_memory_process(None) is None
        assert top_memory_process([]) is None
