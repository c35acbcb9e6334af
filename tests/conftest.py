"""
Pytest configuration and shared fixtures for the throttlewatch test suite.

This module provides common fixtures, a scriptable fake metric source and
sample builders for all test modules.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from throttlewatch.collectors.base import AbstractMetricSource  # noqa: E402
from throttlewatch.models import (  # noqa: E402
    AppConfig,
    CollectionConfig,
    MetricSnapshot,
    MonitorConfig,
    ProcessCpuShare,
    ProcessMemoryUse,
    ProcessReading,
    Sample,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "monitor": {
            "collection": {"interval_seconds": 2.0, "duration_minutes": 1.0},
            "detection": {
                "low_clock_ratio": 0.75,
                "min_low_clock_streak": 4,
                "high_load_threshold": 80.0,
            },
            "general": {"output_dir": "out", "skip_plots": True, "history_limit": 100},
            "alerts": {"enabled": False, "bell": False, "cooldown_seconds": 30.0},
            "storage": {"format": "csv", "compression": "zstd", "write_csv_log": False},
        },
        "attribution": {"extra_excluded_processes": ["backupd"]},
        "diagnosis": {"fallback_low_clock_pct": 15.0, "extra_edr_keywords": ["acmeguard"]},
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary configuration file for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    yield

    from throttlewatch.config import DEFAULT_CONFIG_PATH, clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(DEFAULT_CONFIG_PATH)


# ============================================================================
# Fake metric source
# ============================================================================


SnapshotOrError = Union[MetricSnapshot, Exception]


class FakeMetricSource(AbstractMetricSource):
    """
    Metric source replaying scripted snapshots.

    Once the script is exhausted the last entry is repeated. An exception in
    the script is raised by the corresponding read. ``after_read`` is called
    with the number of reads done so far, from the reading thread.
    """

    def __init__(
        self,
        snapshots: Sequence[SnapshotOrError],
        cores: int = 4,
        after_read: Optional[Callable[[int], None]] = None,
    ):
        self.snapshots = list(snapshots)
        self.cores = cores
        self.after_read = after_read
        self.reads = 0
        self.since_values: List[float] = []
        self.closed = False

    def read_snapshot(self, since: float) -> MetricSnapshot:
        item = self.snapshots[min(self.reads, len(self.snapshots) - 1)]
        self.reads += 1
        self.since_values.append(since)
        if self.after_read is not None:
            self.after_read(self.reads)
        if isinstance(item, Exception):
            raise item
        return item

    def logical_core_count(self) -> int:
        return self.cores

    def close(self) -> None:
        self.closed = True


# ============================================================================
# Test Utilities
# ============================================================================


class TestUtils:
    """Utility functions for testing."""

    FakeMetricSource = FakeMetricSource

    @staticmethod
    def make_snapshot(
        timestamp: float = 1000.0,
        cpu_load_pct: float = 50.0,
        clock_mhz: float = 3000.0,
        max_clock_mhz: float = 4000.0,
        processes: Optional[List[ProcessReading]] = None,
        thermal_event_count: int = 0,
    ) -> MetricSnapshot:
        return MetricSnapshot(
            timestamp=timestamp,
            cpu_load_pct=cpu_load_pct,
            clock_mhz=clock_mhz,
            max_clock_mhz=max_clock_mhz,
            ram_used_mb=8000.0,
            ram_avail_mb=8000.0,
            processes=processes,
            thermal_event_count=thermal_event_count,
        )

    @staticmethod
    def make_sample(
        timestamp: float = 1000.0,
        cpu_load_pct: float = 50.0,
        clock_mhz: float = 3000.0,
        max_clock_mhz: float = 4000.0,
        top_cpu: Optional[tuple] = None,
        top_mem: Optional[tuple] = None,
        thermal_events: int = 0,
        low_clock: bool = False,
        streak: int = 0,
        alert: bool = False,
        high_load: bool = False,
    ) -> Sample:
        return Sample(
            timestamp=timestamp,
            cpu_load_pct=cpu_load_pct,
            clock_mhz=clock_mhz,
            max_clock_mhz=max_clock_mhz,
            ram_used_mb=8000.0,
            ram_avail_mb=8000.0,
            top_cpu_process=ProcessCpuShare(*top_cpu) if top_cpu else None,
            top_mem_process=ProcessMemoryUse(*top_mem) if top_mem else None,
            thermal_events_since_start=thermal_events,
            alert=alert,
            low_clock_streak=streak,
            low_clock=low_clock,
            high_load=high_load,
        )

    @staticmethod
    def make_app_config(
        interval_seconds: float = 0.01,
        duration_minutes: float = 0.0,
    ) -> AppConfig:
        return AppConfig(
            monitor=MonitorConfig(
                collection=CollectionConfig(
                    interval_seconds=interval_seconds,
                    duration_minutes=duration_minutes,
                )
            )
        )


@pytest.fixture
def test_utils():
    """Provide test utility functions."""
    return TestUtils
