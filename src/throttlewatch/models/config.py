"""
Configuration data models.

This module contains the configuration structures for the sampling loop,
low-clock detection, process attribution, alerting and diagnosis thresholds.
Defaults match the documented defaults of the command-line tool.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

# Processes that consume CPU as a side effect of the measurement itself or of
# ordinary housekeeping. Matched by name, case-insensitively, ".exe" ignored.
DEFAULT_EXCLUDED_PROCESSES: Tuple[str, ...] = (
    "Idle",
    "System Idle Process",
    "System",
    "WmiPrvSE",
    "Memory Compression",
    "svchost",
    "MsMpEng",
)

# Vendor and product tokens of security / EDR agents, matched as
# case-insensitive substrings of the most frequent top-CPU process name.
DEFAULT_EDR_KEYWORDS: Tuple[str, ...] = (
    "defender",
    "mssense",
    "senseir",
    "nissrv",
    "crowdstrike",
    "csfalcon",
    "falcon",
    "sentinel",
    "carbonblack",
    "cbdefense",
    "repmgr",
    "cylance",
    "sophos",
    "mcafee",
    "symantec",
    "ccsvchst",
    "trendmicro",
    "ntrtscan",
    "esets",
    "ekrn",
    "kaspersky",
    "avp.exe",
    "bitdefender",
    "cortex",
    "cyserver",
    "elastic-endpoint",
    "tanium",
    "qualys",
)


@dataclass
class CollectionConfig:
    """
    Sampling loop settings, loaded from `[monitor.collection]`.
    """

    # Seconds between ticks. Must be > 0.
    interval_seconds: float = 5.0
    # Session length. 0 means run until cancelled.
    duration_minutes: float = 10.0

    @property
    def duration_seconds(self) -> Optional[float]:
        """Session length in seconds, or None for a continuous session."""
        if self.duration_minutes == 0:
            return None
        return self.duration_minutes * 60.0


@dataclass
class DetectionConfig:
    """
    Low-clock and high-load thresholds, loaded from `[monitor.detection]`.
    """

    # A tick is low-clock when current clock < max clock * low_clock_ratio.
    low_clock_ratio: float = 0.8
    # Consecutive low-clock ticks needed to raise the sustained alert.
    min_low_clock_streak: int = 3
    # A tick is high-load when aggregate CPU load >= this percentage.
    high_load_threshold: float = 70.0


@dataclass
class AttributionConfig:
    """
    Process attribution settings, loaded from `[attribution]`.
    """

    excluded_processes: List[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_PROCESSES)
    )


@dataclass
class DiagnosisConfig:
    """
    Thresholds of the end-of-session rule cascade, loaded from `[diagnosis]`.

    Percentages are expressed in the 0-100 range.
    """

    # Rule 2: share of samples that must be high-load (0-1).
    high_load_share: float = 0.2
    # Rule 2: percentage of high-load samples that must also be low-clock.
    joint_low_clock_pct: float = 20.0
    # Rule 3: peak load at which a flat clock means boost is disabled.
    flat_max_load_pct: float = 90.0
    # Rule 4: average load below which the workload counts as light.
    light_avg_load_pct: float = 40.0
    # Rule 4: low-clock percentage tolerated in a light session.
    light_low_clock_pct: float = 5.0
    # Rule 5: low-clock percentage above which throttling is reported.
    fallback_low_clock_pct: float = 10.0
    edr_keywords: List[str] = field(
        default_factory=lambda: list(DEFAULT_EDR_KEYWORDS)
    )


@dataclass
class AlertConfig:
    """
    Sustained low-clock notification settings, loaded from `[monitor.alerts]`.
    """

    enabled: bool = True
    # Ring the terminal bell in addition to logging a warning.
    bell: bool = True
    # Minimum seconds between two notifications.
    cooldown_seconds: float = 60.0


@dataclass
class StorageConfig:
    """
    Persistence settings, loaded from `[monitor.storage]`.

    Attributes:
        format: Format of the final sample table written at session end
            - 'parquet': Columnar format with compression (default)
            - 'csv': Plain text, readable in any spreadsheet
        compression: Compression algorithm for Parquet format
            - 'snappy', 'gzip', 'brotli', 'lz4', 'zstd'
        write_csv_log: Append one CSV row per tick while sampling, so that a
            killed session still leaves its samples on disk

    Note:
        Compression setting only applies to Parquet format.
    """

    format: Literal["parquet", "csv"] = "parquet"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"
    write_csv_log: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert the StorageConfig to a dictionary."""
        return {
            "format": self.format,
            "compression": self.compression,
            "write_csv_log": self.write_csv_log,
        }


@dataclass
class GeneralConfig:
    """
    Output settings, loaded from `[monitor.general]`.
    """

    output_dir: Path = Path("logs")
    skip_plots: bool = False
    save_results: bool = True
    # Number of samples kept in memory. 0 keeps the whole session.
    history_limit: int = 0


@dataclass
class MonitorConfig:
    """
    The `[monitor]` table: everything that drives a sampling session.
    """

    collection: CollectionConfig = field(default_factory=CollectionConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    general: GeneralConfig = field(default_factory=GeneralConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    attribution: AttributionConfig = field(default_factory=AttributionConfig)
    diagnosis: DiagnosisConfig = field(default_factory=DiagnosisConfig)
