"""
Data models and structures for the sampling and diagnosis engine.

Configuration Models:
- Sampling, detection, attribution, alert, storage and diagnosis settings

Tick Models:
- Raw metric snapshots and per-process readings
- Derived per-tick samples

Result Models:
- Running session aggregation
- Diagnosis conclusions and recommended actions
"""

# Configuration models
from .config import (
    DEFAULT_EDR_KEYWORDS,
    DEFAULT_EXCLUDED_PROCESSES,
    AlertConfig,
    AppConfig,
    AttributionConfig,
    CollectionConfig,
    DetectionConfig,
    DiagnosisConfig,
    GeneralConfig,
    MonitorConfig,
    StorageConfig,
)

# Tick models
from .samples import (
    MetricSnapshot,
    ProcessCpuShare,
    ProcessMemoryUse,
    ProcessReading,
    Sample,
)

# Result models
from .results import (
    Conclusion,
    DiagnosisResult,
    RunningStats,
    SessionReport,
    SessionState,
)

__all__ = [
    # Configuration
    "DEFAULT_EDR_KEYWORDS",
    "DEFAULT_EXCLUDED_PROCESSES",
    "AlertConfig",
    "AppConfig",
    "AttributionConfig",
    "CollectionConfig",
    "DetectionConfig",
    "DiagnosisConfig",
    "GeneralConfig",
    "MonitorConfig",
    "StorageConfig",
    # Tick
    "MetricSnapshot",
    "ProcessCpuShare",
    "ProcessMemoryUse",
    "ProcessReading",
    "Sample",
    # Results
    "Conclusion",
    "DiagnosisResult",
    "RunningStats",
    "SessionReport",
    "SessionState",
]
