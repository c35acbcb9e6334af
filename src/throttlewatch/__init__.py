"""
throttlewatch: CPU clock, throttling and load diagnosis.

This package samples a host's CPU load, current and maximum clock speed,
memory and per-process CPU usage at a fixed interval, flags sustained
low-clock periods and classifies the finished session (thermal throttling,
disabled boost, power policy, background security agents...).

The package is organized into specialized modules:
- config: Configuration management and validation
- models: Data structures and type definitions
- validation: Input validation and error handling
- collectors: Metric source and thermal event counters
- attribution: Per-process CPU share from cumulative CPU time
- detection: Low-clock streak detection
- monitoring: Sampling loop and session aggregation
- diagnosis: End-of-session rule cascade
- storage / reporting / plotter: Persistence, display and charts
- cli: Command-line interface and orchestration

Usage:
    From command line:
        throttlewatch --minutes 5 --interval 2

    Programmatically:
        from throttlewatch import PsutilMetricSource, SamplingScheduler, get_config
        report = SamplingScheduler(PsutilMetricSource(), get_config()).run_blocking()
        print(report.diagnosis)
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .cli.orchestrator import SessionRunner
from .cli import main_cli
from .collectors import PsutilMetricSource
from .monitoring import SamplingScheduler, SchedulerState, SessionAggregator
from .diagnosis import diagnose, render_diagnosis

# Model classes for external use
from .models import (
    AppConfig,
    MonitorConfig,
    DiagnosisConfig,
    Sample,
    SessionState,
    SessionReport,
    DiagnosisResult,
    Conclusion,
)

# Validation utilities
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "SessionRunner",
    "main_cli",
    "PsutilMetricSource",
    "SamplingScheduler",
    "SchedulerState",
    "SessionAggregator",
    "diagnose",
    "render_diagnosis",
    # Models
    "AppConfig",
    "MonitorConfig",
    "DiagnosisConfig",
    "Sample",
    "SessionState",
    "SessionReport",
    "DiagnosisResult",
    "Conclusion",
    # Validation
    "ValidationError",
]
