"""
Configuration validation utilities.

This module turns raw TOML tables into validated configuration dataclasses.
Every invalid value raises ValidationError, so configuration problems surface
before any sampling begins.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models.config import (
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
from ..validation import (
    ValidationError,
    validate_bool,
    validate_enum_choice,
    validate_percentage,
    validate_positive_float,
    validate_positive_integer,
    validate_ratio,
    validate_string_list,
)

logger = logging.getLogger(__name__)


def validate_collection_config(collection_settings: Dict[str, Any]) -> CollectionConfig:
    """
    Validate `[monitor.collection]`.

    Raises:
        ValidationError: If the interval is not > 0 or the duration is negative
    """
    interval_seconds = validate_positive_float(
        collection_settings.get("interval_seconds", 5.0),
        min_value=0.0,
        max_value=3600.0,
        exclusive_min=True,
        field_name="monitor.collection.interval_seconds",
    )
    duration_minutes = validate_positive_float(
        collection_settings.get("duration_minutes", 10.0),
        min_value=0.0,
        field_name="monitor.collection.duration_minutes",
    )
    return CollectionConfig(
        interval_seconds=interval_seconds,
        duration_minutes=duration_minutes,
    )


def validate_detection_config(detection_settings: Dict[str, Any]) -> DetectionConfig:
    """Validate `[monitor.detection]`."""
    low_clock_ratio = validate_ratio(
        detection_settings.get("low_clock_ratio", 0.8),
        field_name="monitor.detection.low_clock_ratio",
    )
    min_low_clock_streak = validate_positive_integer(
        detection_settings.get("min_low_clock_streak", 3),
        min_value=1,
        max_value=100000,
        field_name="monitor.detection.min_low_clock_streak",
    )
    high_load_threshold = validate_percentage(
        detection_settings.get("high_load_threshold", 70.0),
        field_name="monitor.detection.high_load_threshold",
    )
    return DetectionConfig(
        low_clock_ratio=low_clock_ratio,
        min_low_clock_streak=min_low_clock_streak,
        high_load_threshold=high_load_threshold,
    )


def validate_general_config(general_settings: Dict[str, Any]) -> GeneralConfig:
    """Validate `[monitor.general]`. The output directory is created lazily."""
    output_dir = general_settings.get("output_dir", "logs")
    if not isinstance(output_dir, str) or not output_dir.strip():
        raise ValidationError(
            "monitor.general.output_dir must be a non-empty string",
            field_name="monitor.general.output_dir",
            value=output_dir,
        )
    return GeneralConfig(
        output_dir=Path(output_dir),
        skip_plots=validate_bool(
            general_settings.get("skip_plots", False),
            field_name="monitor.general.skip_plots",
        ),
        save_results=validate_bool(
            general_settings.get("save_results", True),
            field_name="monitor.general.save_results",
        ),
        history_limit=validate_positive_integer(
            general_settings.get("history_limit", 0),
            min_value=0,
            field_name="monitor.general.history_limit",
        ),
    )


def validate_alert_config(alert_settings: Dict[str, Any]) -> AlertConfig:
    """Validate `[monitor.alerts]`."""
    return AlertConfig(
        enabled=validate_bool(
            alert_settings.get("enabled", True),
            field_name="monitor.alerts.enabled",
        ),
        bell=validate_bool(
            alert_settings.get("bell", True),
            field_name="monitor.alerts.bell",
        ),
        cooldown_seconds=validate_positive_float(
            alert_settings.get("cooldown_seconds", 60.0),
            min_value=0.0,
            field_name="monitor.alerts.cooldown_seconds",
        ),
    )


def validate_storage_config(storage_settings: Dict[str, Any]) -> StorageConfig:
    """Validate `[monitor.storage]`."""
    format_type = validate_enum_choice(
        storage_settings.get("format", "parquet"),
        choices=["parquet", "csv"],
        field_name="monitor.storage.format",
    )
    compression = validate_enum_choice(
        storage_settings.get("compression", "snappy"),
        choices=["snappy", "gzip", "brotli", "lz4", "zstd"],
        field_name="monitor.storage.compression",
    )
    write_csv_log = validate_bool(
        storage_settings.get("write_csv_log", True),
        field_name="monitor.storage.write_csv_log",
    )
    return StorageConfig(
        format=format_type,
        compression=compression,
        write_csv_log=write_csv_log,
    )


def validate_monitor_config(monitor_data: Dict[str, Any]) -> MonitorConfig:
    """
    Validate and create a MonitorConfig from the raw `[monitor]` table.

    Args:
        monitor_data: Raw monitor configuration from TOML

    Returns:
        Validated MonitorConfig instance

    Raises:
        ValidationError: If validation fails
    """
    try:
        return MonitorConfig(
            collection=validate_collection_config(monitor_data.get("collection", {})),
            detection=validate_detection_config(monitor_data.get("detection", {})),
            general=validate_general_config(monitor_data.get("general", {})),
            alerts=validate_alert_config(monitor_data.get("alerts", {})),
            storage=validate_storage_config(monitor_data.get("storage", {})),
        )
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise


def validate_attribution_config(attribution_data: Dict[str, Any]) -> AttributionConfig:
    """
    Validate `[attribution]`.

    ``extra_excluded_processes`` extends the built-in exclusion list.
    ``excluded_processes`` replaces it entirely.
    """
    if "excluded_processes" in attribution_data:
        excluded = validate_string_list(
            attribution_data["excluded_processes"],
            field_name="attribution.excluded_processes",
        )
    else:
        excluded = list(DEFAULT_EXCLUDED_PROCESSES)
    excluded += validate_string_list(
        attribution_data.get("extra_excluded_processes", []),
        field_name="attribution.extra_excluded_processes",
    )
    return AttributionConfig(excluded_processes=excluded)


def validate_diagnosis_config(diagnosis_data: Dict[str, Any]) -> DiagnosisConfig:
    """Validate `[diagnosis]` thresholds and the EDR keyword list."""
    try:
        if "edr_keywords" in diagnosis_data:
            keywords = validate_string_list(
                diagnosis_data["edr_keywords"],
                field_name="diagnosis.edr_keywords",
            )
        else:
            keywords = list(DEFAULT_EDR_KEYWORDS)
        keywords += validate_string_list(
            diagnosis_data.get("extra_edr_keywords", []),
            field_name="diagnosis.extra_edr_keywords",
        )

        return DiagnosisConfig(
            high_load_share=validate_ratio(
                diagnosis_data.get("high_load_share", 0.2),
                field_name="diagnosis.high_load_share",
            ),
            joint_low_clock_pct=validate_percentage(
                diagnosis_data.get("joint_low_clock_pct", 20.0),
                field_name="diagnosis.joint_low_clock_pct",
                allow_zero=True,
            ),
            flat_max_load_pct=validate_percentage(
                diagnosis_data.get("flat_max_load_pct", 90.0),
                field_name="diagnosis.flat_max_load_pct",
            ),
            light_avg_load_pct=validate_percentage(
                diagnosis_data.get("light_avg_load_pct", 40.0),
                field_name="diagnosis.light_avg_load_pct",
            ),
            light_low_clock_pct=validate_percentage(
                diagnosis_data.get("light_low_clock_pct", 5.0),
                field_name="diagnosis.light_low_clock_pct",
                allow_zero=True,
            ),
            fallback_low_clock_pct=validate_percentage(
                diagnosis_data.get("fallback_low_clock_pct", 10.0),
                field_name="diagnosis.fallback_low_clock_pct",
                allow_zero=True,
            ),
            edr_keywords=keywords,
        )
    except ValidationError as e:
        logger.error(f"Diagnosis configuration validation failed: {e}")
        raise


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate a complete configuration document.

    Missing tables and keys fall back to their documented defaults.
    """
    return AppConfig(
        monitor=validate_monitor_config(config_data.get("monitor", {})),
        attribution=validate_attribution_config(config_data.get("attribution", {})),
        diagnosis=validate_diagnosis_config(config_data.get("diagnosis", {})),
    )
