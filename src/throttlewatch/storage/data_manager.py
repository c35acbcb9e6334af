"""
Data storage manager for sampling sessions.

This module provides a high-level interface that persists a session while it
runs (one CSV row per sample) and once it has ended (the full sample table,
a JSON summary and a human-readable summary log).
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

import polars as pl

from ..diagnosis import render_diagnosis
from ..models.config import StorageConfig
from ..models.results import SessionReport
from ..models.samples import Sample
from ..reporting import render_session_summary
from .csv_storage import CsvStorage
from .factory import create_storage

logger = logging.getLogger(__name__)

SAMPLES_BASENAME = "samples"
SAMPLES_LOG_FILENAME = "samples_log.csv"
SUMMARY_JSON_FILENAME = "session_summary.json"
SUMMARY_LOG_FILENAME = "session_summary.log"


def samples_to_dataframe(samples: Iterable[Sample]) -> pl.DataFrame:
    """Build the sample table, one row per sample."""
    return pl.DataFrame([sample.to_row() for sample in samples])


class SessionDataManager:
    """
    Persists the samples and results of a session.

    `record_sample` is meant to be registered as a per-sample observer;
    `save_session` is called once with the final report.
    """

    def __init__(self, output_dir: Path, storage_config: Optional[StorageConfig] = None):
        """
        Args:
            output_dir: Directory where data files will be stored
            storage_config: Table format and per-sample log settings
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.storage_config = storage_config or StorageConfig()

        self.storage = create_storage(self.storage_config.format, self.storage_config.compression)
        self.sample_log = CsvStorage() if self.storage_config.write_csv_log else None
        self.rows_logged = 0

        logger.debug(
            f"Initialized SessionDataManager in {self.output_dir} "
            f"with format: {self.storage_config.format}"
        )

    @property
    def samples_path(self) -> Path:
        return self.output_dir / f"{SAMPLES_BASENAME}.{self.storage.extension}"

    @property
    def samples_log_path(self) -> Path:
        return self.output_dir / SAMPLES_LOG_FILENAME

    @property
    def summary_json_path(self) -> Path:
        return self.output_dir / SUMMARY_JSON_FILENAME

    @property
    def summary_log_path(self) -> Path:
        return self.output_dir / SUMMARY_LOG_FILENAME

    def record_sample(self, sample: Sample) -> None:
        """Append one sample to the running CSV log."""
        if self.sample_log is None:
            return
        self.sample_log.append_dataframe(samples_to_dataframe([sample]), self.samples_log_path)
        self.rows_logged += 1

    def save_session(self, report: SessionReport) -> Dict[str, Path]:
        """
        Save the full results of a finished session.

        Returns:
            The files written, keyed by kind ("samples", "summary_json",
            "summary_log").
        """
        written: Dict[str, Path] = {}
        state = report.state
        logger.info("Saving session results...")

        if state.samples:
            self.storage.save_dataframe(samples_to_dataframe(state.samples), self.samples_path)
            written["samples"] = self.samples_path
            logger.info(f"Saved {len(state.samples)} samples to: {self.samples_path}")
        else:
            logger.warning("No samples to save")

        summary = {
            "ended_by": report.ended_by,
            "session": state.to_dict(),
            "diagnosis": report.diagnosis.to_dict() if report.diagnosis else None,
            "storage": self.storage_config.to_dict(),
        }
        self.storage.save_dict(summary, self.summary_json_path)
        written["summary_json"] = self.summary_json_path

        with open(self.summary_log_path, "w", encoding="utf-8") as f:
            f.write(render_session_summary(state))
            f.write("\n\n")
            if report.diagnosis is not None:
                f.write(render_diagnosis(report.diagnosis))
            else:
                f.write("Diagnosis: none (no samples collected)")
            f.write("\n")
        written["summary_log"] = self.summary_log_path

        logger.info(f"Successfully saved session results to: {self.output_dir}")
        return written

    def load_samples(self) -> pl.DataFrame:
        """Load the sample table written by `save_session`."""
        return self.storage.load_dataframe(self.samples_path)
