"""
Session runner for CLI integration.

This module wires one monitoring session together: the metric source, the
sampling scheduler and its observers (console, alert, CSV log), an optional
synthetic load, and the end-of-session storage and plots.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ..collectors import AbstractMetricSource, PsutilMetricSource
from ..models.config import AppConfig
from ..models.results import SessionReport
from ..monitoring import SamplingScheduler
from ..reporting import AlertNotifier, ConsoleReporter
from ..storage import SessionDataManager
from ..system import LoadGenerator
from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


class SessionRunner:
    """
    Runs one monitoring session and persists its results.

    Args:
        config: Validated application configuration.
        output_dir: Directory of this session's files, None to save nothing.
        alerts: Register the sustained low-clock alert notifier.
        plots: Generate the clock/load chart after the session.
        stress_workers: Busy processes to run during the session, 0 for none.
        source_factory: Creates the metric source.
    """

    def __init__(
        self,
        config: AppConfig,
        output_dir: Optional[Path] = None,
        alerts: bool = True,
        plots: bool = True,
        stress_workers: int = 0,
        source_factory: Callable[[], AbstractMetricSource] = PsutilMetricSource,
    ):
        self.config = config
        self.output_dir = Path(output_dir) if output_dir else None
        self.alerts = alerts
        self.plots = plots
        self.stress_workers = stress_workers
        self.source_factory = source_factory

        self.scheduler: Optional[SamplingScheduler] = None
        self.data_manager: Optional[SessionDataManager] = None
        self.report: Optional[SessionReport] = None
        self.shutdown_requested = False

    def request_shutdown(self) -> None:
        """Stop the session at the next safe point; results are still saved."""
        self.shutdown_requested = True
        if self.scheduler is not None:
            self.scheduler.request_stop()

    def _build_scheduler(self, source: AbstractMetricSource) -> SamplingScheduler:
        scheduler = SamplingScheduler(source, self.config, observers=[ConsoleReporter()])

        alert_config = self.config.monitor.alerts
        if self.alerts and alert_config.enabled:
            scheduler.add_observer(
                AlertNotifier(cooldown_seconds=alert_config.cooldown_seconds, bell=alert_config.bell)
            )

        if self.output_dir is not None:
            self.data_manager = SessionDataManager(self.output_dir, self.config.monitor.storage)
            scheduler.add_observer(self.data_manager.record_sample)
            logger.info(f"Session outputs will be saved in: {self.output_dir}")

        if self.shutdown_requested:
            scheduler.request_stop()
        return scheduler

    def run(self) -> SessionReport:
        """
        Run the session to completion.

        Returns:
            The session report.
        """
        source = self.source_factory()
        load: Optional[LoadGenerator] = None
        try:
            self.scheduler = self._build_scheduler(source)
            if self.stress_workers:
                load = LoadGenerator(self.stress_workers)
                load.start()
            self.report = self.scheduler.run_blocking()
        finally:
            if load is not None:
                load.stop()
            source.close()

        self._save_results(self.report)
        return self.report

    def _save_results(self, report: SessionReport) -> None:
        if self.data_manager is None:
            return
        try:
            written = self.data_manager.save_session(report)
        except Exception as e:
            handle_error(
                error=e,
                context="saving session results",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
            return

        if self.plots and "samples" in written:
            self._generate_plots(written["samples"])

    def _generate_plots(self, samples_file: Path) -> None:
        from ..plotter import plot_session

        detection = self.config.monitor.detection
        logger.info("--- Starting plot generation ---")
        try:
            plot_session(
                samples_file,
                self.output_dir,
                low_clock_ratio=detection.low_clock_ratio,
                high_load_threshold=detection.high_load_threshold,
            )
        except Exception as e:
            logger.error(f"Failed to generate plots: {type(e).__name__}: {e}", exc_info=True)
        logger.info("--- Plot generation finished ---")


def session_output_dir(root: Path) -> Path:
    """Timestamped directory for one session under ``root``."""
    return Path(root) / f"session_{time.strftime('%Y%m%d_%H%M%S')}"
