"""
Command-line interface for the throttlewatch CPU clock monitor.

This module parses the command line, loads and overrides the configuration,
installs the SIGINT/SIGTERM handlers that stop a session gracefully, runs the
session and prints its diagnosis as text or JSON.
"""

import argparse
import dataclasses
import json
import logging
import signal
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..diagnosis import render_diagnosis
from ..models.config import AppConfig
from ..models.results import SessionReport
from ..validation import (
    ValidationError,
    handle_cli_error,
    validate_percentage,
    validate_positive_float,
    validate_positive_integer,
    validate_ratio,
)
from .orchestrator import SessionRunner, session_output_dir

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def redirect_console_logging(stream) -> None:
    """Point the root handlers that write to stdout at ``stream``."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stdout:
            handler.setStream(stream)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="throttlewatch",
        description="Sample CPU clock, load and memory to detect and diagnose CPU throttling.",
    )
    parser.add_argument("--config", type=Path, help="Path to a config.toml file.")
    parser.add_argument("--interval", type=float, help="Seconds between samples.")
    parser.add_argument(
        "--minutes", type=float, help="Session length in minutes, 0 to run until interrupted."
    )
    parser.add_argument(
        "--ratio", type=float, help="Clock below this fraction of max clock counts as low."
    )
    parser.add_argument(
        "--streak", type=int, help="Consecutive low-clock samples that raise the alert."
    )
    parser.add_argument(
        "--high-load", type=float, dest="high_load", help="CPU load (%%) counted as high load."
    )
    parser.add_argument("--output-dir", type=Path, dest="output_dir", help="Root directory of session outputs.")
    parser.add_argument("--no-alert", action="store_true", help="Disable the low-clock alert.")
    parser.add_argument("--no-save", action="store_true", help="Do not write any file.")
    parser.add_argument("--no-plot", action="store_true", help="Skip chart generation.")
    parser.add_argument(
        "--stress",
        type=int,
        default=0,
        metavar="N",
        help="Keep N cores busy during the session.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON on stdout; log output goes to stderr.",
    )
    return parser


def apply_cli_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """
    Return a copy of ``config`` with the command-line values applied.

    Raises:
        ValidationError: If an overriding value is invalid.
    """
    monitor = config.monitor
    collection = monitor.collection
    detection = monitor.detection
    general = monitor.general

    if args.interval is not None:
        collection = dataclasses.replace(
            collection,
            interval_seconds=validate_positive_float(
                args.interval, min_value=0.0, max_value=3600.0, exclusive_min=True, field_name="--interval"
            ),
        )
    if args.minutes is not None:
        collection = dataclasses.replace(
            collection,
            duration_minutes=validate_positive_float(args.minutes, min_value=0.0, field_name="--minutes"),
        )
    if args.ratio is not None:
        detection = dataclasses.replace(
            detection, low_clock_ratio=validate_ratio(args.ratio, field_name="--ratio")
        )
    if args.streak is not None:
        detection = dataclasses.replace(
            detection,
            min_low_clock_streak=validate_positive_integer(args.streak, min_value=1, field_name="--streak"),
        )
    if args.high_load is not None:
        detection = dataclasses.replace(
            detection, high_load_threshold=validate_percentage(args.high_load, field_name="--high-load")
        )
    if args.output_dir is not None:
        general = dataclasses.replace(general, output_dir=Path(args.output_dir))
    if args.stress:
        validate_positive_integer(args.stress, min_value=1, max_value=1024, field_name="--stress")

    monitor = dataclasses.replace(monitor, collection=collection, detection=detection, general=general)
    return dataclasses.replace(config, monitor=monitor)


def format_report_json(report: SessionReport) -> str:
    return json.dumps(
        {
            "ended_by": report.ended_by,
            "session": report.state.to_dict(),
            "diagnosis": report.diagnosis.to_dict() if report.diagnosis else None,
        },
        indent=2,
        ensure_ascii=False,
    )


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line entry point.

    Raises:
        SystemExit: On configuration errors or an unexpected session failure.
    """
    args = build_parser().parse_args(argv)
    if args.json:
        # stdout carries only the JSON document.
        redirect_console_logging(sys.stderr)

    # Load application configuration
    try:
        if args.config is not None:
            set_config_path(args.config)
        app_config = apply_cli_overrides(get_config(), args)
    except (FileNotFoundError, tomllib.TOMLDecodeError, ValidationError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=2,
            include_traceback=False,
            logger=logger,
        )

    general = app_config.monitor.general
    save = general.save_results and not args.no_save
    runner = SessionRunner(
        app_config,
        output_dir=session_output_dir(general.output_dir) if save else None,
        alerts=not args.no_alert,
        plots=not (general.skip_plots or args.no_plot),
        stress_workers=args.stress,
    )

    def signal_handler(signum, frame):
        """Stop the session gracefully; the results are still finalized."""
        if runner.shutdown_requested:
            logger.warning("Shutdown already in progress. Please be patient.")
            return
        logger.info(f"Signal {signal.strsignal(signum)} received. Stopping the session...")
        runner.request_shutdown()

    previous_handlers = {
        sig: signal.signal(sig, signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        report = runner.run()
    except Exception as e:
        handle_cli_error(
            error=e,
            context="monitoring session",
            exit_code=1,
            include_traceback=True,
            logger=logger,
        )
    finally:
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)

    if args.json:
        print(format_report_json(report))
    elif report.diagnosis is not None:
        print(render_diagnosis(report.diagnosis))
    else:
        print("No samples were collected; nothing to diagnose.")
    return 0


if __name__ == "__main__":
    sys.exit(main_cli())
