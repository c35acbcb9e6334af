"""
Synthetic CPU load.

Running a sampling session on an idle machine says little about throttling:
boost only kicks in, and heat only builds up, under load. `LoadGenerator`
keeps a number of cores busy with pure-Python spin loops in separate
processes while a session runs.
"""

import logging
import multiprocessing
import time
from typing import List, Optional

import psutil

logger = logging.getLogger(__name__)


def _spin(stop_event, deadline: Optional[float]) -> None:
    """Burn CPU until the stop event is set or the deadline passes."""
    value = 0
    while not stop_event.is_set():
        for _ in range(100_000):
            value = (value * 31 + 7) % 1_000_003
        if deadline is not None and time.time() >= deadline:
            break


class LoadGenerator:
    """
    Keeps ``workers`` logical cores busy.

    Args:
        workers: Number of busy processes, capped at the logical core count.
        duration_seconds: Stop by itself after this long, None to run until
            `stop` is called.
    """

    def __init__(self, workers: int, duration_seconds: Optional[float] = None):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        cores = psutil.cpu_count(logical=True) or 1
        if workers > cores:
            logger.warning(f"Requested {workers} load workers, capping at {cores} logical cores")
            workers = cores
        self.workers = workers
        self.duration_seconds = duration_seconds
        self._stop_event = multiprocessing.Event()
        self._processes: List[multiprocessing.Process] = []

    @property
    def is_running(self) -> bool:
        return any(p.is_alive() for p in self._processes)

    def start(self) -> None:
        if self._processes:
            raise RuntimeError("Load generator already started")
        deadline = time.time() + self.duration_seconds if self.duration_seconds else None
        self._stop_event.clear()
        for index in range(self.workers):
            process = multiprocessing.Process(
                target=_spin,
                args=(self._stop_event, deadline),
                name=f"LoadWorker-{index}",
                daemon=True,
            )
            process.start()
            self._processes.append(process)
        logger.info(f"Started {self.workers} load workers")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop every worker, terminating those that do not exit in time."""
        if not self._processes:
            return
        self._stop_event.set()
        for process in self._processes:
            process.join(timeout)
            if process.is_alive():
                logger.warning(f"{process.name} did not exit in {timeout}s, terminating")
                process.terminate()
                process.join(1.0)
        logger.info(f"Stopped {len(self._processes)} load workers")
        self._processes.clear()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
