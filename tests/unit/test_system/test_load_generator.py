"""
Unit tests for the synthetic load generator.

Worker processes are mocked; no CPU is actually burned.
"""

from unittest.mock import MagicMock, patch

import pytest

from throttlewatch.system import LoadGenerator


@pytest.fixture
def mock_process():
    with patch("throttlewatch.system.load.multiprocessing.Process") as process_cls:
        process_cls.side_effect = lambda **kwargs: MagicMock(name=kwargs["name"])
        yield process_cls


@pytest.mark.unit
class TestLoadGenerator:
    """Test cases for LoadGenerator."""

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            LoadGenerator(0)

    @patch("throttlewatch.system.load.psutil.cpu_count", return_value=4)
    def test_workers_capped_at_core_count(self, _cpu_count):
        assert LoadGenerator(16).workers == 4

    @patch("throttlewatch.system.load.psutil.cpu_count", return_value=8)
    def test_start_and_stop(self, _cpu_count, mock_process):
        generator = LoadGenerator(3)

        generator.start()

        assert mock_process.call_count == 3
        processes = list(generator._processes)
        for process in processes:
            process.start.assert_called_once()
            process.is_alive.return_value = False

        generator.stop()

        for process in processes:
            process.join.assert_called()
            process.terminate.assert_not_called()
        assert not generator._processes

    @patch("throttlewatch.system.load.psutil.cpu_count", return_value=8)
    def test_stuck_worker_is_terminated(self, _cpu_count, mock_process):
        generator = LoadGenerator(1)
        generator.start()
        process = generator._processes[0]
        process.is_alive.return_value = True

        generator.stop(timeout=0.01)

        process.terminate.assert_called_once()

    @patch("throttlewatch.system.load.psutil.cpu_count", return_value=8)
    def test_double_start_rejected(self, _cpu_count, mock_process):
        generator = LoadGenerator(1)
        generator.start()

        with pytest.raises(RuntimeError):
            generator.start()

    @patch("throttlewatch.system.load.psutil.cpu_count", return_value=8)
    def test_context_manager(self, _cpu_count, mock_process):
        with LoadGenerator(2) as generator:
            assert len(generator._processes) == 2

        assert not generator._processes
