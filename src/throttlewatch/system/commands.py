"""
Command execution utilities.

This module provides a helper for running short-lived system commands (such
as event log queries) and capturing their output without raising.
"""

import logging
import shutil
import subprocess
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def run_command(
    args: List[str], timeout: Optional[float] = 10.0
) -> Tuple[int, str, str]:
    """Execute a command and capture its output with robust error handling.

    Args:
        args: The command and its arguments.
        timeout: Seconds to wait before giving up, None to wait forever.

    Returns:
        Tuple of (return_code, stdout_string, stderr_string).
        return_code is -1 for execution errors and timeouts.

    Note:
        Uses UTF-8 encoding with error replacement for robust text handling.
    """
    logger.debug(f"Executing command: {args}")
    try:
        process = subprocess.run(
            args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
        return process.returncode, process.stdout, process.stderr
    except FileNotFoundError as e:
        logger.error(f"Command not found: {args[0]}: {type(e).__name__}: {e}")
        return -1, "", f"Error: Command not found '{args[0]}'"
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout}s: {args[0]}")
        return -1, "", f"Error: Command timed out after {timeout}s"
    except Exception as e:
        logger.error(
            f"Unexpected error while running command '{args[0]}': {type(e).__name__}: {e}",
            exc_info=True,
        )
        return -1, "", f"An unexpected error occurred: {e}"


def is_command_available(name: str) -> bool:
    """Return True when ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None
