"""
Reading the TOML configuration file.

Only parsing happens here; turning the raw tables into validated dataclasses
is the job of `config.validators`.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse one TOML file into nested dicts.

    Raises:
        FileNotFoundError: If ``file_path`` does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    file_path = Path(file_path)
    logger.info(f"Loading {description} from: {file_path}")
    if not file_path.is_file():
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {file_path.name}",
            severity=ErrorSeverity.CRITICAL,
            logger=logger,
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Raw tables of the throttlewatch config.toml."""
    return load_toml_file(config_path, "main configuration file")
