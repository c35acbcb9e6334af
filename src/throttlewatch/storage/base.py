"""
Abstract base class for sample table storage.

A storage backend persists the per-sample table of a session and the small
JSON documents that describe it (summary, diagnosis). Backends differ only in
the table format; dictionaries are always written as JSON.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import polars as pl

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DataStorage(ABC):
    """Abstract base class for storage backends."""

    #: File extension of the table format, without the dot.
    extension: str = ""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        """
        Write a DataFrame, replacing any existing file.

        Args:
            df: Polars DataFrame to save
            path: File path to save to
        """
        pass

    @abstractmethod
    def load_dataframe(self, path: PathLike, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """
        Read a DataFrame.

        Args:
            path: File path to load from
            columns: Optional list of columns to load

        Returns:
            Loaded Polars DataFrame
        """
        pass

    @abstractmethod
    def append_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        """Append rows to an existing file, creating it when missing."""
        pass

    def save_dict(self, data: Dict[str, Any], path: PathLike) -> None:
        """Save dictionary data as indented JSON."""
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved dictionary data to {path}")
        except Exception as e:
            logger.error(f"Failed to save dictionary to {path}: {e}")
            raise

    def load_dict(self, path: PathLike) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def file_exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def get_file_size(self, path: PathLike) -> int:
        try:
            return Path(path).stat().st_size
        except FileNotFoundError:
            return 0
