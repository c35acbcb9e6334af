"""
CSV storage backend using Polars.
"""

import logging
from pathlib import Path
from typing import List, Optional

import polars as pl

from .base import DataStorage, PathLike

logger = logging.getLogger(__name__)


class CsvStorage(DataStorage):
    """
    Plain-text storage of the sample table.

    Appending writes the new rows at the end of the file, with a header only
    when the file is new, which makes it suitable for one row per tick.
    """

    extension = "csv"

    def save_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_csv(path)
            logger.debug(f"Saved {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save DataFrame to {path}: {e}")
            raise

    def load_dataframe(self, path: PathLike, columns: Optional[List[str]] = None) -> pl.DataFrame:
        return pl.read_csv(path, columns=columns)

    def append_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        is_new = not self.file_exists(path) or self.get_file_size(path) == 0
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8", newline="") as f:
            df.write_csv(f, include_header=is_new)
