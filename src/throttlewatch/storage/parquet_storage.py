"""
Parquet storage backend using Polars.
"""

import logging
from pathlib import Path
from typing import List, Literal, Optional

import polars as pl

from .base import DataStorage, PathLike

logger = logging.getLogger(__name__)


class ParquetStorage(DataStorage):
    """
    Columnar, compressed storage of the sample table.

    Parquet files cannot be appended in place, so `append_dataframe` reads
    the existing file and rewrites it. Use it for the end-of-session table,
    not for per-tick writes.
    """

    extension = "parquet"

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage with compression: {compression}")

    def save_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(path, compression=self.compression)
            logger.debug(f"Saved {len(df)} rows to {path}")
        except Exception as e:
            logger.error(f"Failed to save DataFrame to {path}: {e}")
            raise

    def load_dataframe(self, path: PathLike, columns: Optional[List[str]] = None) -> pl.DataFrame:
        if columns:
            return pl.read_parquet(path, columns=columns)
        return pl.read_parquet(path)

    def append_dataframe(self, df: pl.DataFrame, path: PathLike) -> None:
        if self.file_exists(path):
            combined = pl.concat([self.load_dataframe(path), df], how="vertical_relaxed")
            self.save_dataframe(combined, path)
        else:
            self.save_dataframe(df, path)
