"""
Factory for creating storage instances.
"""

import logging
from typing import Literal

from .base import DataStorage
from .csv_storage import CsvStorage
from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)


def create_storage(
    format_type: Literal["parquet", "csv"] = "parquet",
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy",
) -> DataStorage:
    """
    Create a storage instance for the given table format.

    Args:
        format_type: 'parquet' or 'csv'
        compression: Compression algorithm (Parquet only)

    Raises:
        ValueError: If an unsupported format type is specified
    """
    if format_type == "parquet":
        logger.debug(f"Creating ParquetStorage with compression: {compression}")
        return ParquetStorage(compression=compression)
    elif format_type == "csv":
        logger.debug("Creating CsvStorage")
        return CsvStorage()
    else:
        raise ValueError(f"Unsupported storage format: {format_type}")
