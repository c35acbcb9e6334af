"""
Storage of session samples and results.

The sample table is written with Polars, as compressed Parquet (default) or
CSV. While a session runs every sample is also appended to a CSV log so an
interrupted session still leaves its data on disk.
"""

from .base import DataStorage
from .csv_storage import CsvStorage
from .data_manager import SessionDataManager, samples_to_dataframe
from .factory import create_storage
from .parquet_storage import ParquetStorage

__all__ = [
    "DataStorage",
    "CsvStorage",
    "ParquetStorage",
    "SessionDataManager",
    "create_storage",
    "samples_to_dataframe",
]
