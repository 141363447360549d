from .record import ResultRecord, signal_key, time_text
from .aggregator import CountFilter, ResultAggregator
from .base import ResultRepository
from .parquet_repository import ParquetResultRepository

__all__ = [
    "ResultRecord",
    "signal_key",
    "time_text",
    "CountFilter",
    "ResultAggregator",
    "ResultRepository",
    "ParquetResultRepository",
]
