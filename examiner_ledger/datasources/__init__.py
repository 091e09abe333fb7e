from .base import DataSource, DataSourceError, RateLimitError, RunRecord
from .speedrun import SpeedrunDataSource

__all__ = [
    "DataSource",
    "DataSourceError",
    "RateLimitError",
    "RunRecord",
    "SpeedrunDataSource",
]
