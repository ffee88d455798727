from .base import RateStore
from .memory import InMemoryRateStore, load_store_file
from .rest import HttpRateStore

__all__ = [
    "RateStore",
    "InMemoryRateStore",
    "load_store_file",
    "HttpRateStore",
]
