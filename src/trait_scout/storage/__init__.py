"""Storage adapters for caching metadata documents"""

from .base import StorageAdapter
from .memory import MemoryStorage

__all__ = ["MemoryStorage", "StorageAdapter"]


def get_storage_adapter(config):
    """Get the storage adapter for a config"""
    return MemoryStorage(config)
