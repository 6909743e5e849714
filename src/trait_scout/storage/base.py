"""Base storage adapter"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class StorageAdapter(ABC):
    """Base storage adapter interface"""

    @abstractmethod
    async def get_cache(self, key: str) -> Optional[Any]:
        """Get cached value"""
        pass

    @abstractmethod
    async def set_cache(self, key: str, value: Any) -> None:
        """Set cached value"""
        pass
