"""Concurrent work over a bounded token ID space"""

import asyncio
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class BoundedIdEnumerator:
    """
    Runs one async work unit per token ID with a concurrency cap

    A cap of 0 or None launches every unit at once. Results come back in ID
    order with None results dropped; completion order is irrelevant because
    all units are joined before anything is returned.
    """

    def __init__(self, max_concurrency: Optional[int] = None):
        if max_concurrency is not None and max_concurrency < 0:
            raise ValueError("max_concurrency must be >= 0")
        self.max_concurrency = max_concurrency or None

    async def run(
        self,
        token_ids: Iterable[int],
        worker: Callable[[int], Awaitable[Optional[T]]],
    ) -> List[T]:
        """Run worker for every token ID and collect the non-None results"""
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def unit(token_id: int) -> Optional[T]:
            if semaphore is None:
                return await worker(token_id)
            async with semaphore:
                return await worker(token_id)

        results = await asyncio.gather(*(unit(token_id) for token_id in token_ids))
        return [r for r in results if r is not None]
