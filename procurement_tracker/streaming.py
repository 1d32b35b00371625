import asyncio
from typing import AsyncIterator

from .stats import compute_stats
from .store import RequestRepository


async def stream_stats(
    store: RequestRepository, interval: float = 0.5, max_updates: int | None = None
) -> AsyncIterator[dict]:
    """Yield fresh statistics now and after every change to the collection."""
    last_version = None
    sent = 0
    while max_updates is None or sent < max_updates:
        if store.version != last_version:
            last_version = store.version
            sent += 1
            yield {"version": last_version, **compute_stats(store.list()).to_dict()}
            continue
        await asyncio.sleep(interval)
