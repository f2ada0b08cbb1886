"""Bounded thread-pool mapping for per-document stages"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar


T = TypeVar("T")
R = TypeVar("R")


def worker_count(max_workers: int = 0) -> int:
    """Resolve a configured worker count; 0 means one per available core."""
    return max_workers or os.cpu_count() or 1


def parallel_map(fn: Callable[[T], R], items: Iterable[T], max_workers: int = 0) -> list[R]:
    """Apply fn to every item on a thread pool; results keep input order.

    Each call writes only its own result slot, so no locking is needed beyond
    the executor join.
    """
    items = list(items)
    if not items:
        return []
    workers = min(worker_count(max_workers), len(items))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(fn, items))
