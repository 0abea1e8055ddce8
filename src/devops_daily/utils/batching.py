from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    size = max(1, size)
    for i in range(0, len(items), size):
        yield items[i:i + size]


def map_in_batches(
    items: Sequence[T],
    fn: Callable[[T], R],
    *,
    batch_size: int,
    on_batch_done: Optional[Callable[[int, int], None]] = None,
    between_batches: Optional[Callable[[], None]] = None,
) -> list[R]:
    """
    Apply fn to items, batch_size at a time, each batch on its own thread pool.

    Results keep input order. on_batch_done(done, total) runs after each batch;
    between_batches() runs between batches (not after the last one).
    """
    results: list[R] = []
    total = len(items)
    batches = list(batched(items, batch_size))

    for n, batch in enumerate(batches):
        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            results.extend(pool.map(fn, batch))
        if on_batch_done is not None:
            on_batch_done(len(results), total)
        if between_batches is not None and n < len(batches) - 1:
            between_batches()

    return results
