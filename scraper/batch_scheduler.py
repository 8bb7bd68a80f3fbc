"""Run async work over items in sequential batches of concurrent calls."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


def partition(items: Sequence[T], batch_size: int) -> List[Sequence[T]]:
    """
    Split items into consecutive slices of at most batch_size.

    Args:
        items: Items to split
        batch_size: Maximum slice length, must be positive

    Returns:
        List of slices in input order
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size}")
    return [items[i:i + batch_size] for i in range(0, len(items), batch_size)]


async def run_batches(
    items: Sequence[T],
    batch_size: int,
    worker: Callable[[T], Awaitable[List[R]]]
) -> List[R]:
    """
    Apply worker to every item, batch_size items at a time.

    Items inside a batch run concurrently; the next batch starts only
    once every item of the current one has finished. Per-item results
    are concatenated in item order.

    Args:
        items: Work items
        batch_size: Maximum number of workers in flight
        worker: Coroutine function returning a list of results per item

    Returns:
        Flattened results of all items
    """
    batches = partition(items, batch_size)
    results: List[R] = []
    processed = 0

    for number, batch in enumerate(batches, start=1):
        logger.info(
            f"Processing batch {number}/{len(batches)} of {len(batch)} items "
            f"({processed + 1} to {processed + len(batch)} of {len(items)})"
        )
        outcomes = await asyncio.gather(
            *(worker(item) for item in batch),
            return_exceptions=True
        )

        for item, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(
                    f"Worker failed for {item!r}: {outcome}",
                    extra={'error_type': type(outcome).__name__}
                )
                continue
            results.extend(outcome)

        processed += len(batch)

    return results
