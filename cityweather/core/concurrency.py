from __future__ import annotations

from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], R],
    concurrency: int,
    *,
    on_complete: Optional[Callable[[int, R], None]] = None,
) -> List[R]:
    """
    Run ``worker`` over ``items`` with at most ``concurrency`` calls in flight.

    A cursor walks the input; each time an in-flight call finishes its slot is
    handed to the next unstarted item. ``results[i]`` always belongs to
    ``items[i]`` no matter which call finishes first.

    A worker exception is re-raised straight away and items that were not yet
    admitted are never started. Callers that need per-item isolation must
    catch inside the worker.

    Args:
        items: Inputs to process.
        worker: Called once per item on a pool thread.
        concurrency: Upper bound on simultaneous worker calls (>= 1).
        on_complete: Optional ``(index, result)`` callback, run on the calling
            thread as each item finishes.

    Returns:
        Worker results in input order.
    """
    item_list = list(items)
    if not item_list:
        return []
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    results: List[Optional[R]] = [None] * len(item_list)
    in_flight: Dict[Future, int] = {}
    cursor = 0

    executor = ThreadPoolExecutor(
        max_workers=min(concurrency, len(item_list)),
        thread_name_prefix="cityweather",
    )
    try:
        while cursor < len(item_list) or in_flight:
            while cursor < len(item_list) and len(in_flight) < concurrency:
                future = executor.submit(worker, item_list[cursor])
                in_flight[future] = cursor
                cursor += 1

            done, _ = wait(list(in_flight), return_when=FIRST_COMPLETED)
            for future in done:
                index = in_flight.pop(future)
                result = future.result()
                results[index] = result
                if on_complete is not None:
                    on_complete(index, result)
    except BaseException:
        # Running calls cannot be interrupted; just stop waiting for them.
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown(wait=True)
    return results  # type: ignore[return-value]
