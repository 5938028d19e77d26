"""
Bounded worker pool.

A fixed number of threads pull task indices from one shared cursor until the
list is exhausted. Results land in the slot of their task index, so output
order always matches input order.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def run_pool(items: Sequence[T], worker: Callable[[T, int], R], concurrency: int) -> List[R]:
    """
    Run `worker(item, index)` for every item with at most `concurrency`
    workers in flight. Blocks until every task has finished.

    The pool does not catch task errors: `worker` should encode failures in
    its return value. An exception that does escape is re-raised after all
    workers have drained the cursor.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")
    total = len(items)
    if total == 0:
        return []

    results: List[R] = [None] * total
    cursor = 0
    cursor_lock = threading.Lock()

    def claim() -> int:
        nonlocal cursor
        with cursor_lock:
            i = cursor
            cursor += 1
            return i

    def runner():
        while True:
            i = claim()
            if i >= total:
                return
            results[i] = worker(items[i], i)

    n_workers = min(concurrency, total)
    with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="harvest") as executor:
        futures = [executor.submit(runner) for _ in range(n_workers)]
    for f in futures:
        f.result()
    return results
