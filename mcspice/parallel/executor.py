# mcspice/parallel/executor.py
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Iterable, List, TypeVar

from mcspice import logs

T = TypeVar("T")


class ParallelExecutor:
    """
    ParallelExecutor（线程池）

    - 每个 item 一个 handler 调用（典型：一个 seed 一个仿真子进程）
    - 工作是等子进程，线程足够，不需要进程池
    - 结果按输入顺序返回
    - 任一失败：等全部 future 结束后抛出第一个失败（按输入顺序）
    """

    @staticmethod
    def run(
            *,
            items: Iterable[T],
            handler: Callable[[T], Any],
            max_workers: int | None = None,
            kind: str = "seed",
    ) -> List[Any]:
        items = list(items)
        if not items:
            logs.info("[ParallelExecutor] no items to process")
            return []

        logs.info(
            f"[ParallelExecutor] start "
            f"kind={kind} total={len(items)}"
        )

        workers = ParallelExecutor._resolve_workers(items, max_workers)

        if workers == 1:
            return ParallelExecutor._run_sequential(items, handler)
        return ParallelExecutor._run_parallel(items, handler, workers)

    # ---------------- internal ----------------

    @staticmethod
    def _resolve_workers(items: list, max_workers: int | None) -> int:
        cpu = os.cpu_count() or 1
        if max_workers is None:
            return min(cpu, len(items))
        return max(1, min(max_workers, len(items)))

    @staticmethod
    def _run_sequential(
            items: list,
            handler: Callable[[Any], Any],
    ) -> List[Any]:
        return [handler(item) for item in items]

    @staticmethod
    def _run_parallel(
            items: list,
            handler: Callable[[Any], Any],
            workers: int,
    ) -> List[Any]:
        logs.info(
            f"[ParallelExecutor] run parallel | workers={workers}"
        )

        results: List[Any] = [None] * len(items)
        errors: dict[int, BaseException] = {}

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(handler, item): i
                for i, item in enumerate(items)
            }
            for fut in as_completed(futures):
                i = futures[fut]
                try:
                    results[i] = fut.result()
                except Exception as e:
                    logs.error(f"[ParallelExecutor] item={items[i]} failed: {e}")
                    errors[i] = e

        if errors:
            raise errors[min(errors)]

        return results
