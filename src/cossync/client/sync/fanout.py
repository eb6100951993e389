"""Structured fan-out/fan-in for concurrent tree operations.

This module provides:
- fan_out: Run a function over items on a bounded thread pool and wait for all
- FanOutResult: Per-item results in input order plus errors in completion order

Each call owns its own ThreadPoolExecutor, so a task may itself fan out
(recursion into subdirectories) without waiting on slots held by its parent.
Failures never cancel siblings that are already running; the caller sees
the first error observed and makes no assumption about the others.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class FanOutResult(Generic[R]):
    """Outcome of a fan-out.

    Attributes:
        results: One slot per input item, in input order (None if it failed).
        errors: Exceptions in the order their tasks completed.
    """

    results: list[R | None] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Check if every task succeeded."""
        return not self.errors

    @property
    def first_error(self) -> BaseException | None:
        """First error observed, or None."""
        return self.errors[0] if self.errors else None

    def raise_first(self) -> None:
        """Raise the first observed error, logging any others."""
        if not self.errors:
            return
        for extra in self.errors[1:]:
            logger.warning(f"Additional failure suppressed: {extra}")
        raise self.errors[0]

    def values(self) -> list[R]:
        """Results of the tasks that succeeded, in input order."""
        return [r for r in self.results if r is not None]


def fan_out(
    items: Sequence[T],
    func: Callable[[T], R],
    max_workers: int = 0,
    thread_name_prefix: str = "cossync",
) -> FanOutResult[R]:
    """Run ``func`` over ``items`` concurrently and wait for all of them.

    Args:
        items: Work items, one task each.
        func: Function applied to each item.
        max_workers: Maximum threads for this fan-out (0 = one per item).
        thread_name_prefix: Prefix for worker thread names.

    Returns:
        FanOutResult with ordered results and completion-ordered errors.
    """
    result: FanOutResult[R] = FanOutResult(results=[None] * len(items))
    if not items:
        return result

    workers = len(items) if max_workers <= 0 else min(max_workers, len(items))
    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix=thread_name_prefix
    ) as executor:
        futures: dict[Future[R], int] = {
            executor.submit(func, item): index for index, item in enumerate(items)
        }
        for future in as_completed(futures):
            error = future.exception()
            if error is not None:
                result.errors.append(error)
            else:
                result.results[futures[future]] = future.result()

    return result
