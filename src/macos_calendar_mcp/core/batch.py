"""Partial-failure aggregation for multi-item calendar operations.

``run_batch`` attempts every item and reports each outcome; ``fan_out`` merges
results from many targets and drops the targets that fail.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..domain import BatchItemResult, BatchReport, ErrorKind, ExecutionOutcome, Failure, FanOutResult
from .errors import CalendarError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def _attempt(item: T, per_item: Callable[[T], Awaitable[ExecutionOutcome]]) -> ExecutionOutcome:
    try:
        return await per_item(item)
    except CalendarError as exc:
        return Failure(exc.kind, exc.message, exc.suggestion)
    except asyncio.CancelledError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("Batch item failed unexpectedly")
        return Failure(ErrorKind.UNKNOWN, str(exc) or type(exc).__name__)


async def run_batch(
    items: Sequence[T],
    per_item: Callable[[T], Awaitable[ExecutionOutcome]],
    *,
    max_concurrency: int = 1,
) -> BatchReport[T]:
    """Attempt every item and return one result per item, in input order.

    A failing item never stops its siblings. ``per_item`` may raise
    :class:`CalendarError` (for example a validation error before any process
    is started); that is recorded as the item's failure.
    """

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _guarded(index: int, item: T) -> BatchItemResult[T]:
        async with semaphore:
            outcome = await _attempt(item, per_item)
        if not outcome.ok:
            logger.info("Batch item %d failed (%s): %s", index, outcome.kind.value, outcome.message)
        return BatchItemResult(index=index, input=item, outcome=outcome)

    results = await asyncio.gather(*(_guarded(index, item) for index, item in enumerate(items)))
    report = BatchReport(items=tuple(results))
    logger.info("Batch finished: %d succeeded, %d failed", report.success_count, report.fail_count)
    return report


async def fan_out(
    targets: Sequence[T],
    per_target: Callable[[T], Awaitable[ExecutionOutcome]],
    collect: Callable[[T, str], Sequence[R]],
    *,
    max_concurrency: int,
    result_cap: int,
) -> FanOutResult[T, R]:
    """Run ``per_target`` for every target and merge what ``collect`` extracts.

    Failed targets are left out of the matches and reported in ``skipped``.
    When the merged match count reaches ``result_cap`` the remaining targets
    are cancelled and the result is marked truncated.
    """

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _guarded(target: T) -> ExecutionOutcome:
        async with semaphore:
            return await _attempt(target, per_target)

    tasks: Dict["asyncio.Task[ExecutionOutcome]", int] = {
        asyncio.ensure_future(_guarded(target)): index for index, target in enumerate(targets)
    }
    slots: List[Optional[Sequence[R]]] = [None] * len(targets)
    skipped: List[Tuple[int, Failure]] = []
    collected = 0
    truncated = False
    pending = set(tasks)

    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                index = tasks[task]
                outcome = task.result()
                if not outcome.ok:
                    logger.info("Skipping %r: %s (%s)", targets[index], outcome.message, outcome.kind.value)
                    skipped.append((index, outcome))
                    continue
                matches = collect(targets[index], outcome.stdout)
                slots[index] = matches
                collected += len(matches)
            if collected >= result_cap:
                truncated = collected > result_cap or bool(pending)
                break
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    merged: List[R] = []
    searched: List[T] = []
    for index, matches in enumerate(slots):
        if matches is None:
            continue
        searched.append(targets[index])
        merged.extend(matches)
    skipped.sort(key=lambda pair: pair[0])
    return FanOutResult(
        matches=tuple(merged[:result_cap]),
        searched=tuple(searched),
        skipped=tuple((targets[index], failure) for index, failure in skipped),
        truncated=truncated,
    )
