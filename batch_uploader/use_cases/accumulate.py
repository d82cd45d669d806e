"""Use case for running the upload invoker over a whole batch."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from batch_uploader.models import BatchResult, UploadItem, UploadOutcome
from batch_uploader.use_cases.invoke_upload import InvokeUploadUseCase

logger = logging.getLogger(__name__)

ItemStartHook = Callable[[int, UploadItem], Awaitable[None]]
ItemDoneHook = Callable[[int, UploadOutcome], Awaitable[None]]


class AccumulateBatchUseCase:
    """
    Upload every item of a batch and collect one outcome per item.

    Sequential by default: item i+1 starts only after item i settled. With
    ``max_parallel > 1`` at most that many uploads are in flight; outcomes are
    still returned in input order, so partitions do not depend on completion order.
    """

    def __init__(
        self,
        invoke_upload: Optional[InvokeUploadUseCase] = None,
        max_parallel: int = 1,
    ):
        if max_parallel < 1:
            raise ValueError(f"max_parallel must be >= 1, got {max_parallel}")
        self._invoke_upload = invoke_upload or InvokeUploadUseCase()
        self._max_parallel = max_parallel

    async def execute(
        self,
        upload_capability: Any,
        items: Sequence[UploadItem],
        on_item_start: Optional[ItemStartHook] = None,
        on_item_done: Optional[ItemDoneHook] = None,
    ) -> BatchResult:
        items = list(items)
        if not items:
            return BatchResult()

        logger.info(
            "Starting batch: %d item(s), max_parallel=%d",
            len(items),
            self._max_parallel,
        )

        if self._max_parallel == 1 or len(items) == 1:
            outcomes = await self._run_sequential(upload_capability, items, on_item_start, on_item_done)
        else:
            outcomes = await self._run_bounded(upload_capability, items, on_item_start, on_item_done)

        result = BatchResult(outcomes)
        logger.info(
            "Batch complete: %d successful, %d failed (%d size, %d validation, %d other)",
            len(result.successes),
            len(result.failures),
            len(result.size_failures),
            len(result.valid_failures),
            len(result.other_failures),
        )
        return result

    async def _run_sequential(
        self,
        upload_capability: Any,
        items: List[UploadItem],
        on_item_start: Optional[ItemStartHook],
        on_item_done: Optional[ItemDoneHook],
    ) -> List[UploadOutcome]:
        outcomes: List[UploadOutcome] = []
        for index, item in enumerate(items):
            outcomes.append(
                await self._run_one(upload_capability, index, item, on_item_start, on_item_done)
            )
        return outcomes

    async def _run_bounded(
        self,
        upload_capability: Any,
        items: List[UploadItem],
        on_item_start: Optional[ItemStartHook],
        on_item_done: Optional[ItemDoneHook],
    ) -> List[UploadOutcome]:
        semaphore = asyncio.Semaphore(self._max_parallel)

        async def guarded(index: int, item: UploadItem) -> UploadOutcome:
            async with semaphore:
                return await self._run_one(upload_capability, index, item, on_item_start, on_item_done)

        tasks = [asyncio.create_task(guarded(i, item)) for i, item in enumerate(items)]
        try:
            # gather keeps input order regardless of which upload finishes first
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _run_one(
        self,
        upload_capability: Any,
        index: int,
        item: UploadItem,
        on_item_start: Optional[ItemStartHook],
        on_item_done: Optional[ItemDoneHook],
    ) -> UploadOutcome:
        if on_item_start:
            await on_item_start(index, item)
        outcome = await self._invoke_upload.execute(upload_capability, item)
        if on_item_done:
            await on_item_done(index, outcome)
        return outcome
