"""Core orchestrator - runs one upload cycle and dispatches its notifications."""
import inspect
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..messages import MessageProvider
from ..protocols import IMessageProvider, INotifier, IUploadCapability
from ..models import (
    BatchResult,
    NotificationRequest,
    UploadConfig,
    UploadItem,
    UploadOutcome,
)
from ..use_cases.accumulate import AccumulateBatchUseCase
from ..use_cases.aggregate import AggregateNotificationsUseCase
from ..use_cases.invoke_upload import InvokeUploadUseCase
from ..utils.events import BatchProgress, EventEmitter
from .retry import RetryCoordinator

logger = logging.getLogger(__name__)

ItemLike = Union[UploadItem, Path, str]


@dataclass(frozen=True)
class BatchCycleResult:
    """Everything one orchestration cycle produced."""
    batch: BatchResult
    notifications: Tuple[NotificationRequest, ...] = ()

    @property
    def success(self) -> bool:
        return self.batch.all_success

    @property
    def retry_actions(self) -> Tuple[RetryCoordinator, ...]:
        return tuple(n.retry_action for n in self.notifications if n.retry_action is not None)


def _to_items(items: Iterable[ItemLike]) -> List[UploadItem]:
    return [item if isinstance(item, UploadItem) else UploadItem.from_path(item) for item in items]


class BatchUploadOrchestrator:
    """
    Orchestrates batch uploads using injected capabilities.

    Follows:
    - Dependency Injection (upload capability, notifier and messages injected)
    - Single Responsibility (delegates to use cases)

    Usage:
        async with BatchUploadOrchestrator(uploader, notifier) as orchestrator:
            cycle = await orchestrator.upload_batch([Path("a.png"), Path("b.pdf")])
            for action in cycle.retry_actions:
                await action()
    """

    def __init__(
        self,
        upload_capability: IUploadCapability,
        notifier: Optional[INotifier] = None,
        config: Optional[UploadConfig] = None,
        messages: Optional[IMessageProvider] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            upload_capability: Object with ``upload_file(item)`` (sync or async)
            notifier: Object with ``notify(request)`` (sync or async); optional
            config: Upload configuration
            messages: Message provider; defaults to English strings plus config overrides
        """
        self._config = config or UploadConfig()
        self._upload_capability = upload_capability
        self._notifier = notifier
        self._messages = messages or MessageProvider(self._config.messages)
        self._events = EventEmitter()

        invoke_upload = InvokeUploadUseCase(self._messages)
        self._accumulate = AccumulateBatchUseCase(invoke_upload, self._config.max_parallel)
        self._aggregate = AggregateNotificationsUseCase(self._messages)

    async def __aenter__(self):
        enter = getattr(self._upload_capability, "__aenter__", None)
        if callable(enter):
            await enter()
        return self

    async def __aexit__(self, *args):
        exit_ = getattr(self._upload_capability, "__aexit__", None)
        if callable(exit_):
            await exit_(*args)

    @property
    def config(self) -> UploadConfig:
        return self._config

    # Event subscription methods
    def on_batch_start(self, callback: Callable[[Tuple[UploadItem, ...]], None]):
        """Called when a cycle starts. Receives the batch items."""
        self._events.on("batch_start", callback)

    def on_item_start(self, callback: Callable[[UploadItem], None]):
        """Called before an item is uploaded. Receives UploadItem."""
        self._events.on("item_start", callback)

    def on_item_complete(self, callback: Callable[[UploadOutcome], None]):
        """Called when an item uploaded successfully. Receives UploadOutcome."""
        self._events.on("item_complete", callback)

    def on_item_fail(self, callback: Callable[[UploadOutcome], None]):
        """Called when an item failed. Receives UploadOutcome."""
        self._events.on("item_fail", callback)

    def on_progress(self, callback: Callable[[BatchProgress], None]):
        """Called after every item. Receives BatchProgress."""
        self._events.on("progress", callback)

    def on_notification(self, callback: Callable[[NotificationRequest], None]):
        """Called for every dispatched notification. Receives NotificationRequest."""
        self._events.on("notification", callback)

    def on_batch_finish(self, callback: Callable[[BatchCycleResult], None]):
        """Called when a cycle finished. Receives BatchCycleResult."""
        self._events.on("batch_finish", callback)

    async def upload_batch(self, items: Iterable[ItemLike]) -> BatchCycleResult:
        """
        Run one orchestration cycle over ``items``.

        Uploads every item, then dispatches the resulting notifications. A batch
        of exactly one item is reported directly, larger batches per failure kind.
        """
        batch_items = tuple(_to_items(items))
        if not batch_items:
            logger.debug("Empty batch submitted; nothing to upload")
            return BatchCycleResult(BatchResult())

        await self._events.emit("batch_start", batch_items)
        progress = BatchProgress(total=len(batch_items))

        async def item_started(index: int, item: UploadItem) -> None:
            logger.info("[%d/%d] Uploading: %s", index + 1, progress.total, item.name)
            await self._events.emit("item_start", item)

        async def item_done(index: int, outcome: UploadOutcome) -> None:
            progress.completed += 1
            if outcome.success:
                progress.uploaded += 1
                await self._events.emit("item_complete", outcome)
            else:
                progress.failed += 1
                await self._events.emit("item_fail", outcome)
            status = "✓ Success" if outcome.success else "✗ Failed"
            logger.info("[%d/%d] %s: %s", index + 1, progress.total, status, outcome.name)
            await self._events.emit("progress", progress)

        batch = await self._accumulate.execute(
            self._upload_capability,
            batch_items,
            on_item_start=item_started,
            on_item_done=item_done,
        )

        notifications = self._aggregate.execute(
            batch,
            is_single_item_batch=len(batch_items) == 1,
            retry_factory=self.retry_coordinator,
        )
        for notification in notifications:
            await self._dispatch(notification)

        cycle = BatchCycleResult(batch, tuple(notifications))
        await self._events.emit("batch_finish", cycle)
        return cycle

    def retry_coordinator(self, items: Iterable[UploadItem]) -> RetryCoordinator:
        """Bind a retry command to a snapshot of ``items``."""
        return RetryCoordinator.for_items(self, tuple(items))

    async def retry(self, items: Iterable[UploadItem]) -> Optional[BatchCycleResult]:
        """Start a fresh cycle over ``items``; no-op for an empty set."""
        return await self.retry_coordinator(items)()

    async def _dispatch(self, notification: NotificationRequest) -> None:
        await self._events.emit("notification", notification)
        if self._notifier is None:
            return
        try:
            result = self._notifier.notify(notification)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.error(
                "Notifier failed for %s: %s",
                ", ".join(notification.affected),
                exc,
                exc_info=True,
            )
