"""Retry command bound to an immutable snapshot of items."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, TYPE_CHECKING

from ..models import UploadItem

if TYPE_CHECKING:
    from .core import BatchCycleResult, BatchUploadOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class RetryCoordinator:
    """
    Resubmit exactly ``items`` as a brand new batch.

    Each call is an independent cycle: the single/multi rule is re-evaluated
    against ``len(items)`` and no attempt count is kept.

    Usage:
        action = notification.retry_action
        if action:
            cycle = await action()
    """
    orchestrator: "BatchUploadOrchestrator" = field(repr=False)
    items: Tuple[UploadItem, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    @classmethod
    def for_items(
        cls,
        orchestrator: "BatchUploadOrchestrator",
        items: Sequence[UploadItem],
    ) -> "RetryCoordinator":
        return cls(orchestrator=orchestrator, items=tuple(items))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(item.name for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    async def __call__(self) -> Optional["BatchCycleResult"]:
        if not self.items:
            logger.debug("Retry requested with nothing to retry; ignoring")
            return None
        logger.info("Retrying %d item(s): %s", len(self.items), ", ".join(self.names))
        return await self.orchestrator.upload_batch(self.items)
