"""Use case for turning a batch result into notification requests."""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from batch_uploader.messages import MessageProvider, message_id_for
from batch_uploader.models import (
    BatchResult,
    ErrorKind,
    NotificationRequest,
    UploadItem,
    UploadOutcome,
)

logger = logging.getLogger(__name__)

RetryFactory = Callable[[Sequence[UploadItem]], Any]

# Reporting order across partitions; independent of item order.
NOTIFICATION_ORDER: Tuple[ErrorKind, ...] = (
    ErrorKind.OTHER_ERROR,
    ErrorKind.SIZE_ERROR,
    ErrorKind.VALID_ERROR,
)


class AggregateNotificationsUseCase:
    """
    Decide which notifications a finished batch produces.

    Single-item batches get at most one direct notification. Multi-item batches
    get one notification per non-empty failure partition (at most three). Only
    transient failures are offered a retry, scoped to exactly their items.
    """

    def __init__(self, messages: Optional[Any] = None):
        self._messages = messages or MessageProvider()

    def execute(
        self,
        batch_result: BatchResult,
        is_single_item_batch: bool,
        retry_factory: Optional[RetryFactory] = None,
    ) -> List[NotificationRequest]:
        if is_single_item_batch:
            return self._single(batch_result, retry_factory)
        return self._aggregate(batch_result, retry_factory)

    def _single(
        self,
        batch_result: BatchResult,
        retry_factory: Optional[RetryFactory],
    ) -> List[NotificationRequest]:
        failures = batch_result.failures
        if not failures:
            return []
        if batch_result.total > 1:
            logger.warning(
                "Single-item reporting requested for a batch of %d; reporting first failure only",
                batch_result.total,
            )
        return [self._direct(failures[0], retry_factory)]

    def _aggregate(
        self,
        batch_result: BatchResult,
        retry_factory: Optional[RetryFactory],
    ) -> List[NotificationRequest]:
        notifications = []
        for kind in NOTIFICATION_ORDER:
            partition = batch_result.failures_of(kind)
            if not partition:
                continue
            if len(partition) == 1:
                notifications.append(self._direct(partition[0], retry_factory))
                continue
            items = [outcome.item for outcome in partition]
            notifications.append(
                NotificationRequest(
                    message=self._messages.get(message_id_for(kind, aggregate=True)),
                    affected=tuple(item.name for item in items),
                    is_aggregate=True,
                    retry_action=self._retry_action(kind, items, retry_factory),
                    kind=kind,
                )
            )
        return notifications

    def _direct(
        self,
        outcome: UploadOutcome,
        retry_factory: Optional[RetryFactory],
    ) -> NotificationRequest:
        return NotificationRequest(
            message=outcome.message or self._messages.get(message_id_for(outcome.kind)),
            affected=(outcome.name,),
            is_aggregate=False,
            retry_action=self._retry_action(outcome.kind, [outcome.item], retry_factory),
            kind=outcome.kind,
        )

    @staticmethod
    def _retry_action(
        kind: ErrorKind,
        items: Sequence[UploadItem],
        retry_factory: Optional[RetryFactory],
    ) -> Any:
        if retry_factory is None or not kind.retryable or not items:
            return None
        return retry_factory(tuple(items))
