"""Tests for the batch upload orchestrator and retry coordinator."""
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from batch_uploader import (
    BatchUploadOrchestrator,
    CollectingNotifier,
    ErrorKind,
    RetryCoordinator,
    SizeError,
    UploadConfig,
    ValidError,
)
from batch_uploader.messages import DEFAULT_MESSAGES, UPLOAD_FAILED
from tests.fakes import FakeUploader


def _build(failures=None, config=None):
    uploader = FakeUploader(failures)
    notifier = CollectingNotifier()
    orchestrator = BatchUploadOrchestrator(uploader, notifier, config=config)
    return orchestrator, uploader, notifier


class TestScenarios:
    @pytest.mark.asyncio
    async def test_success_and_size_error(self, items):
        orchestrator, _, notifier = _build({"b.pdf": SizeError("File too large")})

        await orchestrator.upload_batch(items("a.png", "b.pdf"))

        assert len(notifier.requests) == 1
        payload = notifier.requests[0].to_payload()
        assert payload == {
            "severity": "error",
            "message": "File too large",
            "affectedNames": ["b.pdf"],
            "isAggregate": False,
            "retryAction": None,
        }

    @pytest.mark.asyncio
    async def test_other_errors_retry_only_failed_items(self, items):
        orchestrator, uploader, notifier = _build({
            "a.gif": RuntimeError("503"),
            "b.gif": RuntimeError("503"),
        })

        await orchestrator.upload_batch(items("a.gif", "b.gif", "c.png"))

        (notification,) = notifier.requests
        assert notification.affected == ("a.gif", "b.gif")
        assert notification.is_aggregate is True
        assert notification.retry_action is not None

        uploader.calls.clear()
        uploader.failures.clear()
        notifier.clear()
        retry_cycle = await notification.retry_action()

        assert uploader.calls == ["a.gif", "b.gif"]
        assert retry_cycle.success is True
        assert notifier.requests == []

    @pytest.mark.asyncio
    async def test_valid_and_size_errors_never_retry(self, items):
        orchestrator, _, notifier = _build({
            "x.pdf": ValidError("Bad type"),
            "y.pdf": SizeError("Too big"),
        })

        cycle = await orchestrator.upload_batch(items("x.pdf", "y.pdf"))

        assert len(notifier.requests) == 2
        assert [n.kind for n in notifier.requests] == [ErrorKind.SIZE_ERROR, ErrorKind.VALID_ERROR]
        assert all(n.retry_action is None for n in notifier.requests)
        assert cycle.retry_actions == ()


class TestSingleItemBatch:
    @pytest.mark.asyncio
    async def test_success_is_silent(self, items):
        orchestrator, uploader, notifier = _build()

        cycle = await orchestrator.upload_batch(items("a.png"))

        assert cycle.success is True
        assert notifier.requests == []
        assert uploader.calls == ["a.png"]

    @pytest.mark.asyncio
    async def test_other_error_offers_retry(self, items):
        orchestrator, uploader, notifier = _build({"a.png": ConnectionError("reset")})

        await orchestrator.upload_batch(items("a.png"))

        (notification,) = notifier.requests
        assert notification.is_aggregate is False
        assert notification.message == DEFAULT_MESSAGES[UPLOAD_FAILED]
        assert isinstance(notification.retry_action, RetryCoordinator)
        assert notification.retry_action.names == ("a.png",)

        notifier.clear()
        await notification.retry_action()

        assert uploader.calls == ["a.png", "a.png"]
        (again,) = notifier.requests
        assert again.retry_action is not None


class TestRetry:
    @pytest.mark.asyncio
    async def test_retry_subset_shrinks_to_single_item_rules(self, items):
        orchestrator, uploader, notifier = _build({
            "a.gif": RuntimeError("x"),
            "b.gif": RuntimeError("y"),
        })
        await orchestrator.upload_batch(items("a.gif", "b.gif"))
        action = notifier.requests[0].retry_action

        del uploader.failures["a.gif"]
        notifier.clear()
        cycle = await action()

        # Two items are retried, so aggregate rules still apply; one failure left.
        (notification,) = cycle.notifications
        assert notification.affected == ("b.gif",)
        assert notification.retry_action.items == (action.items[1],)

        notifier.clear()
        final = await notification.retry_action()
        (single,) = final.notifications
        assert single.is_aggregate is False

    @pytest.mark.asyncio
    async def test_retry_set_excludes_deterministic_failures(self, items):
        orchestrator, _, notifier = _build({
            "a": RuntimeError("x"),
            "b": SizeError("big"),
            "c": ValidError("bad"),
            "d": RuntimeError("y"),
        })
        batch = items("a", "b", "c", "d", "e")

        cycle = await orchestrator.upload_batch(batch)

        (action,) = cycle.retry_actions
        assert action.items == (batch[0], batch[3])
        assert set(action.items).isdisjoint({batch[1], batch[2]})
        assert set(action.items) <= set(batch)

    @pytest.mark.asyncio
    async def test_empty_retry_is_noop(self):
        orchestrator, uploader, notifier = _build()
        notify = Mock()
        notifier.notify = notify

        result = await orchestrator.retry([])

        assert result is None
        assert uploader.calls == []
        notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self):
        orchestrator, uploader, notifier = _build()

        cycle = await orchestrator.upload_batch([])

        assert cycle.batch.total == 0
        assert cycle.notifications == ()
        assert uploader.calls == []
        assert notifier.requests == []

    @pytest.mark.asyncio
    async def test_coordinator_snapshot_is_immutable(self, items):
        orchestrator, _, _ = _build()
        source = items("a", "b")

        coordinator = orchestrator.retry_coordinator(source)
        source.append(items("c")[0])

        assert len(coordinator) == 2
        assert bool(orchestrator.retry_coordinator([])) is False


class TestDispatch:
    @pytest.mark.asyncio
    async def test_async_notifier(self, items):
        notifier = Mock()
        notifier.notify = AsyncMock()
        orchestrator = BatchUploadOrchestrator(FakeUploader({"a": RuntimeError("x")}), notifier)

        await orchestrator.upload_batch(items("a"))

        notifier.notify.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failing_notifier_does_not_stop_dispatch(self, items):
        notifier = Mock()
        notifier.notify = Mock(side_effect=[RuntimeError("ui gone"), None])
        orchestrator = BatchUploadOrchestrator(
            FakeUploader({"a": RuntimeError("x"), "b": RuntimeError("y"), "c": SizeError("big")}),
            notifier,
        )

        cycle = await orchestrator.upload_batch(items("a", "b", "c"))

        assert notifier.notify.call_count == 2
        assert len(cycle.notifications) == 2

    @pytest.mark.asyncio
    async def test_accepts_paths(self):
        orchestrator, uploader, _ = _build()

        cycle = await orchestrator.upload_batch([Path("/tmp/a.png"), "/tmp/b.png"])

        assert uploader.calls == ["a.png", "b.png"]
        assert cycle.batch.total == 2

    @pytest.mark.asyncio
    async def test_config_messages_override(self, items):
        config = UploadConfig(messages={UPLOAD_FAILED: "Try again later"})
        orchestrator, _, notifier = _build({"a": RuntimeError("x")}, config=config)

        await orchestrator.upload_batch(items("a"))

        assert notifier.requests[0].message == "Try again later"

    @pytest.mark.asyncio
    async def test_parallel_config(self, items):
        config = UploadConfig(max_parallel=4)
        orchestrator, uploader, _ = _build({"b": RuntimeError("x")}, config=config)

        cycle = await orchestrator.upload_batch(items("a", "b", "c"))

        assert [o.name for o in cycle.batch.outcomes] == ["a", "b", "c"]
        assert cycle.batch.retry_set[0].name == "b"


class TestEvents:
    @pytest.mark.asyncio
    async def test_lifecycle_events(self, items):
        orchestrator, _, _ = _build({"b": SizeError("big")})
        seen = []
        orchestrator.on_batch_start(lambda batch: seen.append(("start", len(batch))))
        orchestrator.on_item_start(lambda item: seen.append(("item", item.name)))
        orchestrator.on_item_complete(lambda outcome: seen.append(("ok", outcome.name)))
        orchestrator.on_item_fail(lambda outcome: seen.append(("fail", outcome.name)))
        orchestrator.on_notification(lambda n: seen.append(("notify", n.affected)))
        orchestrator.on_batch_finish(lambda cycle: seen.append(("finish", cycle.success)))

        await orchestrator.upload_batch(items("a", "b"))

        assert seen == [
            ("start", 2),
            ("item", "a"),
            ("ok", "a"),
            ("item", "b"),
            ("fail", "b"),
            ("notify", ("b",)),
            ("finish", False),
        ]

    @pytest.mark.asyncio
    async def test_progress_events(self, items):
        orchestrator, _, _ = _build({"a": RuntimeError("x")})
        snapshots = []
        orchestrator.on_progress(lambda p: snapshots.append((p.completed, p.uploaded, p.failed)))

        await orchestrator.upload_batch(items("a", "b"))

        assert snapshots == [(1, 0, 1), (2, 1, 1)]

    @pytest.mark.asyncio
    async def test_listener_errors_are_contained(self, items):
        orchestrator, uploader, _ = _build()

        def broken(_item):
            raise RuntimeError("listener bug")

        orchestrator.on_item_start(broken)
        cycle = await orchestrator.upload_batch(items("a"))

        assert cycle.success is True
        assert uploader.calls == ["a"]


class TestContextManager:
    @pytest.mark.asyncio
    async def test_enters_and_exits_capability(self):
        capability = Mock()
        capability.__aenter__ = AsyncMock(return_value=capability)
        capability.__aexit__ = AsyncMock(return_value=None)

        async with BatchUploadOrchestrator(capability) as orchestrator:
            assert isinstance(orchestrator, BatchUploadOrchestrator)

        capability.__aenter__.assert_awaited_once()
        capability.__aexit__.assert_awaited_once()
