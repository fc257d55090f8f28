"""
Update Scheduler
Coalesces prop updates into one flush per frame.
"""

import asyncio
from typing import Any, Callable, Iterable, Mapping, Protocol

from .core import get_logger
from .models import ComponentMeta, UpdateTransaction
from .monitoring import metrics_collector
from .store import Writable

logger = get_logger(__name__)


class FrameScheduler(Protocol):
    """Runs a callback once before the next frame."""

    def request_frame(self, callback: Callable[[], None]) -> None:
        ...


class LoopFrameScheduler:
    """
    Frame scheduler backed by the running asyncio loop.

    ``frame_interval`` of 0 runs the callback on the next loop iteration.
    """

    def __init__(self, frame_interval: float = 1 / 60) -> None:
        self.frame_interval = frame_interval

    def request_frame(self, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        if self.frame_interval > 0:
            loop.call_later(self.frame_interval, callback)
        else:
            loop.call_soon(callback)


def copy_value(value: Any) -> Any:
    """Shallow-copy container values so stored props never alias the caller's."""
    if isinstance(value, list):
        return list(value)
    if value is None:
        return None
    if isinstance(value, dict):
        return dict(value)
    return value


def _as_transaction(update: UpdateTransaction | Mapping[str, Any]) -> UpdateTransaction:
    if isinstance(update, UpdateTransaction):
        return update
    return UpdateTransaction(id=update["id"], prop=update["prop"], value=update.get("value"))


class UpdateScheduler:
    """
    Queues batches of prop updates and applies them in a single flush.

    Batches are applied in submission order and transactions in list order,
    so the last write to an ``(id, prop)`` wins. Every transaction is applied;
    nothing is merged away.
    """

    def __init__(
        self,
        layout: Writable[ComponentMeta],
        instance_map: Mapping[int, ComponentMeta],
        frame_scheduler: FrameScheduler,
        scheduled_updates: Writable[bool] | None = None,
    ) -> None:
        self.layout = layout
        self.instance_map = instance_map
        self.frame_scheduler = frame_scheduler
        self.scheduled_updates = scheduled_updates or Writable(False)
        self._pending: list[list[UpdateTransaction]] = []
        self._update_scheduled = False

    @property
    def update_scheduled(self) -> bool:
        """Whether a flush is waiting for the next frame."""
        return self._update_scheduled

    @property
    def pending_batches(self) -> int:
        return len(self._pending)

    def submit(self, updates: Iterable[UpdateTransaction | Mapping[str, Any]]) -> None:
        """
        Queue one batch of updates and schedule a flush if none is pending.

        Args:
            updates: Transactions as UpdateTransaction or ``{id, prop, value}`` dicts
        """
        self._pending.append([_as_transaction(u) for u in updates])

        if not self._update_scheduled:
            self._update_scheduled = True
            self.scheduled_updates.set(True)
            self.frame_scheduler.request_frame(self.flush)

    def flush(self) -> None:
        """
        Apply every queued batch as one layout store update.

        All or nothing: if any transaction names an unknown component, no
        prop is touched, the whole queue is dropped and KeyError is raised.
        """
        batches, self._pending = self._pending, []
        self._update_scheduled = False
        applied = 0

        unknown = sorted({u.id for batch in batches for u in batch if u.id not in self.instance_map})
        if unknown:
            self.scheduled_updates.set(False)
            logger.error(
                "flush_failed",
                unknown_ids=unknown,
                dropped_batches=len(batches),
                dropped_transactions=sum(len(batch) for batch in batches),
            )
            raise KeyError(unknown[0])

        def apply(layout: ComponentMeta | None) -> ComponentMeta | None:
            nonlocal applied
            for batch in batches:
                for update in batch:
                    instance = self.instance_map[update.id]
                    instance.props[update.prop] = copy_value(update.value)
                    applied += 1
            return layout

        try:
            self.layout.update(apply)
        finally:
            # A subscriber may have submitted (and scheduled) a new batch
            if not self._update_scheduled:
                self.scheduled_updates.set(False)

        metrics_collector.record_flush(applied)
        logger.debug("flushed", batches=len(batches), transactions=applied)


__all__ = ["FrameScheduler", "LoopFrameScheduler", "UpdateScheduler", "copy_value"]
