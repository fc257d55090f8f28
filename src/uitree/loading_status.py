"""Loading status tracking for dependencies and the components they touch."""

from dataclasses import dataclass
from typing import Any, Callable, Literal

from .store import Writable

Status = Literal["pending", "generating", "complete", "error"]


@dataclass
class ComponentLoadingStatus:
    """Status of the latest dependency run touching a component."""

    fn_index: int
    status: Status
    queue: bool = True
    queue_size: int | None = None
    queue_position: int | None = None
    eta: float | None = None
    message: str | None = None
    progress: list[dict[str, Any]] | None = None


class LoadingStatus:
    """
    Tracks dependency runs.

    Outputs stay ``pending`` while any dependency writing to them is pending.
    Inputs whose pending state changed are reported by
    ``get_inputs_to_update`` so they can be locked or released.
    """

    def __init__(self) -> None:
        self._store: Writable[dict[int, ComponentLoadingStatus]] = Writable({})
        self._fn_inputs: dict[int, list[int]] = {}
        self._fn_outputs: dict[int, list[int]] = {}
        self._pending_outputs: dict[int, int] = {}
        self._pending_inputs: dict[int, int] = {}
        self._inputs_to_update: dict[int, Status] = {}
        self._fn_status: dict[int, Status] = {}

    def register(self, fn_index: int, inputs: list[int], outputs: list[int]) -> None:
        """Record which components a dependency reads and writes."""
        self._fn_inputs[fn_index] = inputs
        self._fn_outputs[fn_index] = outputs

    def update(
        self,
        fn_index: int,
        status: Status,
        queue: bool = True,
        size: int | None = None,
        position: int | None = None,
        eta: float | None = None,
        message: str | None = None,
        progress: list[dict[str, Any]] | None = None,
    ) -> None:
        """
        Record a status change of one dependency.

        Args:
            fn_index: Dependency index
            status: New status
            queue: Whether the run is queued
            size: Queue size
            position: Position in the queue
            eta: Estimated seconds until completion
            message: Status message
            progress: Progress units reported by the backend
        """
        last_status = self._fn_status.get(fn_index)
        was_pending = last_status == "pending"
        is_pending = status == "pending"

        outputs_to_update: list[tuple[int, Status]] = []
        for id in self._fn_outputs.get(fn_index, []):
            count = self._pending_outputs.get(id, 0)
            if was_pending and not is_pending:
                count = max(count - 1, 0)
                self._pending_outputs[id] = count
                new_status: Status = "pending" if count > 0 else status
            elif is_pending and not was_pending:
                self._pending_outputs[id] = count + 1
                new_status = "pending"
            else:
                new_status = status
            outputs_to_update.append((id, new_status))

        for id in self._fn_inputs.get(fn_index, []):
            count = self._pending_inputs.get(id, 0)
            if was_pending and not is_pending:
                self._pending_inputs[id] = max(count - 1, 0)
                self._inputs_to_update[id] = status
            elif is_pending and not was_pending:
                self._pending_inputs[id] = count + 1
                self._inputs_to_update[id] = status
            else:
                self._inputs_to_update.pop(id, None)

        def apply(statuses: dict[int, ComponentLoadingStatus]) -> dict[int, ComponentLoadingStatus]:
            for id, new_status in outputs_to_update:
                statuses[id] = ComponentLoadingStatus(
                    fn_index=fn_index,
                    status=new_status,
                    queue=queue,
                    queue_size=size,
                    queue_position=position,
                    eta=eta,
                    message=message,
                    progress=progress,
                )
            return statuses

        self._store.update(apply)
        self._fn_status[fn_index] = status

    def get_status_for_fn(self, fn_index: int) -> Status | None:
        """Latest status of a dependency."""
        return self._fn_status.get(fn_index)

    def get_status_for_component(self, id: int) -> ComponentLoadingStatus | None:
        return self._store.get().get(id)

    def get_inputs_to_update(self) -> dict[int, Status]:
        """Input ids whose pending state changed on the last update."""
        return self._inputs_to_update

    def subscribe(self, subscriber: Callable[[dict[int, ComponentLoadingStatus]], None]):
        return self._store.subscribe(subscriber)


__all__ = ["LoadingStatus", "ComponentLoadingStatus", "Status"]
