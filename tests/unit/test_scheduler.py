"""Tests for the batched update scheduler."""

import asyncio

import pytest
from structlog.testing import capture_logs

from uitree.models import ComponentMeta, UpdateTransaction
from uitree.scheduler import LoopFrameScheduler, UpdateScheduler, copy_value
from uitree.store import Writable


@pytest.fixture
def instance_map():
    """Two components keyed by id."""
    return {
        1: ComponentMeta(id=1, type="textbox", props={"value": ""}),
        2: ComponentMeta(id=2, type="json", props={"value": None}),
    }


@pytest.fixture
def layout(instance_map):
    """Published layout store."""
    return Writable(instance_map[1])


@pytest.fixture
def scheduler(layout, instance_map, frame_scheduler):
    """Scheduler driven by the manual frame scheduler."""
    return UpdateScheduler(layout, instance_map, frame_scheduler)


@pytest.mark.unit
def test_submit_schedules_one_frame(scheduler, frame_scheduler):
    """Test many submits before a frame request only one flush."""
    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])
    scheduler.submit([{"id": 1, "prop": "label", "value": "Name"}])
    scheduler.submit([{"id": 2, "prop": "value", "value": 3}])

    assert len(frame_scheduler.callbacks) == 1
    assert scheduler.update_scheduled is True
    assert scheduler.pending_batches == 3


@pytest.mark.unit
def test_last_write_wins(scheduler, frame_scheduler, instance_map):
    """Test later batches overwrite earlier ones in a single flush."""
    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])
    scheduler.submit([{"id": 1, "prop": "value", "value": "b"}])

    assert frame_scheduler.run_frame() == 1
    assert instance_map[1].props["value"] == "b"
    assert scheduler.update_scheduled is False
    assert scheduler.pending_batches == 0


@pytest.mark.unit
def test_order_within_batch(scheduler, frame_scheduler, instance_map):
    """Test transactions within a batch apply in list order."""
    scheduler.submit(
        [
            UpdateTransaction(id=1, prop="value", value="first"),
            UpdateTransaction(id=1, prop="value", value="second"),
        ]
    )
    frame_scheduler.run_frame()

    assert instance_map[1].props["value"] == "second"


@pytest.mark.unit
def test_nothing_applied_before_flush(scheduler, instance_map):
    """Test props are untouched until the frame runs."""
    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])

    assert instance_map[1].props["value"] == ""


@pytest.mark.unit
def test_list_values_are_copied(scheduler, frame_scheduler, instance_map):
    """Test the caller's list is not aliased by the stored prop."""
    value = [1, 2, 3]
    scheduler.submit([{"id": 2, "prop": "value", "value": value}])
    frame_scheduler.run_frame()
    value.append(4)

    assert instance_map[2].props["value"] == [1, 2, 3]


@pytest.mark.unit
def test_dict_values_are_copied(scheduler, frame_scheduler, instance_map):
    """Test the caller's dict is not aliased by the stored prop."""
    value = {"a": 1}
    scheduler.submit([{"id": 2, "prop": "value", "value": value}])
    frame_scheduler.run_frame()
    value["b"] = 2

    assert instance_map[2].props["value"] == {"a": 1}


@pytest.mark.unit
def test_none_assigned_as_is(scheduler, frame_scheduler, instance_map):
    """Test None clears a prop."""
    instance_map[2].props["value"] = [1]
    scheduler.submit([{"id": 2, "prop": "value", "value": None}])
    frame_scheduler.run_frame()

    assert instance_map[2].props["value"] is None


@pytest.mark.unit
def test_flush_notifies_layout_once(scheduler, frame_scheduler, layout):
    """Test observers see one transition per flush."""
    seen = []
    layout.subscribe(seen.append)
    seen.clear()

    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])
    scheduler.submit([{"id": 2, "prop": "value", "value": "b"}])
    frame_scheduler.run_frame()

    assert len(seen) == 1


@pytest.mark.unit
def test_scheduled_updates_store(scheduler, frame_scheduler):
    """Test the pending flag store follows the flush lifecycle."""
    seen = []
    scheduler.scheduled_updates.subscribe(seen.append)

    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])
    frame_scheduler.run_frame()

    assert seen == [False, True, False]


@pytest.mark.unit
def test_submit_during_flush_schedules_next_frame(scheduler, frame_scheduler, layout, instance_map):
    """Test a batch submitted by an observer lands in the following flush."""
    resubmitted = []

    def observer(_):
        if not resubmitted and instance_map[1].props["value"] == "a":
            resubmitted.append(True)
            scheduler.submit([{"id": 1, "prop": "value", "value": "b"}])

    layout.subscribe(observer)
    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])
    frame_scheduler.run_frame()

    assert scheduler.update_scheduled is True
    assert scheduler.scheduled_updates.get() is True

    frame_scheduler.run_frame()
    assert instance_map[1].props["value"] == "b"


@pytest.mark.unit
def test_unknown_id_raises(scheduler, frame_scheduler):
    """Test lookups for unknown components fail at flush time."""
    scheduler.submit([{"id": 99, "prop": "value", "value": "a"}])

    with pytest.raises(KeyError):
        frame_scheduler.run_frame()
    assert scheduler.update_scheduled is False


@pytest.mark.unit
def test_unknown_id_drops_queue_without_partial_apply(scheduler, frame_scheduler, layout, instance_map):
    """Test a bad transaction leaves every prop untouched and is logged."""
    published = []
    layout.subscribe(published.append)
    scheduler.submit([{"id": 1, "prop": "value", "value": "kept out"}])
    scheduler.submit([{"id": 99, "prop": "value", "value": "a"}, {"id": 2, "prop": "value", "value": [1]}])

    with capture_logs() as logs:
        with pytest.raises(KeyError):
            frame_scheduler.run_frame()

    assert instance_map[1].props["value"] == ""
    assert instance_map[2].props["value"] is None
    assert len(published) == 1
    assert scheduler.pending_batches == 0
    assert scheduler.scheduled_updates.get() is False
    failure = next(entry for entry in logs if entry["event"] == "flush_failed")
    assert failure["unknown_ids"] == [99]
    assert failure["dropped_batches"] == 2
    assert failure["dropped_transactions"] == 3


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [([1], [1]), ({"a": 1}, {"a": 1}), (None, None), ("s", "s"), (3, 3), ((1, 2), (1, 2))],
)
def test_copy_value(value, expected):
    """Test copy rules per value kind."""
    copied = copy_value(value)
    assert copied == expected
    if isinstance(value, (list, dict)):
        assert copied is not value


@pytest.mark.unit
@pytest.mark.asyncio
async def test_loop_frame_scheduler_runs_flush(layout, instance_map):
    """Test the asyncio frame scheduler flushes on the next loop iteration."""
    scheduler = UpdateScheduler(layout, instance_map, LoopFrameScheduler(frame_interval=0))

    scheduler.submit([{"id": 1, "prop": "value", "value": "a"}])
    await asyncio.sleep(0.01)

    assert instance_map[1].props["value"] == "a"
    assert scheduler.update_scheduled is False
