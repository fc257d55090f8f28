"""Tests for the observable store."""

import pytest

from uitree.store import Writable


@pytest.mark.unit
def test_subscribe_receives_current_value():
    """Test subscribers are called immediately."""
    store = Writable(1)
    seen = []
    store.subscribe(seen.append)

    assert seen == [1]


@pytest.mark.unit
def test_set_notifies_on_change_only():
    """Test equal scalar values do not notify."""
    store = Writable("a")
    seen = []
    store.subscribe(seen.append)

    store.set("a")
    store.set("b")

    assert seen == ["a", "b"]


@pytest.mark.unit
def test_containers_always_notify():
    """Test mutable containers notify even when identical."""
    value = {"x": 1}
    store = Writable(value)
    seen = []
    store.subscribe(seen.append)

    store.update(lambda v: v)

    assert len(seen) == 2


@pytest.mark.unit
def test_unsubscribe():
    """Test unsubscribed callbacks stop receiving values."""
    store = Writable(0)
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()

    store.set(1)

    assert seen == [0]
    assert store.subscriber_count == 0
    assert store.get() == 1
