"""Observable value cell with set/update/subscribe semantics."""

from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscriber = Callable[[], None]


def _safe_not_equal(a: Any, b: Any) -> bool:
    # Containers and models can be mutated in place, so they always notify
    if isinstance(b, (list, dict, set)) or hasattr(b, "__dict__"):
        return True
    if a is b:
        return False
    try:
        return bool(a != b)
    except (TypeError, ValueError):
        return True


class Writable(Generic[T]):
    """
    Observable value.

    Subscribers are called once on subscription with the current value and
    again after every change.

    Examples:
        >>> store = Writable(0)
        >>> seen = []
        >>> unsubscribe = store.subscribe(seen.append)
        >>> store.update(lambda n: n + 1)
        >>> seen
        [0, 1]
    """

    def __init__(self, value: T | None = None) -> None:
        self._value = value
        self._subscribers: list[Subscriber] = []

    def get(self) -> T | None:
        """Current value."""
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and notify subscribers if it changed."""
        if not _safe_not_equal(self._value, value):
            return
        self._value = value
        for subscriber in list(self._subscribers):
            subscriber(value)

    def update(self, fn: Callable[[T | None], T]) -> None:
        """Set the value to ``fn(current)``."""
        self.set(fn(self._value))

    def subscribe(self, subscriber: Subscriber) -> Unsubscriber:
        """
        Register a subscriber.

        Returns:
            Callable that removes the subscriber
        """
        self._subscribers.append(subscriber)
        subscriber(self._value)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


__all__ = ["Writable"]
