"""Observable values and subscription handles shared by the overlay and the globe tracker."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class Subscription:
    """Handle returned by every subscribe/start call. ``cancel()`` is idempotent."""

    def __init__(self, on_cancel: Callable[[], None] | None = None) -> None:
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        callback, self._on_cancel = self._on_cancel, None
        if callback is not None:
            callback()


class Signal(Generic[T]):
    """A value that notifies subscribers when it changes."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: list[Listener[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def get(self) -> T:
        return self._value

    def set(self, value: T) -> bool:
        if value == self._value:
            return False
        self._value = value
        # Copy so a listener may unsubscribe while being notified.
        for listener in list(self._listeners):
            listener(value)
        return True

    def subscribe(self, listener: Listener[T]) -> Subscription:
        self._listeners.append(listener)
        return Subscription(lambda: self._remove(listener))

    def listener_count(self) -> int:
        return len(self._listeners)

    def _remove(self, listener: Listener[T]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


class ScalarChannel(Signal[float]):
    """Single-writer float channel; the globe radius in pixels, ``0`` meaning no mask."""

    def __init__(self, value: float = 0.0) -> None:
        super().__init__(float(value))

    def publish(self, value: float) -> bool:
        return self.set(float(value))

    def css_value(self) -> str:
        value = self._value
        if value <= 0:
            return "0px"
        if value == int(value):
            return f"{int(value)}px"
        return f"{value:.1f}px"
