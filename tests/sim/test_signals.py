from __future__ import annotations

from theatre.sim.signals import ScalarChannel, Signal, Subscription


def test_signal_notifies_only_on_change() -> None:
    signal: Signal[int] = Signal(1)
    seen: list[int] = []
    signal.subscribe(seen.append)

    assert signal.set(1) is False
    assert signal.set(2) is True
    assert signal.get() == 2
    assert seen == [2]


def test_listener_may_unsubscribe_while_notified() -> None:
    signal: Signal[str] = Signal("a")
    seen: list[str] = []
    holder: dict[str, Subscription] = {}

    def once(value: str) -> None:
        seen.append(value)
        holder["sub"].cancel()

    holder["sub"] = signal.subscribe(once)
    signal.subscribe(lambda value: seen.append(value.upper()))
    signal.set("b")
    signal.set("c")
    assert seen == ["b", "B", "C"]
    assert signal.listener_count() == 1


def test_subscription_cancel_is_idempotent() -> None:
    calls: list[int] = []
    subscription = Subscription(lambda: calls.append(1))
    subscription.cancel()
    subscription.cancel()
    assert calls == [1]
    assert subscription.active is False


def test_scalar_channel_css_value() -> None:
    channel = ScalarChannel()
    assert channel.css_value() == "0px"
    channel.publish(320)
    assert channel.css_value() == "320px"
    channel.publish(324.66)
    assert channel.css_value() == "324.7px"
    channel.publish(-5)
    assert channel.css_value() == "0px"
