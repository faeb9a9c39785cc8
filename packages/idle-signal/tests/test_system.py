"""Integration tests for the signal system with the idle engine."""
from __future__ import annotations

from dataclasses import dataclass

from idle import Engine
from idle_signal import SignalBus, make_signal_system


@dataclass(frozen=True)
class Ticked:
    tick: int


def test_system_flushes_bus():
    bus = SignalBus()
    engine = Engine(tps=20)
    received = []
    bus.subscribe(Ticked, received.append)

    engine.add_system(lambda state, ctx: bus.publish(Ticked(ctx.tick_number)))
    engine.add_system(make_signal_system(bus))
    engine.run(2)

    assert received == [Ticked(1), Ticked(2)]


def test_signal_after_signal_system_deferred():
    """Events published after the flush in tick order wait a tick."""
    bus = SignalBus()
    engine = Engine(tps=20)
    received = []
    bus.subscribe(Ticked, lambda e: received.append(e.tick))

    engine.add_system(make_signal_system(bus))
    engine.add_system(lambda state, ctx: bus.publish(Ticked(ctx.tick_number)))
    engine.run(3)

    assert received == [1, 2]


def test_held_engine_does_not_flush():
    bus = SignalBus()
    engine = Engine(tps=20)
    received = []
    bus.subscribe(Ticked, received.append)
    engine.add_system(make_signal_system(bus))

    bus.publish(Ticked(0))
    engine.clock.hold("dialogue")
    engine.run(3)
    assert received == []

    engine.clock.release("dialogue")
    engine.step()
    assert received == [Ticked(0)]
