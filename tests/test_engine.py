"""Tests for Engine."""
from tick_alignment.engine import Engine
from tick_alignment.types import TickContext


def test_run_calls_systems_in_order() -> None:
    engine = Engine(tps=100, seed=1)
    calls: list[tuple[str, int]] = []
    engine.add_system(lambda ctx: calls.append(("a", ctx.tick_number)))
    engine.add_system(lambda ctx: calls.append(("b", ctx.tick_number)))
    engine.run(2)
    assert calls == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]


def test_step_advances_one_tick() -> None:
    engine = Engine()
    engine.step()
    assert engine.clock.tick_number == 1


def test_request_stop_ends_run() -> None:
    engine = Engine(seed=1)

    def stopper(ctx: TickContext) -> None:
        if ctx.tick_number == 3:
            ctx.request_stop()

    engine.add_system(stopper)
    engine.run(10)
    assert engine.clock.tick_number == 3


def test_run_forever_stops_on_request() -> None:
    engine = Engine(tps=1000, seed=1)

    def stopper(ctx: TickContext) -> None:
        if ctx.tick_number == 5:
            ctx.request_stop()

    engine.add_system(stopper)
    engine.run_forever()
    assert engine.clock.tick_number == 5


def test_seed_is_reproducible() -> None:
    a = Engine(seed=7)
    b = Engine(seed=7)
    assert [a.random.random() for _ in range(3)] == [b.random.random() for _ in range(3)]
    assert a.seed == 7


def test_random_seed_when_none() -> None:
    assert isinstance(Engine().seed, int)


def test_context_between_ticks() -> None:
    engine = Engine(seed=3)
    engine.run(4)
    ctx = engine.context()
    assert ctx.tick_number == 4
    assert ctx.random is engine.random
