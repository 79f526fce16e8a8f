"""Named one-shot and periodic tasks advanced by the tick loop."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

from tick_alignment.types import TickContext

TaskFn = Callable[[TickContext], None]


@dataclass
class Timer:
    """One-shot countdown. Fires when remaining reaches 0, then is removed."""

    name: str
    remaining: int
    fn: TaskFn


@dataclass
class Periodic:
    """Recurring task. Fires every `interval` ticks until cancelled."""

    name: str
    interval: int
    fn: TaskFn
    elapsed: int = 0


Task = Union[Timer, Periodic]


class Scheduler:
    """Owns every timer in a session, keyed by name.

    Owners release what they register with :meth:`cancel` or
    :meth:`cancel_prefix`; nothing outlives an explicit release.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def after(self, name: str, ticks: int, fn: TaskFn) -> None:
        """Run *fn* once after *ticks* ticks. Re-arms an existing timer of the same name."""
        if ticks < 1:
            raise ValueError(f"ticks must be >= 1, got {ticks}")
        existing = self._tasks.get(name)
        if isinstance(existing, Periodic):
            raise ValueError(f"Task {name!r} is already scheduled as periodic")
        self._tasks.pop(name, None)
        self._tasks[name] = Timer(name=name, remaining=ticks, fn=fn)

    def every(self, name: str, interval: int, fn: TaskFn) -> None:
        """Run *fn* every *interval* ticks. Raises ValueError if *name* is taken."""
        if interval < 1:
            raise ValueError(f"interval must be >= 1, got {interval}")
        if name in self._tasks:
            raise ValueError(f"Task {name!r} is already scheduled")
        self._tasks[name] = Periodic(name=name, interval=interval, fn=fn)

    def cancel(self, name: str) -> bool:
        """Remove a task. Returns False if it was not scheduled."""
        return self._tasks.pop(name, None) is not None

    def cancel_prefix(self, prefix: str) -> int:
        """Remove every task whose name starts with *prefix*. Returns the count."""
        names = [n for n in self._tasks if n.startswith(prefix)]
        for n in names:
            del self._tasks[n]
        return len(names)

    def has(self, name: str) -> bool:
        return name in self._tasks

    def remaining(self, name: str) -> int:
        """Ticks until the task next fires. Raises KeyError if not scheduled."""
        task = self._tasks[name]
        if isinstance(task, Timer):
            return task.remaining
        return task.interval - task.elapsed

    def names(self) -> list[str]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def advance(self, ctx: TickContext) -> None:
        """Advance every task by one tick, firing the due ones in registration order."""
        for name, task in list(self._tasks.items()):
            # Skip tasks cancelled or replaced by an earlier callback this tick.
            if self._tasks.get(name) is not task:
                continue
            if isinstance(task, Timer):
                task.remaining -= 1
                if task.remaining <= 0:
                    del self._tasks[name]
                    task.fn(ctx)
            else:
                task.elapsed += 1
                if task.elapsed >= task.interval:
                    task.elapsed = 0
                    task.fn(ctx)


def make_schedule_system(scheduler: Scheduler) -> Callable[[TickContext], None]:
    """Return a system that advances *scheduler* once per tick."""

    def schedule_system(ctx: TickContext) -> None:
        scheduler.advance(ctx)

    return schedule_system
