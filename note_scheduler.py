# -*- coding: utf-8 -*-
########################
# note_scheduler.py
########################
# Purpose:
# - Delayed emission queue that merges independent event sources into one ordered timeline.
# - Holds chart arrivals, background note audio, key presses and ticks until their fire time.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Order is deterministic: sort by (fire_time_ms, sequence). The sequence number is assigned
#   at push time, so events with the same fire time are delivered in push order and each
#   source keeps its own internal order.
# - The queue never inspects payloads. Drivers decide what a payload means.
#
########################
# Interfaces:
# Public dataclasses:
# - ScheduledEvent(fire_time_ms: float, sequence: int, payload: object)
#
# Public classes:
# - class EventQueue
#   - push(fire_time_ms: float, payload: object) -> ScheduledEvent
#   - extend(items: Iterable[tuple[float, object]]) -> None
#   - peek_time_ms() -> Optional[float]
#   - pop_next() -> ScheduledEvent
#   - pop_due(now_ms: float) -> list[ScheduledEvent]
#   - clear() -> None
#   - __len__() -> int
#
# Inputs:
# - Fire times in milliseconds on the driver's clock, and opaque payloads.
#
# Outputs:
# - ScheduledEvent values in delivery order.
#
########################

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple


@dataclass(frozen=True, order=True)
class ScheduledEvent:
    fire_time_ms: float
    sequence: int
    payload: Any = field(compare=False)


class EventQueue:
    def __init__(self) -> None:
        self._heap: List[ScheduledEvent] = []
        self._counter = itertools.count()

    def __len__(self) -> int:
        return len(self._heap)

    def push(self, fire_time_ms: float, payload: Any) -> ScheduledEvent:
        event = ScheduledEvent(
            fire_time_ms=float(fire_time_ms),
            sequence=next(self._counter),
            payload=payload,
        )
        heapq.heappush(self._heap, event)
        return event

    def extend(self, items: Iterable[Tuple[float, Any]]) -> None:
        for fire_time_ms, payload in items:
            self.push(fire_time_ms, payload)

    def peek_time_ms(self) -> Optional[float]:
        if not self._heap:
            return None
        return float(self._heap[0].fire_time_ms)

    def pop_next(self) -> ScheduledEvent:
        if not self._heap:
            raise IndexError("pop from an empty EventQueue")
        return heapq.heappop(self._heap)

    def pop_due(self, now_ms: float) -> List[ScheduledEvent]:
        due: List[ScheduledEvent] = []
        cutoff = float(now_ms)
        while self._heap and self._heap[0].fire_time_ms <= cutoff:
            due.append(heapq.heappop(self._heap))
        return due

    def clear(self) -> None:
        self._heap.clear()


def _run_unit_tests() -> None:
    queue = EventQueue()
    queue.push(32.0, "tick-2")
    queue.push(16.0, "arrival-a")
    queue.push(16.0, "arrival-b")
    queue.push(0.0, "arrival-0")

    assert len(queue) == 4
    assert queue.peek_time_ms() == 0.0

    due = queue.pop_due(16.0)
    assert [event.payload for event in due] == ["arrival-0", "arrival-a", "arrival-b"]
    assert queue.pop_next().payload == "tick-2"
    assert queue.peek_time_ms() is None

    try:
        queue.pop_next()
    except IndexError:
        pass
    else:
        raise AssertionError("Expected IndexError on empty queue")


if __name__ == "__main__":
    _run_unit_tests()
    print("note_scheduler.py: ok")
