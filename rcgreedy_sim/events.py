"""Jobs, events and the Poisson arrival stream used by the simulations."""

from __future__ import annotations

import heapq
import math
import random
from dataclasses import dataclass, field
from enum import IntEnum


class EventType(IntEnum):
    """Kinds of event handled by the simulation loop."""

    ARRIVAL = 0
    COMPLETION = 1


@dataclass
class Job:
    """A job flowing through a scheduler."""

    job_id: int
    last_queue_insertion: float = 0.0
    size: float = 0.0
    remaining_size: float = 0.0
    servers_allocated: float = 0.0
    p: float = 0.0


@dataclass(order=True)
class Event:
    """A timed event; events order by their time alone."""

    event_time: float
    event_type: EventType = field(default=EventType.ARRIVAL, compare=False)
    job: Job = field(default_factory=lambda: Job(0), compare=False)


def speedup_factor(p: float, servers: float) -> float:
    """Amdahl speedup of a job with parallel fraction ``p`` on ``servers`` servers.

    Zero servers give no speedup for a parallelizable job; for ``p == 0`` the
    value is undefined and NaN is returned.
    """
    if servers == 0:
        return 0.0 if p > 0 else math.nan
    return 1.0 / ((p / servers) + 1 - p)


def generate_events(
    num_events: int,
    arrival_lambda: float,
    job_size_lambda: float,
    rng: random.Random | None = None,
) -> list[Event]:
    """Generate ``num_events`` arrivals as a heap ordered by event time.

    Inter-arrival gaps are exponential with rate ``arrival_lambda``, job sizes
    exponential with rate ``job_size_lambda`` and speedup parameters uniform
    on [0, 1).
    """
    if arrival_lambda <= 0 or job_size_lambda <= 0:
        raise ValueError("rates must be positive")
    if num_events < 0:
        raise ValueError("num_events must not be negative")
    rng = rng if rng is not None else random.Random()

    events: list[Event] = []
    elapsed = 0.0
    for job_id in range(num_events):
        elapsed += rng.expovariate(arrival_lambda)
        size = rng.expovariate(job_size_lambda)
        job = Job(job_id, elapsed, size, size, 0.0, rng.random())
        events.append(Event(elapsed, EventType.ARRIVAL, job))
    heapq.heapify(events)
    return events