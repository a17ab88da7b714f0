import heapq
import math
import random

import pytest

from rcgreedy_sim.events import (
    Event,
    EventType,
    Job,
    generate_events,
    speedup_factor,
)


def test_generated_events_are_arrivals_with_code_zero():
    events = generate_events(5, 1.0, 1.0, random.Random(11))
    assert [int(e.event_type) for e in events] == [0] * 5
    assert all(e.event_type == EventType.ARRIVAL for e in events)
    assert all(e.event_type != EventType.COMPLETION for e in events)


def test_speedup_single_server_is_one():
    for p in (0.0, 0.25, 0.5, 0.99):
        assert speedup_factor(p, 1.0) == pytest.approx(1.0)


def test_speedup_sequential_job_is_one():
    for servers in (1.0, 2.5, 100.0):
        assert speedup_factor(0.0, servers) == pytest.approx(1.0)


def test_speedup_fully_parallel_equals_servers():
    for servers in (1.0, 4.0, 37.5):
        assert speedup_factor(1.0, servers) == pytest.approx(servers)


def test_speedup_increases_with_servers():
    values = [speedup_factor(0.7, s) for s in (1, 2, 4, 8, 16)]
    assert values == sorted(values)
    assert values[0] < values[-1]


def test_speedup_zero_servers():
    assert speedup_factor(0.5, 0) == 0.0
    assert math.isnan(speedup_factor(0.0, 0))


def test_events_order_by_time_only():
    early = Event(1.0, EventType.COMPLETION, Job(5))
    late = Event(2.0, EventType.ARRIVAL, Job(1))
    assert early < late
    assert Event(1.0, EventType.ARRIVAL, Job(1)) == Event(1.0, EventType.COMPLETION, Job(2))


def test_generate_events_count_and_ids():
    events = generate_events(50, 1.0, 2.0, random.Random(1))
    assert len(events) == 50
    assert sorted(e.job.job_id for e in events) == list(range(50))
    assert all(e.event_type is EventType.ARRIVAL for e in events)


def test_generate_events_pop_in_time_order_with_increasing_ids():
    events = generate_events(100, 2.0, 1.0, random.Random(7))
    popped = [heapq.heappop(events) for _ in range(100)]
    times = [e.event_time for e in popped]
    assert times == sorted(times)
    assert [e.job.job_id for e in popped] == list(range(100))


def test_generated_jobs_fields_consistent():
    for event in generate_events(40, 1.0, 3.0, random.Random(3)):
        job = event.job
        assert job.size == job.remaining_size
        assert job.size >= 0
        assert job.last_queue_insertion == event.event_time
        assert job.servers_allocated == 0.0
        assert 0.0 <= job.p < 1.0


def test_generate_events_deterministic_with_seed():
    first = generate_events(20, 1.0, 1.0, random.Random(42))
    second = generate_events(20, 1.0, 1.0, random.Random(42))
    assert [(e.event_time, e.job.size, e.job.p) for e in first] == [
        (e.event_time, e.job.size, e.job.p) for e in second
    ]


def test_generate_events_empty():
    assert generate_events(0, 1.0, 1.0) == []


@pytest.mark.parametrize("arrival, size", [(0.0, 1.0), (1.0, 0.0), (-1.0, 1.0)])
def test_generate_events_rejects_bad_rates(arrival, size):
    with pytest.raises(ValueError):
        generate_events(5, arrival, size)