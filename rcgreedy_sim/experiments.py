"""Discrete-event simulations comparing EQUI with RCGREEDY variants."""

from __future__ import annotations

import heapq
import math
import random
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import IntFlag
from pathlib import Path

from .equi import Equi
from .events import Event, EventType, Job, generate_events, speedup_factor
from .rcgreedy import RCGreedy, RCGreedyJob

CSV_HEADER = "Scheduler,Parameter,Value,AverageProcessingTime,AvgRealTime\n"
MIN_SPEEDUP = 1e-6
COMPLETION_TOLERANCE = 1e-6


class SchedulerFlag(IntFlag):
    """Bit flags selecting which schedulers a run simulates."""

    E = 1
    R1 = 2
    R2 = 4
    R3 = 8
    R4 = 16
    R5 = 32
    R6 = 64
    R7 = 128
    R8 = 256
    R9 = 512


_RCGREEDY_DEPTHS = (
    (SchedulerFlag.R1, 1),
    (SchedulerFlag.R2, 2),
    (SchedulerFlag.R3, 3),
    (SchedulerFlag.R4, 4),
    (SchedulerFlag.R5, 5),
    (SchedulerFlag.R6, 6),
    (SchedulerFlag.R7, 7),
    (SchedulerFlag.R8, 8),
    (SchedulerFlag.R9, 9),
)

# Schedulers reported by the experiment sweeps; R9 is never reported there.
_REPORTED_FLAGS = (
    SchedulerFlag.E,
    SchedulerFlag.R1,
    SchedulerFlag.R2,
    SchedulerFlag.R3,
    SchedulerFlag.R4,
    SchedulerFlag.R5,
    SchedulerFlag.R6,
    SchedulerFlag.R7,
    SchedulerFlag.R8,
)

_DEFAULT_SCHEDULERS = (
    SchedulerFlag.E
    | SchedulerFlag.R1
    | SchedulerFlag.R3
    | SchedulerFlag.R4
    | SchedulerFlag.R5
    | SchedulerFlag.R7
    | SchedulerFlag.R8
)

_NAMES = {
    SchedulerFlag.E: "EQUI",
    SchedulerFlag.R1: "R1",
    SchedulerFlag.R2: "R2",
    SchedulerFlag.R3: "R3",
    SchedulerFlag.R4: "R4",
    SchedulerFlag.R5: "R5",
    SchedulerFlag.R6: "R6",
    SchedulerFlag.R7: "R7",
    SchedulerFlag.R8: "R8",
    SchedulerFlag.R9: "R9",
}


@dataclass
class SimulationResults:
    """Outcome of one simulation.

    ``avg_real_time`` holds the wall-clock seconds spent inside the scheduler
    over the whole run.
    """

    avg_processing_time: float = 0.0
    avg_real_time: float = 0.0


@dataclass
class _JobState:
    p: float
    arrival_time: float
    remaining_size: float
    current_speedup: float
    last_update_time: float
    expected_completion: float = 0.0


def scheduler_name(flag: int) -> str:
    """Display name of a single scheduler flag, or ``"Unknown"``."""
    for known, name in _NAMES.items():
        if flag == known:
            return name
    return "Unknown"


def write_csv_header(path: str | Path) -> None:
    """Create or truncate ``path`` and write the results header."""
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(CSV_HEADER)


def write_csv_row(
    path: str | Path,
    scheduler: str,
    param: str,
    value: float,
    results: SimulationResults,
) -> None:
    """Append one row of averaged results to ``path``."""
    line = (
        f"{scheduler},{param},{float(value):g},"
        f"{results.avg_processing_time:.7f},{results.avg_real_time:.7f}\n"
    )
    with open(path, "a", encoding="utf-8", newline="") as handle:
        handle.write(line)


def simulation_runner(
    events: Iterable[Event],
    scheduler: int,
    num_servers: int,
    partial_servers: bool,
    r_depth: int = 0,
    full_realloc_count: int = 10,
    job_size_lambda: float = 1.0,
) -> SimulationResults:
    """Run the arrival events through one scheduler until every job completes.

    The given events are left untouched.  ``scheduler`` is ``SchedulerFlag.E``
    for EQUI; anything else runs RCGREEDY with depth ``r_depth``.
    """
    queue = list(events)
    heapq.heapify(queue)
    use_equi = scheduler == SchedulerFlag.E

    equi: Equi | None = None
    rcgreedy: RCGreedy | None = None
    if use_equi:
        equi = Equi(num_servers, partial_servers)
    else:
        rcgreedy = RCGreedy(num_servers, r_depth, 1.0 / job_size_lambda, partial_servers)

    states: dict[int, _JobState] = {}
    processing_times: list[float] = []
    total_real_time = 0.0
    realloc_counter = full_realloc_count

    def update_job(job_id: int, now: float, servers: float) -> None:
        state = states[job_id]
        state.remaining_size -= state.current_speedup * (now - state.last_update_time)
        state.last_update_time = now
        speedup = speedup_factor(state.p, servers)
        if not speedup >= MIN_SPEEDUP:
            speedup = MIN_SPEEDUP
        state.current_speedup = speedup
        state.expected_completion = now + state.remaining_size / speedup
        heapq.heappush(
            queue,
            Event(state.expected_completion, EventType.COMPLETION, Job(job_id, p=state.p)),
        )

    def apply_allocation_changes(now: float) -> None:
        if equi is not None:
            for job_id, servers in equi.all_allocations():
                update_job(job_id, now, servers)
        else:
            for job_id, servers in rcgreedy.server_changes():
                if job_id in states:
                    update_job(job_id, now, servers)

    def maybe_full_realloc() -> None:
        nonlocal realloc_counter
        if realloc_counter == 0:
            rcgreedy.full_realloc()
            realloc_counter = full_realloc_count

    while queue:
        event = heapq.heappop(queue)
        now = event.event_time
        job_id = event.job.job_id

        if event.event_type == EventType.ARRIVAL:
            states[job_id] = _JobState(
                p=event.job.p,
                arrival_time=now,
                remaining_size=event.job.size,
                current_speedup=1.0,
                last_update_time=now,
            )
            start = time.perf_counter()
            if equi is not None:
                equi.insert_job(job_id)
            else:
                maybe_full_realloc()
                rcgreedy.add_job(RCGreedyJob(job_id, event.job.p), True)
                realloc_counter -= 1
            apply_allocation_changes(now)
            total_real_time += time.perf_counter() - start

        elif event.event_type == EventType.COMPLETION:
            state = states.get(job_id)
            if state is None:
                continue
            if abs(now - state.expected_completion) > COMPLETION_TOLERANCE:
                continue  # superseded by a later reschedule
            processing_times.append(now - state.arrival_time)

            start = time.perf_counter()
            if equi is not None:
                equi.delete_job(job_id)
            else:
                maybe_full_realloc()
                rcgreedy.delete_job(RCGreedyJob(job_id, state.p), True)
                realloc_counter -= 1
            apply_allocation_changes(now)
            del states[job_id]
            total_real_time += time.perf_counter() - start

    avg_processing = (
        math.fsum(processing_times) / len(processing_times) if processing_times else 0.0
    )
    return SimulationResults(avg_processing, total_real_time)


def experiments_new(
    options_to_run: int,
    num_servers: int = 1000,
    job_spacing_lambda: float = 1.0,
    job_size_lambda: float = 9.0,
    partial_servers: bool = True,
    jobs: int = 300,
    full_realloc_count: int = 1,
    rng: random.Random | None = None,
) -> list[SimulationResults]:
    """Simulate every selected scheduler on one shared stream of arrivals.

    Results come in the order EQUI, R1, ..., R9, skipping unselected ones.
    """
    base_events = generate_events(jobs, job_spacing_lambda, job_size_lambda, rng)
    results: list[SimulationResults] = []
    if options_to_run & SchedulerFlag.E:
        results.append(
            simulation_runner(base_events, SchedulerFlag.E, num_servers, partial_servers)
        )
    for flag, depth in _RCGREEDY_DEPTHS:
        if options_to_run & flag:
            results.append(
                simulation_runner(
                    base_events,
                    flag,
                    num_servers,
                    partial_servers,
                    depth,
                    full_realloc_count,
                    job_size_lambda,
                )
            )
    return results


def _float_range(start: float, stop: float, step: float) -> Iterator[float]:
    value = start
    while value <= stop:
        yield value
        value += step


def _sweep(option: int) -> tuple[str, list[tuple[float, dict]]] | None:
    if option == 1:
        return "Servers", [(s, {"num_servers": s}) for s in range(50, 201, 25)]
    if option == 2:
        return "JobSizeLambda", [
            (lam, {"num_servers": 1000, "job_spacing_lambda": 20.0,
                   "job_size_lambda": lam, "partial_servers": False})
            for lam in _float_range(0.1, 20, 0.5)
        ]
    if option == 3:
        return "JobSpacingLambda", [
            (lam, {"num_servers": 100, "job_spacing_lambda": lam, "job_size_lambda": 1.0})
            for lam in _float_range(0.5, 2.5, 0.5)
        ]
    if option == 4:
        return "PartialServers", [
            (partial, {"num_servers": 100, "job_spacing_lambda": 1.0,
                       "job_size_lambda": 1.0, "partial_servers": partial})
            for partial in (True, False)
        ]
    if option == 5:
        return "ReallocationFrequency", [
            (freq, {"num_servers": 100, "job_spacing_lambda": 1.0, "job_size_lambda": 1.0,
                    "partial_servers": True, "jobs": 1000, "full_realloc_count": freq})
            for freq in (1, 5, 10, 15, 20)
        ]
    return None


def run_experiment_option(
    option: int, trials: int, csv_file: str | Path, options_to_run: int
) -> None:
    """Run experiment ``option`` (1-5) and append per-scheduler averages to ``csv_file``.

    Unknown options write nothing.
    """
    if trials < 1:
        raise ValueError("trials must be >= 1")
    sweep = _sweep(option)
    if sweep is None:
        return
    param, points = sweep
    enabled = [flag for flag in _REPORTED_FLAGS if options_to_run & flag]

    for value, kwargs in points:
        totals = {flag: SimulationResults() for flag in enabled}
        for _ in range(trials):
            for flag, result in zip(enabled, experiments_new(options_to_run, **kwargs)):
                totals[flag].avg_processing_time += result.avg_processing_time
                totals[flag].avg_real_time += result.avg_real_time
        for flag, total in totals.items():
            average = SimulationResults(
                total.avg_processing_time / trials, total.avg_real_time / trials
            )
            write_csv_row(csv_file, scheduler_name(flag), param, value, average)


def experiments(
    trials: int, option: int, csv_output_file: str | Path, generate_graphs: bool
) -> None:
    """Write a fresh results file for experiment ``option`` over the default schedulers.

    ``generate_graphs`` is accepted but produces nothing.
    """
    write_csv_header(csv_output_file)
    run_experiment_option(option, trials, csv_output_file, _DEFAULT_SCHEDULERS)