# rcgreedy-sim

A discrete-event simulator that compares two policies for sharing a pool of
servers among parallelizable jobs:

- **EQUI** splits the servers evenly among all jobs in the system.
- **RCGREEDY** sorts jobs into a binary tree of groups by their speedup
  parameter `p`. At each level of the tree it splits the servers between the
  two child groups so as to maximize total throughput. The tree depth is at
  most 10.

Jobs arrive as a Poisson process and their sizes are exponentially
distributed. A job's speedup on `k` servers follows Amdahl's law:
`1 / (p / k + 1 - p)`.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install .[test]
pytest
```

## Command line

The `rcgreedy-sim` command has two modes, chosen by its first argument.

```
rcgreedy-sim 0
```

This runs a short self-check of both schedulers and prints `[PASS]` or
`[FAIL]` for each check. The exit status is 0 only if every check passed.

```
rcgreedy-sim 1 --trials 5 --option 1 --csv results.csv --graphs false
```

A first argument whose leading integer is non-zero selects experiment mode.
The command then runs one experiment sweep and writes averaged results to a
CSV file. All four options are required:

| Option      | Meaning                                              |
|-------------|------------------------------------------------------|
| `--trials`  | number of trials to average (at least 1)             |
| `--option`  | which experiment to run (see below)                  |
| `--csv`     | output file; it is overwritten                       |
| `--graphs`  | `true` or `1` for true, anything else for false      |

If an option is missing or malformed, the command prints the list of required
parameters and exits with status 1. It does the same if `--trials` is below 1.
If the command is given no arguments at all, it prints usage and exits with
status 1.

The experiments are:

1. Vary the number of servers from 50 to 200 in steps of 25. The remaining
   settings are arrival rate 1.0, job size rate 9.0, fractional servers,
   300 jobs, and a full reallocation before every scheduler call.
2. Vary the job size rate from 0.1 up to 20 in steps of 0.5. This uses
   1000 servers, arrival rate 20.0 and whole servers.
3. Vary the arrival rate from 0.5 to 2.5 in steps of 0.5. This uses
   100 servers and job size rate 1.0.
4. Compare fractional allocations (`True`) with whole-server allocations
   (`False`). This uses 100 servers, arrival rate 1.0 and job size rate 1.0.
5. Vary how often RCGREEDY performs a full reallocation: every 1, 5, 10, 15
   or 20 scheduler calls. This uses 100 servers, 1000 jobs and fractional
   servers.

Any other experiment number writes only the header line.

Each run covers EQUI and RCGREEDY at depths 1, 3, 4, 5, 7 and 8. The CSV has
the columns `Scheduler,Parameter,Value,AverageProcessingTime,AvgRealTime`.
`AverageProcessingTime` is the mean time from a job's arrival to its
completion in simulated time. `AvgRealTime` is the wall-clock time, in
seconds, spent inside the scheduler over a whole run. Both columns are
averaged over the trials.

## Using the library

```python
import random

from rcgreedy_sim.equi import Equi
from rcgreedy_sim.rcgreedy import RCGreedy, RCGreedyJob
from rcgreedy_sim.events import generate_events
from rcgreedy_sim.experiments import SchedulerFlag, experiments_new, simulation_runner

equi = Equi(10, True)
equi.insert_job(1)
equi.insert_job(2)
print(equi.allocation(1))          # 5.0
print(equi.all_allocations())      # [(1, 5.0), (2, 5.0)]

rcg = RCGreedy(8, 3, 0.5, False)
for job in (RCGreedyJob(1, 0.3), RCGreedyJob(2, 0.6), RCGreedyJob(3, 0.8)):
    rcg.add_job(job, False)
rcg.full_realloc()
print(rcg.all_server_counts())     # list of (job id, servers) pairs
print(rcg.server_count(RCGreedyJob(1)))

events = generate_events(300, 1.0, 9.0, random.Random(0))
result = simulation_runner(events, SchedulerFlag.R3, 1000, True, 3, 1, 9.0)
print(result.avg_processing_time)

results = experiments_new(SchedulerFlag.E | SchedulerFlag.R2, rng=random.Random(1))
```

The modules are:

- `rcgreedy_sim.events`: `Job`, `Event`, `EventType`, `speedup_factor` and
  `generate_events`. The last returns a heap of arrival events and takes an
  optional `random.Random` for reproducible runs.
- `rcgreedy_sim.equi`: the `Equi` scheduler. `insert_job` raises `ValueError`
  for a job that is already present. `delete_job` raises `KeyError` for a job
  that is not present.
- `rcgreedy_sim.rcgreedy`: the `RCGreedy` scheduler and `RCGreedyJob`.
  `server_changes()` returns the allocations changed by the last add, delete
  or full reallocation. Adding a job twice raises `ValueError`. Deleting or
  querying an unknown job raises `KeyError`.
- `rcgreedy_sim.experiments`: `SchedulerFlag`, `SimulationResults`,
  `simulation_runner`, `experiments_new`, `run_experiment_option`,
  `experiments`, and the CSV helpers `write_csv_header`, `write_csv_row` and
  `scheduler_name`.
- `rcgreedy_sim.cli`: `main` and `parse_args`.

## What it does not do

The `--graphs` option is accepted but has no effect. No plots are produced,
only the CSV file.