"""Command-line entry point: run the built-in self-check or an experiment sweep."""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import TextIO

from .equi import Equi
from .experiments import experiments
from .rcgreedy import RCGreedy, RCGreedyJob

PROG = "rcgreedy-sim"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_REQUIRED_HELP = (
    "Required parameters:\n"
    "  --trials <number>\n"
    "  --option <experiment-number>\n"
    "  --csv <filename>\n"
    "  --graphs <true/false>\n"
)


@dataclass(frozen=True)
class ExperimentOptions:
    """Parameters of one experiment run."""

    trials: int
    option: int
    csv_output_file: str
    generate_graphs: bool


def _leading_int(text: str) -> int | None:
    """Integer at the start of ``text`` (after whitespace), or None."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def _take(args: list[str], flag: str) -> str | None:
    """Remove ``flag`` and its value from ``args`` and return the value."""
    try:
        index = args.index(flag)
    except ValueError:
        return None
    if index + 1 >= len(args):
        return None
    value = args[index + 1]
    del args[index : index + 2]
    return value


def _take_int(args: list[str], flag: str) -> int | None:
    try:
        index = args.index(flag)
    except ValueError:
        return None
    if index + 1 >= len(args):
        return None
    value = _leading_int(args[index + 1])
    if value is None:
        return None
    del args[index : index + 2]
    return value


def parse_args(argv: list[str]) -> ExperimentOptions:
    """Parse experiment options; raise ValueError if any is missing or malformed.

    ``--graphs`` is true only for ``true`` or ``1``.
    """
    args = list(argv)
    trials = _take_int(args, "--trials")
    if trials is None:
        raise ValueError("Missing required parameters")
    option = _take_int(args, "--option")
    if option is None:
        raise ValueError("Missing required parameters")
    csv_output_file = _take(args, "--csv")
    if csv_output_file is None:
        raise ValueError("Missing required parameters")
    graphs = _take(args, "--graphs")
    if graphs is None:
        raise ValueError("Missing required parameters")
    return ExperimentOptions(trials, option, csv_output_file, graphs in ("true", "1"))


def _self_check(out: TextIO) -> bool:
    """Run quick sanity checks of both schedulers, reporting each on ``out``."""
    checks: list[tuple[str, bool]] = []

    equi = Equi(4, False)
    equi.insert_job(1)
    checks.append(("EQUI Insert", equi.job_exists(1)))
    equi.delete_job(1)
    checks.append(("EQUI Delete", not equi.job_exists(1)))

    equi = Equi(6, False)
    for job_id in (1, 2, 3):
        equi.insert_job(job_id)
    total = math.fsum(servers for _, servers in equi.all_allocations())
    checks.append(("EQUI Allocation Sum", abs(total - 6.0) < 1e-6))

    equi = Equi(10, True)
    equi.insert_job(1)
    equi.insert_job(2)
    checks.append(("EQUI Partial Allocation", abs(equi.allocation(1) - 5.0) < 1e-6))

    scheduler = RCGreedy(8, 3, 0.5)
    for job in (RCGreedyJob(1, 0.3), RCGreedyJob(2, 0.6), RCGreedyJob(3, 0.8)):
        scheduler.add_job(job, False)
    scheduler.full_realloc()
    total = math.fsum(servers for _, servers in scheduler.all_server_counts())
    checks.append(("RCGREEDY Allocation Sum", abs(total - 8.0) < 1e-6))

    for name, passed in checks:
        status = "PASS" if passed else "FAIL"
        out.write(f"[{status}] {name}: Test {'passed' if passed else 'failed'}\n")
    return all(passed for _, passed in checks)


def main(argv: list[str] | None = None) -> int:
    """Run the program; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write(
            f"Usage:\n  {PROG} 0\n  {PROG} <flag> [experiment options]\n"
        )
        return 1

    mode = _leading_int(args[0]) or 0
    if mode == 0:
        return 0 if _self_check(sys.stdout) else 1

    try:
        options = parse_args(args[1:])
    except ValueError as exc:
        sys.stderr.write(f"Error: {exc}\n{_REQUIRED_HELP}")
        return 1

    if options.trials < 1:
        sys.stderr.write("trials must be >= 1\n")
        return 1

    experiments(
        options.trials, options.option, options.csv_output_file, options.generate_graphs
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())