"""The RCGREEDY scheduler.

Jobs are bucketed by their speedup parameter ``p`` into a binary tree of
groups.  Servers are split between sibling groups with the GREEDY* rule and
shared equally between the jobs of a leaf group.  Group allocations are
updated lazily: a group whose ``update_count`` is older than its parent's
holds a stale allocation.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field

from .events import speedup_factor

MAX_DEPTH = 10
EPSILON = 1e-6


@dataclass(frozen=True)
class RCGreedyJob:
    """A job as seen by the scheduler; jobs are equal when their ids are."""

    job_id: int
    p: float = field(default=0.0, compare=False)


@dataclass
class _Group:
    job_count: int = 0
    allocated_servers: int = 0
    update_count: int = 0
    total_p: float = 0.0


class RCGreedy:
    """Recursive greedy server allocation over groups of similar jobs."""

    def __init__(
        self,
        servers: int,
        max_depth: int,
        average_size: float,
        partial_servers: bool = False,
    ) -> None:
        if average_size <= 0:
            raise ValueError("average_size must be positive")
        self.current_depth = max(0, min(max_depth, MAX_DEPTH))
        self.partial_servers = partial_servers
        self.total_servers = servers
        self._maximization_constant = 1.0 / average_size
        self._groups: defaultdict[str, _Group] = defaultdict(_Group)
        self._jobs_by_group: defaultdict[str, dict[int, RCGreedyJob]] = defaultdict(dict)
        self._assignments: dict[int, str] = {}
        self._max_update = 0
        self._history: list[tuple[int, float]] = []
        self._groups[""] = _Group(allocated_servers=servers)

    def full_realloc(self) -> None:
        """Reallocate servers across the whole tree."""
        self._max_update += 1
        self._history.clear()
        if not self._groups[""].job_count:
            return
        self._partial_realloc("")

    def add_job(self, job: RCGreedyJob, forced_local_realloc: bool = False) -> None:
        """Add a job; raise ValueError if it is already present.

        With ``forced_local_realloc``, if the job's group has no servers the
        nearest ancestor that has servers is reallocated downwards.
        """
        if job.job_id in self._assignments:
            raise ValueError(f"job {job.job_id} already exists")

        group = self._group_id(job)
        self._jobs_by_group[group][job.job_id] = job
        last_level_with_servers = ""
        current_update = self._groups[""].update_count
        self._history.clear()

        for length in range(len(group) + 1):
            level = group[:length]
            node = self._groups[level]
            if node.update_count >= current_update:
                current_update = node.update_count
                if node.allocated_servers > node.job_count or (
                    node.allocated_servers and self.partial_servers
                ):
                    last_level_with_servers = level
            else:
                node.update_count = current_update
                node.allocated_servers = 0
            node.job_count += 1
            node.total_p += job.p

        if forced_local_realloc and group != last_level_with_servers:
            self._max_update += 1
            self._partial_realloc(last_level_with_servers)
        else:
            self._history.extend(self.job_group_server_count(job))

    def delete_job(self, job: RCGreedyJob, forced_local_realloc: bool = False) -> None:
        """Remove a job; raise KeyError if it is not present.

        With ``forced_local_realloc`` and the job being the last of its group,
        the group's servers move to the nearest subtree that still has jobs.
        """
        group = self._assignments.get(job.job_id)
        if group is None:
            raise KeyError(f"job {job.job_id} doesn't exist")

        self._history.clear()
        stored = self._jobs_by_group[group][job.job_id]
        leaf = self._groups[group]
        forced = forced_local_realloc and leaf.job_count == 1
        released = leaf.allocated_servers if forced else 0
        target = ""

        for length in range(len(group), -1, -1):
            level = group[:length]
            node = self._groups[level]
            node.job_count -= 1
            node.total_p -= stored.p
            if forced and not target:
                if node.job_count:
                    target = level + ("0" if group[length] == "1" else "1")
                elif level:
                    node.allocated_servers -= released

        del self._jobs_by_group[group][job.job_id]

        if forced and target:
            self._groups[target].allocated_servers += released
            self._max_update += 1
            self._partial_realloc(target)
        elif self._groups[group].job_count:
            self._history.extend(self.job_group_server_count(job))
        del self._assignments[job.job_id]

    def server_count(self, job: RCGreedyJob) -> float:
        """Servers allocated to one job; raise KeyError if it is unknown."""
        group = self._assignments.get(job.job_id)
        if group is None:
            raise KeyError(f"job {job.job_id} doesn't exist")
        node = self._groups[group]
        if node.job_count == 0:
            raise ValueError(f"group {group!r} has no jobs")
        if node.job_count == 1:
            return float(node.allocated_servers)
        if self.partial_servers:
            return node.allocated_servers / node.job_count
        base, remainder = divmod(node.allocated_servers, node.job_count)
        for index, job_id in enumerate(self._jobs_by_group[group]):
            if index >= remainder:
                break
            if job_id == job.job_id:
                return float(base + 1)
        return float(base)

    def job_group_server_count(self, job: RCGreedyJob) -> list[tuple[int, float]]:
        """Allocations of every job in the given job's group."""
        group = self._assignments.get(job.job_id)
        if group is None:
            raise KeyError(f"job {job.job_id} doesn't exist")
        node = self._groups[group]
        if node.job_count == 1:
            return [(job.job_id, float(node.allocated_servers))]
        return self._group_server_counts(group)

    def all_server_counts(self) -> list[tuple[int, float]]:
        """Allocations of every job in the scheduler."""
        counts: list[tuple[int, float]] = []
        for group in sorted(self._jobs_by_group):
            if self._jobs_by_group[group]:
                counts.extend(self._group_server_counts(group))
        return counts

    def server_changes(self) -> list[tuple[int, float]]:
        """Allocations that changed during the last add, delete or reallocation."""
        return list(self._history)

    def _group_server_counts(self, group: str) -> list[tuple[int, float]]:
        node = self._groups[group]
        if node.job_count == 0:
            raise ValueError(f"group {group!r} has no jobs")
        jobs = self._jobs_by_group[group]
        if self.partial_servers:
            share = node.allocated_servers / node.job_count
            return [(job_id, share) for job_id in jobs]
        base, remainder = divmod(node.allocated_servers, node.job_count)
        return [
            (job_id, float(base + 1 if index < remainder else base))
            for index, job_id in enumerate(jobs)
        ]

    def _group_id(self, job: RCGreedyJob) -> str:
        existing = self._assignments.get(job.job_id)
        if existing is not None:
            return existing
        p_min = 0.0
        diff = 0.5
        bits = []
        for _ in range(self.current_depth):
            if job.p >= p_min + diff:
                p_min += diff
                bits.append("1")
            else:
                bits.append("0")
            diff /= 2
        group = "".join(bits)
        self._assignments[job.job_id] = group
        return group

    def _partial_realloc(self, group: str) -> None:
        node = self._groups[group]
        node.update_count = self._max_update

        if len(group) == self.current_depth:
            self._history.extend(self._group_server_counts(group))
            return

        low = self._groups[group + "0"]
        high = self._groups[group + "1"]

        if not low.job_count and not high.job_count:
            for child in (low, high):
                child.allocated_servers = 0
                child.update_count = self._max_update
            return
        if not low.job_count:
            high.allocated_servers = node.allocated_servers
            low.allocated_servers = 0
            low.update_count = self._max_update
            self._partial_realloc(group + "1")
            return
        if not high.job_count:
            low.allocated_servers = node.allocated_servers
            high.allocated_servers = 0
            high.update_count = self._max_update
            self._partial_realloc(group + "0")
            return

        low_servers = self._optimal_server_count(
            low.total_p / low.job_count,
            low.job_count,
            high.total_p / high.job_count,
            high.job_count,
            node.allocated_servers,
        )
        low.allocated_servers = low_servers
        high.allocated_servers = node.allocated_servers - low_servers
        self._partial_realloc(group + "0")
        self._partial_realloc(group + "1")

    def _optimal_server_count(
        self, p1: float, count1: int, p2: float, count2: int, total: int
    ) -> int:
        """Servers for the less parallelizable class maximizing GREEDY*; ties go high."""
        best = 0
        max_value = 0.0
        for candidate in range(total + 1):
            value = self._maximization_constant * (
                count1 * speedup_factor(p1, candidate / count1)
                + count2 * speedup_factor(p2, (total - candidate) / count2)
            )
            if max_value - value < EPSILON:
                best = candidate
                max_value = value
        return best