"""The EQUI scheduler: servers are shared equally among all jobs."""

from __future__ import annotations


class Equi:
    """Splits a fixed pool of servers equally between the jobs present."""

    def __init__(self, servers: int, partial_servers: bool = False) -> None:
        self.server_count = servers
        self.partial_servers = partial_servers
        self._jobs: dict[int, None] = {}

    def job_exists(self, job_id: int) -> bool:
        return job_id in self._jobs

    def insert_job(self, job_id: int) -> None:
        """Add a job; raise ValueError if it is already present."""
        if job_id in self._jobs:
            raise ValueError(f"job {job_id} already exists")
        self._jobs[job_id] = None

    def delete_job(self, job_id: int) -> None:
        """Remove a job; raise KeyError if it is not present."""
        if job_id not in self._jobs:
            raise KeyError(f"job {job_id} doesn't exist")
        del self._jobs[job_id]

    def job_count(self) -> int:
        return len(self._jobs)

    def allocation(self, job_id: int) -> float:
        """Servers allocated to one job.

        With whole servers, the first ``servers % jobs`` jobs receive one
        server more than the others.
        """
        count = len(self._jobs)
        if not count:
            return 0.0
        if self.partial_servers:
            return self.server_count / count
        base, remainder = divmod(self.server_count, count)
        for index, existing in enumerate(self._jobs):
            if index >= remainder:
                break
            if existing == job_id:
                return float(base + 1)
        return float(base)

    def all_allocations(self) -> list[tuple[int, float]]:
        """Pairs of job id and allocated servers for every job."""
        count = len(self._jobs)
        if not count:
            return []
        if self.partial_servers:
            share = self.server_count / count
            return [(job_id, share) for job_id in self._jobs]
        base, remainder = divmod(self.server_count, count)
        return [
            (job_id, float(base + 1 if index < remainder else base))
            for index, job_id in enumerate(self._jobs)
        ]