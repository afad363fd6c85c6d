from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Job:
    """
    A batch job: known arrival time and estimated service time.

    ``start``, ``end`` and ``core`` stay unset until a dispatcher assigns
    the job; once set, ``end == start + service``.
    """

    id: int
    arrival: float
    service: float
    start: Optional[float] = None
    end: Optional[float] = None
    core: Optional[int] = None

    @property
    def is_scheduled(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def turnaround(self) -> Optional[float]:
        if self.end is None:
            return None
        return self.end - self.arrival

    @property
    def weighted_turnaround(self) -> Optional[float]:
        turnaround = self.turnaround
        if turnaround is None or self.service <= 0:
            return None
        return turnaround / self.service


@dataclass
class JobSummary:
    count: int
    avg_turnaround: float
    avg_weighted_turnaround: float
    weighted_count: int = 0


@dataclass
class SystemMetrics:
    makespan: float
    busy_time: float
    throughput: float
    core_utilization: float


@dataclass
class ScheduleResult:
    algorithm: str
    cores: int
    jobs: List[Job] = field(default_factory=list)
    summary: Optional[JobSummary] = None
    system: Optional[SystemMetrics] = None
