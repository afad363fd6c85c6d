from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterable, List, Optional

from .cores import TIME_EPSILON, CoreTracker
from .metrics import compute_system_metrics, summarize_jobs
from .models import Job, ScheduleResult

logger = logging.getLogger(__name__)

# Sort key for a ready job at the current simulated time; lower runs first.
PriorityFn = Callable[[Job, float], float]


class SchedulingError(RuntimeError):
    """
    The event-driven engine finished with jobs it never dispatched.
    """


def _fresh_copies(jobs: Iterable[Job]) -> List[Job]:
    # Dispatchers never touch the caller's objects.
    return [replace(j, start=None, end=None, core=None) for j in jobs]


def _by_id(jobs: List[Job]) -> List[Job]:
    return sorted(jobs, key=lambda j: j.id)


def schedule_fcfs(jobs: List[Job], cores: int) -> List[Job]:
    """
    First-Come First-Serve (non-preemptive) over ``cores`` identical cores.

    Jobs are taken in arrival order (stable on ties) and each one goes to the
    core that frees up first.
    """
    tracker = CoreTracker(cores)
    ordered = sorted(_fresh_copies(jobs), key=lambda j: j.arrival)

    for job in ordered:
        core, free_time = tracker.earliest()
        job.start = max(job.arrival, free_time)
        job.end = job.start + job.service
        job.core = core
        tracker.occupy(core, job.end)
        logger.debug("fcfs: job %s -> core %d [%g, %g)", job.id, core, job.start, job.end)

    return _by_id(ordered)


@dataclass
class _DispatchState:
    """
    Working state of one event-driven run. Owned by a single call.
    """

    pending: List[Job]
    cores: CoreTracker
    now: float = 0.0
    next_index: int = 0
    ready: List[Job] = field(default_factory=list)
    finished: List[Job] = field(default_factory=list)

    def admit_arrivals(self) -> None:
        while self.next_index < len(self.pending) and self.pending[self.next_index].arrival <= self.now:
            self.ready.append(self.pending[self.next_index])
            self.next_index += 1

    def next_arrival(self) -> Optional[float]:
        if self.next_index < len(self.pending):
            return self.pending[self.next_index].arrival
        return None

    def next_event(self) -> float:
        next_free = self.cores.next_free_time()
        next_arrival = self.next_arrival()
        if next_arrival is None:
            return next_free
        return min(next_arrival, next_free)

    def advance(self, to: float) -> None:
        # The virtual clock never runs backwards.
        if to > self.now:
            logger.debug("clock %g -> %g", self.now, to)
            self.now = to

    def dispatch(self, core: int) -> Job:
        job = self.ready.pop(0)
        job.start = max(self.now, job.arrival)
        job.end = job.start + job.service
        job.core = core
        self.cores.occupy(core, job.end)
        self.finished.append(job)
        return job


def schedule_event_driven(
    jobs: List[Job],
    cores: int,
    priority: PriorityFn,
    epsilon: float = TIME_EPSILON,
) -> List[Job]:
    """
    Non-preemptive event-driven dispatch shared by SJF and HRRN.

    A virtual clock jumps between arrivals and core-free instants. Whenever
    at least one core is free and jobs are waiting, the ready set is sorted
    by ``priority`` evaluated at the current time and the best jobs go to the
    free cores, lowest core index first. Ties keep arrival order.
    """
    state = _DispatchState(
        pending=sorted(_fresh_copies(jobs), key=lambda j: j.arrival),
        cores=CoreTracker(cores, epsilon=epsilon),
    )
    total = len(state.pending)

    while len(state.finished) < total:
        state.admit_arrivals()
        free = state.cores.free_cores(state.now)

        if not free:
            # Busy cores block dispatch; wait for the first one to free up,
            # or for an arrival if nothing is waiting yet.
            if state.ready:
                state.advance(state.cores.next_free_time())
            else:
                state.advance(state.next_event())
            continue

        if not state.ready:
            next_arrival = state.next_arrival()
            if next_arrival is None:
                break
            state.advance(next_arrival)
            continue

        now = state.now
        state.ready.sort(key=lambda j: priority(j, now))
        for core in free:
            if not state.ready:
                break
            job = state.dispatch(core)
            logger.debug(
                "t=%g: job %s -> core %d [%g, %g) key=%g",
                now, job.id, core, job.start, job.end, priority(job, now),
            )

        state.advance(state.next_event())

    if state.ready:
        # Every exit above leaves the ready set empty; reaching this means the
        # advancement logic is broken, so fail loudly instead of patching.
        raise SchedulingError(
            f"{len(state.ready)} job(s) left undispatched at t={state.now:g}: "
            f"{[j.id for j in state.ready]}"
        )

    return _by_id(state.finished)


def sjf_priority(job: Job, now: float) -> float:
    return job.service


def response_ratio(job: Job, now: float) -> float:
    """
    HRRN response ratio ``(waiting + service) / service`` at time ``now``.

    A job with no positive service time has an infinite ratio.
    """
    if job.service <= 0:
        return math.inf
    return (now - job.arrival + job.service) / job.service


def hrrn_priority(job: Job, now: float) -> float:
    return -response_ratio(job, now)


def schedule_sjf(jobs: List[Job], cores: int) -> List[Job]:
    """
    Shortest Job First (non-preemptive).

    Among jobs that have arrived, free cores take the smallest service time.
    """
    return schedule_event_driven(jobs, cores, sjf_priority)


def schedule_hrrn(jobs: List[Job], cores: int) -> List[Job]:
    """
    Highest Response Ratio Next (non-preemptive).

    The ratio is recomputed at every dispatch decision, so long-waiting jobs
    eventually overtake shorter newcomers.
    """
    return schedule_event_driven(jobs, cores, hrrn_priority)


ALGORITHMS: Dict[str, Callable[[List[Job], int], List[Job]]] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "hrrn": schedule_hrrn,
}

ALGORITHM_LABELS = {
    "fcfs": "FCFS",
    "sjf": "SJF (non-preemptive)",
    "hrrn": "HRRN",
}


def run_algorithm(name: str, jobs: List[Job], cores: int = 1) -> ScheduleResult:
    """
    Dispatch to the requested algorithm and attach the summary metrics.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    scheduled = ALGORITHMS[name](jobs, cores)
    result = ScheduleResult(
        algorithm=ALGORITHM_LABELS[name],
        cores=cores,
        jobs=scheduled,
        summary=summarize_jobs(scheduled),
    )
    compute_system_metrics(result)
    return result
