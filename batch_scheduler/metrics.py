from __future__ import annotations

from typing import List

from .models import Job, JobSummary, ScheduleResult, SystemMetrics


def summarize_jobs(jobs: List[Job]) -> JobSummary:
    """
    Average turnaround and weighted turnaround over the scheduled jobs.

    Jobs without both start and end are left out of both averages. Jobs with
    a non-positive service time still count towards the turnaround average
    but not the weighted one, which is undefined for them.
    """
    turnarounds = [j.turnaround for j in jobs if j.is_scheduled]
    weighted = [
        j.weighted_turnaround
        for j in jobs
        if j.is_scheduled and j.weighted_turnaround is not None
    ]

    return JobSummary(
        count=len(turnarounds),
        avg_turnaround=sum(turnarounds) / len(turnarounds) if turnarounds else 0.0,
        avg_weighted_turnaround=sum(weighted) / len(weighted) if weighted else 0.0,
        weighted_count=len(weighted),
    )


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute makespan, throughput and core utilization for a finished run.
    """
    scheduled = [j for j in result.jobs if j.is_scheduled]
    if not scheduled:
        system = SystemMetrics(makespan=0.0, busy_time=0.0, throughput=0.0, core_utilization=0.0)
        result.system = system
        return system

    makespan = max(j.end for j in scheduled)
    busy_time = sum(max(j.end - j.start, 0.0) for j in scheduled)

    throughput = len(scheduled) / makespan if makespan > 0 else 0.0
    capacity = makespan * result.cores
    core_utilization = busy_time / capacity if capacity > 0 else 0.0

    system = SystemMetrics(
        makespan=makespan,
        busy_time=busy_time,
        throughput=throughput,
        core_utilization=core_utilization,
    )
    result.system = system
    return system
