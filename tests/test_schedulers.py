import pytest

from batch_scheduler.algorithms import (
    response_ratio,
    run_algorithm,
    schedule_event_driven,
    schedule_fcfs,
    schedule_hrrn,
    schedule_sjf,
    sjf_priority,
)
from batch_scheduler.models import Job


def _jobs():
    return [
        Job(1, arrival=0, service=3),
        Job(2, arrival=2, service=6),
        Job(3, arrival=4, service=4),
        Job(4, arrival=6, service=5),
        Job(5, arrival=8, service=2),
    ]


def _stream_b():
    return [
        Job(1, arrival=0, service=8),
        Job(2, arrival=1, service=4),
        Job(3, arrival=2, service=9),
        Job(4, arrival=3, service=5),
        Job(5, arrival=10, service=2),
        Job(6, arrival=10, service=1),
    ]


def test_fcfs_single_core():
    res = schedule_fcfs(_jobs(), 1)
    assert [j.id for j in res] == [1, 2, 3, 4, 5]
    assert [j.start for j in res] == [0, 3, 9, 13, 18]
    assert [j.end for j in res] == [3, 9, 13, 18, 20]


def test_fcfs_two_cores_takes_earliest_free_core():
    res = schedule_fcfs(_jobs(), 2)
    assert [j.start for j in res] == [0, 2, 4, 8, 8]
    assert [j.end for j in res] == [3, 8, 8, 13, 10]
    assert [j.core for j in res] == [0, 1, 0, 0, 1]


def test_fcfs_equal_arrivals_keep_input_order():
    jobs = [Job(3, 0, 1), Job(1, 0, 5), Job(2, 0, 2)]
    res = schedule_fcfs(jobs, 1)
    # Output sorted by id, but dispatch followed input order 3, 1, 2.
    assert [(j.id, j.start) for j in res] == [(1, 1), (2, 6), (3, 0)]


def test_sjf_single_core():
    res = schedule_sjf(_jobs(), 1)
    # Job 3 only arrives at t=4, so job 2 is alone in the ready set at t=3.
    assert [j.start for j in res] == [0, 3, 11, 15, 9]
    assert [j.end for j in res] == [3, 9, 15, 20, 11]


def test_sjf_shorter_job_wins_when_both_ready():
    jobs = _jobs()
    jobs[2] = Job(3, arrival=3, service=4)
    res = schedule_sjf(jobs, 1)
    # At t=3 jobs 2 (6) and 3 (4) are both waiting; job 3 goes first.
    assert [j.start for j in res] == [0, 14, 3, 7, 12]
    assert [j.end for j in res] == [3, 20, 7, 12, 14]


def test_sjf_two_cores():
    res = schedule_sjf(_jobs(), 2)
    assert [j.start for j in res] == [0, 2, 4, 8, 8]
    assert [j.end for j in res] == [3, 8, 8, 13, 10]
    # Job 5 is shorter so it takes the lower core index.
    assert [j.core for j in res] == [0, 1, 0, 1, 0]


def test_sjf_picks_shortest_among_late_arrivals():
    res = schedule_sjf(_stream_b(), 1)
    assert [j.start for j in res] == [0, 8, 20, 15, 13, 12]


def test_sjf_equal_service_preserves_arrival_order():
    jobs = [Job(1, 0, 4), Job(2, 1, 2), Job(3, 2, 2), Job(4, 3, 2)]
    res = schedule_sjf(jobs, 1)
    assert [j.start for j in res] == [0, 4, 6, 8]


def test_hrrn_single_core():
    res = schedule_hrrn(_jobs(), 1)
    assert [j.start for j in res] == [0, 3, 9, 15, 13]
    assert [j.end for j in res] == [3, 9, 13, 20, 15]


def test_hrrn_two_cores():
    res = schedule_hrrn(_jobs(), 2)
    assert [j.start for j in res] == [0, 2, 4, 8, 8]
    assert [j.end for j in res] == [3, 8, 8, 13, 10]
    # At t=8 job 4 has waited 2 (ratio 1.4) and beats job 5 (ratio 1.0).
    assert [j.core for j in res] == [0, 1, 0, 0, 1]


@pytest.mark.parametrize("jobs", [_jobs(), _stream_b()])
def test_hrrn_dispatches_highest_ratio_first(jobs):
    res = schedule_hrrn(jobs, 2)
    for job in res:
        t = job.start
        waiting = [k for k in res if k.arrival <= t and k.start > t]
        for other in waiting:
            assert response_ratio(job, t) >= response_ratio(other, t)


def test_response_ratio():
    job = Job(1, arrival=2, service=4)
    assert response_ratio(job, 2) == 1.0
    assert response_ratio(job, 10) == 3.0
    assert response_ratio(Job(2, 0, 0), 5) == float("inf")


@pytest.mark.parametrize("schedule", [schedule_fcfs, schedule_sjf, schedule_hrrn])
def test_empty_job_list(schedule):
    assert schedule([], 3) == []


@pytest.mark.parametrize("schedule", [schedule_fcfs, schedule_sjf, schedule_hrrn])
def test_zero_cores_rejected(schedule):
    with pytest.raises(ValueError):
        schedule(_jobs(), 0)


@pytest.mark.parametrize("schedule", [schedule_fcfs, schedule_sjf, schedule_hrrn])
def test_input_jobs_not_mutated(schedule):
    jobs = _jobs()
    res = schedule(jobs, 2)
    assert all(j.start is None and j.end is None for j in jobs)
    assert all(r is not j for r in res for j in jobs)


def test_simultaneous_arrival_and_core_free():
    # Jobs 2 and 3 arrive exactly when job 1 frees the only core.
    jobs = [Job(1, 0, 2), Job(2, 2, 1), Job(3, 2, 3)]
    for schedule in (schedule_sjf, schedule_hrrn):
        res = schedule(jobs, 1)
        assert [(j.start, j.end) for j in res] == [(0, 2), (2, 3), (3, 6)]


def test_simultaneous_arrivals_and_frees_on_two_cores():
    jobs = [Job(1, 0, 2), Job(2, 0, 2), Job(3, 2, 5), Job(4, 2, 1), Job(5, 2, 1)]
    res = schedule_sjf(jobs, 2)
    assert [(j.start, j.core) for j in res] == [(0, 0), (0, 1), (3, 0), (2, 0), (2, 1)]


def test_accumulated_float_drift_terminates():
    jobs = [Job(1, 0, 0.1), Job(2, 0, 0.1), Job(3, 0, 0.1), Job(4, 0.3, 0.1)]
    res = schedule_sjf(jobs, 1)
    assert all(j.is_scheduled for j in res)
    assert res[3].start == pytest.approx(0.3)


def test_zero_service_job_is_scheduled():
    jobs = [Job(1, 0, 3), Job(2, 1, 0), Job(3, 1, 2)]
    res = schedule_hrrn(jobs, 1)
    assert [(j.start, j.end) for j in res] == [(0, 3), (3, 3), (3, 5)]


def test_custom_priority_plugs_into_engine():
    # Longest job first: the engine only needs a sort key.
    res = schedule_event_driven(_jobs(), 1, lambda job, now: -job.service)
    assert [j.start for j in res] == [0, 3, 14, 9, 18]


def test_priority_function_errors_propagate():
    def broken(job, now):
        raise KeyError("missing priority")

    with pytest.raises(KeyError):
        schedule_event_driven(_jobs(), 1, broken)


def test_sjf_priority_is_service():
    assert sjf_priority(Job(1, 0, 7), 100) == 7


def test_run_algorithm_attaches_metrics():
    res = run_algorithm("SJF", _jobs(), cores=1)
    assert res.algorithm == "SJF (non-preemptive)"
    assert res.cores == 1
    assert res.summary.count == 5
    assert res.system.makespan == 20
    assert res.system.busy_time == sum(j.service for j in _jobs())


def test_run_algorithm_unknown():
    with pytest.raises(ValueError):
        run_algorithm("rr", _jobs())
