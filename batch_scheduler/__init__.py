"""
Batch scheduler package.

Simulates non-preemptive dispatch of batch jobs over a pool of identical
cores (FCFS, SJF, HRRN) and reports turnaround metrics, with a small
command-line front end.
"""

from .algorithms import run_algorithm, schedule_fcfs, schedule_hrrn, schedule_sjf
from .models import Job

__all__ = ["Job", "cli", "run_algorithm", "schedule_fcfs", "schedule_hrrn", "schedule_sjf"]
